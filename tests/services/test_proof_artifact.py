from __future__ import annotations

import io

import pytest
from PIL import Image

from passport.core.errors import EncodingError, ProofDecodeError
from passport.services.proof_artifact import QrProofGenerator

SSP = "SSP-6f1c1b0e-3c1a-4b7e-9f5d-1a2b3c4d5e6f"


def test_render_produces_png() -> None:
    png = QrProofGenerator().render(SSP)
    image = Image.open(io.BytesIO(png))
    assert image.format == "PNG"
    # box_size 10 with a 4-module border on each side
    assert image.size[0] == image.size[1]
    assert image.size[0] % 10 == 0


def test_render_is_deterministic() -> None:
    gen = QrProofGenerator()
    assert gen.render(SSP) == gen.render(SSP)


def test_decode_recovers_rendered_text() -> None:
    gen = QrProofGenerator()
    assert gen.decode(gen.render(SSP)) == SSP


def test_render_over_capacity_raises_encoding_error() -> None:
    with pytest.raises(EncodingError):
        QrProofGenerator().render("x" * 5000)


def test_decode_rejects_non_image() -> None:
    with pytest.raises(ProofDecodeError, match="not a readable image"):
        QrProofGenerator().decode(b"definitely not an image")


def test_decode_rejects_image_without_code() -> None:
    buf = io.BytesIO()
    Image.new("L", (200, 200), color=255).save(buf, format="PNG")
    with pytest.raises(ProofDecodeError):
        QrProofGenerator().decode(buf.getvalue())
