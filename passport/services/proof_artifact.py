"""Proof artifacts: QR codes carrying a credential's public id.

``render`` is deterministic: the same text always yields the same PNG
bytes. ``decode`` reads a scanned/uploaded image back to its text, which
the credential service feeds into the ordinary verify path.
"""

from __future__ import annotations

import io
import logging

import qrcode
import zxingcpp
from PIL import Image, UnidentifiedImageError
from qrcode.exceptions import DataOverflowError

from passport.core.errors import EncodingError, ProofDecodeError

logger = logging.getLogger(__name__)


class QrProofGenerator:
    def __init__(
        self,
        *,
        error_correction: int = qrcode.constants.ERROR_CORRECT_M,
        box_size: int = 10,
        border: int = 4,
    ) -> None:
        self._error_correction = error_correction
        self._box_size = box_size
        self._border = border

    def render(self, text: str) -> bytes:
        """Encode ``text`` as a QR code, return PNG bytes."""
        qr = qrcode.QRCode(
            version=None,
            error_correction=self._error_correction,
            box_size=self._box_size,
            border=self._border,
        )
        qr.add_data(text)
        try:
            qr.make(fit=True)
        except DataOverflowError as e:
            raise EncodingError(
                f"Proof text of {len(text)} chars exceeds QR capacity"
            ) from e

        buf = io.BytesIO()
        qr.make_image(fill_color="black", back_color="white").save(buf, format="PNG")
        return buf.getvalue()

    def decode(self, image_bytes: bytes) -> str:
        """Return the text embedded in a QR image."""
        try:
            image = Image.open(io.BytesIO(image_bytes))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise ProofDecodeError("Uploaded file is not a readable image") from e

        results = zxingcpp.read_barcodes(image.convert("L"))
        if not results:
            raise ProofDecodeError()
        return results[0].text
