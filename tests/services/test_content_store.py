from __future__ import annotations

import asyncio
import hashlib
import json

import httpx
import pytest
from prometheus_client import REGISTRY

from passport.core.errors import InvalidPayload, StorageUnavailable
from passport.services.content_store import (
    IpfsContentStore,
    MirrorContentStore,
    build_content_store,
    is_mirror_ref,
)

CID = "QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"


def _mirror_writes() -> float:
    return REGISTRY.get_sample_value("content_store_mirror_writes_total") or 0.0


# ---- mirror mode ----


def test_mirror_ref_is_prefixed_sha256() -> None:
    store = MirrorContentStore()
    ref = asyncio.run(store.store(b"hello"))
    assert ref == "mock-ipfs-" + hashlib.sha256(b"hello").hexdigest()
    assert is_mirror_ref(ref)


def test_mirror_ref_is_deterministic() -> None:
    a = asyncio.run(MirrorContentStore().store(b"same bytes"))
    b = asyncio.run(MirrorContentStore().store(b"same bytes"))
    assert a == b


def test_mirror_store_exists_and_retrieve() -> None:
    store = MirrorContentStore()
    ref = asyncio.run(store.store(b"payload"))
    assert asyncio.run(store.exists(ref)) is True
    assert asyncio.run(store.retrieve(ref)) == b"payload"
    assert asyncio.run(store.exists("mock-ipfs-unknown")) is False


def test_mirror_retrieve_unknown_raises() -> None:
    with pytest.raises(StorageUnavailable):
        asyncio.run(MirrorContentStore().retrieve("mock-ipfs-unknown"))


def test_mirror_rejects_empty_payload() -> None:
    with pytest.raises(InvalidPayload):
        asyncio.run(MirrorContentStore().store(b""))


def test_mirror_write_increments_metric() -> None:
    before = _mirror_writes()
    asyncio.run(MirrorContentStore().store(b"x"))
    assert _mirror_writes() - before == 1


# ---- IPFS over MockTransport ----


def _ipfs(handler) -> IpfsContentStore:
    return IpfsContentStore(
        "http://ipfs.test:5001", timeout=1.0, transport=httpx.MockTransport(handler)
    )


def test_ipfs_store_posts_multipart_and_returns_hash() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = request.read()
        return httpx.Response(200, json={"Name": "document", "Hash": CID, "Size": "13"})

    ref = asyncio.run(_ipfs(handler).store(b"hello"))
    assert ref == CID
    assert seen["path"] == "/api/v0/add"
    assert b"hello" in seen["body"]
    assert not is_mirror_ref(ref)


def test_ipfs_store_http_error_is_storage_unavailable() -> None:
    store = _ipfs(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(StorageUnavailable):
        asyncio.run(store.store(b"hello"))


def test_ipfs_store_connection_error_is_storage_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(StorageUnavailable):
        asyncio.run(_ipfs(handler).store(b"hello"))


def test_ipfs_store_malformed_response_is_storage_unavailable() -> None:
    store = _ipfs(lambda request: httpx.Response(200, content=b"not json"))
    with pytest.raises(StorageUnavailable):
        asyncio.run(store.store(b"hello"))


def test_ipfs_store_rejects_empty_payload_without_calling_node() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"Hash": CID})

    with pytest.raises(InvalidPayload):
        asyncio.run(_ipfs(handler).store(b""))
    assert calls == []


def test_ipfs_exists_true_false_and_never_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v0/block/stat"
        if request.url.params["arg"] == CID:
            return httpx.Response(200, content=json.dumps({"Key": CID}).encode())
        return httpx.Response(500)

    store = _ipfs(handler)
    assert asyncio.run(store.exists(CID)) is True
    assert asyncio.run(store.exists("QmMissing")) is False

    def broken(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    assert asyncio.run(_ipfs(broken).exists(CID)) is False


def test_ipfs_retrieve_returns_bytes() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v0/cat"
        return httpx.Response(200, content=b"hello")

    assert asyncio.run(_ipfs(handler).retrieve(CID)) == b"hello"


# ---- strategy selection ----


@pytest.mark.parametrize("url", [None, "", "not a url", "ftp://ipfs.test", "http://"])
def test_build_falls_back_to_mirror(url: str | None) -> None:
    assert build_content_store(url, timeout=1.0).mode == "mirror"


def test_build_uses_ipfs_for_http_url() -> None:
    store = build_content_store("http://127.0.0.1:5001", timeout=1.0)
    assert store.mode == "ipfs"
    asyncio.run(store.aclose())
