"""Shared fixtures for the blobcast test suite."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Iterator
from unittest.mock import patch

import httpx
import pytest

from blobcast.kzg import TrustedSetupError, resolve_trusted_setup
from blobcast.sigil.eth import generate_eoa

_CONFIG_VARS = ("PRIVATE_KEY", "BLOBCAST_RPC_URL", "CHAIN_ID", "KZG_TRUSTED_SETUP", "BLOBCAST_EXPLORER_URL")


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Keep tests away from the real ~/.blobcast, local .env files and config env vars."""
    home = tmp_path / ".blobcast"
    monkeypatch.chdir(tmp_path)
    with patch.dict(os.environ):
        for key in _CONFIG_VARS:
            os.environ.pop(key, None)
        with patch("blobcast.sigil.eth.BLOBCAST_DIR", home), \
                patch("blobcast.sigil.eth.BLOBCAST_ENV", home / ".env"):
            yield home


@pytest.fixture(scope="session")
def trusted_setup_path() -> Path:
    """A trusted setup available without network access, or skip."""
    try:
        return resolve_trusted_setup()
    except TrustedSetupError:
        pytest.skip("no KZG trusted setup available offline")


@pytest.fixture(scope="session")
def native_backend(trusted_setup_path: Path):
    from blobcast.kzg.native import NativeBackend

    return NativeBackend(trusted_setup_path)


@pytest.fixture()
def wallet() -> tuple[str, str]:
    """Fresh (private_key, address) pair."""
    return generate_eoa()


@pytest.fixture()
def message_blob() -> bytes:
    from blobcast.blobs import raw_blob

    return raw_blob(b"Long live the BLOBs!")


class FakeNode:
    """JSON-RPC node stub behind httpx.MockTransport.

    ``results`` maps a method name to its result, to a callable taking the
    params, or to ``{"error": ...}`` for an error response.
    """

    def __init__(self) -> None:
        self.results: dict[str, Any] = {}
        self.calls: list[tuple[str, list]] = []
        self.status_code = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        method, params = body["method"], body["params"]
        self.calls.append((method, params))
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={})
        if method not in self.results:
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32601, "message": "method not found"}},
            )
        result = self.results[method]
        if callable(result):
            result = result(params)
        if isinstance(result, dict) and set(result) == {"error"}:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], **result})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]


@pytest.fixture()
def fake_node() -> Iterator[FakeNode]:
    node = FakeNode()
    real_client = httpx.Client

    def client_factory(*args: Any, **kwargs: Any) -> httpx.Client:
        kwargs["transport"] = httpx.MockTransport(node.handler)
        return real_client(*args, **kwargs)

    with patch("blobcast.pneuma.rpc.httpx.Client", side_effect=client_factory):
        yield node
