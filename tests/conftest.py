"""Shared fixtures: generated credentials, a TLS mock peer, and a clean environment."""

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from mocks.mock_peer import DEFAULT_PEER_NAME, PeerPki, start_peer, write_test_pki

ENV_KEYS = (
    "PORT",
    "ORG_NAME",
    "MSP_ID",
    "CRYPTO_PATH",
    "CERT_PATH",
    "KEY_PATH",
    "TLS_CERT_PATH",
    "PEER_ENDPOINT",
    "GATEWAY_PEER",
    "CONNECT_TIMEOUT",
)

_PROXY_KEYS = ("http_proxy", "https_proxy", "grpc_proxy", "HTTP_PROXY", "HTTPS_PROXY")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unset every config variable, and undo whatever python-dotenv sets during the test."""
    for key in ENV_KEYS + _PROXY_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


@pytest.fixture
def pki(tmp_path: Path) -> PeerPki:
    """A CA, a peer TLS cert for peer0.org1.example.com, and a client cert/key."""
    return write_test_pki(tmp_path / "crypto")


@pytest.fixture
def peer_endpoint(pki: PeerPki) -> Iterator[str]:
    """Start a TLS gRPC mock peer and yield its ``host:port``."""
    server, port = start_peer(pki)
    try:
        yield f"127.0.0.1:{port}"
    finally:
        server.stop(0)


@pytest.fixture
def write_env(tmp_path: Path, pki: PeerPki) -> Callable[..., Path]:
    """Return a helper that writes a ``.env`` pointing at the generated credentials."""

    def _write(endpoint: str, gateway_peer: str = DEFAULT_PEER_NAME, **extra: str) -> Path:
        values = {
            "PORT": "3000",
            "ORG_NAME": "Org1",
            "CRYPTO_PATH": str(pki.ca_cert.parent.parent),
            "CERT_PATH": str(pki.client_cert),
            "KEY_PATH": str(pki.keystore),
            "TLS_CERT_PATH": str(pki.ca_cert),
            "PEER_ENDPOINT": endpoint,
            "GATEWAY_PEER": gateway_peer,
            "CONNECT_TIMEOUT": "3",
        }
        values.update(extra)
        env_file = tmp_path / ".env"
        env_file.write_text("".join(f"{k}={v}\n" for k, v in values.items()))
        return env_file

    return _write
