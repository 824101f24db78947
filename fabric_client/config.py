"""Client configuration loaded from environment variables."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from dotenv import load_dotenv

from fabric_client.errors import ConfigLoadError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CONNECT_TIMEOUT = 10.0


@dataclass(frozen=True)
class OrgConfig:
    """Immutable organisation configuration."""

    port: str = ""
    org_name: str = ""
    msp_id: str = ""
    crypto_path: str = ""
    cert_path: str = ""
    key_path: str = ""
    tls_cert_path: str = ""
    peer_endpoint: str = ""
    gateway_peer: str = ""
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT


def get_env(key: str, fallback: T) -> str | T:
    """Return the environment value for *key*, or *fallback* unchanged if unset.

    An empty string that is set in the environment still counts as present.
    """
    value = os.environ.get(key)
    if value is None:
        return fallback
    return value


def _parse_float_env(name: str, default: float) -> float:
    raw = get_env(name, None)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigLoadError(f"Environment variable {name} must be a number, got {raw!r}") from exc
    if not math.isfinite(value) or value <= 0:
        raise ConfigLoadError(
            f"Environment variable {name} must be a positive finite number, got {raw!r}"
        )
    return value


def load_config(env_file: str | Path | None = None) -> OrgConfig:
    """Load organisation config from the env file and the process environment.

    Reads ``env_file`` (default ``.env`` in the working directory) with
    python-dotenv; values already present in the environment win. Then builds
    an :class:`OrgConfig` from:

    - ``PORT``, ``ORG_NAME``, ``CRYPTO_PATH``
    - ``CERT_PATH`` (signing certificate PEM file)
    - ``KEY_PATH`` (private key PEM file, or a directory holding exactly one)
    - ``TLS_CERT_PATH`` (peer TLS root certificate)
    - ``PEER_ENDPOINT`` (``host:port``), ``GATEWAY_PEER`` (expected TLS name)
    - ``MSP_ID`` (default ``"<ORG_NAME>MSP"``)
    - ``CONNECT_TIMEOUT`` (default ``10.0`` seconds)

    Every string value falls back to ``""`` when unset.

    Raises:
        ConfigLoadError: If the env file is missing or unreadable, or
            ``CONNECT_TIMEOUT`` is not a positive number.
    """
    path = Path(env_file) if env_file is not None else Path.cwd() / ".env"
    if not path.is_file():
        raise ConfigLoadError(f"Error loading env file: {path} does not exist")
    try:
        load_dotenv(path, override=False)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"Error loading env file {path}: {exc}") from exc

    org_name = get_env("ORG_NAME", "")
    msp_id = get_env("MSP_ID", "") or (f"{org_name}MSP" if org_name else "")

    cfg = OrgConfig(
        port=get_env("PORT", ""),
        org_name=org_name,
        msp_id=msp_id,
        crypto_path=get_env("CRYPTO_PATH", ""),
        cert_path=get_env("CERT_PATH", ""),
        key_path=get_env("KEY_PATH", ""),
        tls_cert_path=get_env("TLS_CERT_PATH", ""),
        peer_endpoint=get_env("PEER_ENDPOINT", ""),
        gateway_peer=get_env("GATEWAY_PEER", ""),
        connect_timeout=_parse_float_env("CONNECT_TIMEOUT", DEFAULT_CONNECT_TIMEOUT),
    )

    logger.info("Initializing connection for %s...", cfg.org_name or "<unnamed org>")
    return cfg
