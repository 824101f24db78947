"""PEM certificate loading."""

from __future__ import annotations

import logging
from pathlib import Path

from cryptography import x509

from fabric_client.errors import FileReadError, ParseError

logger = logging.getLogger(__name__)


def read_pem(path: str | Path, what: str = "certificate") -> bytes:
    """Read raw PEM bytes from *path*.

    Raises:
        FileReadError: If the path does not exist or cannot be read.
    """
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise FileReadError(f"failed to read {what} file {str(path)!r}: {exc}") from exc


def load_certificate(path: str | Path) -> x509.Certificate:
    """Read and parse a PEM-encoded X.509 certificate.

    Raises:
        FileReadError: If the file cannot be read.
        ParseError: If the content is not a PEM certificate.
    """
    pem = read_pem(path)
    try:
        certificate = x509.load_pem_x509_certificate(pem)
    except ValueError as exc:
        raise ParseError(f"failed to parse certificate {str(path)!r}: {exc}") from exc
    logger.debug("Loaded certificate %s from %s", certificate.subject.rfc4514_string(), path)
    return certificate
