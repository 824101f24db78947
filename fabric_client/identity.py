"""Client identity and signing function built from X.509 material on disk."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519
from cryptography.hazmat.primitives.asymmetric.utils import (
    Prehashed,
    decode_dss_signature,
    encode_dss_signature,
)

from fabric_client.certificates import load_certificate, read_pem
from fabric_client.errors import FileReadError, IdentityError, ParseError

logger = logging.getLogger(__name__)

Sign = Callable[[bytes], bytes]
"""Signs a message digest and returns the signature bytes."""

# Group orders for the curves Fabric CAs issue keys on; needed for low-S.
_CURVE_ORDERS: dict[str, int] = {
    "secp256r1": 0xFFFFFFFF00000000FFFFFFFFFFFFFFFFBCE6FAADA7179E84F3B9CAC2FC632551,
    "secp384r1": int(
        "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFC7634D81F4372DDF"
        "581A0DB248B0A77AECEC196ACCC52973",
        16,
    ),
}

_PREHASH_BY_LENGTH: dict[int, hashes.HashAlgorithm] = {
    32: hashes.SHA256(),
    48: hashes.SHA384(),
}


@dataclass(frozen=True)
class X509Identity:
    """An X.509 certificate bound to a membership service provider ID."""

    msp_id: str
    certificate: x509.Certificate

    @property
    def credentials(self) -> bytes:
        """PEM encoding of the certificate, as sent to the gateway."""
        return self.certificate.public_bytes(serialization.Encoding.PEM)


def build_identity(msp_id: str, cert_path: str | Path) -> X509Identity:
    """Load the client certificate and bind it to *msp_id*.

    Raises:
        FileReadError: If the certificate cannot be read.
        ParseError: If the certificate is malformed.
        IdentityError: If *msp_id* is empty.
    """
    if not msp_id:
        raise IdentityError("MSP ID must not be empty")
    certificate = load_certificate(cert_path)
    identity = X509Identity(msp_id=msp_id, certificate=certificate)
    logger.info("Client identity %s for %s", certificate.subject.rfc4514_string(), msp_id)
    return identity


def resolve_key_file(key_path: str | Path) -> Path:
    """Return the private key file named by *key_path*.

    A file path is used as-is. A directory must contain exactly one regular
    file (Fabric's ``msp/keystore`` layout); entries are sorted so the choice
    never depends on filesystem listing order.

    Raises:
        IdentityError: If *key_path* is empty, or a directory holds zero or
            several files.
        FileReadError: If *key_path* does not exist or cannot be listed.
    """
    if not key_path:
        raise IdentityError("private key path is not set")
    path = Path(key_path)
    if path.is_file():
        return path
    if not path.is_dir():
        raise FileReadError(f"private key path {str(path)!r} does not exist")
    try:
        candidates = sorted(p for p in path.iterdir() if p.is_file())
    except OSError as exc:
        raise FileReadError(f"failed to read private key directory {str(path)!r}: {exc}") from exc
    if not candidates:
        raise IdentityError(f"private key directory {str(path)!r} is empty")
    if len(candidates) > 1:
        names = ", ".join(p.name for p in candidates)
        raise IdentityError(
            f"private key directory {str(path)!r} must hold exactly one key file, found: {names}"
        )
    return candidates[0]


def _ecdsa_sign(private_key: ec.EllipticCurvePrivateKey) -> Sign:
    order = _CURVE_ORDERS.get(private_key.curve.name)
    if order is None:
        raise IdentityError(f"unsupported ECDSA curve: {private_key.curve.name}")
    half_order = order >> 1

    def sign(digest: bytes) -> bytes:
        algorithm = _PREHASH_BY_LENGTH.get(len(digest))
        if algorithm is None:
            raise ValueError(f"digest must be 32 or 48 bytes, got {len(digest)}")
        der = private_key.sign(digest, ec.ECDSA(Prehashed(algorithm)))
        r, s = decode_dss_signature(der)
        # Fabric peers reject high-S signatures.
        if s > half_order:
            s = order - s
        return encode_dss_signature(r, s)

    return sign


def _ed25519_sign(private_key: ed25519.Ed25519PrivateKey) -> Sign:
    def sign(digest: bytes) -> bytes:
        return private_key.sign(digest)

    return sign


def build_signer(key_path: str | Path) -> Sign:
    """Load the private key at *key_path* and return a signing function.

    The returned callable closes over the parsed key only; the PEM bytes
    are dropped once the key is parsed.

    Raises:
        IdentityError: If no single key file can be selected, or the key type
            is not ECDSA (P-256/P-384) or Ed25519.
        FileReadError: If the key file cannot be read.
        ParseError: If the file is not a PEM private key.
    """
    key_file = resolve_key_file(key_path)
    pem = read_pem(key_file, what="private key")
    try:
        private_key = serialization.load_pem_private_key(pem, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise ParseError(f"failed to parse private key {key_file.name!r}: {exc}") from exc
    del pem

    if isinstance(private_key, ec.EllipticCurvePrivateKey):
        return _ecdsa_sign(private_key)
    if isinstance(private_key, ed25519.Ed25519PrivateKey):
        return _ed25519_sign(private_key)
    raise IdentityError(f"unsupported private key type: {type(private_key).__name__}")
