"""Errors raised while setting up the Fabric gateway connection."""

from __future__ import annotations


class SetupError(Exception):
    """Base class for every failure during client initialisation."""


class ConfigLoadError(SetupError):
    """Raised when the env file is missing or a value cannot be parsed."""


class FileReadError(SetupError):
    """Raised when a certificate or key file cannot be read."""


class ParseError(SetupError):
    """Raised when PEM content is not a valid certificate or private key."""


class IdentityError(SetupError):
    """Raised when the client identity or signer cannot be built."""


class PeerConnectionError(SetupError, ConnectionError):
    """Raised when TLS credentials cannot be built or the peer dial fails."""


class GatewayConnectError(SetupError):
    """Raised when the gateway handle cannot be created or is used after close."""
