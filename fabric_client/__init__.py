"""Hyperledger Fabric gateway client setup: credentials, TLS channel, gateway handle."""

from fabric_client.errors import (
    ConfigLoadError,
    FileReadError,
    GatewayConnectError,
    IdentityError,
    ParseError,
    PeerConnectionError,
    SetupError,
)
from fabric_client.org_setup import OrgSetup, OrgSetupInitializer, SetupState, init_config

__all__ = [
    "ConfigLoadError",
    "FileReadError",
    "GatewayConnectError",
    "IdentityError",
    "OrgSetup",
    "OrgSetupInitializer",
    "ParseError",
    "PeerConnectionError",
    "SetupError",
    "SetupState",
    "init_config",
]
