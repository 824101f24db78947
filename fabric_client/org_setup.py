"""One-time organisation setup: config, credentials, channel and gateway."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

import grpc

from fabric_client.channel import build_connection
from fabric_client.config import OrgConfig, load_config
from fabric_client.gateway import Gateway, GatewayTimeouts, connect
from fabric_client.identity import Sign, X509Identity, build_identity, build_signer

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUTS = GatewayTimeouts(evaluate=5.0, endorse=15.0, submit=5.0, commit_status=60.0)


class SetupState(StrEnum):
    """Initialisation states."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


@dataclass(frozen=True)
class OrgSetup:
    """A fully initialised organisation: its config and connected gateway."""

    config: OrgConfig
    gateway: Gateway


class OrgSetupInitializer:
    """Builds the :class:`OrgSetup` exactly once and hands out the same instance.

    Concurrent callers block on the lock until the first initialisation
    finishes. A failed attempt releases everything it built and leaves the
    initializer ``UNINITIALIZED``, so the caller decides whether to retry
    or exit.
    """

    def __init__(
        self,
        env_file: str | Path | None = None,
        *,
        timeouts: GatewayTimeouts = DEFAULT_TIMEOUTS,
        config_loader: Callable[..., OrgConfig] | None = None,
        connection_builder: Callable[..., grpc.Channel] | None = None,
        identity_builder: Callable[..., X509Identity] | None = None,
        signer_builder: Callable[..., Sign] | None = None,
        gateway_connector: Callable[..., Gateway] | None = None,
    ) -> None:
        self._env_file = env_file
        self._timeouts = timeouts
        self._load_config = config_loader or load_config
        self._build_connection = connection_builder or build_connection
        self._build_identity = identity_builder or build_identity
        self._build_signer = signer_builder or build_signer
        self._connect = gateway_connector or connect
        self._lock = threading.Lock()
        self._state = SetupState.UNINITIALIZED
        self._instance: OrgSetup | None = None

    @property
    def state(self) -> SetupState:
        return self._state

    def initialize(self) -> OrgSetup:
        """Return the ready :class:`OrgSetup`, building it on first call.

        Raises:
            SetupError: Any subclass, from whichever step failed.
        """
        with self._lock:
            if self._state is SetupState.READY and self._instance is not None:
                return self._instance
            self._state = SetupState.INITIALIZING
            try:
                self._instance = self._build()
            except BaseException:
                self._state = SetupState.UNINITIALIZED
                raise
            self._state = SetupState.READY
            logger.info("Initialization complete")
            return self._instance

    def _build(self) -> OrgSetup:
        config = self._load_config(self._env_file)
        channel = self._build_connection(
            config.tls_cert_path,
            config.peer_endpoint,
            config.gateway_peer,
            timeout=config.connect_timeout,
        )
        try:
            identity = self._build_identity(config.msp_id, config.cert_path)
            sign = self._build_signer(config.key_path)
            gateway = self._connect(
                identity,
                sign=sign,
                client_connection=channel,
                timeouts=self._timeouts,
            )
        except BaseException:
            channel.close()
            raise
        return OrgSetup(config=config, gateway=gateway)

    def close(self) -> None:
        """Close the gateway, if any, and return to ``UNINITIALIZED``."""
        with self._lock:
            if self._instance is not None:
                self._instance.gateway.close()
            self._instance = None
            self._state = SetupState.UNINITIALIZED


_default_initializer = OrgSetupInitializer()


def init_config() -> OrgSetup:
    """Initialise the process-wide setup from ``.env`` on first call."""
    return _default_initializer.initialize()
