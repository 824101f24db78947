"""Connected gateway session handle."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import TracebackType

import grpc

from fabric_client.errors import GatewayConnectError
from fabric_client.identity import Sign, X509Identity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayTimeouts:
    """Per-call deadlines, in seconds, for gateway operations."""

    evaluate: float = 5.0
    endorse: float = 15.0
    submit: float = 5.0
    commit_status: float = 60.0


class Gateway:
    """Session with a Fabric gateway peer.

    Owns the gRPC channel; closing the gateway closes the channel.
    """

    def __init__(
        self,
        identity: X509Identity,
        sign: Sign,
        channel: grpc.Channel,
        timeouts: GatewayTimeouts,
    ) -> None:
        self._identity = identity
        self._sign = sign
        self._channel = channel
        self._timeouts = timeouts
        self._closed = False

    @property
    def identity(self) -> X509Identity:
        return self._identity

    @property
    def timeouts(self) -> GatewayTimeouts:
        return self._timeouts

    @property
    def channel(self) -> grpc.Channel:
        return self._channel

    @property
    def closed(self) -> bool:
        return self._closed

    def sign(self, digest: bytes) -> bytes:
        """Sign *digest* with the client's private key."""
        if self._closed:
            raise GatewayConnectError("gateway is closed")
        return self._sign(digest)

    def close(self) -> None:
        """Close the underlying channel. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._channel.close()
        logger.info("Gateway connection for %s closed", self._identity.msp_id)

    def __enter__(self) -> Gateway:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def connect(
    identity: X509Identity | None,
    *,
    sign: Sign | None,
    client_connection: grpc.Channel | None,
    timeouts: GatewayTimeouts | None = None,
) -> Gateway:
    """Create a gateway session from an identity, signer and open channel.

    Raises:
        GatewayConnectError: If any of the required parts is missing.
    """
    if identity is None:
        raise GatewayConnectError("an identity is required")
    if sign is None:
        raise GatewayConnectError("a signing function is required")
    if client_connection is None:
        raise GatewayConnectError("a client connection is required")
    timeouts = timeouts or GatewayTimeouts()
    gateway = Gateway(identity, sign, client_connection, timeouts)
    logger.debug(
        "Gateway timeouts: evaluate=%ss endorse=%ss submit=%ss commit_status=%ss",
        timeouts.evaluate,
        timeouts.endorse,
        timeouts.submit,
        timeouts.commit_status,
    )
    return gateway
