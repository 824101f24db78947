"""TLS-secured gRPC channel to a Fabric peer gateway."""

from __future__ import annotations

import logging
from pathlib import Path

import grpc
from cryptography.hazmat.primitives import serialization

from fabric_client.certificates import load_certificate
from fabric_client.errors import PeerConnectionError

logger = logging.getLogger(__name__)


def build_connection(
    tls_cert_path: str | Path,
    peer_endpoint: str,
    expected_peer_name: str,
    timeout: float = 10.0,
) -> grpc.Channel:
    """Dial *peer_endpoint* over TLS and wait until the channel is ready.

    The peer's certificate chain must validate against the single root at
    *tls_cert_path*, and the name it presents must match *expected_peer_name*.
    No retries: a handshake that is not complete within *timeout* seconds
    fails. gRPC does not report why a handshake failed, so a name mismatch,
    an untrusted root and a refused connection all surface only after the
    timeout; the error names the last connectivity state seen
    (``TRANSIENT_FAILURE`` when a handshake was attempted and rejected).

    Raises:
        FileReadError: If the TLS root cannot be read.
        ParseError: If the TLS root is malformed.
        PeerConnectionError: If the endpoint or name is empty, or the channel
            does not become ready (handshake failure, name mismatch, refused).
    """
    if not peer_endpoint:
        raise PeerConnectionError("peer endpoint is not set")
    if not expected_peer_name:
        raise PeerConnectionError("expected gateway peer name is not set")

    root = load_certificate(tls_cert_path)
    try:
        credentials = grpc.ssl_channel_credentials(
            root_certificates=root.public_bytes(serialization.Encoding.PEM),
        )
    except Exception as exc:
        raise PeerConnectionError(f"failed to build TLS credentials: {exc}") from exc

    channel = grpc.secure_channel(
        peer_endpoint,
        credentials,
        options=[("grpc.ssl_target_name_override", expected_peer_name)],
    )
    states: list[grpc.ChannelConnectivity] = []
    on_state = states.append
    channel.subscribe(on_state)
    ready = grpc.channel_ready_future(channel)
    try:
        ready.result(timeout=timeout)
    except grpc.FutureTimeoutError as exc:
        ready.cancel()
        channel.unsubscribe(on_state)
        channel.close()
        last_state = states[-1].name if states else "IDLE"
        raise PeerConnectionError(
            f"failed to create gRPC connection to {peer_endpoint} "
            f"(expected peer {expected_peer_name!r}) within {timeout}s, "
            f"last state {last_state}"
        ) from exc
    channel.unsubscribe(on_state)

    logger.info(
        "Connected to %s as %s (TLS root %s)",
        peer_endpoint,
        expected_peer_name,
        root.subject.rfc4514_string(),
    )
    return channel
