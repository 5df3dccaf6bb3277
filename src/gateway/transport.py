"""
TLS-secured gRPC transport to a gateway peer.

**Conceptual**: One gRPC channel is opened per peer and shared by every
gateway call. The peer presents a TLS certificate issued for its own host name
(e.g. peer0.org1.example.com), which often differs from the address the client
dials (e.g. localhost:7051 through a port mapping). The expected server name
is therefore pinned with ``grpc.ssl_target_name_override``.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import grpc

from src.gateway.errors import TransportError

logger = logging.getLogger(__name__)


class GrpcTransport:
    """
    An open gRPC channel to a gateway peer.

    Use as a context manager so the channel is closed on every exit path:
        >>> with open_transport(endpoint, tls_cert_path, host_alias) as transport:
        ...     gateway = connect(transport, identity, signer)
    """

    def __init__(self, channel: grpc.Channel, endpoint: str):
        self._channel = channel
        self.endpoint = endpoint
        self._closed = False

    @property
    def channel(self) -> grpc.Channel:
        return self._channel

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._channel.close()
        logger.debug("Closed gRPC channel to %s", self.endpoint)

    def __enter__(self) -> "GrpcTransport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def open_transport(
    endpoint: str,
    tls_cert_path: Union[str, Path],
    host_alias: Optional[str] = None,
    connect_timeout_seconds: Optional[float] = None,
) -> GrpcTransport:
    """
    Open a TLS gRPC channel to ``endpoint``.

    The TLS root certificate is read before anything else, so a missing file
    fails without creating a channel.

    Args:
        endpoint: host:port of the gateway peer.
        tls_cert_path: PEM-encoded TLS root certificate used to verify the peer.
        host_alias: Server name expected in the peer's certificate, if it
                    differs from the endpoint host.
        connect_timeout_seconds: If set, wait this long for the channel to be
                                 ready and fail otherwise. gRPC channels
                                 connect lazily, so without it connection
                                 problems surface on the first call.

    Returns:
        GrpcTransport wrapping the channel.

    Raises:
        OSError: If the TLS certificate file is missing or unreadable.
        TransportError: If the channel can't be created or doesn't become ready.
    """
    tls_root_cert = Path(tls_cert_path).read_bytes()

    options = []
    if host_alias:
        options.append(("grpc.ssl_target_name_override", host_alias))

    try:
        credentials = grpc.ssl_channel_credentials(root_certificates=tls_root_cert)
        channel = grpc.secure_channel(endpoint, credentials, options=options)
    except (ValueError, TypeError, grpc.RpcError) as e:
        raise TransportError(f"Failed to create gRPC channel to {endpoint}: {e}") from e

    transport = GrpcTransport(channel, endpoint)

    if connect_timeout_seconds is not None:
        try:
            grpc.channel_ready_future(channel).result(timeout=connect_timeout_seconds)
        except grpc.FutureTimeoutError as e:
            transport.close()
            raise TransportError(
                f"Gateway peer {endpoint} not reachable within {connect_timeout_seconds}s"
            ) from e

    logger.info("Opened gRPC channel to %s (TLS host %s)", endpoint, host_alias or endpoint)
    return transport
