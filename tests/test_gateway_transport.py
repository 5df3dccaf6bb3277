"""
Tests for src/gateway/transport.py

**Purpose**: Verify channel creation options, the fail-before-connect behavior
on a missing TLS certificate, idempotent close, and the optional readiness wait.

**Testing philosophy**: Patch grpc's channel functions so no socket is opened.
"""

from unittest.mock import MagicMock, patch

import grpc
import pytest

from src.gateway.errors import TransportError
from src.gateway.transport import GrpcTransport, open_transport


def test_missing_tls_cert_fails_before_creating_channel(tmp_path):
    with patch("src.gateway.transport.grpc.secure_channel") as secure_channel:
        with pytest.raises(FileNotFoundError):
            open_transport("localhost:7051", tmp_path / "ca.crt", "peer0.org1.example.com")

    secure_channel.assert_not_called()


def test_secure_channel_pins_host_alias(msp_dir, certificate_pem):
    channel = MagicMock()
    with patch("src.gateway.transport.grpc.ssl_channel_credentials") as creds, \
            patch("src.gateway.transport.grpc.secure_channel", return_value=channel) as secure_channel:
        transport = open_transport("localhost:7051", msp_dir / "tls" / "ca.crt", "peer0.org1.example.com")

    creds.assert_called_once_with(root_certificates=certificate_pem)
    args, kwargs = secure_channel.call_args
    assert args[0] == "localhost:7051"
    assert args[1] is creds.return_value
    assert kwargs["options"] == [("grpc.ssl_target_name_override", "peer0.org1.example.com")]
    assert transport.channel is channel
    assert transport.closed is False


def test_no_host_alias_means_no_override(msp_dir):
    with patch("src.gateway.transport.grpc.ssl_channel_credentials"), \
            patch("src.gateway.transport.grpc.secure_channel") as secure_channel:
        open_transport("peer0.org1.example.com:7051", msp_dir / "tls" / "ca.crt")

    assert secure_channel.call_args.kwargs["options"] == []


def test_channel_creation_error_is_transport_error(msp_dir):
    with patch("src.gateway.transport.grpc.ssl_channel_credentials"), \
            patch("src.gateway.transport.grpc.secure_channel", side_effect=ValueError("bad target")):
        with pytest.raises(TransportError, match="bad target"):
            open_transport("::bad::", msp_dir / "tls" / "ca.crt")


def test_close_is_idempotent():
    channel = MagicMock()
    transport = GrpcTransport(channel, "localhost:7051")

    transport.close()
    transport.close()

    channel.close.assert_called_once()
    assert transport.closed is True


def test_context_manager_closes_channel():
    channel = MagicMock()

    with GrpcTransport(channel, "localhost:7051") as transport:
        assert not transport.closed

    channel.close.assert_called_once()


def test_ready_timeout_closes_channel_and_raises(msp_dir):
    channel = MagicMock()
    future = MagicMock()
    future.result.side_effect = grpc.FutureTimeoutError()

    with patch("src.gateway.transport.grpc.ssl_channel_credentials"), \
            patch("src.gateway.transport.grpc.secure_channel", return_value=channel), \
            patch("src.gateway.transport.grpc.channel_ready_future", return_value=future):
        with pytest.raises(TransportError, match="not reachable within 2.0s"):
            open_transport("localhost:7051", msp_dir / "tls" / "ca.crt", connect_timeout_seconds=2.0)

    future.result.assert_called_once_with(timeout=2.0)
    channel.close.assert_called_once()


def test_ready_wait_success(msp_dir):
    future = MagicMock()

    with patch("src.gateway.transport.grpc.ssl_channel_credentials"), \
            patch("src.gateway.transport.grpc.secure_channel"), \
            patch("src.gateway.transport.grpc.channel_ready_future", return_value=future):
        transport = open_transport("localhost:7051", msp_dir / "tls" / "ca.crt", connect_timeout_seconds=1.5)

    future.result.assert_called_once_with(timeout=1.5)
    assert not transport.closed
