"""
Tests for src/gateway/client.py

**Purpose**: Verify the gateway call sequence, per-call-kind timeouts,
error mapping and session lifecycle.

**Testing philosophy**: Replace the gRPC channel with a fake whose stubs
record (method, request, timeout) and answer from canned responses. Requests
and responses go through the real protobuf serializers, so the wire encoding
is exercised too. Time is frozen so timeouts are exact.
"""

from datetime import datetime, timedelta, timezone

import grpc
import pytest

from src.config.settings import TimeoutSettings
from src.gateway import protos
from src.gateway.client import CallKind, Gateway, connect
from src.gateway.credentials import Identity, PrivateKeySigner
from src.gateway.errors import (
    CommitError,
    CommitStatusError,
    EndorseError,
    EvaluateError,
    GatewayClosedError,
    SubmitError,
)
from src.utils.time import FrozenClock


class FakeRpcError(grpc.RpcError):
    def __init__(self, code, details):
        self._code = code
        self._details = details

    def code(self):
        return self._code

    def details(self):
        return self._details


class FakeChannel:
    """Stand-in for grpc.Channel; responders map method path -> callable(request)."""

    def __init__(self, responders=None):
        self.responders = responders or {}
        self.calls = []

    def unary_unary(self, method, request_serializer=None, response_deserializer=None):
        def invoke(request, timeout=None):
            wire_request = request_serializer(request)
            self.calls.append((method, wire_request, timeout))
            response = self.responders[method](wire_request)
            return response_deserializer(response.SerializeToString())
        return invoke

    @property
    def methods(self):
        return [method for method, _, _ in self.calls]


class FakeTransport:
    def __init__(self, channel):
        self.channel = channel
        self.closed = False

    def close(self):
        self.closed = True


def raise_error(code, details="boom"):
    def responder(_request):
        raise FakeRpcError(code, details)
    return responder


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 3, 1, tzinfo=timezone.utc))


@pytest.fixture
def identity(certificate_pem):
    return Identity(msp_id="Org1MSP", credentials=certificate_pem)


@pytest.fixture
def signer(ec_private_key):
    return PrivateKeySigner(ec_private_key)


@pytest.fixture
def channel(make_prepared_envelope):
    return FakeChannel({
        protos.EVALUATE_METHOD: lambda _req: protos.EvaluateResponse(
            result=protos.Response(status=200, payload=b'{"id": 5}')
        ),
        protos.ENDORSE_METHOD: lambda _req: protos.EndorseResponse(
            prepared_transaction=make_prepared_envelope(b"registered")
        ),
        protos.SUBMIT_METHOD: lambda _req: protos.SubmitResponse(),
        protos.COMMIT_STATUS_METHOD: lambda _req: protos.CommitStatusResponse(
            result=protos.TX_VALID, block_number=7
        ),
    })


@pytest.fixture
def gateway(channel, identity, signer, clock):
    return connect(FakeTransport(channel), identity, signer, clock=clock)


@pytest.fixture
def contract(gateway):
    return gateway.get_network("mychannel").get_contract("basic")


def test_evaluate_transaction_returns_payload(contract, channel):
    assert contract.evaluate_transaction("ReadOrder", "5") == b'{"id": 5}'

    method, wire_request, timeout = channel.calls[0]
    assert method == "/gateway.Gateway/Evaluate"
    assert timeout == 5.0

    request = protos.EvaluateRequest.FromString(wire_request)
    assert request.channel_id == "mychannel"
    proposal = protos.Proposal.FromString(request.proposed_transaction.proposal_bytes)
    payload = protos.ChaincodeProposalPayload.FromString(proposal.payload)
    invocation = protos.ChaincodeInvocationSpec.FromString(payload.input)
    assert list(invocation.chaincode_spec.input.args) == [b"ReadOrder", b"5"]
    assert invocation.chaincode_spec.chaincode_id.name == "basic"


def test_submit_transaction_call_sequence_and_timeouts(contract, channel):
    result = contract.submit_transaction("RegisterOrder", "1", "0", "5")

    assert result == b"registered"
    assert channel.methods == [
        "/gateway.Gateway/Endorse",
        "/gateway.Gateway/Submit",
        "/gateway.Gateway/CommitStatus",
    ]
    assert [timeout for _, _, timeout in channel.calls] == [15.0, 5.0, 60.0]


def test_submit_sends_signed_envelope_and_same_transaction_id(contract, channel, signer):
    contract.submit_transaction("RegisterOrder", "1")

    endorse = protos.EndorseRequest.FromString(channel.calls[0][1])
    submit = protos.SubmitRequest.FromString(channel.calls[1][1])
    commit = protos.SignedCommitStatusRequest.FromString(channel.calls[2][1])
    commit_request = protos.CommitStatusRequest.FromString(commit.request)

    assert endorse.transaction_id == submit.transaction_id == commit_request.transaction_id
    assert submit.prepared_transaction.signature != b""
    assert commit.signature != b""


def test_custom_timeouts(channel, identity, signer, clock):
    timeouts = TimeoutSettings(
        evaluate=timedelta(seconds=2),
        endorse=timedelta(seconds=3),
        submit=timedelta(seconds=4),
        commit_status=timedelta(seconds=30),
    )
    gateway = Gateway(FakeTransport(channel), identity, signer, timeouts=timeouts, clock=clock)
    contract = gateway.get_network("mychannel").get_contract("basic")

    contract.evaluate_transaction("ReadOrder", "5")
    contract.submit_transaction("RegisterOrder", "1")

    assert [timeout for _, _, timeout in channel.calls] == [2.0, 3.0, 4.0, 30.0]


def test_deadline_computed_when_call_is_made(gateway, clock):
    first = gateway.deadline_for(CallKind.EVALUATE)
    clock.advance(timedelta(seconds=10))
    second = gateway.deadline_for(CallKind.EVALUATE)

    assert first == datetime(2024, 3, 1, 0, 0, 5, tzinfo=timezone.utc)
    assert second - first == timedelta(seconds=10)


def test_commit_failure_raises_commit_error(channel, contract):
    channel.responders[protos.COMMIT_STATUS_METHOD] = lambda _req: protos.CommitStatusResponse(
        result=11, block_number=9
    )

    with pytest.raises(CommitError) as excinfo:
        contract.submit_transaction("RegisterOrder", "1")

    assert excinfo.value.validation_code == 11
    assert excinfo.value.block_number == 9
    assert "status code 11" in str(excinfo.value)


@pytest.mark.parametrize(
    "method, error_type",
    [
        (protos.ENDORSE_METHOD, EndorseError),
        (protos.SUBMIT_METHOD, SubmitError),
        (protos.COMMIT_STATUS_METHOD, CommitStatusError),
    ],
)
def test_submit_rpc_failures_are_mapped(channel, contract, method, error_type):
    channel.responders[method] = raise_error(grpc.StatusCode.ABORTED, "endorsement mismatch")

    with pytest.raises(error_type) as excinfo:
        contract.submit_transaction("RegisterOrder", "1")

    assert excinfo.value.code == grpc.StatusCode.ABORTED
    assert "ABORTED: endorsement mismatch" in str(excinfo.value)
    assert excinfo.value.transaction_id in str(excinfo.value)


def test_endorse_failure_stops_sequence(channel, contract):
    channel.responders[protos.ENDORSE_METHOD] = raise_error(grpc.StatusCode.UNAVAILABLE)

    with pytest.raises(EndorseError):
        contract.submit_transaction("RegisterOrder", "1")

    assert channel.methods == ["/gateway.Gateway/Endorse"]


def test_evaluate_rpc_failure(channel, contract):
    channel.responders[protos.EVALUATE_METHOD] = raise_error(grpc.StatusCode.DEADLINE_EXCEEDED, "too slow")

    with pytest.raises(EvaluateError, match="DEADLINE_EXCEEDED"):
        contract.evaluate_transaction("ReadOrder", "5")


def test_evaluate_error_status(channel, contract):
    channel.responders[protos.EVALUATE_METHOD] = lambda _req: protos.EvaluateResponse(
        result=protos.Response(status=500, message="order 5 does not exist")
    )

    with pytest.raises(EvaluateError, match="order 5 does not exist"):
        contract.evaluate_transaction("ReadOrder", "5")


def test_closed_gateway_rejects_calls(gateway, contract, channel):
    gateway.close()
    gateway.close()

    assert gateway.closed
    with pytest.raises(GatewayClosedError):
        contract.evaluate_transaction("ReadOrder", "5")
    with pytest.raises(GatewayClosedError):
        gateway.get_network("mychannel")
    assert channel.calls == []


def test_closing_gateway_leaves_transport_open(channel, identity, signer, clock):
    transport = FakeTransport(channel)

    with connect(transport, identity, signer, clock=clock) as gateway:
        pass

    assert gateway.closed
    assert not transport.closed


def test_creator_is_serialized_identity(gateway, identity):
    assert gateway.creator == identity.serialize()
