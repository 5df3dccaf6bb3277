"""
Gateway session over a gRPC transport.

**Conceptual**: The Gateway object ties together the three things every call
needs: the transport (where to send), the identity (who is asking) and the
signer (proof that it's really them). From it you get a Network (a channel)
and from that a Contract, which exposes the two operations the client uses:

  - evaluate_transaction: run a read-only query on one peer and return its
    result. Nothing is written to the ledger.
  - submit_transaction: collect endorsements, send the endorsed transaction to
    ordering, then wait until the peer reports it committed.

**Timeouts**: every gateway RPC has its own budget (evaluate, endorse, submit,
commit status). The absolute deadline is computed from the clock when the RPC
is issued, never stored, so each call gets a fresh budget.

**Lifecycle**: closing the gateway does not close the transport. The caller
owns the transport and closes it after the gateway:

    >>> with open_transport(...) as transport:
    ...     with connect(transport, identity, signer) as gateway:
    ...         contract = gateway.get_network("mychannel").get_contract("basic")
    ...         contract.submit_transaction("RegisterOrder", *args)
"""

import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional, Type

import grpc

from src.config.settings import TimeoutSettings
from src.gateway import protos
from src.gateway.base import SigningIdentity, Signer, TransportHandle
from src.gateway.errors import (
    CommitError,
    CommitStatusError,
    EndorseError,
    EvaluateError,
    GatewayCallError,
    GatewayClosedError,
    SubmitError,
)
from src.gateway.proposal import (
    build_commit_status_request,
    extract_transaction_result,
    new_proposed_transaction,
    sign_envelope,
)
from src.utils.time import Clock, RealClock, deadline_after, seconds_until

logger = logging.getLogger(__name__)


class CallKind(Enum):
    """The four kinds of gateway RPC, each with its own timeout."""
    EVALUATE = "Evaluate"
    ENDORSE = "Endorse"
    SUBMIT = "Submit"
    COMMIT_STATUS = "CommitStatus"


_METHODS = {
    CallKind.EVALUATE: (protos.EVALUATE_METHOD, protos.EvaluateRequest, protos.EvaluateResponse),
    CallKind.ENDORSE: (protos.ENDORSE_METHOD, protos.EndorseRequest, protos.EndorseResponse),
    CallKind.SUBMIT: (protos.SUBMIT_METHOD, protos.SubmitRequest, protos.SubmitResponse),
    CallKind.COMMIT_STATUS: (
        protos.COMMIT_STATUS_METHOD,
        protos.SignedCommitStatusRequest,
        protos.CommitStatusResponse,
    ),
}

_ERRORS: dict[CallKind, Type[GatewayCallError]] = {
    CallKind.EVALUATE: EvaluateError,
    CallKind.ENDORSE: EndorseError,
    CallKind.SUBMIT: SubmitError,
    CallKind.COMMIT_STATUS: CommitStatusError,
}


class Gateway:
    """
    A gateway session bound to one transport, identity and signer.

    Args:
        transport: Open transport to the gateway peer.
        identity: Client identity (transaction creator).
        signer: Signs SHA-256 digests with the identity's private key.
        timeouts: Per-call-kind durations (defaults: 5s/15s/5s/60s).
        clock: Time source for deadlines and proposal timestamps.
    """

    def __init__(
        self,
        transport: TransportHandle,
        identity: SigningIdentity,
        signer: Signer,
        timeouts: Optional[TimeoutSettings] = None,
        clock: Optional[Clock] = None,
    ):
        self.identity = identity
        self.signer = signer
        self.timeouts = timeouts or TimeoutSettings()
        self.clock = clock or RealClock()
        self._creator = identity.serialize()
        self._closed = False

        channel = transport.channel
        self._stubs = {
            kind: channel.unary_unary(
                method,
                request_serializer=request_type.SerializeToString,
                response_deserializer=response_type.FromString,
            )
            for kind, (method, request_type, response_type) in _METHODS.items()
        }

    @property
    def creator(self) -> bytes:
        """Serialized identity used as creator of every proposal."""
        return self._creator

    @property
    def closed(self) -> bool:
        return self._closed

    def get_network(self, channel_name: str) -> "Network":
        self._ensure_open()
        return Network(self, channel_name)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        logger.debug("Closed gateway session for %s", self.identity.msp_id)

    def __enter__(self) -> "Gateway":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def timeout_for(self, kind: CallKind) -> timedelta:
        return {
            CallKind.EVALUATE: self.timeouts.evaluate,
            CallKind.ENDORSE: self.timeouts.endorse,
            CallKind.SUBMIT: self.timeouts.submit,
            CallKind.COMMIT_STATUS: self.timeouts.commit_status,
        }[kind]

    def deadline_for(self, kind: CallKind) -> datetime:
        """Absolute deadline for a call of ``kind`` issued now."""
        return deadline_after(self.timeout_for(kind), self.clock)

    def call(self, kind: CallKind, transaction_id: str, request):
        """
        Issue one gateway RPC with a freshly computed deadline.

        Raises:
            GatewayClosedError: If the gateway was closed.
            EvaluateError / EndorseError / SubmitError / CommitStatusError:
                If the RPC fails.
        """
        self._ensure_open()
        deadline = self.deadline_for(kind)
        logger.debug("%s %s (deadline %s)", kind.value, transaction_id, deadline.isoformat())
        try:
            return self._stubs[kind](request, timeout=seconds_until(deadline, self.clock))
        except grpc.RpcError as e:
            raise _ERRORS[kind].from_rpc_error(kind.value, transaction_id, e) from e

    def _ensure_open(self) -> None:
        if self._closed:
            raise GatewayClosedError("Gateway session is closed")


class Network:
    """A channel seen through a gateway session."""

    def __init__(self, gateway: Gateway, channel_name: str):
        self.gateway = gateway
        self.name = channel_name

    def get_contract(self, chaincode_name: str) -> "Contract":
        return Contract(self, chaincode_name)


class Contract:
    """A contract (chaincode) deployed on a channel."""

    def __init__(self, network: Network, chaincode_name: str):
        self.network = network
        self.chaincode_name = chaincode_name

    @property
    def channel_name(self) -> str:
        return self.network.name

    def _propose(self, function_name: str, args):
        gateway = self.network.gateway
        return new_proposed_transaction(
            channel_name=self.channel_name,
            chaincode_name=self.chaincode_name,
            function_name=function_name,
            args=args,
            creator=gateway.creator,
            signer=gateway.signer,
            timestamp=gateway.clock.now(),
        )

    def evaluate_transaction(self, name: str, *args: str) -> bytes:
        """
        Run a read-only query and return the contract function's result.

        Args:
            name: Contract function name.
            *args: Positional string arguments.

        Returns:
            Raw result payload bytes.

        Raises:
            EvaluateError: If the gateway rejects the query or the function fails.
        """
        gateway = self.network.gateway
        proposed = self._propose(name, args)
        request = protos.EvaluateRequest(
            transaction_id=proposed.transaction_id,
            channel_id=self.channel_name,
            proposed_transaction=proposed.signed_proposal,
        )
        response = gateway.call(CallKind.EVALUATE, proposed.transaction_id, request)

        result = response.result
        if result.status >= 400:
            raise EvaluateError(
                f"Evaluate of {name} returned status {result.status}: {result.message}",
                transaction_id=proposed.transaction_id,
            )
        return result.payload

    def submit_transaction(self, name: str, *args: str) -> bytes:
        """
        Submit a transaction and block until it is committed to the ledger.

        Steps: endorse -> sign envelope -> submit -> wait for commit status.

        Args:
            name: Contract function name.
            *args: Positional string arguments.

        Returns:
            The contract function's result bytes (may be empty).

        Raises:
            EndorseError, SubmitError, CommitStatusError: If an RPC fails.
            CommitError: If the transaction was ordered but marked invalid.
        """
        gateway = self.network.gateway
        proposed = self._propose(name, args)
        transaction_id = proposed.transaction_id

        endorse_response = gateway.call(
            CallKind.ENDORSE,
            transaction_id,
            protos.EndorseRequest(
                transaction_id=transaction_id,
                channel_id=self.channel_name,
                proposed_transaction=proposed.signed_proposal,
            ),
        )
        prepared = sign_envelope(endorse_response.prepared_transaction, gateway.signer)

        gateway.call(
            CallKind.SUBMIT,
            transaction_id,
            protos.SubmitRequest(
                transaction_id=transaction_id,
                channel_id=self.channel_name,
                prepared_transaction=prepared,
            ),
        )
        logger.debug("Submitted transaction %s, waiting for commit", transaction_id)

        status = gateway.call(
            CallKind.COMMIT_STATUS,
            transaction_id,
            build_commit_status_request(transaction_id, self.channel_name, gateway.creator, gateway.signer),
        )
        if status.result != protos.TX_VALID:
            raise CommitError(transaction_id, status.result, status.block_number)

        logger.debug("Transaction %s committed in block %d", transaction_id, status.block_number)
        return extract_transaction_result(prepared)


def connect(
    transport: TransportHandle,
    identity: SigningIdentity,
    signer: Signer,
    timeouts: Optional[TimeoutSettings] = None,
    clock: Optional[Clock] = None,
) -> Gateway:
    """Open a gateway session over ``transport``."""
    return Gateway(transport, identity, signer, timeouts=timeouts, clock=clock)
