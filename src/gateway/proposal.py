"""
Transaction proposal construction and signing.

**Conceptual**: Every gateway call starts from a signed proposal: "client X
asks contract Y on channel Z to run function F with arguments A". The steps
are the same for a query and for a transaction:
  1. Pick a random nonce; the transaction id is sha256(nonce + creator).
  2. Build the channel header (type, channel, tx id, timestamp, contract).
  3. Build the signature header (creator identity, nonce).
  4. Wrap the invocation spec (function name + arguments) as the payload.
  5. Sign sha256(proposal bytes) with the client's signer.

For a submitted transaction the gateway returns an unsigned envelope after
endorsement; the client signs it the same way before submission, and signs
the commit status request it sends afterwards.
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from src.gateway import protos
from src.gateway.base import Signer

NONCE_LENGTH = 24


@dataclass(frozen=True)
class ProposedTransaction:
    """
    A signed proposal ready to be sent to the gateway.

    Attributes:
        transaction_id: Hex transaction id derived from nonce and creator.
        channel_name: Channel the proposal targets.
        signed_proposal: protos.SignedProposal message.
    """
    transaction_id: str
    channel_name: str
    signed_proposal: object


def new_nonce() -> bytes:
    return secrets.token_bytes(NONCE_LENGTH)


def transaction_id_for(nonce: bytes, creator: bytes) -> str:
    """Derive the Fabric transaction id: hex(sha256(nonce + creator))."""
    return hashlib.sha256(nonce + creator).hexdigest()


def encode_args(args: Sequence[str]) -> list[bytes]:
    """Encode chaincode arguments as UTF-8 bytes (bytes pass through unchanged)."""
    return [arg if isinstance(arg, bytes) else str(arg).encode("utf-8") for arg in args]


def _timestamp(when: datetime):
    seconds = int(when.timestamp())
    return protos.Timestamp(seconds=seconds, nanos=when.microsecond * 1000)


def build_proposal(
    channel_name: str,
    chaincode_name: str,
    function_name: str,
    args: Sequence[str],
    creator: bytes,
    timestamp: datetime,
    nonce: Optional[bytes] = None,
):
    """
    Build an unsigned proposal invoking ``function_name(*args)``.

    The function name travels as the first chaincode argument, which is how
    both contract-API and shim-based chaincode route invocations.

    Args:
        channel_name: Target channel.
        chaincode_name: Target contract.
        function_name: Contract function, e.g. "RegisterOrder".
        args: Positional string arguments.
        creator: Serialized identity of the client.
        timestamp: Proposal creation time.
        nonce: Random nonce (generated if omitted).

    Returns:
        (transaction_id, protos.Proposal) tuple.
    """
    if nonce is None:
        nonce = new_nonce()
    transaction_id = transaction_id_for(nonce, creator)

    chaincode_id = protos.ChaincodeID(name=chaincode_name)
    extension = protos.ChaincodeHeaderExtension(chaincode_id=chaincode_id)
    channel_header = protos.ChannelHeader(
        type=protos.ENDORSER_TRANSACTION,
        timestamp=_timestamp(timestamp),
        channel_id=channel_name,
        tx_id=transaction_id,
        epoch=0,
        extension=extension.SerializeToString(),
    )
    signature_header = protos.SignatureHeader(creator=creator, nonce=nonce)
    header = protos.Header(
        channel_header=channel_header.SerializeToString(),
        signature_header=signature_header.SerializeToString(),
    )

    invocation_spec = protos.ChaincodeInvocationSpec(
        chaincode_spec=protos.ChaincodeSpec(
            chaincode_id=chaincode_id,
            input=protos.ChaincodeInput(args=encode_args([function_name, *args])),
        )
    )
    payload = protos.ChaincodeProposalPayload(input=invocation_spec.SerializeToString())

    proposal = protos.Proposal(
        header=header.SerializeToString(),
        payload=payload.SerializeToString(),
    )
    return transaction_id, proposal


def sign_bytes(message: bytes, signer: Signer) -> bytes:
    """Sign sha256(message) with ``signer``."""
    return signer(hashlib.sha256(message).digest())


def sign_proposal(proposal, signer: Signer):
    """Return a protos.SignedProposal for ``proposal``."""
    proposal_bytes = proposal.SerializeToString()
    return protos.SignedProposal(
        proposal_bytes=proposal_bytes,
        signature=sign_bytes(proposal_bytes, signer),
    )


def new_proposed_transaction(
    channel_name: str,
    chaincode_name: str,
    function_name: str,
    args: Sequence[str],
    creator: bytes,
    signer: Signer,
    timestamp: datetime,
) -> ProposedTransaction:
    """Build and sign a proposal in one step."""
    transaction_id, proposal = build_proposal(
        channel_name, chaincode_name, function_name, args, creator, timestamp
    )
    return ProposedTransaction(
        transaction_id=transaction_id,
        channel_name=channel_name,
        signed_proposal=sign_proposal(proposal, signer),
    )


def sign_envelope(envelope, signer: Signer):
    """Return a copy of the prepared transaction envelope with its signature set."""
    signed = protos.Envelope()
    signed.CopyFrom(envelope)
    signed.signature = sign_bytes(envelope.payload, signer)
    return signed


def build_commit_status_request(transaction_id: str, channel_name: str, creator: bytes, signer: Signer):
    """Return a protos.SignedCommitStatusRequest for ``transaction_id``."""
    request_bytes = protos.CommitStatusRequest(
        transaction_id=transaction_id,
        channel_id=channel_name,
        identity=creator,
    ).SerializeToString()
    return protos.SignedCommitStatusRequest(
        request=request_bytes,
        signature=sign_bytes(request_bytes, signer),
    )


def extract_transaction_result(envelope) -> bytes:
    """
    Dig the contract function's return value out of a prepared transaction.

    Envelope.payload -> Payload.data -> Transaction.actions[0].payload ->
    ChaincodeActionPayload.action.proposal_response_payload ->
    ProposalResponsePayload.extension -> ChaincodeAction.response.payload

    Returns:
        The result bytes (empty if the function returned nothing).
    """
    payload = protos.Payload.FromString(envelope.payload)
    transaction = protos.Transaction.FromString(payload.data)
    if not transaction.actions:
        return b""

    action_payload = protos.ChaincodeActionPayload.FromString(transaction.actions[0].payload)
    response_payload = protos.ProposalResponsePayload.FromString(
        action_payload.action.proposal_response_payload
    )
    chaincode_action = protos.ChaincodeAction.FromString(response_payload.extension)
    return chaincode_action.response.payload
