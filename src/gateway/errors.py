"""
Exceptions raised by the gateway client.

**Conceptual**: Every client-side failure derives from GatewayClientError, so
callers can catch the whole family at once or pick out one kind. Remote call
failures carry the transaction id and the gRPC status code so a failed run can
be traced on the peer's logs.

Filesystem problems (missing certificate, unreadable key directory) are NOT
wrapped: they surface as the OSError raised by the read itself.
"""

from typing import Optional

import grpc


class GatewayClientError(Exception):
    """Base exception for gateway client errors."""
    pass


class CredentialError(GatewayClientError):
    """
    Raised when credential material is present but unusable.

    Empty key directory, malformed PEM, or a key type the signer can't use.
    """
    pass


class TransportError(GatewayClientError):
    """Raised when the gRPC channel to the gateway peer can't be established."""
    pass


class GatewayClosedError(GatewayClientError):
    """Raised when a call is made through a gateway that was already closed."""
    pass


class GatewayCallError(GatewayClientError):
    """
    Base class for failures of a gateway RPC.

    Attributes:
        transaction_id: Id of the transaction the call was made for.
        code: gRPC status code reported for the failure (None if unknown).
    """

    def __init__(self, message: str, transaction_id: str, code: Optional[grpc.StatusCode] = None):
        super().__init__(message)
        self.transaction_id = transaction_id
        self.code = code

    @classmethod
    def from_rpc_error(cls, call: str, transaction_id: str, error: grpc.RpcError) -> "GatewayCallError":
        code = error.code() if hasattr(error, "code") else None
        details = error.details() if hasattr(error, "details") else str(error)
        code_name = code.name if code is not None else "UNKNOWN"
        return cls(
            f"{call} failed for transaction {transaction_id}: {code_name}: {details}",
            transaction_id=transaction_id,
            code=code,
        )


class EvaluateError(GatewayCallError):
    """Raised when a read-only evaluation is rejected by the gateway."""
    pass


class EndorseError(GatewayCallError):
    """Raised when endorsement of a transaction proposal fails."""
    pass


class SubmitError(GatewayCallError):
    """Raised when the endorsed transaction can't be submitted for ordering."""
    pass


class CommitStatusError(GatewayCallError):
    """Raised when the commit status of a submitted transaction can't be obtained."""
    pass


class CommitError(GatewayClientError):
    """
    Raised when a transaction was ordered but failed validation on commit.

    Attributes:
        transaction_id: Id of the failed transaction.
        validation_code: Fabric TxValidationCode reported by the peer.
        block_number: Block the transaction was recorded in.
    """

    def __init__(self, transaction_id: str, validation_code: int, block_number: int):
        super().__init__(
            f"Transaction {transaction_id} failed to commit with status code "
            f"{validation_code} in block {block_number}"
        )
        self.transaction_id = transaction_id
        self.validation_code = validation_code
        self.block_number = block_number
