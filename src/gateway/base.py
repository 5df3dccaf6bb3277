"""
Capability protocols for the gateway client.

**Conceptual**: The transaction driver never touches gRPC, protobuf or key
objects directly. It depends on four small protocols, and anything that
implements them (the gRPC implementation in this package, a fake in tests, or
a different SDK) can be plugged in.

**Open/close contracts**:
  - TransportHandle: opened once, shared by every call, closed exactly once
    at shutdown. close() must be safe to call twice.
  - GatewaySession: built on top of an open transport; closing it does NOT
    close the transport. Shutdown order is session first, then transport.
  - SigningIdentity and Signer hold no resources and need no cleanup.
"""

from typing import Protocol

import grpc


class TransportHandle(Protocol):
    """An open, long-lived connection to a gateway peer."""

    @property
    def channel(self) -> grpc.Channel:
        """The underlying gRPC channel."""
        ...

    def close(self) -> None:
        """Release the connection. Idempotent."""
        ...


class SigningIdentity(Protocol):
    """The client's identity: organization MSP ID plus PEM certificate."""

    @property
    def msp_id(self) -> str:
        ...

    @property
    def credentials(self) -> bytes:
        ...

    def serialize(self) -> bytes:
        """Encode as a Fabric SerializedIdentity (the transaction creator)."""
        ...


class Signer(Protocol):
    """Signs a SHA-256 digest and returns the signature bytes."""

    def __call__(self, digest: bytes) -> bytes:
        ...


class ContractHandle(Protocol):
    """A deployed contract on one channel."""

    def submit_transaction(self, name: str, *args: str) -> bytes:
        """Endorse, submit and wait for commit. Returns the transaction result."""
        ...

    def evaluate_transaction(self, name: str, *args: str) -> bytes:
        """Run a read-only query and return its result payload."""
        ...


class NetworkHandle(Protocol):
    """A channel seen through a gateway session."""

    def get_contract(self, chaincode_name: str) -> ContractHandle:
        ...


class GatewaySession(Protocol):
    """A session combining transport, identity and signer."""

    def get_network(self, channel_name: str) -> NetworkHandle:
        ...

    def close(self) -> None:
        """Release the session (not the transport). Idempotent."""
        ...

