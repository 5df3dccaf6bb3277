"""
Protobuf messages of the Fabric Gateway wire protocol.

**Conceptual**: The gateway peer speaks protobuf over gRPC. Only a small subset
of the Fabric message set is needed to evaluate, endorse, submit and check the
commit status of a transaction. Rather than vendoring generated *_pb2 modules,
the messages are declared here as descriptors and turned into real protobuf
message classes at import time.

Protobuf encoding depends only on field numbers and types, so the messages are
wire-compatible with Fabric's common/, msp/, peer/ and gateway/ definitions
even though they share a single package name here. Fields the client never
reads or writes (maps, endorsements, events) are left out; protobuf skips
unknown fields when parsing.
"""

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

_F = descriptor_pb2.FieldDescriptorProto

_PACKAGE = "fabricgw"

# (name, number, type, label, message type name or None)
_MESSAGES = {
    "Timestamp": [
        ("seconds", 1, _F.TYPE_INT64, _F.LABEL_OPTIONAL, None),
        ("nanos", 2, _F.TYPE_INT32, _F.LABEL_OPTIONAL, None),
    ],
    # msp/identities.proto
    "SerializedIdentity": [
        ("mspid", 1, _F.TYPE_STRING, _F.LABEL_OPTIONAL, None),
        ("id_bytes", 2, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
    ],
    # common/common.proto
    "ChannelHeader": [
        ("type", 1, _F.TYPE_INT32, _F.LABEL_OPTIONAL, None),
        ("version", 2, _F.TYPE_INT32, _F.LABEL_OPTIONAL, None),
        ("timestamp", 3, _F.TYPE_MESSAGE, _F.LABEL_OPTIONAL, "Timestamp"),
        ("channel_id", 4, _F.TYPE_STRING, _F.LABEL_OPTIONAL, None),
        ("tx_id", 5, _F.TYPE_STRING, _F.LABEL_OPTIONAL, None),
        ("epoch", 6, _F.TYPE_UINT64, _F.LABEL_OPTIONAL, None),
        ("extension", 7, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
        ("tls_cert_hash", 8, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
    ],
    "SignatureHeader": [
        ("creator", 1, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
        ("nonce", 2, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
    ],
    "Header": [
        ("channel_header", 1, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
        ("signature_header", 2, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
    ],
    "Payload": [
        ("header", 1, _F.TYPE_MESSAGE, _F.LABEL_OPTIONAL, "Header"),
        ("data", 2, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
    ],
    "Envelope": [
        ("payload", 1, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
        ("signature", 2, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
    ],
    # peer/chaincode.proto
    "ChaincodeID": [
        ("path", 1, _F.TYPE_STRING, _F.LABEL_OPTIONAL, None),
        ("name", 2, _F.TYPE_STRING, _F.LABEL_OPTIONAL, None),
        ("version", 3, _F.TYPE_STRING, _F.LABEL_OPTIONAL, None),
    ],
    "ChaincodeInput": [
        ("args", 1, _F.TYPE_BYTES, _F.LABEL_REPEATED, None),
        ("is_init", 3, _F.TYPE_BOOL, _F.LABEL_OPTIONAL, None),
    ],
    "ChaincodeSpec": [
        ("type", 1, _F.TYPE_INT32, _F.LABEL_OPTIONAL, None),
        ("chaincode_id", 2, _F.TYPE_MESSAGE, _F.LABEL_OPTIONAL, "ChaincodeID"),
        ("input", 3, _F.TYPE_MESSAGE, _F.LABEL_OPTIONAL, "ChaincodeInput"),
        ("timeout", 4, _F.TYPE_INT32, _F.LABEL_OPTIONAL, None),
    ],
    "ChaincodeInvocationSpec": [
        ("chaincode_spec", 1, _F.TYPE_MESSAGE, _F.LABEL_OPTIONAL, "ChaincodeSpec"),
    ],
    # peer/proposal.proto
    "ChaincodeHeaderExtension": [
        ("chaincode_id", 2, _F.TYPE_MESSAGE, _F.LABEL_OPTIONAL, "ChaincodeID"),
    ],
    "ChaincodeProposalPayload": [
        ("input", 1, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
    ],
    "Proposal": [
        ("header", 1, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
        ("payload", 2, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
        ("extension", 3, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
    ],
    "SignedProposal": [
        ("proposal_bytes", 1, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
        ("signature", 2, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
    ],
    # peer/proposal_response.proto
    "Response": [
        ("status", 1, _F.TYPE_INT32, _F.LABEL_OPTIONAL, None),
        ("message", 2, _F.TYPE_STRING, _F.LABEL_OPTIONAL, None),
        ("payload", 3, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
    ],
    "ProposalResponsePayload": [
        ("proposal_hash", 1, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
        ("extension", 2, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
    ],
    # peer/transaction.proto
    "TransactionAction": [
        ("header", 1, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
        ("payload", 2, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
    ],
    "Transaction": [
        ("actions", 1, _F.TYPE_MESSAGE, _F.LABEL_REPEATED, "TransactionAction"),
    ],
    "ChaincodeEndorsedAction": [
        ("proposal_response_payload", 1, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
    ],
    "ChaincodeActionPayload": [
        ("chaincode_proposal_payload", 1, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
        ("action", 2, _F.TYPE_MESSAGE, _F.LABEL_OPTIONAL, "ChaincodeEndorsedAction"),
    ],
    "ChaincodeAction": [
        ("results", 1, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
        ("events", 2, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
        ("response", 3, _F.TYPE_MESSAGE, _F.LABEL_OPTIONAL, "Response"),
        ("chaincode_id", 4, _F.TYPE_MESSAGE, _F.LABEL_OPTIONAL, "ChaincodeID"),
    ],
    # gateway/gateway.proto
    "EvaluateRequest": [
        ("transaction_id", 1, _F.TYPE_STRING, _F.LABEL_OPTIONAL, None),
        ("channel_id", 2, _F.TYPE_STRING, _F.LABEL_OPTIONAL, None),
        ("proposed_transaction", 3, _F.TYPE_MESSAGE, _F.LABEL_OPTIONAL, "SignedProposal"),
        ("target_organizations", 4, _F.TYPE_STRING, _F.LABEL_REPEATED, None),
    ],
    "EvaluateResponse": [
        ("result", 1, _F.TYPE_MESSAGE, _F.LABEL_OPTIONAL, "Response"),
    ],
    "EndorseRequest": [
        ("transaction_id", 1, _F.TYPE_STRING, _F.LABEL_OPTIONAL, None),
        ("channel_id", 2, _F.TYPE_STRING, _F.LABEL_OPTIONAL, None),
        ("proposed_transaction", 3, _F.TYPE_MESSAGE, _F.LABEL_OPTIONAL, "SignedProposal"),
        ("endorsing_organizations", 4, _F.TYPE_STRING, _F.LABEL_REPEATED, None),
    ],
    "EndorseResponse": [
        ("prepared_transaction", 1, _F.TYPE_MESSAGE, _F.LABEL_OPTIONAL, "Envelope"),
    ],
    "SubmitRequest": [
        ("transaction_id", 1, _F.TYPE_STRING, _F.LABEL_OPTIONAL, None),
        ("channel_id", 2, _F.TYPE_STRING, _F.LABEL_OPTIONAL, None),
        ("prepared_transaction", 3, _F.TYPE_MESSAGE, _F.LABEL_OPTIONAL, "Envelope"),
    ],
    "SubmitResponse": [],
    "CommitStatusRequest": [
        ("transaction_id", 1, _F.TYPE_STRING, _F.LABEL_OPTIONAL, None),
        ("channel_id", 2, _F.TYPE_STRING, _F.LABEL_OPTIONAL, None),
        ("identity", 3, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
    ],
    "SignedCommitStatusRequest": [
        ("request", 1, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
        ("signature", 2, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
    ],
    "CommitStatusResponse": [
        ("result", 1, _F.TYPE_INT32, _F.LABEL_OPTIONAL, None),
        ("block_number", 2, _F.TYPE_UINT64, _F.LABEL_OPTIONAL, None),
    ],
}

# common.HeaderType
ENDORSER_TRANSACTION = 3

# peer.TxValidationCode
TX_VALID = 0

# gateway.Gateway service method paths
EVALUATE_METHOD = "/gateway.Gateway/Evaluate"
ENDORSE_METHOD = "/gateway.Gateway/Endorse"
SUBMIT_METHOD = "/gateway.Gateway/Submit"
COMMIT_STATUS_METHOD = "/gateway.Gateway/CommitStatus"


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="fabricgw/gateway_messages.proto",
        package=_PACKAGE,
        syntax="proto3",
    )
    for message_name, fields in _MESSAGES.items():
        message = file_proto.message_type.add(name=message_name)
        for name, number, field_type, label, type_name in fields:
            field = message.field.add(name=name, number=number, type=field_type, label=label)
            if type_name is not None:
                field.type_name = f".{_PACKAGE}.{type_name}"
    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file().SerializeToString())


def _message_class(name: str):
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{_PACKAGE}.{name}"))


Timestamp = _message_class("Timestamp")
SerializedIdentity = _message_class("SerializedIdentity")
ChannelHeader = _message_class("ChannelHeader")
SignatureHeader = _message_class("SignatureHeader")
Header = _message_class("Header")
Payload = _message_class("Payload")
Envelope = _message_class("Envelope")
ChaincodeID = _message_class("ChaincodeID")
ChaincodeInput = _message_class("ChaincodeInput")
ChaincodeSpec = _message_class("ChaincodeSpec")
ChaincodeInvocationSpec = _message_class("ChaincodeInvocationSpec")
ChaincodeHeaderExtension = _message_class("ChaincodeHeaderExtension")
ChaincodeProposalPayload = _message_class("ChaincodeProposalPayload")
Proposal = _message_class("Proposal")
SignedProposal = _message_class("SignedProposal")
Response = _message_class("Response")
ProposalResponsePayload = _message_class("ProposalResponsePayload")
TransactionAction = _message_class("TransactionAction")
Transaction = _message_class("Transaction")
ChaincodeEndorsedAction = _message_class("ChaincodeEndorsedAction")
ChaincodeActionPayload = _message_class("ChaincodeActionPayload")
ChaincodeAction = _message_class("ChaincodeAction")
EvaluateRequest = _message_class("EvaluateRequest")
EvaluateResponse = _message_class("EvaluateResponse")
EndorseRequest = _message_class("EndorseRequest")
EndorseResponse = _message_class("EndorseResponse")
SubmitRequest = _message_class("SubmitRequest")
SubmitResponse = _message_class("SubmitResponse")
CommitStatusRequest = _message_class("CommitStatusRequest")
SignedCommitStatusRequest = _message_class("SignedCommitStatusRequest")
CommitStatusResponse = _message_class("CommitStatusResponse")
