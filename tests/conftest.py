"""
Pytest configuration file.

Ensures the repo root is on sys.path so that 'import src...' works, and
provides throwaway credential material (EC key, self-signed certificate,
MSP directory layout) generated fresh for each test.
"""
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

# Add the repo root to sys.path
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))


@pytest.fixture
def ec_private_key():
    """A fresh P-256 private key."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def private_key_pem(ec_private_key):
    return ec_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture
def certificate_pem(ec_private_key):
    """Self-signed certificate for the test key, PEM-encoded."""
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "User1@org1.example.com")])
    now = datetime.now(timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(ec_private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=1))
        .sign(ec_private_key, hashes.SHA256())
    )
    return certificate.public_bytes(serialization.Encoding.PEM)


@pytest.fixture
def msp_dir(tmp_path, certificate_pem, private_key_pem):
    """
    MSP layout as written by the Fabric CA:

        <tmp>/msp/signcerts/cert.pem
        <tmp>/msp/keystore/<ski>_sk
        <tmp>/tls/ca.crt
    """
    signcerts = tmp_path / "msp" / "signcerts"
    keystore = tmp_path / "msp" / "keystore"
    tls = tmp_path / "tls"
    for directory in (signcerts, keystore, tls):
        directory.mkdir(parents=True)

    (signcerts / "cert.pem").write_bytes(certificate_pem)
    (keystore / "9f3c1a_sk").write_bytes(private_key_pem)
    (tls / "ca.crt").write_bytes(certificate_pem)
    return tmp_path


@pytest.fixture
def make_prepared_envelope():
    """
    Build an unsigned prepared transaction envelope, as returned by Endorse,
    whose chaincode response carries ``result``.
    """
    from src.gateway import protos

    def _make(result: bytes = b"", status: int = 200):
        chaincode_action = protos.ChaincodeAction(
            response=protos.Response(status=status, payload=result)
        )
        response_payload = protos.ProposalResponsePayload(
            extension=chaincode_action.SerializeToString()
        )
        action_payload = protos.ChaincodeActionPayload(
            action=protos.ChaincodeEndorsedAction(
                proposal_response_payload=response_payload.SerializeToString()
            )
        )
        transaction = protos.Transaction(
            actions=[protos.TransactionAction(payload=action_payload.SerializeToString())]
        )
        payload = protos.Payload(data=transaction.SerializeToString())
        return protos.Envelope(payload=payload.SerializeToString())

    return _make
