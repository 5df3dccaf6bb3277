"""
Client identity and signer construction from PEM files.

**Conceptual**: A Fabric client needs two things to transact:
  1. An identity: its organization's MSP ID plus its X.509 certificate. Peers
     use it to check who created a transaction.
  2. A signer: a function that signs message digests with the private key
     matching that certificate.

Both are loaded from the user's MSP directory produced by the Fabric CA
(signcerts/ for the certificate, keystore/ for the key).

**Signature format**: Fabric peers require ECDSA signatures in DER form with a
"low-S" value (s <= n/2). The signer normalizes every signature so peers never
reject a valid one as malleable.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    Prehashed,
    decode_dss_signature,
    encode_dss_signature,
)

from src.gateway import protos
from src.gateway.errors import CredentialError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Group orders of the curves Fabric CAs issue keys on.
_CURVE_ORDERS = {
    "secp256r1": 0xFFFFFFFF00000000FFFFFFFFFFFFFFFFBCE6FAADA7179E84F3B9CAC2FC632551,
    "secp384r1": int(
        "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFC7634D81F4372DDF581A0DB248B0A77AECEC196ACCC52973",
        16,
    ),
}

# Messages are always hashed with SHA-256, whatever the curve.
_DIGEST = hashes.SHA256()


@dataclass(frozen=True)
class Identity:
    """
    A client identity: MSP ID plus PEM-encoded certificate.

    Attributes:
        msp_id: Membership service provider ID of the issuing organization.
        credentials: PEM-encoded X.509 certificate bytes.
    """
    msp_id: str
    credentials: bytes

    def serialize(self) -> bytes:
        """Encode as a Fabric SerializedIdentity, the creator field of every transaction."""
        return protos.SerializedIdentity(mspid=self.msp_id, id_bytes=self.credentials).SerializeToString()


class PrivateKeySigner:
    """
    Callable that signs SHA-256 digests with an ECDSA private key.

    The gateway protocol hashes every message with SHA-256 before signing, so
    the signer receives the digest, not the message.

    Example:
        >>> signer = PrivateKeySigner(private_key)
        >>> signature = signer(hashlib.sha256(message).digest())
    """

    def __init__(self, private_key: ec.EllipticCurvePrivateKey):
        if not isinstance(private_key, ec.EllipticCurvePrivateKey):
            raise CredentialError(
                f"Unsupported private key type {type(private_key).__name__}; "
                "an ECDSA key is required"
            )
        curve_name = private_key.curve.name
        if curve_name not in _CURVE_ORDERS:
            raise CredentialError(f"Unsupported elliptic curve: {curve_name}")

        self._private_key = private_key
        self._curve_order = _CURVE_ORDERS[curve_name]

    @property
    def public_key(self) -> ec.EllipticCurvePublicKey:
        return self._private_key.public_key()

    def __call__(self, digest: bytes) -> bytes:
        """
        Sign ``digest`` and return a low-S, DER-encoded ECDSA signature.

        Raises:
            ValueError: If ``digest`` is not a SHA-256 digest.
        """
        if len(digest) != _DIGEST.digest_size:
            raise ValueError(
                f"Digest must be {_DIGEST.digest_size} bytes, got {len(digest)}"
            )
        der = self._private_key.sign(digest, ec.ECDSA(Prehashed(_DIGEST)))
        r, s = decode_dss_signature(der)
        half_order = self._curve_order // 2
        if s > half_order:
            s = self._curve_order - s
        return encode_dss_signature(r, s)


def load_identity(cert_path: PathLike, msp_id: str) -> Identity:
    """
    Read the client certificate and pair it with the MSP ID.

    Args:
        cert_path: Path to the PEM-encoded signing certificate.
        msp_id: Membership service provider ID.

    Returns:
        Identity with the raw certificate bytes.

    Raises:
        OSError: If the certificate file is missing or unreadable.
    """
    credentials = Path(cert_path).read_bytes()
    logger.debug("Loaded certificate %s for %s", cert_path, msp_id)
    return Identity(msp_id=msp_id, credentials=credentials)


def load_private_key(key_path: PathLike) -> ec.EllipticCurvePrivateKey:
    """
    Read and parse an unencrypted PEM private key.

    Raises:
        OSError: If the file is missing or unreadable.
        CredentialError: If the file is not a valid PEM private key.
    """
    pem = Path(key_path).read_bytes()
    try:
        return serialization.load_pem_private_key(pem, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise CredentialError(f"Malformed private key in {key_path}: {e}") from e


def load_signer(key_directory_path: PathLike) -> PrivateKeySigner:
    """
    Build a signer from the first key file found in ``key_directory_path``.

    **Conceptual**: The Fabric CA writes the user's key into keystore/ under a
    generated name (e.g. "<ski>_sk"), so the file is found by listing the
    directory rather than by a fixed name. The directory is expected to hold
    exactly one key; files are taken in name order so the choice is stable.

    Args:
        key_directory_path: Directory holding the PEM private key.

    Returns:
        PrivateKeySigner bound to the key.

    Raises:
        OSError: If the directory is missing or unreadable.
        CredentialError: If the directory holds no files or the key is malformed.
    """
    directory = Path(key_directory_path)
    key_files = sorted(entry for entry in directory.iterdir() if entry.is_file())
    if not key_files:
        raise CredentialError(f"No private key file found in {directory}")

    if len(key_files) > 1:
        logger.warning(
            "Found %d files in %s; using %s", len(key_files), directory, key_files[0].name
        )

    return PrivateKeySigner(load_private_key(key_files[0]))
