"""
Configuration settings for the gateway client.

**Conceptual**: This module provides strongly-typed configuration objects that
load from environment variables (optionally via a .env file). Every setting has
a documented default, so the client runs against a stock Fabric test network
without any configuration at all.

**Why centralized config?**
  - Single source of truth for channel, contract, identity and peer settings.
  - Easy to test (pass a fake environ mapping instead of touching os.environ).
  - Built once at startup and passed down explicitly; no module-level globals
    that other modules read behind your back.

This module uses python-dotenv to load .env files and dataclasses for type safety.
"""

import math
import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv


PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

# Fabric samples layout: this client lives two directories below the samples
# root, next to test-network/.
DEFAULT_CRYPTO_PATH = (
    PROJECT_ROOT / ".." / ".." / "test-network" / "organizations"
    / "peerOrganizations" / "org1.example.com"
).resolve()

DEFAULT_USER = "User1@org1.example.com"
DEFAULT_PEER = "peer0.org1.example.com"


def env_or_default(key: str, default: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Return the environment value for ``key``, or ``default`` if unset or empty.

    Args:
        key: Environment variable name.
        default: Value used when the variable is missing or set to "".
        environ: Mapping to read from (defaults to os.environ).

    Returns:
        The resolved string value.

    Example:
        >>> env_or_default("CHANNEL_NAME", "mychannel", {})
        'mychannel'
        >>> env_or_default("CHANNEL_NAME", "mychannel", {"CHANNEL_NAME": "energy"})
        'energy'
    """
    if environ is None:
        environ = os.environ
    return environ.get(key) or default


def load_environment(env_file: Optional[Path] = None) -> bool:
    """
    Load a .env file into os.environ without overriding variables already set.

    Args:
        env_file: Path to the .env file (default: <project root>/.env).

    Returns:
        True if a file was found and loaded.
    """
    path = Path(env_file) if env_file is not None else PROJECT_ROOT / ".env"
    return load_dotenv(dotenv_path=path, override=False)


def _parse_seconds(key: str, default: str, environ: Mapping[str, str]) -> float:
    raw = env_or_default(key, default, environ)
    try:
        seconds = float(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number of seconds, got: {raw}")
    if not math.isfinite(seconds):
        raise ValueError(f"{key} must be a finite number of seconds, got: {raw}")
    if seconds <= 0:
        raise ValueError(f"{key} must be positive, got: {raw}")
    return seconds


@dataclass(frozen=True)
class GatewaySettings:
    """
    Connection and identity settings for a Fabric gateway peer.

    **Conceptual**: These are the nine values the client needs before it can
    talk to the ledger: which channel and contract to use, which organization
    (MSP) the user belongs to, where the user's credentials live on disk, and
    which peer to connect to.

    **Path defaults cascade**: the key, certificate and TLS paths default to
    locations under ``crypto_path``. Overriding CRYPTO_PATH alone is enough to
    point the client at a different organization directory.

    Attributes:
        channel_name: Ledger channel the contract is deployed on.
        chaincode_name: Name of the deployed contract.
        msp_id: Membership service provider ID of the client's organization.
        crypto_path: Root of the organization's crypto material.
        key_directory_path: Directory holding the user's PEM private key.
        cert_path: User's PEM-encoded signing certificate.
        tls_cert_path: PEM-encoded TLS root certificate of the gateway peer.
        peer_endpoint: host:port of the gateway peer.
        peer_host_alias: TLS server name expected in the peer's certificate.
        connect_timeout_seconds: If set, block this long for the channel to
                                 become ready before giving up.
    """
    channel_name: str = "mychannel"
    chaincode_name: str = "basic"
    msp_id: str = "Org1MSP"
    crypto_path: Path = DEFAULT_CRYPTO_PATH
    key_directory_path: Path = DEFAULT_CRYPTO_PATH / "users" / DEFAULT_USER / "msp" / "keystore"
    cert_path: Path = DEFAULT_CRYPTO_PATH / "users" / DEFAULT_USER / "msp" / "signcerts" / f"{DEFAULT_USER}-cert.pem"
    tls_cert_path: Path = DEFAULT_CRYPTO_PATH / "peers" / DEFAULT_PEER / "tls" / "ca.crt"
    peer_endpoint: str = "localhost:7051"
    peer_host_alias: str = DEFAULT_PEER
    connect_timeout_seconds: Optional[float] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GatewaySettings":
        """
        Load gateway settings from environment variables.

        **Environment variables** (all optional):
          - CHANNEL_NAME (default: mychannel)
          - CHAINCODE_NAME (default: basic)
          - MSP_ID (default: Org1MSP)
          - CRYPTO_PATH (default: fabric-samples test-network org1 directory)
          - KEY_DIRECTORY_PATH (default: <crypto>/users/User1@org1.example.com/msp/keystore)
          - CERT_PATH (default: <crypto>/users/User1@org1.example.com/msp/signcerts/User1@org1.example.com-cert.pem)
          - TLS_CERT_PATH (default: <crypto>/peers/peer0.org1.example.com/tls/ca.crt)
          - PEER_ENDPOINT (default: localhost:7051)
          - PEER_HOST_ALIAS (default: peer0.org1.example.com)
          - PEER_CONNECT_TIMEOUT_SECONDS (default: unset, do not wait)

        Args:
            environ: Mapping to read from (defaults to os.environ).

        Returns:
            GatewaySettings with every value resolved.

        Raises:
            ValueError: If PEER_CONNECT_TIMEOUT_SECONDS is set but not a positive number.
        """
        if environ is None:
            environ = os.environ

        crypto_path = Path(env_or_default("CRYPTO_PATH", str(DEFAULT_CRYPTO_PATH), environ))
        user_msp = crypto_path / "users" / DEFAULT_USER / "msp"

        connect_timeout = None
        if environ.get("PEER_CONNECT_TIMEOUT_SECONDS"):
            connect_timeout = _parse_seconds("PEER_CONNECT_TIMEOUT_SECONDS", "", environ)

        return cls(
            channel_name=env_or_default("CHANNEL_NAME", "mychannel", environ),
            chaincode_name=env_or_default("CHAINCODE_NAME", "basic", environ),
            msp_id=env_or_default("MSP_ID", "Org1MSP", environ),
            crypto_path=crypto_path,
            key_directory_path=Path(env_or_default(
                "KEY_DIRECTORY_PATH", str(user_msp / "keystore"), environ
            )),
            cert_path=Path(env_or_default(
                "CERT_PATH", str(user_msp / "signcerts" / f"{DEFAULT_USER}-cert.pem"), environ
            )),
            tls_cert_path=Path(env_or_default(
                "TLS_CERT_PATH", str(crypto_path / "peers" / DEFAULT_PEER / "tls" / "ca.crt"), environ
            )),
            peer_endpoint=env_or_default("PEER_ENDPOINT", "localhost:7051", environ),
            peer_host_alias=env_or_default("PEER_HOST_ALIAS", DEFAULT_PEER, environ),
            connect_timeout_seconds=connect_timeout,
        )


@dataclass(frozen=True)
class TimeoutSettings:
    """
    Per-call-kind timeout durations for gateway calls.

    **Conceptual**: Each kind of gateway call gets its own budget. These are
    durations, not deadlines: the absolute deadline is computed from the clock
    at the moment each call is made, so repeated calls each get a fresh budget.

    Attributes:
        evaluate: Read-only query budget (default 5s).
        endorse: Proposal endorsement budget (default 15s).
        submit: Ordering submission budget (default 5s).
        commit_status: Commit confirmation budget (default 60s).
    """
    evaluate: timedelta = timedelta(seconds=5)
    endorse: timedelta = timedelta(seconds=15)
    submit: timedelta = timedelta(seconds=5)
    commit_status: timedelta = timedelta(seconds=60)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TimeoutSettings":
        """
        Load timeout durations from environment variables.

        **Environment variables** (all optional, seconds):
          - EVALUATE_TIMEOUT_SECONDS (default 5)
          - ENDORSE_TIMEOUT_SECONDS (default 15)
          - SUBMIT_TIMEOUT_SECONDS (default 5)
          - COMMIT_STATUS_TIMEOUT_SECONDS (default 60)

        Raises:
            ValueError: If a value is not a positive number.
        """
        if environ is None:
            environ = os.environ

        return cls(
            evaluate=timedelta(seconds=_parse_seconds("EVALUATE_TIMEOUT_SECONDS", "5", environ)),
            endorse=timedelta(seconds=_parse_seconds("ENDORSE_TIMEOUT_SECONDS", "15", environ)),
            submit=timedelta(seconds=_parse_seconds("SUBMIT_TIMEOUT_SECONDS", "5", environ)),
            commit_status=timedelta(seconds=_parse_seconds("COMMIT_STATUS_TIMEOUT_SECONDS", "60", environ)),
        )


@dataclass(frozen=True)
class Settings:
    """
    Top-level settings for the client.

    **Usage pattern**:
      ```python
      from src.config.settings import Settings

      settings = Settings.from_env()
      gateway_settings = settings.gateway
      ```

    Attributes:
        gateway: Channel, contract, identity and peer settings.
        timeouts: Per-call-kind timeout durations.
    """
    gateway: GatewaySettings = field(default_factory=GatewaySettings)
    timeouts: TimeoutSettings = field(default_factory=TimeoutSettings)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Load all settings from environment variables (see subsystem from_env docs)."""
        return cls(
            gateway=GatewaySettings.from_env(environ),
            timeouts=TimeoutSettings.from_env(environ),
        )

    def describe(self) -> list[tuple[str, str]]:
        """
        Return the input parameters as (label, value) pairs, in display order.

        Used at startup to log exactly what the client is about to connect to.
        """
        gw = self.gateway
        return [
            ("channelName", gw.channel_name),
            ("chaincodeName", gw.chaincode_name),
            ("mspId", gw.msp_id),
            ("cryptoPath", str(gw.crypto_path)),
            ("keyDirectoryPath", str(gw.key_directory_path)),
            ("certPath", str(gw.cert_path)),
            ("tlsCertPath", str(gw.tls_cert_path)),
            ("peerEndpoint", gw.peer_endpoint),
            ("peerHostAlias", gw.peer_host_alias),
        ]
