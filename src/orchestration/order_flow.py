"""
Register-then-read order workflow against the energy trading contract.

**Conceptual**: This is the whole client run, start to finish:

    open transport -> load identity + signer -> connect gateway
        -> RegisterOrder (submit, wait for commit)
        -> ReadOrder (evaluate, decode, print)
    -> close gateway -> close transport

Every step either succeeds or raises; nothing is retried or swallowed. The
gateway and the transport are closed on every exit path, gateway first, by
nesting them in ``with closing(...)`` blocks.

**Testability**: the collaborators (transport factory, credential loaders,
gateway factory) are parameters with production defaults, so tests can swap
in fakes and check the exact close order without a Fabric network.
"""

import json
import logging
from contextlib import closing
from typing import Any, Callable, Optional

from src.config.settings import Settings
from src.data.orders import Order, decode_order_record, sample_order, to_decimal_string
from src.gateway.base import ContractHandle
from src.gateway.client import connect
from src.gateway.credentials import load_identity, load_signer
from src.gateway.transport import open_transport
from src.utils.time import Clock

logger = logging.getLogger(__name__)

REGISTER_ORDER = "RegisterOrder"
READ_ORDER = "ReadOrder"


def register_order(contract: ContractHandle, order: Order) -> None:
    """
    Submit RegisterOrder and block until the transaction is committed.

    Args:
        contract: Contract handle for the energy trading chaincode.
        order: Order to register; encoded as 12 positional strings.

    Raises:
        Any gateway error from submit_transaction (no retry).
    """
    logger.info("--> Submit Transaction: %s, order id %s", REGISTER_ORDER, order.id)
    contract.submit_transaction(REGISTER_ORDER, *order.to_contract_args())
    logger.info("*** Transaction committed successfully")


def read_order_by_id(contract: ContractHandle, order_id: str) -> dict[str, Any]:
    """
    Evaluate ReadOrder for ``order_id``, print the decoded record and return it.

    Args:
        contract: Contract handle for the energy trading chaincode.
        order_id: Order identifier as a decimal string.

    Returns:
        The order record as stored on the ledger.

    Raises:
        OrderDecodeError: If the result isn't a UTF-8 JSON object.
        Any gateway error from evaluate_transaction.
    """
    logger.info("--> Evaluate Transaction: %s, function returns order attributes", READ_ORDER)
    result_bytes = contract.evaluate_transaction(READ_ORDER, order_id)
    result = decode_order_record(result_bytes)
    print(f"*** Result: {json.dumps(result, indent=2, sort_keys=True)}")
    return result


def log_input_parameters(settings: Settings) -> None:
    """Log the resolved configuration before connecting."""
    for label, value in settings.describe():
        logger.info("%-18s %s", f"{label}:", value)


def run_order_flow(
    settings: Settings,
    order: Optional[Order] = None,
    *,
    submit: bool = True,
    clock: Optional[Clock] = None,
    transport_factory: Callable = open_transport,
    identity_loader: Callable = load_identity,
    signer_loader: Callable = load_signer,
    gateway_factory: Callable = connect,
) -> dict[str, Any]:
    """
    Register ``order`` (unless ``submit`` is False) and read it back.

    Args:
        settings: Resolved client settings.
        order: Order to register (default: the sample order).
        submit: If False, skip RegisterOrder and only read the order.
        clock: Time source for deadlines (default: system clock).
        transport_factory: Opens the transport (endpoint, tls_cert_path,
                           host_alias, connect_timeout_seconds).
        identity_loader: Loads the identity (cert_path, msp_id).
        signer_loader: Loads the signer (key_directory_path).
        gateway_factory: Connects the session (transport, identity, signer,
                         timeouts=, clock=).

    Returns:
        The order record read back from the ledger.
    """
    if order is None:
        order = sample_order()
    gw = settings.gateway

    transport = transport_factory(
        gw.peer_endpoint,
        gw.tls_cert_path,
        gw.peer_host_alias,
        gw.connect_timeout_seconds,
    )
    with closing(transport):
        identity = identity_loader(gw.cert_path, gw.msp_id)
        signer = signer_loader(gw.key_directory_path)

        gateway = gateway_factory(transport, identity, signer, timeouts=settings.timeouts, clock=clock)
        with closing(gateway):
            contract = gateway.get_network(gw.channel_name).get_contract(gw.chaincode_name)

            if submit:
                register_order(contract, order)

            return read_order_by_id(contract, to_decimal_string(order.id))
