#!/usr/bin/env python3
"""
Register an energy order on the ledger and read it back by id.

**Purpose**: End-to-end run of the gateway client against a Fabric network:
connect to the gateway peer over TLS, submit RegisterOrder, wait for commit,
then evaluate ReadOrder and print the stored record.

**Usage**:
    python actions/register_and_read_order.py
    python actions/register_and_read_order.py --order-id 7 --slot-id slot0007 --action sell
    python actions/register_and_read_order.py --order-id 5 --skip-submit
    python actions/register_and_read_order.py --env-file ../org2.env -v

**Configuration**: all connection settings come from environment variables
(optionally loaded from a .env file). See src/config/settings.py for the full
list and defaults.

**Exit codes**:
  - 0: Order registered (or skipped) and read back
  - 1: Any failure (bad configuration, missing credentials, TLS/connection
       error, rejected transaction, undecodable result)
  - 130: Interrupted by user

**Requirements**:
  - A running Fabric network with the energy trading chaincode deployed
  - The user's certificate, private key and the peer's TLS root certificate
"""

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

# Add project root to Python path so we can import src modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.config.settings import Settings, load_environment
from src.data.orders import Action, sample_order
from src.orchestration.order_flow import log_input_parameters, run_order_flow
from src.utils.logging import setup_logging

logger = logging.getLogger("register_and_read_order")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Every order option defaults to the sample order's value, so running the
    script with no arguments registers the sample order.
    """
    sample = sample_order()

    parser = argparse.ArgumentParser(
        description="Register an energy order on the ledger and read it back",
        epilog="""
Examples:
  # Register the sample order (id 5) and read it back
  python actions/register_and_read_order.py

  # Register a sell order with a different id and slot
  python actions/register_and_read_order.py --order-id 7 --slot-id slot0007 --action sell

  # Only read an existing order
  python actions/register_and_read_order.py --order-id 5 --skip-submit
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file to load before reading settings (default: <project>/.env)",
    )
    parser.add_argument(
        "--order-id",
        type=int,
        default=sample.id,
        help=f"Order id to register and read (default: {sample.id})",
    )
    parser.add_argument(
        "--slot-id",
        type=str,
        default=sample.slot_id,
        help=f"Delivery slot id (default: {sample.slot_id})",
    )
    parser.add_argument(
        "--total-quantity",
        type=int,
        default=sample.total_quantity,
        help=f"Total energy quantity (default: {sample.total_quantity})",
    )
    parser.add_argument(
        "--unit-cost",
        type=float,
        default=sample.unit_cost,
        help=f"Cost per unit (default: {sample.unit_cost})",
    )
    parser.add_argument(
        "--order-cost",
        type=float,
        default=sample.order_cost,
        help=f"Total order cost (default: {sample.order_cost})",
    )
    parser.add_argument(
        "--action",
        choices=["buy", "sell"],
        default=sample.action.name.lower(),
        help="Buy or sell (default: buy)",
    )
    parser.add_argument(
        "--skip-submit",
        action="store_true",
        help="Skip RegisterOrder and only read the order",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def build_order(args: argparse.Namespace):
    """Apply command line overrides to the sample order."""
    return dataclasses.replace(
        sample_order(),
        id=args.order_id,
        slot_id=args.slot_id,
        total_quantity=args.total_quantity,
        unit_cost=args.unit_cost,
        order_cost=args.order_cost,
        action=Action[args.action.upper()],
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point for the script.

    **Error handling strategy**: nothing is caught below this function. Any
    failure (configuration, credentials, transport, contract call, decoding)
    propagates here, gets logged as a single error line, and turns into exit
    code 1. Resource cleanup has already happened by then.
    """
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        load_environment(args.env_file)
        settings = Settings.from_env()
        log_input_parameters(settings)

        order = build_order(args)
        run_order_flow(settings, order, submit=not args.skip_submit)

    except KeyboardInterrupt:
        logger.warning("Interrupted by user. Exiting...")
        return 130

    except Exception as e:
        logger.error("******** FAILED to run the application: %s: %s", type(e).__name__, e)
        logger.debug("Traceback", exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
