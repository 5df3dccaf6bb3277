"""
energy_order_client – Main entry point.

Runs the sample flow with default settings: register the sample order, read it
back by id and print it. Use actions/register_and_read_order.py for options.
"""

import sys

from actions.register_and_read_order import main


if __name__ == "__main__":
    sys.exit(main([]))
