"""
Order record and contract argument encoding.

**Conceptual**: An Order is an energy buy or sell bid registered on the ledger.
The client builds it in memory right before submission and does not keep it
afterwards. The contract's RegisterOrder function takes every field as a
positional string, in a fixed order that differs from the record's own field
order, so the encoding lives here next to the record it encodes.

**Validation**: the client only checks that values have the right shape
(numbers are numbers, slot id is a string). Business rules such as "a new
order must start as BidCreated or BidAccepted" are enforced by the contract.
"""

import json
import math
from dataclasses import dataclass
from enum import IntEnum
from numbers import Real
from typing import Any, Union


class OrderDecodeError(ValueError):
    """
    Raised when a ReadOrder result can't be decoded into an order record.

    **Conceptual**: The contract returns the stored order as UTF-8 JSON. Bad
    bytes, invalid JSON, or JSON that isn't an object all mean the client
    can't trust the result, so they fail loudly instead of returning {}.
    """
    pass


class BidStatus(IntEnum):
    """Lifecycle state of an energy bid, as stored by the contract."""
    BID_CREATED = 0
    BID_ACCEPTED = 1
    BID_REJECTED = 2
    BID_EXECUTED = 3
    BID_TERMINATED = 4


class Action(IntEnum):
    """Whether the user is buying or selling energy."""
    BUY = 0
    SELL = 1


# Positional argument order expected by RegisterOrder.
CONTRACT_FIELD_ORDER = (
    "bid_match_id",
    "bid_status",
    "id",
    "on_market_price",
    "order_cost",
    "payment_id",
    "slot_id",
    "total_quantity",
    "unit_cost",
    "user_id",
    "slot_exec_date",
    "action",
)

Number = Union[int, float]


def to_decimal_string(value: Number) -> str:
    """
    Render a number the way the contract expects to parse it.

    Integers (and IntEnum members) render as plain integers. Floats with an
    integral value drop the trailing ".0" so that 200.0 and 200 both become
    "200"; other floats use Python's shortest round-trip form ("3.5").
    This matches JavaScript's Number.toString for everyday magnitudes only:
    exponent forms differ (Python gives "1e-07" where JavaScript gives "1e-7").

    Raises:
        TypeError: For booleans and non-numeric values.
        ValueError: For NaN or infinite floats.
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError(f"Expected a number, got {type(value).__name__}: {value!r}")

    if isinstance(value, int):
        return str(int(value))

    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"Cannot encode non-finite number: {value!r}")
    if value.is_integer():
        return str(int(value))
    return repr(value)


@dataclass(frozen=True)
class Order:
    """
    An energy order as registered through the RegisterOrder contract function.

    Attributes:
        bid_match_id: Identifier of the bid match this order belongs to.
        bid_status: Bid lifecycle code (BidStatus or its int value).
        id: Order identifier; also the key used by ReadOrder.
        on_market_price: Market price at order time.
        order_cost: Total cost of the order.
        payment_id: Identifier of the associated payment.
        slot_id: Delivery slot identifier.
        slot_exec_date: Slot execution date (unix time or slot index).
        total_quantity: Total energy quantity.
        unit_cost: Cost per unit.
        action: Buy or sell (Action or its int value).
        user_id: Identifier of the ordering user.
    """
    bid_match_id: int
    bid_status: Union[BidStatus, int]
    id: int
    on_market_price: Number
    order_cost: Number
    payment_id: int
    slot_id: str
    slot_exec_date: int
    total_quantity: Number
    unit_cost: Number
    action: Union[Action, int]
    user_id: int

    def __post_init__(self):
        """Check field types; value rules belong to the contract."""
        if not isinstance(self.slot_id, str):
            raise TypeError(f"slot_id must be a string, got {type(self.slot_id).__name__}")
        for name in CONTRACT_FIELD_ORDER:
            if name == "slot_id":
                continue
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real):
                raise TypeError(f"{name} must be a number, got {type(value).__name__}: {value!r}")

    def to_contract_args(self) -> list[str]:
        """
        Encode the order as RegisterOrder's 12 positional string arguments.

        Returns:
            [bidMatchId, bidStatus, id, onMarketPrice, orderCost, paymentId,
             slotId, totalQuantity, unitCost, userId, slotExecDate, action]

        Example:
            >>> sample_order().to_contract_args()
            ['1', '0', '5', '0', '200', '5', 'slot1234', '300', '3.5', '6', '50', '0']
        """
        args = []
        for name in CONTRACT_FIELD_ORDER:
            value = getattr(self, name)
            args.append(value if name == "slot_id" else to_decimal_string(value))
        return args


def sample_order() -> Order:
    """Return the demonstration order registered by the sample flow."""
    return Order(
        bid_match_id=1,
        bid_status=BidStatus.BID_CREATED,
        id=5,
        on_market_price=0,
        order_cost=200,
        payment_id=5,
        slot_id="slot1234",
        total_quantity=300,
        unit_cost=3.5,
        user_id=6,
        slot_exec_date=50,
        action=Action.BUY,
    )


def decode_order_record(payload: bytes) -> dict[str, Any]:
    """
    Decode a ReadOrder result payload into a dict.

    Args:
        payload: Raw bytes returned by the contract.

    Returns:
        The order record as stored on the ledger (JSON keys as-is, e.g.
        "bidMatchId", "slotId").

    Raises:
        OrderDecodeError: If the payload is not UTF-8, not JSON, or not a JSON object.

    Example:
        >>> decode_order_record(b'{"id": 5, "slotId": "slot1234"}')
        {'id': 5, 'slotId': 'slot1234'}
    """
    try:
        text = bytes(payload).decode("utf-8")
    except UnicodeDecodeError as e:
        raise OrderDecodeError(f"Order payload is not valid UTF-8: {e}") from e

    try:
        record = json.loads(text)
    except json.JSONDecodeError as e:
        raise OrderDecodeError(f"Order payload is not valid JSON: {e}; payload={text[:200]!r}") from e

    if not isinstance(record, dict):
        raise OrderDecodeError(f"Order payload must be a JSON object, got {type(record).__name__}")

    return record
