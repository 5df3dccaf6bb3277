"""
Tests for src/data/orders.py

**Purpose**: Verify the RegisterOrder argument encoding (field order and
number rendering) and the ReadOrder result decoding.
"""

import dataclasses
import json

import pytest

from src.data.orders import (
    Action,
    BidStatus,
    Order,
    OrderDecodeError,
    decode_order_record,
    sample_order,
    to_decimal_string,
)


def test_sample_order_contract_args():
    """The sample order encodes to the exact 12 strings the contract expects."""
    assert sample_order().to_contract_args() == [
        "1", "0", "5", "0", "200", "5", "slot1234", "300", "3.5", "6", "50", "0",
    ]


def test_contract_args_follow_contract_field_order():
    """userId precedes slotExecDate in the argument list, unlike the record."""
    order = dataclasses.replace(sample_order(), user_id=61, slot_exec_date=99, action=Action.SELL)

    args = order.to_contract_args()

    assert len(args) == 12
    assert args[9] == "61"
    assert args[10] == "99"
    assert args[11] == "1"


def test_enum_values():
    assert [status.value for status in BidStatus] == [0, 1, 2, 3, 4]
    assert Action.BUY == 0
    assert Action.SELL == 1


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, "0"),
        (300, "300"),
        (200.0, "200"),
        (3.5, "3.5"),
        (0.1, "0.1"),
        (BidStatus.BID_EXECUTED, "3"),
        (-2, "-2"),
        (1e-07, "1e-07"),
    ],
)
def test_to_decimal_string(value, expected):
    assert to_decimal_string(value) == expected


@pytest.mark.parametrize("value", [True, "5", None])
def test_to_decimal_string_rejects_non_numbers(value):
    with pytest.raises(TypeError):
        to_decimal_string(value)


@pytest.mark.parametrize("value", [float("nan"), float("inf")])
def test_to_decimal_string_rejects_non_finite(value):
    with pytest.raises(ValueError):
        to_decimal_string(value)


def test_order_rejects_wrong_types():
    with pytest.raises(TypeError, match="slot_id"):
        dataclasses.replace(sample_order(), slot_id=1234)

    with pytest.raises(TypeError, match="total_quantity"):
        dataclasses.replace(sample_order(), total_quantity="300")


def test_order_is_immutable():
    order = sample_order()
    with pytest.raises(dataclasses.FrozenInstanceError):
        order.id = 6


def test_decode_order_record():
    record = {"id": 5, "slotId": "slot1234", "unitCost": 3.5}

    assert decode_order_record(json.dumps(record).encode("utf-8")) == record


def test_decode_order_record_invalid_json():
    with pytest.raises(OrderDecodeError, match="not valid JSON"):
        decode_order_record(b"order 5 not found")


def test_decode_order_record_invalid_utf8():
    with pytest.raises(OrderDecodeError, match="UTF-8"):
        decode_order_record(b"\xff\xfe{}")


@pytest.mark.parametrize("payload", [b"[1, 2]", b"42", b"null"])
def test_decode_order_record_requires_object(payload):
    with pytest.raises(OrderDecodeError, match="JSON object"):
        decode_order_record(payload)


def test_decode_error_is_a_value_error():
    assert issubclass(OrderDecodeError, ValueError)


def test_replace_without_changes_keeps_order_equal():
    """Frozen orders compare by value."""
    assert dataclasses.replace(sample_order()) == sample_order()
    assert isinstance(sample_order(), Order)
