"""Unit tests for bound value classification."""

from __future__ import annotations

import ipaddress
import uuid
from datetime import date, datetime
from decimal import Decimal

import pytest

from kitql import InvalidValueError, MacAddress, Order, Value, ValueKind


@pytest.mark.parametrize(
    "obj,kind",
    [
        (None, ValueKind.NULL),
        (True, ValueKind.BOOL),
        (0, ValueKind.INT),
        (1.5, ValueKind.FLOAT),
        ("x", ValueKind.TEXT),
        (datetime(2024, 1, 2, 3, 4, 5), ValueKind.DATETIME),
        (date(2024, 1, 2), ValueKind.DATETIME),
        (b"\x00", ValueKind.BYTES),
        (uuid.UUID(int=1), ValueKind.UUID),
        ({"a": 1}, ValueKind.JSON),
        ([1, 2], ValueKind.JSON),
        (Decimal("1.10"), ValueKind.DECIMAL),
        (ipaddress.ip_network("10.0.0.0/8"), ValueKind.NETWORK),
        (ipaddress.ip_address("::1"), ValueKind.NETWORK),
        (MacAddress("aa:bb:cc:dd:ee:ff"), ValueKind.MAC),
    ],
)
def test_value_of_classifies(obj, kind):
    assert Value.of(obj).kind is kind


def test_bool_is_not_int():
    assert Value.of(False) != Value.of(0)


def test_enum_binds_its_value():
    assert Value.of(Order.DESC) == Value(ValueKind.TEXT, "DESC")


def test_value_passthrough():
    v = Value.of(3)
    assert Value.of(v) is v


def test_unsupported_object_raises():
    with pytest.raises(InvalidValueError) as exc:
        Value.of(object())
    assert exc.value.details == {"type": "object"}


def test_json_tag_for_bare_string():
    assert Value.json("text").kind is ValueKind.JSON


def test_mac_normalised():
    assert Value.mac("AA-BB-CC-DD-EE-0F").data.address == "aa:bb:cc:dd:ee:0f"


def test_invalid_mac_raises():
    with pytest.raises(InvalidValueError):
        MacAddress("aa:bb:cc")


def test_is_empty():
    assert Value.null().is_empty()
    assert Value.of("").is_empty()
    assert Value.of([]).is_empty()
    assert not Value.of(0).is_empty()
    assert not Value.of("x").is_empty()
