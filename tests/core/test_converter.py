"""Tests for type tag conversion."""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from hlapi.core.converter import convert, is_known_type, to_text, type_name
from hlapi.exceptions import ArgumentConversionError


class TestConvert:
    """Test converting raw values to declared types."""

    @pytest.mark.parametrize(
        "value,type_tag,expected",
        [
            ("5", "int", 5),
            (5, "long", 5),
            ("true", "bool", True),
            ("False", "bool", False),
            ("1.5", "double", 1.5),
            ("1.10", "decimal", Decimal("1.10")),
            ("foo", "string", "foo"),
            (5, "string", "5"),
            ("a", "char", "a"),
            ("aGk=", "bytes", b"hi"),
            ("1500", "time", timedelta(milliseconds=1500)),
            ("01:00:00", "time", timedelta(hours=1)),
        ],
    )
    def test_conversions(self, value, type_tag, expected):
        assert convert(value, type_tag) == expected

    def test_date_defaults_to_utc(self):
        assert convert("2024-01-02T03:04:05", "date") == datetime(
            2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc
        )

    def test_guid(self):
        value = uuid.uuid4()
        assert convert(str(value), "guid") == value

    @pytest.mark.parametrize("type_tag", ["*", "x", None])
    def test_passthrough(self, type_tag):
        value = {"anything": "goes"}
        assert convert(value, type_tag) is value

    @pytest.mark.parametrize(
        "value,type_tag",
        [("five", "int"), ("300", "byte"), ("yes", "bool"), (1.5, "int"), ("x", "guid")],
    )
    def test_failures(self, value, type_tag):
        with pytest.raises(ArgumentConversionError):
            convert(value, type_tag)

    def test_unknown_type(self):
        with pytest.raises(ArgumentConversionError):
            convert("x", "widget")

    def test_known_types(self):
        assert is_known_type("int")
        assert is_known_type("*")
        assert not is_known_type("widget")


class TestText:
    """Test textual rendering of values."""

    def test_to_text(self):
        assert to_text(True) == "true"
        assert to_text(datetime(2024, 1, 2, tzinfo=timezone.utc)) == "2024-01-02T00:00:00Z"
        assert to_text(timedelta(seconds=2)) == "2000"
        assert to_text(b"hi") == "aGk="
        assert to_text(None) == ""

    def test_type_name(self):
        assert type_name(True) == "bool"
        assert type_name(5) == "int"
        assert type_name(2**40) == "long"
        assert type_name("x") == "string"
