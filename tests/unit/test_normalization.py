"""Tests for domain.normalization — tax rates, prices, service types, volumes."""

from decimal import Decimal

import pytest

from domain.normalization import (
    normalize_service_type,
    normalize_tax_rate,
    parse_reference_volume,
    round_price,
    round_rate,
    to_decimal,
)


class TestNormalizeTaxRate:
    """Tests for the percentage-vs-fraction heuristic."""

    def test_percentage_divided_by_100(self):
        assert normalize_tax_rate("19") == Decimal("0.19")

    def test_fraction_kept(self):
        assert normalize_tax_rate("0.19") == Decimal("0.19")

    def test_percentage_and_fraction_agree(self):
        assert normalize_tax_rate(19) == normalize_tax_rate(0.19)

    def test_idempotent(self):
        once = normalize_tax_rate("19")
        assert normalize_tax_rate(once) == once

    def test_exactly_ten_is_not_divided(self):
        assert normalize_tax_rate(10) == Decimal("10.0000")

    def test_rounded_to_four_decimals(self):
        assert normalize_tax_rate("0.123456") == Decimal("0.1235")

    def test_decimal_comma_accepted(self):
        assert normalize_tax_rate("0,07") == Decimal("0.07")

    def test_invalid_returns_none(self):
        assert normalize_tax_rate("abc") is None
        assert normalize_tax_rate(None) is None


class TestRounding:
    def test_round_price_two_decimals(self):
        assert round_price(Decimal("12.345")) == Decimal("12.35")

    def test_round_rate_four_decimals(self):
        assert round_rate(Decimal("0.19004")) == Decimal("0.1900")


class TestToDecimal:
    @pytest.mark.parametrize("value", ["", None, "nan", "inf", True])
    def test_rejects(self, value):
        assert to_decimal(value) is None

    def test_float_keeps_short_repr(self):
        assert to_decimal(0.1) == Decimal("0.1")


class TestServiceType:
    def test_trim_and_uppercase(self):
        assert normalize_service_type("  transport ") == "TRANSPORT"

    def test_none_becomes_empty(self):
        assert normalize_service_type(None) == ""


class TestReferenceVolume:
    def test_int_passthrough(self):
        assert parse_reference_volume(20) == 20

    def test_string_truncated(self):
        assert parse_reference_volume("12.7") == 12

    @pytest.mark.parametrize("value", [None, "", "abc"])
    def test_empty_or_invalid(self, value):
        assert parse_reference_volume(value) is None
