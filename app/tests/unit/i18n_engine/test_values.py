"""Tests for i18n_engine.values and i18n_engine.locale_data modules."""

from decimal import Decimal

import pytest

from i18n_engine.locale_data import (
    all_currency_codes,
    all_timezones,
    guess_local_timezone,
    is_valid_currency_code,
    is_valid_timezone,
)
from i18n_engine.values import (
    CurrencyCode,
    SupportsDisplayValue,
    Timezone,
    coerce_currency_code,
    coerce_timezone,
    render_value,
)
from tests.factories.i18n import Priority, TicketStatus


class Money:
    def __init__(self, amount, currency):
        self.amount = amount
        self.currency = currency

    @property
    def display_value(self) -> str:
        return f"{self.amount} {self.currency}"


class TestLocaleData:
    """Tests for currency and timezone reference data."""

    @pytest.mark.parametrize("code", ["USD", "EUR", "GBP", "JPY", "CAD"])
    def test_valid_currency_codes(self, code):
        assert is_valid_currency_code(code) is True

    @pytest.mark.parametrize("code", ["usd", "XYZ", "US", "", None])
    def test_invalid_currency_codes(self, code):
        assert is_valid_currency_code(code) is False

    def test_all_currency_codes(self):
        codes = all_currency_codes()
        assert "USD" in codes
        assert all(len(code) == 3 for code in codes)

    def test_timezones(self):
        assert is_valid_timezone("America/Toronto") is True
        assert is_valid_timezone("Mars/Olympus_Mons") is False
        assert "UTC" in all_timezones()

    def test_guess_local_timezone_from_env(self, monkeypatch):
        monkeypatch.setenv("TZ", ":America/Toronto")
        assert guess_local_timezone() == "America/Toronto"

    def test_guess_local_timezone_defaults_to_utc(self, monkeypatch):
        monkeypatch.setenv("TZ", "Nowhere/Special")
        assert guess_local_timezone() == "UTC"


class TestValueObjects:
    """Tests for CurrencyCode and Timezone."""

    def test_currency_code_default(self):
        assert CurrencyCode().value == "USD"

    def test_currency_code_invalid(self):
        with pytest.raises(ValueError, match="Invalid currency code"):
            CurrencyCode("XYZ")

    def test_currency_code_display(self):
        code = CurrencyCode("EUR")
        assert code.display_value == "EUR"
        assert str(code) == "EUR"
        assert isinstance(code, SupportsDisplayValue)

    def test_timezone_invalid(self):
        with pytest.raises(ValueError, match="Invalid timezone"):
            Timezone("Not/AZone")

    def test_timezone_name(self):
        timezone = Timezone("Europe/Paris")
        assert timezone.name == "Europe/Paris"
        assert timezone.display_value == "Europe/Paris"

    def test_value_objects_are_equal_by_value(self):
        assert CurrencyCode("GBP") == CurrencyCode("GBP")
        assert Timezone("UTC") == Timezone()

    def test_coerce(self):
        code = CurrencyCode("CAD")
        assert coerce_currency_code(code) is code
        assert coerce_currency_code("CAD") == code
        assert coerce_timezone("UTC") == Timezone("UTC")
        with pytest.raises(ValueError):
            coerce_timezone("bogus")


class TestRenderValue:
    """Tests for render_value()."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, ""),
            ("text", "text"),
            (42, "42"),
            (1.5, "1.5"),
            (True, "true"),
            (Decimal("19.90"), "19.90"),
            (Decimal("1E+2"), "100"),
        ],
    )
    def test_scalars(self, value, expected):
        assert render_value(value) == expected

    def test_enum_renders_value(self):
        assert render_value(Priority.HIGH) == "2"
        assert render_value(TicketStatus.OPEN) == "open"

    def test_display_value_objects(self):
        assert render_value(Money(5, "EUR")) == "5 EUR"
        assert render_value(CurrencyCode("JPY")) == "JPY"

    def test_unknown_types_use_str(self):
        assert render_value(["a"]) == "['a']"
