"""Interpolation value types.

Everything that can be substituted into a ``{name}`` placeholder is one of:

- text (str)
- a number (int, float, Decimal)
- an enum member (rendered through its value)
- a display-value object exposing a ``display_value`` string

render_value() is the single place that turns any of these into text.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Protocol, Union, runtime_checkable

from i18n_engine.locale_data import is_valid_currency_code, is_valid_timezone


@runtime_checkable
class SupportsDisplayValue(Protocol):
    """Anything that knows how to present itself inside a translated string."""

    @property
    def display_value(self) -> str: ...


InterpolationValue = Union[str, int, float, Decimal, Enum, SupportsDisplayValue]


@dataclass(frozen=True)
class CurrencyCode:
    """Validated ISO 4217 currency code.

    Attributes:
        value: Upper-case three letter code (e.g., "USD", "EUR").
    """

    value: str = "USD"

    def __post_init__(self):
        if not is_valid_currency_code(self.value):
            raise ValueError(f"Invalid currency code: {self.value}")

    @property
    def display_value(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Timezone:
    """Validated IANA timezone name.

    Attributes:
        value: Timezone identifier (e.g., "UTC", "America/Toronto").
    """

    value: str = "UTC"

    def __post_init__(self):
        if not is_valid_timezone(self.value):
            raise ValueError(f"Invalid timezone: {self.value}")

    @property
    def display_value(self) -> str:
        return self.value

    @property
    def name(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


def render_value(value: Any) -> str:
    """Render an interpolation value as text.

    Args:
        value: Any InterpolationValue. Unknown types fall back to str().

    Returns:
        Text form of the value. None renders as an empty string.
    """
    if value is None:
        return ""
    if isinstance(value, Enum):
        return render_value(value.value)
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, SupportsDisplayValue):
        return str(value.display_value)
    return str(value)


def coerce_currency_code(value: Union[str, CurrencyCode]) -> CurrencyCode:
    if isinstance(value, CurrencyCode):
        return value
    return CurrencyCode(value)


def coerce_timezone(value: Union[str, Timezone]) -> Timezone:
    if isinstance(value, Timezone):
        return value
    return Timezone(value)
