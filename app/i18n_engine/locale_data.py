"""Locale reference data: currency codes and timezones.

Thin lookup functions over static ISO 4217 data and the pytz timezone
database. The engine only asks "is this valid" and "what exists"; it never
formats amounts or converts times.
"""

import os
from typing import FrozenSet

import pytz

from core.currencies import ISO_4217_CODES


def is_valid_currency_code(code: str) -> bool:
    """Check whether a string is an active ISO 4217 currency code.

    Matching is exact: lowercase codes are not valid.
    """
    return isinstance(code, str) and code in ISO_4217_CODES


def all_currency_codes() -> FrozenSet[str]:
    return ISO_4217_CODES


def is_valid_timezone(tz: str) -> bool:
    """Check whether a string names a timezone in the pytz database."""
    return isinstance(tz, str) and tz in pytz.all_timezones_set


def all_timezones() -> FrozenSet[str]:
    return frozenset(pytz.all_timezones)


def guess_local_timezone() -> str:
    """Best-effort guess of the host timezone.

    Uses the TZ environment variable when it names a known zone,
    otherwise falls back to UTC.

    Returns:
        A timezone name that is always valid for is_valid_timezone().
    """
    candidate = os.environ.get("TZ", "").lstrip(":")
    if is_valid_timezone(candidate):
        return candidate
    return "UTC"
