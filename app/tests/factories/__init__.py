"""Test data factories for deterministic test data generation."""

from tests.factories.i18n import (
    make_component,
    make_context,
    make_engine,
    make_language_definitions,
)

__all__ = [
    "make_component",
    "make_context",
    "make_engine",
    "make_language_definitions",
]
