"""Data models for the i18n engine.

Defines the core data structures shared by the registries, the context
store and the template resolver.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

from i18n_engine.values import CurrencyCode, Timezone

DEFAULT_CONTEXT_KEY = "default"


class ContextSpace(str, Enum):
    """Which perspective drives language and timezone selection."""

    USER = "user"
    ADMIN = "admin"

    @classmethod
    def from_string(cls, value: str) -> "ContextSpace":
        """Convert string to ContextSpace enum.

        Args:
            value: "user" or "admin".

        Returns:
            Matching ContextSpace.

        Raises:
            ValueError: If value is not a known context space.
        """
        try:
            return cls(value)
        except ValueError as e:
            raise ValueError(f"Unsupported context space: {value}") from e


@dataclass(frozen=True)
class LanguageDefinition:
    """A language the engine can translate into.

    Attributes:
        id: Unique identifier used as the key in component string tables.
        name: Human readable display name (e.g., "Français").
        code: Locale code (e.g., "fr-FR"), unique across languages.
        is_default: Whether this is the engine's default language.
    """

    id: str
    name: str
    code: str
    is_default: bool = False


@dataclass
class Component:
    """An independently registered bundle of per-language string tables.

    Attributes:
        id: Canonical component identifier.
        strings: Mapping {language_id: {string_key: message}}.
        aliases: Alternate identifiers resolving to this component.
        string_keys: Explicit required key list. When omitted the required
            keys are the union of keys across every language table.
        message_format: Whether template strings of this component are handed
            to the engine's external message formatter (plural/select grammar).
    """

    id: str
    strings: Dict[str, Dict[str, str]] = field(default_factory=dict)
    aliases: Tuple[str, ...] = ()
    string_keys: Optional[Tuple[str, ...]] = None
    message_format: bool = False

    def __post_init__(self):
        self.aliases = tuple(self.aliases)
        if self.string_keys is not None:
            self.string_keys = tuple(self.string_keys)

    def required_keys(self) -> List[str]:
        """Return the required key set in first-seen order."""
        if self.string_keys is not None:
            return list(dict.fromkeys(self.string_keys))
        keys: Dict[str, None] = {}
        for language_strings in self.strings.values():
            for key in language_strings:
                keys[key] = None
        return list(keys)

    def identifiers(self) -> List[str]:
        """Return the id followed by every non-empty alias."""
        identifiers = [self.id]
        for alias in self.aliases:
            alias = alias.strip()
            if alias and alias not in identifiers:
                identifiers.append(alias)
        return identifiers


@dataclass(frozen=True)
class MissingKey:
    """A (language, key) pair a component does not provide."""

    language_id: str
    component_id: str
    string_key: str


@dataclass
class ValidationResult:
    """Outcome of a registration or validation pass.

    Attributes:
        is_valid: True when no required (language, key) pair is missing.
        missing_keys: Every missing pair found.
        warnings: Non-fatal findings (missing pairs filled from fallback).
        errors: Fatal findings (only populated in strict modes).
    """

    is_valid: bool = True
    missing_keys: List[MissingKey] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @classmethod
    def valid(cls) -> "ValidationResult":
        return cls(is_valid=True)

    def merge(self, other: "ValidationResult") -> None:
        """Fold another result into this one."""
        self.missing_keys.extend(other.missing_keys)
        self.warnings.extend(other.warnings)
        self.errors.extend(other.errors)
        self.is_valid = self.is_valid and other.is_valid


@dataclass(frozen=True)
class TranslationResponse:
    """Translated string plus where it actually came from.

    Attributes:
        translation: Final string (after substitution for template keys).
        actual_language: Language whose table supplied the string.
        was_fallback: True when the fallback language supplied the string.
    """

    translation: str
    actual_language: str
    was_fallback: bool = False


@dataclass
class ActiveContext:
    """Current locale settings for one context key.

    Always fully populated; the store substitutes defaults at creation.
    """

    language: str
    admin_language: str
    currency_code: CurrencyCode = field(default_factory=CurrencyCode)
    timezone: Timezone = field(default_factory=Timezone)
    admin_timezone: Timezone = field(default_factory=Timezone)
    current_context_space: ContextSpace = ContextSpace.USER

    @property
    def current_language(self) -> str:
        if self.current_context_space == ContextSpace.ADMIN:
            return self.admin_language
        return self.language

    @property
    def current_timezone(self) -> Timezone:
        if self.current_context_space == ContextSpace.ADMIN:
            return self.admin_timezone
        return self.timezone

    def to_variables(self) -> Dict[str, Any]:
        """Expose the context as template variables.

        ``language`` and ``timezone`` follow the active context space.
        """
        return {
            "language": self.current_language,
            "adminLanguage": self.admin_language,
            "userLanguage": self.language,
            "currencyCode": self.currency_code,
            "timezone": self.current_timezone,
            "userTimezone": self.timezone,
            "adminTimezone": self.admin_timezone,
        }


class MessageFormatter(Protocol):
    """External plural/select formatter supplied by the host application."""

    def __call__(
        self, template: str, variables: Mapping[str, Any], locale: str
    ) -> str: ...


@dataclass
class EngineConfig:
    """Behavioural settings for one engine instance.

    Attributes:
        default_language: Language used when neither call nor context names one.
            Defaults to the registry's default language.
        fallback_language: Language that backfills missing strings.
            Defaults to default_language.
        constants: Engine-level constants registered at construction.
        require_complete_strings: Strict mode, reject incomplete components.
        allow_partial_registration: Accept components whose fallback
            language lacks required keys.
        default_currency_code: Currency for newly created contexts.
        default_timezone: Timezone for newly created contexts.
        context_key: Active context this engine reads from.
        max_template_length: Longest template t() will process.
        message_formatter: Optional external plural/select formatter.
    """

    default_language: Optional[str] = None
    fallback_language: Optional[str] = None
    constants: Dict[str, Any] = field(default_factory=dict)
    require_complete_strings: bool = False
    allow_partial_registration: bool = True
    default_currency_code: str = "USD"
    default_timezone: str = "UTC"
    context_key: str = DEFAULT_CONTEXT_KEY
    max_template_length: int = 10000
    message_formatter: Optional[MessageFormatter] = None

    @classmethod
    def from_settings(cls, i18n_settings: Any, **overrides: Any) -> "EngineConfig":
        """Build an EngineConfig from I18nSettings.

        Args:
            i18n_settings: core.config.I18nSettings instance.
            **overrides: Field values taking precedence over settings.

        Returns:
            EngineConfig instance.
        """
        values: Dict[str, Any] = {
            "require_complete_strings": i18n_settings.REQUIRE_COMPLETE_STRINGS,
            "allow_partial_registration": i18n_settings.ALLOW_PARTIAL_REGISTRATION,
            "default_currency_code": i18n_settings.DEFAULT_CURRENCY_CODE,
            "default_timezone": i18n_settings.DEFAULT_TIMEZONE,
            "max_template_length": i18n_settings.MAX_TEMPLATE_LENGTH,
        }
        values.update(overrides)
        return cls(**values)
