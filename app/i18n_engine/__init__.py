"""i18n engine - component-based translation and template resolution.

Resolves strings across multiple languages from independently registered
components, with fallback-language backfilling, shared constants, per-key
active contexts and a ``{{component.key}}`` / ``{name}`` template processor.

Main components:
- models: LanguageDefinition, Component, ActiveContext, EngineConfig, results
- languages / components / constants / enums / context: the registries
- engine: I18nEngine, the translation resolver
- service: I18nService, named engine instances
- loader: ComponentLoader and YAMLComponentLoader
- factory: create_engine, create_service
"""

from i18n_engine.engine import I18nEngine
from i18n_engine.enums import i18n_enum
from i18n_engine.errors import (
    ComponentNotFoundError,
    ConstantConflictError,
    ConstantsSchemaValidationError,
    DuplicateComponentError,
    DuplicateInstanceError,
    DuplicateLanguageError,
    ErrorCode,
    I18nError,
    IncompleteRegistrationError,
    InstanceNotFoundError,
    InvalidContextError,
    InvalidStringKeyEnumError,
    LanguageNotFoundError,
    StringKeyNotFoundError,
    StringKeyNotRegisteredError,
    ValidationFailedError,
)
from i18n_engine.factory import create_engine, create_service
from i18n_engine.loader import ComponentLoader, YAMLComponentLoader
from i18n_engine.models import (
    ActiveContext,
    Component,
    ContextSpace,
    EngineConfig,
    LanguageDefinition,
    MissingKey,
    TranslationResponse,
    ValidationResult,
)
from i18n_engine.service import I18nService
from i18n_engine.values import CurrencyCode, Timezone, render_value

__all__ = [
    "I18nEngine",
    "I18nService",
    "EngineConfig",
    "LanguageDefinition",
    "Component",
    "ActiveContext",
    "ContextSpace",
    "MissingKey",
    "ValidationResult",
    "TranslationResponse",
    "CurrencyCode",
    "Timezone",
    "render_value",
    "i18n_enum",
    "ComponentLoader",
    "YAMLComponentLoader",
    "create_engine",
    "create_service",
    "ErrorCode",
    "I18nError",
    "ComponentNotFoundError",
    "LanguageNotFoundError",
    "StringKeyNotFoundError",
    "DuplicateComponentError",
    "DuplicateLanguageError",
    "InvalidContextError",
    "ValidationFailedError",
    "IncompleteRegistrationError",
    "ConstantConflictError",
    "ConstantsSchemaValidationError",
    "InvalidStringKeyEnumError",
    "StringKeyNotRegisteredError",
    "InstanceNotFoundError",
    "DuplicateInstanceError",
]
