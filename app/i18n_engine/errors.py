"""Custom exceptions for the i18n engine.

Every error raised by the engine inherits from I18nError and carries a
machine-readable ErrorCode plus a metadata dict describing the failure.
Callers that need resilience use the ``safe_*`` operations instead of
catching these directly.
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    COMPONENT_NOT_FOUND = "COMPONENT_NOT_FOUND"
    LANGUAGE_NOT_FOUND = "LANGUAGE_NOT_FOUND"
    STRING_KEY_NOT_FOUND = "STRING_KEY_NOT_FOUND"
    DUPLICATE_COMPONENT = "DUPLICATE_COMPONENT"
    DUPLICATE_LANGUAGE = "DUPLICATE_LANGUAGE"
    INVALID_CONTEXT = "INVALID_CONTEXT"
    INCOMPLETE_REGISTRATION = "INCOMPLETE_REGISTRATION"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    CONSTANT_CONFLICT = "CONSTANT_CONFLICT"
    INSTANCE_NOT_FOUND = "INSTANCE_NOT_FOUND"
    DUPLICATE_INSTANCE = "DUPLICATE_INSTANCE"
    INVALID_STRING_KEY_ENUM = "INVALID_STRING_KEY_ENUM"
    STRING_KEY_NOT_REGISTERED = "STRING_KEY_NOT_REGISTERED"
    CONSTANTS_SCHEMA_VALIDATION_FAILED = "CONSTANTS_SCHEMA_VALIDATION_FAILED"


class I18nError(Exception):
    """Base exception for all i18n engine errors.

    Attributes:
        code: ErrorCode identifying the failure kind
        metadata: Structured details (component id, key, language...)

    Example:
        try:
            engine.translate("app", "welcome")
        except I18nError as e:
            logger.error("translation_failed", code=e.code.value, **e.metadata)
    """

    code: ErrorCode = ErrorCode.VALIDATION_FAILED

    def __init__(self, message: str, metadata: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.metadata: Dict[str, Any] = metadata or {}


class ComponentNotFoundError(I18nError):
    """Raised when a component id or alias is not registered.

    Example:
        >>> engine.translate("nonexistent", "title")
        Traceback (most recent call last):
        ...
        ComponentNotFoundError: Component 'nonexistent' not found
    """

    code = ErrorCode.COMPONENT_NOT_FOUND

    def __init__(self, component_id: str):
        super().__init__(
            f"Component '{component_id}' not found", {"component_id": component_id}
        )
        self.component_id = component_id


class LanguageNotFoundError(I18nError):
    """Raised when a language id is not registered with the engine.

    Example:
        >>> engine.set_user_language("xx")
        Traceback (most recent call last):
        ...
        LanguageNotFoundError: Language 'xx' not found
    """

    code = ErrorCode.LANGUAGE_NOT_FOUND

    def __init__(self, language: str):
        super().__init__(f"Language '{language}' not found", {"language": language})
        self.language = language


class StringKeyNotFoundError(I18nError):
    """Raised when a component has no string for the requested key."""

    code = ErrorCode.STRING_KEY_NOT_FOUND

    def __init__(self, component_id: str, string_key: str, language: str = ""):
        message = f"String key '{string_key}' not found in component '{component_id}'"
        if language:
            message = f"{message} for language '{language}'"
        super().__init__(
            message,
            {
                "component_id": component_id,
                "string_key": string_key,
                "language": language,
            },
        )
        self.component_id = component_id
        self.string_key = string_key
        self.language = language


class DuplicateComponentError(I18nError):
    """Raised when a component id or alias is already taken.

    Ids and aliases share one namespace, so an alias colliding with another
    component's id raises this as well.

    Example:
        >>> engine.register(Component(id="app", strings={...}))
        >>> engine.register(Component(id="app", strings={...}))
        Traceback (most recent call last):
        ...
        DuplicateComponentError: Component 'app' already registered
    """

    code = ErrorCode.DUPLICATE_COMPONENT

    def __init__(self, identifier: str, owner: Optional[str] = None):
        message = f"Component '{identifier}' already registered"
        if owner and owner != identifier:
            message = f"Identifier '{identifier}' already used by component '{owner}'"
        super().__init__(message, {"component_id": identifier, "owner": owner})
        self.component_id = identifier
        self.owner = owner


class DuplicateLanguageError(I18nError):
    """Raised when a language id or locale code is registered twice."""

    code = ErrorCode.DUPLICATE_LANGUAGE

    def __init__(self, language: str):
        super().__init__(
            f"Language '{language}' already registered", {"language": language}
        )
        self.language = language


class InvalidContextError(I18nError):
    """Raised when an active context key does not exist.

    Contexts are never created implicitly by accessors, so reading or
    writing an unknown key is always an error.
    """

    code = ErrorCode.INVALID_CONTEXT

    def __init__(self, context_key: str):
        super().__init__(
            f"Invalid context key '{context_key}'", {"context_key": context_key}
        )
        self.context_key = context_key


class ValidationFailedError(I18nError):
    """Raised when a component registration fails validation.

    Attributes:
        errors: Human readable validation errors
        missing_keys: MissingKey entries that caused the failure
    """

    code = ErrorCode.VALIDATION_FAILED

    def __init__(
        self,
        component_id: str,
        errors: Iterable[str],
        missing_keys: Optional[List[Any]] = None,
    ):
        self.errors = list(errors)
        self.missing_keys = list(missing_keys or [])
        super().__init__(
            f"Component '{component_id}' registration validation failed: "
            + ", ".join(self.errors),
            {
                "component_id": component_id,
                "errors": self.errors,
                "missing_keys": self.missing_keys,
            },
        )
        self.component_id = component_id


class IncompleteRegistrationError(ValidationFailedError):
    """Raised in strict mode when any language lacks a required key.

    Example:
        >>> engine = I18nEngine(languages, EngineConfig(require_complete_strings=True))
        >>> engine.register(Component(id="app", strings={"en": {"a": "A"}, "fr": {}}))
        Traceback (most recent call last):
        ...
        IncompleteRegistrationError: Component 'app' registration validation failed: ...
    """

    code = ErrorCode.INCOMPLETE_REGISTRATION


class ConstantConflictError(I18nError):
    """Raised when a constant is registered with a value that differs from its owner's.

    Example:
        >>> engine.register_constants("x", {"Site": "A"})
        >>> engine.register_constants("y", {"Site": "B"})
        Traceback (most recent call last):
        ...
        ConstantConflictError: Constant 'Site' from 'y' conflicts with owner 'x'
    """

    code = ErrorCode.CONSTANT_CONFLICT

    def __init__(self, name: str, component_id: str, owner: str):
        super().__init__(
            f"Constant '{name}' from '{component_id}' conflicts with owner '{owner}'",
            {"name": name, "component_id": component_id, "owner": owner},
        )
        self.name = name
        self.component_id = component_id
        self.owner = owner


class InstanceNotFoundError(I18nError):
    """Raised when no engine instance exists under the requested key."""

    code = ErrorCode.INSTANCE_NOT_FOUND

    def __init__(self, key: str):
        super().__init__(f"I18n instance '{key}' not found", {"key": key})
        self.key = key


class DuplicateInstanceError(I18nError):
    """Raised when creating an engine instance under a key already in use."""

    code = ErrorCode.DUPLICATE_INSTANCE

    def __init__(self, key: str):
        super().__init__(f"I18n instance '{key}' already exists", {"key": key})
        self.key = key


class InvalidStringKeyEnumError(I18nError):
    """Raised when registering a string-key enum without a component tag.

    A string-key enum must be a str-valued Enum decorated with
    i18n_enum(component_id); the tag names the component owning its keys.
    """

    code = ErrorCode.INVALID_STRING_KEY_ENUM

    def __init__(self, enum_name: str):
        super().__init__(
            f"'{enum_name}' is not a tagged string key enum", {"enum_name": enum_name}
        )
        self.enum_name = enum_name


class StringKeyNotRegisteredError(I18nError):
    """Raised when a string key belongs to no registered string-key enum.

    Example:
        >>> engine.translate_string_key("unknown.key")
        Traceback (most recent call last):
        ...
        StringKeyNotRegisteredError: String key 'unknown.key' is not registered
    """

    code = ErrorCode.STRING_KEY_NOT_REGISTERED

    def __init__(self, string_key: str):
        super().__init__(
            f"String key '{string_key}' is not registered", {"string_key": string_key}
        )
        self.string_key = string_key


class ConstantsSchemaValidationError(I18nError):
    """Raised when a component's constants do not satisfy its schema.

    Attributes:
        schema_name: Name of the pydantic model used for validation
        field_errors: One "location: message" entry per failing field
    """

    code = ErrorCode.CONSTANTS_SCHEMA_VALIDATION_FAILED

    def __init__(self, component_id: str, schema_name: str, field_errors: Iterable[str]):
        self.field_errors = list(field_errors)
        super().__init__(
            f"Constants for '{component_id}' failed {schema_name} validation: "
            + "; ".join(self.field_errors),
            {
                "component_id": component_id,
                "schema_name": schema_name,
                "field_errors": self.field_errors,
            },
        )
        self.component_id = component_id
        self.schema_name = schema_name
