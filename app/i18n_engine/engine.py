"""Translation engine.

I18nEngine ties the registries and the context store together and resolves
strings and templates. All state belongs to the engine instance; several
engines can coexist in one process (see I18nService).

Usage:
    engine = I18nEngine(
        [LanguageDefinition("en", "English", "en-US", is_default=True),
         LanguageDefinition("fr", "Français", "fr-FR")],
    )
    engine.register(Component("app", {"en": {"welcome": "Hi"}, "fr": {"welcome": "Salut"}}))
    engine.translate("app", "welcome", language="fr")   # "Salut"
    engine.t("{{app.welcome}}, {name}", {"name": "Ada"})  # "Hi, Ada"
"""

import threading
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, Union

from core.logging import get_module_logger
from i18n_engine.components import ComponentRegistry
from i18n_engine.constants import ConstantsRegistry, Schema
from i18n_engine.context import ActiveContextStore
from i18n_engine.enums import (
    EnumRef,
    EnumRegistry,
    StringKey,
    StringKeyEnumRegistry,
    string_key_value,
)
from i18n_engine.errors import (
    ComponentNotFoundError,
    I18nError,
    StringKeyNotFoundError,
)
from i18n_engine.languages import LanguageRegistry
from i18n_engine.models import (
    ActiveContext,
    Component,
    ContextSpace,
    EngineConfig,
    LanguageDefinition,
    TranslationResponse,
    ValidationResult,
)
from i18n_engine.templates import (
    is_template_key,
    merge_variables,
    resolve_component_references,
    substitute_variables,
)
from i18n_engine.values import CurrencyCode, Timezone

logger = get_module_logger()

ENGINE_CONSTANTS_OWNER = "__engine__"

Variables = Optional[Mapping[str, Any]]


def placeholder(component_id: Any, key: Any) -> str:
    """Text returned when a string cannot be resolved."""
    return f"[{component_id}.{key}]"


class I18nEngine:
    """Component-based translation engine.

    Attributes:
        config: EngineConfig the engine was built with.
        default_language: Language used when neither the call nor the
            context names one.
        fallback_language: Language that backfills missing strings.
        context_key: Key of the active context this engine reads.
    """

    def __init__(
        self,
        languages: Iterable[LanguageDefinition],
        config: Optional[EngineConfig] = None,
    ):
        """Initialize the engine.

        Args:
            languages: Language definitions; at least one is required.
            config: Engine settings, defaults to EngineConfig().

        Raises:
            ValueError: If no language is given.
            LanguageNotFoundError: If the configured default or fallback
                language is not among languages.
            DuplicateLanguageError: If two definitions share an id or code.
        """
        self.config = config or EngineConfig()
        self._lock = threading.RLock()

        self._languages = LanguageRegistry(languages)
        if not len(self._languages):
            raise ValueError("I18nEngine requires at least one language")

        default = self.config.default_language or self._languages.get_default_language().id
        self.default_language = self._languages.get_language(default).id
        fallback = self.config.fallback_language or self.default_language
        self.fallback_language = self._languages.get_language(fallback).id

        self._components = ComponentRegistry(
            self._languages,
            self.fallback_language,
            require_complete_strings=self.config.require_complete_strings,
            allow_partial_registration=self.config.allow_partial_registration,
        )
        self._constants = ConstantsRegistry()
        if self.config.constants:
            self._constants.register(ENGINE_CONSTANTS_OWNER, self.config.constants)
        self._enums = EnumRegistry()
        self._string_keys = StringKeyEnumRegistry()

        self.context_key = self.config.context_key
        self._contexts = ActiveContextStore(
            self.config.default_currency_code, self.config.default_timezone
        )
        self._contexts.create_context(self.default_language, key=self.context_key)

        logger.info(
            "engine_initialized",
            languages=self._languages.language_ids(),
            default_language=self.default_language,
            fallback_language=self.fallback_language,
            context_key=self.context_key,
        )

    # Languages

    def register_language(self, definition: LanguageDefinition) -> None:
        """Register another language.

        Components registered earlier have no table for it; their strings are
        served from the fallback language.
        """
        with self._lock:
            self._languages.register_language(definition)

    def register_languages(self, definitions: Iterable[LanguageDefinition]) -> None:
        with self._lock:
            self._languages.register_languages(definitions)

    def has_language(self, language_id: str) -> bool:
        with self._lock:
            return self._languages.has_language(language_id)

    def get_language(self, language_id: str) -> LanguageDefinition:
        with self._lock:
            return self._languages.get_language(language_id)

    def get_languages(self) -> List[LanguageDefinition]:
        with self._lock:
            return self._languages.get_all_languages()

    # Components

    def register(self, component: Component) -> ValidationResult:
        """Register a component.

        Raises:
            DuplicateComponentError: If the id or an alias is already in use.
            IncompleteRegistrationError: In strict mode, if a pair is missing.
            ValidationFailedError: If partial registration is disallowed and
                the fallback language lacks required keys.
        """
        with self._lock:
            return self._components.register(component)

    def register_if_not_exists(self, component: Component) -> ValidationResult:
        with self._lock:
            return self._components.register_if_not_exists(component)

    def update(
        self, component_id: str, strings: Mapping[str, Mapping[str, str]]
    ) -> ValidationResult:
        """Merge more language tables into a registered component."""
        with self._lock:
            return self._components.update(component_id, strings)

    def has_component(self, component_ref: str) -> bool:
        with self._lock:
            return self._components.has_component(component_ref)

    def get_component(self, component_ref: str) -> Component:
        with self._lock:
            return self._components.get_component(component_ref)

    def get_components(self) -> List[Component]:
        with self._lock:
            return self._components.get_components()

    def validate_all_components(self) -> ValidationResult:
        with self._lock:
            result = self._components.validate_all()
        logger.info(
            "components_validated",
            is_valid=result.is_valid,
            missing_key_count=len(result.missing_keys),
        )
        return result

    # Translation

    def translate(
        self,
        component_id: str,
        key: str,
        variables: Variables = None,
        language: Optional[str] = None,
    ) -> str:
        """Translate one string.

        Args:
            component_id: Component id or alias.
            key: Exact string key.
            variables: Caller variables for template keys.
            language: Target language; defaults to the context's current
                language, then the engine default.

        Returns:
            The stored string, with ``{name}`` substitution for template keys.

        Raises:
            ComponentNotFoundError: If the component is not registered.
            StringKeyNotFoundError: If no table supplies the key.
        """
        return self.get_translation_details(component_id, key, variables, language).translation

    def get_translation_details(
        self,
        component_id: str,
        key: str,
        variables: Variables = None,
        language: Optional[str] = None,
    ) -> TranslationResponse:
        """Translate one string and report which language supplied it."""
        with self._lock:
            target = self._resolve_language(language)
            try:
                response = self._components.lookup(component_id, key, target)
            except (ComponentNotFoundError, StringKeyNotFoundError) as e:
                logger.warning(
                    "translation_not_found",
                    component_id=component_id,
                    key=key,
                    language=target,
                    error=e.message,
                )
                raise

            if not is_template_key(key):
                return response

            component = self._components.get_component(component_id)
            merged = self._build_variables([variables])
            text = self._format(
                component, response.translation, merged, response.actual_language
            )
            return TranslationResponse(text, response.actual_language, response.was_fallback)

    def safe_translate(
        self,
        component_id: str,
        key: str,
        variables: Variables = None,
        language: Optional[str] = None,
    ) -> str:
        """Like translate() but returns ``[component_id.key]`` instead of raising."""
        try:
            return self.translate(component_id, key, variables, language)
        except Exception as e:
            logger.debug(
                "safe_translate_fallback",
                component_id=component_id,
                key=key,
                error=str(e),
            )
            return placeholder(component_id, key)

    def t(
        self,
        template: str,
        *variables: Mapping[str, Any],
        language: Optional[str] = None,
    ) -> str:
        """Process a free-form template.

        ``{{identifier.key}}`` references are resolved first, then ``{name}``
        variables are substituted in the result. Later variable mappings
        override earlier ones. Never raises: unresolved references become
        placeholders and unknown variables stay verbatim.
        """
        if not template:
            return template or ""
        if len(template) > self.config.max_template_length:
            logger.warning(
                "template_too_long",
                length=len(template),
                max_length=self.config.max_template_length,
            )
            return template

        try:
            with self._lock:
                target = self._resolve_language(language)
                merged = self._build_variables(variables)
                text = resolve_component_references(
                    template,
                    lambda identifier, key: self._resolve_reference(
                        identifier, key, merged, target
                    ),
                )
                return substitute_variables(text, merged)
        except Exception as e:
            logger.error("template_processing_failed", error=str(e))
            return template

    # Enums

    def register_enum(
        self,
        enum_type: Type[Enum],
        translations: Mapping[str, Mapping[Any, str]],
        enum_name: Optional[str] = None,
        component_id: Optional[str] = None,
    ) -> str:
        """Register enum translations.

        Args:
            enum_type: Enum class.
            translations: {language_id: {value, member or name: text}}.
            enum_name: Name usable in ``{{EnumName.key}}``; defaults to the
                class name.
            component_id: Component that ``{{EnumName.key}}`` resolves to.

        Returns:
            The registry tag of the enum.
        """
        with self._lock:
            return self._enums.register(
                enum_type, translations, enum_name or enum_type.__name__, component_id
            )

    def translate_enum(
        self, enum_ref: EnumRef, value: Any, language: Optional[str] = None
    ) -> str:
        """Translate an enum value.

        Raises:
            ComponentNotFoundError: If the enum is not registered.
            LanguageNotFoundError: If neither the language nor the fallback
                language has translations.
            StringKeyNotFoundError: If the value has no translation.
        """
        with self._lock:
            target = self._resolve_language(language)
            return self._enums.translate(enum_ref, value, target, self.fallback_language)

    def has_enum(self, enum_ref: EnumRef) -> bool:
        with self._lock:
            return self._enums.has(enum_ref)

    # String-key enums

    def register_string_key_enum(self, enum_type: Type[Enum]) -> str:
        """Register a str enum of string keys tagged with i18n_enum(component_id).

        Returns:
            The component id the enum's keys belong to.

        Raises:
            InvalidStringKeyEnumError: If the enum has no tag or non-string values.
        """
        with self._lock:
            return self._string_keys.register(enum_type)

    def has_string_key_enum(self, enum_type: Type[Enum]) -> bool:
        with self._lock:
            return self._string_keys.has(enum_type)

    def translate_string_key(
        self,
        key: StringKey,
        variables: Variables = None,
        language: Optional[str] = None,
    ) -> str:
        """Translate a string key without naming its component.

        Raises:
            StringKeyNotRegisteredError: If no registered string-key enum
                holds the key.
            ComponentNotFoundError: If the owning component is not registered.
            StringKeyNotFoundError: If the component has no such string.
        """
        with self._lock:
            component_id = self._string_keys.resolve_component_id(key)
            return self.translate(component_id, string_key_value(key), variables, language)

    def safe_translate_string_key(
        self,
        key: StringKey,
        variables: Variables = None,
        language: Optional[str] = None,
    ) -> str:
        """Like translate_string_key() but never raises.

        Unregistered keys yield ``[key]``; otherwise the usual
        ``[component_id.key]`` placeholder applies.
        """
        value = string_key_value(key)
        with self._lock:
            component_id = self._string_keys.safe_resolve_component_id(key)
            if component_id is None:
                logger.debug("string_key_not_registered", string_key=value)
                return f"[{value}]"
            return self.safe_translate(component_id, value, variables, language)

    # Constants

    def register_constants(
        self,
        component_id: str,
        values: Mapping[str, Any],
        schema: Optional[Schema] = None,
    ) -> None:
        """Register constants, optionally validated by a pydantic model.

        Raises:
            ConstantConflictError: If a name already carries another value.
            ConstantsSchemaValidationError: If the values fail the schema.
        """
        with self._lock:
            self._constants.register(component_id, values, schema)

    def update_constants(
        self,
        component_id: str,
        values: Mapping[str, Any],
        schema: Optional[Schema] = None,
    ) -> None:
        with self._lock:
            self._constants.update(component_id, values, schema)

    def merge_constants(
        self,
        component_id: str,
        values: Mapping[str, Any],
        schema: Optional[Schema] = None,
    ) -> None:
        with self._lock:
            self._constants.merge(component_id, values, schema)

    def replace_constants(
        self,
        component_id: str,
        values: Mapping[str, Any],
        schema: Optional[Schema] = None,
    ) -> None:
        with self._lock:
            self._constants.replace(component_id, values, schema)

    def register_constants_schema(self, component_id: str, schema: Schema) -> None:
        """Attach a schema that later constants writes for component_id must satisfy."""
        with self._lock:
            self._constants.register_schema(component_id, schema)

    def resolve_constant_owner(self, name: str) -> Optional[str]:
        with self._lock:
            return self._constants.resolve_owner(name)

    def get_constants(self, component_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Return one component's constants, or the merged view when omitted."""
        with self._lock:
            if component_id is None:
                return self._constants.get_merged()
            return self._constants.get(component_id)

    # Context

    def create_context(
        self,
        language: Optional[str] = None,
        admin_language: Optional[str] = None,
        key: Optional[str] = None,
    ) -> ActiveContext:
        """Create or reset a context; languages default to the engine default."""
        with self._lock:
            language = self._languages.get_language(language or self.default_language).id
            if admin_language is not None:
                self._languages.get_language(admin_language)
            return self._contexts.create_context(
                language, admin_language, key=key or self.context_key
            )

    def get_context(self, key: Optional[str] = None) -> ActiveContext:
        with self._lock:
            return self._contexts.get_context(key or self.context_key)

    def set_context(self, context: ActiveContext, key: Optional[str] = None) -> None:
        """Store a context.

        Raises:
            LanguageNotFoundError: If either language is not registered.
        """
        with self._lock:
            self._languages.get_language(context.language)
            self._languages.get_language(context.admin_language)
            self._contexts.set_context(context, key or self.context_key)

    def has_context(self, key: Optional[str] = None) -> bool:
        with self._lock:
            return self._contexts.has_context(key or self.context_key)

    def get_user_language(self, key: Optional[str] = None) -> str:
        with self._lock:
            return self._contexts.get_user_language(key or self.context_key)

    def set_user_language(self, language: str, key: Optional[str] = None) -> None:
        """Set the user language.

        Raises:
            LanguageNotFoundError: If language is not registered.
            InvalidContextError: If no context exists for key.
        """
        with self._lock:
            self._languages.get_language(language)
            self._contexts.set_user_language(language, key or self.context_key)

    def get_admin_language(self, key: Optional[str] = None) -> str:
        with self._lock:
            return self._contexts.get_admin_language(key or self.context_key)

    def set_admin_language(self, language: str, key: Optional[str] = None) -> None:
        with self._lock:
            self._languages.get_language(language)
            self._contexts.set_admin_language(language, key or self.context_key)

    def get_currency_code(self, key: Optional[str] = None) -> CurrencyCode:
        with self._lock:
            return self._contexts.get_currency_code(key or self.context_key)

    def set_currency_code(
        self, currency_code: Union[str, CurrencyCode], key: Optional[str] = None
    ) -> None:
        with self._lock:
            self._contexts.set_currency_code(currency_code, key or self.context_key)

    def get_user_timezone(self, key: Optional[str] = None) -> Timezone:
        with self._lock:
            return self._contexts.get_user_timezone(key or self.context_key)

    def set_user_timezone(
        self, timezone: Union[str, Timezone], key: Optional[str] = None
    ) -> None:
        with self._lock:
            self._contexts.set_user_timezone(timezone, key or self.context_key)

    def get_admin_timezone(self, key: Optional[str] = None) -> Timezone:
        with self._lock:
            return self._contexts.get_admin_timezone(key or self.context_key)

    def set_admin_timezone(
        self, timezone: Union[str, Timezone], key: Optional[str] = None
    ) -> None:
        with self._lock:
            self._contexts.set_admin_timezone(timezone, key or self.context_key)

    def get_language_context_space(self, key: Optional[str] = None) -> ContextSpace:
        with self._lock:
            return self._contexts.get_language_context_space(key or self.context_key)

    def set_language_context_space(
        self, space: Union[str, ContextSpace], key: Optional[str] = None
    ) -> None:
        with self._lock:
            self._contexts.set_language_context_space(space, key or self.context_key)

    def switch_to_admin(self, key: Optional[str] = None) -> None:
        self.set_language_context_space(ContextSpace.ADMIN, key)

    def switch_to_user(self, key: Optional[str] = None) -> None:
        self.set_language_context_space(ContextSpace.USER, key)

    def get_current_language(self, key: Optional[str] = None) -> str:
        with self._lock:
            return self._contexts.current_language(key or self.context_key)

    def get_current_timezone(self, key: Optional[str] = None) -> Timezone:
        with self._lock:
            return self._contexts.current_timezone(key or self.context_key)

    def clear_all(self) -> None:
        """Discard every active context, the engine's own included.

        Translation keeps working on the engine default language until a
        context is created again.
        """
        with self._lock:
            self._contexts.clear_all()
        logger.info("contexts_cleared", context_key=self.context_key)

    # Internals

    def _resolve_language(self, language: Optional[str]) -> str:
        if language:
            return language
        if self._contexts.has_context(self.context_key):
            return self._contexts.current_language(self.context_key)
        return self.default_language

    def _build_variables(self, caller_variables: Iterable[Variables]) -> Dict[str, Any]:
        context_variables: Dict[str, Any] = {}
        if self._contexts.has_context(self.context_key):
            context_variables = self._contexts.get_context(self.context_key).to_variables()
        return merge_variables(
            self._constants.get_merged(), context_variables, caller_variables
        )

    def _format(
        self,
        component: Component,
        raw: str,
        variables: Dict[str, Any],
        language: str,
    ) -> str:
        if component.message_format:
            formatter = self.config.message_formatter
            if formatter is not None:
                locale = language
                if self._languages.has_language(language):
                    locale = self._languages.get_language(language).code
                return formatter(raw, variables, locale)
            logger.debug("message_formatter_not_configured", component_id=component.id)
        return substitute_variables(raw, variables)

    def _resolve_reference(
        self, identifier: str, key: str, variables: Dict[str, Any], language: str
    ) -> str:
        component_id = self._components.find_id(identifier)
        if component_id is not None:
            return self.safe_translate(component_id, key, variables, language)

        entry = self._enums.resolve_name(identifier)
        if entry is not None:
            if entry.component_id:
                return self.safe_translate(entry.component_id, key, variables, language)
            try:
                return self._enums.translate(
                    entry.tag, key, language, self.fallback_language
                )
            except I18nError as e:
                logger.debug(
                    "enum_reference_unresolved",
                    enum_name=identifier,
                    key=key,
                    error=e.message,
                )
                return placeholder(identifier, key)

        return self.safe_translate(identifier, key, variables, language)
