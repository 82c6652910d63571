"""Engine facade managing named engine instances.

I18nService replaces process-wide singletons: an application creates one
service, registers engines under keys, and forwards calls to them. Every
forwarding method accepts ``instance_key``; omitted, it targets the default
instance (the first one created).

Usage:
    service = I18nService()
    service.create_instance(languages)
    service.register(Component("app", {"en": {"welcome": "Hi"}}))
    service.translate("app", "welcome")
"""

import threading
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, Union

from core.config import settings
from core.logging import get_module_logger
from i18n_engine.constants import Schema
from i18n_engine.engine import I18nEngine, placeholder
from i18n_engine.enums import EnumRef, StringKey, string_key_value
from i18n_engine.errors import DuplicateInstanceError, InstanceNotFoundError
from i18n_engine.models import (
    ActiveContext,
    Component,
    ContextSpace,
    EngineConfig,
    LanguageDefinition,
    TranslationResponse,
    ValidationResult,
)
from i18n_engine.values import CurrencyCode, Timezone

logger = get_module_logger()


class I18nService:
    """Registry of named I18nEngine instances plus call forwarding.

    Attributes:
        default_instance_key: Key used by create_instance when none is given.
    """

    def __init__(self, default_instance_key: Optional[str] = None):
        self.default_instance_key = (
            default_instance_key or settings.i18n.DEFAULT_INSTANCE_KEY
        )
        self._instances: Dict[str, I18nEngine] = {}
        self._default_key: Optional[str] = None
        self._lock = threading.Lock()

    # Instance management

    def create_instance(
        self,
        languages: Iterable[LanguageDefinition],
        config: Optional[EngineConfig] = None,
        key: Optional[str] = None,
    ) -> I18nEngine:
        """Create an engine and store it under key.

        Raises:
            DuplicateInstanceError: If an instance already exists under key.
        """
        key = key or self.default_instance_key
        with self._lock:
            if key in self._instances:
                raise DuplicateInstanceError(key)
            engine = I18nEngine(languages, config)
            self._add(key, engine)
        return engine

    def add_instance(self, key: str, engine: I18nEngine) -> None:
        """Store an already built engine under key.

        Raises:
            DuplicateInstanceError: If an instance already exists under key.
        """
        with self._lock:
            if key in self._instances:
                raise DuplicateInstanceError(key)
            self._add(key, engine)

    def get_or_create_instance(
        self,
        languages: Iterable[LanguageDefinition],
        config: Optional[EngineConfig] = None,
        key: Optional[str] = None,
    ) -> I18nEngine:
        key = key or self.default_instance_key
        with self._lock:
            engine = self._instances.get(key)
            if engine is None:
                engine = I18nEngine(languages, config)
                self._add(key, engine)
        return engine

    def get_instance(self, key: Optional[str] = None) -> I18nEngine:
        """Return the instance under key, or the default instance.

        Raises:
            InstanceNotFoundError: If no such instance exists.
        """
        with self._lock:
            resolved = key or self._default_key
            engine = self._instances.get(resolved) if resolved else None
            if engine is None:
                raise InstanceNotFoundError(key or self.default_instance_key)
            return engine

    def has_instance(self, key: Optional[str] = None) -> bool:
        with self._lock:
            resolved = key or self._default_key
            return resolved is not None and resolved in self._instances

    def remove_instance(self, key: str) -> bool:
        """Remove an instance; returns False when nothing was stored under key."""
        with self._lock:
            if self._instances.pop(key, None) is None:
                return False
            if self._default_key == key:
                self._default_key = next(iter(self._instances), None)
            get_module_logger(instance_key=key).info("instance_removed")
            return True

    def reset_all(self) -> None:
        with self._lock:
            count = len(self._instances)
            self._instances.clear()
            self._default_key = None
        logger.info("instances_reset", instance_count=count)

    def instance_keys(self) -> List[str]:
        with self._lock:
            return list(self._instances)

    def _add(self, key: str, engine: I18nEngine) -> None:
        self._instances[key] = engine
        if self._default_key is None:
            self._default_key = key
        get_module_logger(instance_key=key).info(
            "instance_created", is_default=self._default_key == key
        )

    # Components

    def register(
        self, component: Component, instance_key: Optional[str] = None
    ) -> ValidationResult:
        return self.get_instance(instance_key).register(component)

    def register_if_not_exists(
        self, component: Component, instance_key: Optional[str] = None
    ) -> ValidationResult:
        return self.get_instance(instance_key).register_if_not_exists(component)

    def update(
        self,
        component_id: str,
        strings: Mapping[str, Mapping[str, str]],
        instance_key: Optional[str] = None,
    ) -> ValidationResult:
        return self.get_instance(instance_key).update(component_id, strings)

    def validate_all_components(
        self, instance_key: Optional[str] = None
    ) -> ValidationResult:
        return self.get_instance(instance_key).validate_all_components()

    # Translation

    def translate(
        self,
        component_id: str,
        key: str,
        variables: Optional[Mapping[str, Any]] = None,
        language: Optional[str] = None,
        instance_key: Optional[str] = None,
    ) -> str:
        return self.get_instance(instance_key).translate(
            component_id, key, variables, language
        )

    def safe_translate(
        self,
        component_id: str,
        key: str,
        variables: Optional[Mapping[str, Any]] = None,
        language: Optional[str] = None,
        instance_key: Optional[str] = None,
    ) -> str:
        """Never raises, not even for a missing instance."""
        try:
            engine = self.get_instance(instance_key)
        except InstanceNotFoundError as e:
            logger.warning("safe_translate_no_instance", error=e.message)
            return placeholder(component_id, key)
        return engine.safe_translate(component_id, key, variables, language)

    def get_translation_details(
        self,
        component_id: str,
        key: str,
        variables: Optional[Mapping[str, Any]] = None,
        language: Optional[str] = None,
        instance_key: Optional[str] = None,
    ) -> TranslationResponse:
        return self.get_instance(instance_key).get_translation_details(
            component_id, key, variables, language
        )

    def t(
        self,
        template: str,
        *variables: Mapping[str, Any],
        language: Optional[str] = None,
        instance_key: Optional[str] = None,
    ) -> str:
        return self.get_instance(instance_key).t(
            template, *variables, language=language
        )

    # Enums

    def register_enum(
        self,
        enum_type: Type[Enum],
        translations: Mapping[str, Mapping[Any, str]],
        enum_name: Optional[str] = None,
        component_id: Optional[str] = None,
        instance_key: Optional[str] = None,
    ) -> str:
        return self.get_instance(instance_key).register_enum(
            enum_type, translations, enum_name, component_id
        )

    def translate_enum(
        self,
        enum_ref: EnumRef,
        value: Any,
        language: Optional[str] = None,
        instance_key: Optional[str] = None,
    ) -> str:
        return self.get_instance(instance_key).translate_enum(enum_ref, value, language)

    def has_enum(self, enum_ref: EnumRef, instance_key: Optional[str] = None) -> bool:
        return self.get_instance(instance_key).has_enum(enum_ref)

    # String-key enums

    def register_string_key_enum(
        self, enum_type: Type[Enum], instance_key: Optional[str] = None
    ) -> str:
        return self.get_instance(instance_key).register_string_key_enum(enum_type)

    def translate_string_key(
        self,
        key: StringKey,
        variables: Optional[Mapping[str, Any]] = None,
        language: Optional[str] = None,
        instance_key: Optional[str] = None,
    ) -> str:
        return self.get_instance(instance_key).translate_string_key(
            key, variables, language
        )

    def safe_translate_string_key(
        self,
        key: StringKey,
        variables: Optional[Mapping[str, Any]] = None,
        language: Optional[str] = None,
        instance_key: Optional[str] = None,
    ) -> str:
        """Never raises, not even for a missing instance."""
        try:
            engine = self.get_instance(instance_key)
        except InstanceNotFoundError as e:
            logger.warning("safe_translate_no_instance", error=e.message)
            return f"[{string_key_value(key)}]"
        return engine.safe_translate_string_key(key, variables, language)

    # Constants

    def register_constants(
        self,
        component_id: str,
        values: Mapping[str, Any],
        schema: Optional[Schema] = None,
        instance_key: Optional[str] = None,
    ) -> None:
        self.get_instance(instance_key).register_constants(component_id, values, schema)

    def update_constants(
        self,
        component_id: str,
        values: Mapping[str, Any],
        schema: Optional[Schema] = None,
        instance_key: Optional[str] = None,
    ) -> None:
        self.get_instance(instance_key).update_constants(component_id, values, schema)

    def merge_constants(
        self,
        component_id: str,
        values: Mapping[str, Any],
        schema: Optional[Schema] = None,
        instance_key: Optional[str] = None,
    ) -> None:
        self.get_instance(instance_key).merge_constants(component_id, values, schema)

    def replace_constants(
        self,
        component_id: str,
        values: Mapping[str, Any],
        schema: Optional[Schema] = None,
        instance_key: Optional[str] = None,
    ) -> None:
        self.get_instance(instance_key).replace_constants(component_id, values, schema)

    def register_constants_schema(
        self, component_id: str, schema: Schema, instance_key: Optional[str] = None
    ) -> None:
        self.get_instance(instance_key).register_constants_schema(component_id, schema)

    def resolve_constant_owner(
        self, name: str, instance_key: Optional[str] = None
    ) -> Optional[str]:
        return self.get_instance(instance_key).resolve_constant_owner(name)

    def get_constants(
        self, component_id: Optional[str] = None, instance_key: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        return self.get_instance(instance_key).get_constants(component_id)

    # Context

    def create_context(
        self,
        language: Optional[str] = None,
        admin_language: Optional[str] = None,
        key: Optional[str] = None,
        instance_key: Optional[str] = None,
    ) -> ActiveContext:
        return self.get_instance(instance_key).create_context(language, admin_language, key)

    def has_context(
        self, key: Optional[str] = None, instance_key: Optional[str] = None
    ) -> bool:
        return self.get_instance(instance_key).has_context(key)

    def clear_all(self, instance_key: Optional[str] = None) -> None:
        """Discard every active context of one instance."""
        self.get_instance(instance_key).clear_all()

    def get_context(
        self, key: Optional[str] = None, instance_key: Optional[str] = None
    ) -> ActiveContext:
        return self.get_instance(instance_key).get_context(key)

    def set_context(
        self,
        context: ActiveContext,
        key: Optional[str] = None,
        instance_key: Optional[str] = None,
    ) -> None:
        self.get_instance(instance_key).set_context(context, key)

    def get_user_language(
        self, key: Optional[str] = None, instance_key: Optional[str] = None
    ) -> str:
        return self.get_instance(instance_key).get_user_language(key)

    def set_user_language(
        self,
        language: str,
        key: Optional[str] = None,
        instance_key: Optional[str] = None,
    ) -> None:
        self.get_instance(instance_key).set_user_language(language, key)

    def get_admin_language(
        self, key: Optional[str] = None, instance_key: Optional[str] = None
    ) -> str:
        return self.get_instance(instance_key).get_admin_language(key)

    def set_admin_language(
        self,
        language: str,
        key: Optional[str] = None,
        instance_key: Optional[str] = None,
    ) -> None:
        self.get_instance(instance_key).set_admin_language(language, key)

    def get_currency_code(
        self, key: Optional[str] = None, instance_key: Optional[str] = None
    ) -> CurrencyCode:
        return self.get_instance(instance_key).get_currency_code(key)

    def set_currency_code(
        self,
        currency_code: Union[str, CurrencyCode],
        key: Optional[str] = None,
        instance_key: Optional[str] = None,
    ) -> None:
        self.get_instance(instance_key).set_currency_code(currency_code, key)

    def get_user_timezone(
        self, key: Optional[str] = None, instance_key: Optional[str] = None
    ) -> Timezone:
        return self.get_instance(instance_key).get_user_timezone(key)

    def set_user_timezone(
        self,
        timezone: Union[str, Timezone],
        key: Optional[str] = None,
        instance_key: Optional[str] = None,
    ) -> None:
        self.get_instance(instance_key).set_user_timezone(timezone, key)

    def get_admin_timezone(
        self, key: Optional[str] = None, instance_key: Optional[str] = None
    ) -> Timezone:
        return self.get_instance(instance_key).get_admin_timezone(key)

    def set_admin_timezone(
        self,
        timezone: Union[str, Timezone],
        key: Optional[str] = None,
        instance_key: Optional[str] = None,
    ) -> None:
        self.get_instance(instance_key).set_admin_timezone(timezone, key)

    def get_language_context_space(
        self, key: Optional[str] = None, instance_key: Optional[str] = None
    ) -> ContextSpace:
        return self.get_instance(instance_key).get_language_context_space(key)

    def set_language_context_space(
        self,
        space: Union[str, ContextSpace],
        key: Optional[str] = None,
        instance_key: Optional[str] = None,
    ) -> None:
        self.get_instance(instance_key).set_language_context_space(space, key)

    def get_current_language(
        self, key: Optional[str] = None, instance_key: Optional[str] = None
    ) -> str:
        return self.get_instance(instance_key).get_current_language(key)

    def get_current_timezone(
        self, key: Optional[str] = None, instance_key: Optional[str] = None
    ) -> Timezone:
        return self.get_instance(instance_key).get_current_timezone(key)

    def switch_to_admin(
        self, key: Optional[str] = None, instance_key: Optional[str] = None
    ) -> None:
        self.get_instance(instance_key).switch_to_admin(key)

    def switch_to_user(
        self, key: Optional[str] = None, instance_key: Optional[str] = None
    ) -> None:
        self.get_instance(instance_key).switch_to_user(key)
