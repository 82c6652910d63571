"""Active context store.

Holds the current language, currency and timezones per context key. Each
engine owns one store; there is no module-level state.
"""

from dataclasses import replace
from typing import Dict, List, Optional, Union

from core.logging import get_module_logger
from i18n_engine.errors import InvalidContextError
from i18n_engine.models import DEFAULT_CONTEXT_KEY, ActiveContext, ContextSpace
from i18n_engine.values import (
    CurrencyCode,
    Timezone,
    coerce_currency_code,
    coerce_timezone,
)

logger = get_module_logger()


class ActiveContextStore:
    """Keyed collection of ActiveContext objects.

    Contexts are only created explicitly and only destroyed by clear_all().
    Every accessor raises InvalidContextError for an unknown key.

    Attributes:
        default_currency: Currency given to newly created contexts.
        default_timezone: Timezone given to newly created contexts.
    """

    def __init__(
        self,
        default_currency: Union[str, CurrencyCode] = "USD",
        default_timezone: Union[str, Timezone] = "UTC",
    ):
        self.default_currency = coerce_currency_code(default_currency)
        self.default_timezone = coerce_timezone(default_timezone)
        self._contexts: Dict[str, ActiveContext] = {}

    def create_context(
        self,
        default_language: str,
        default_admin_language: Optional[str] = None,
        key: str = DEFAULT_CONTEXT_KEY,
    ) -> ActiveContext:
        """Create (or reset) the context stored under key.

        Args:
            default_language: User language of the new context.
            default_admin_language: Admin language, defaults to default_language.
            key: Context key.

        Returns:
            The newly stored ActiveContext.
        """
        context = ActiveContext(
            language=default_language,
            admin_language=default_admin_language or default_language,
            currency_code=self.default_currency,
            timezone=self.default_timezone,
            admin_timezone=self.default_timezone,
            current_context_space=ContextSpace.USER,
        )
        self._contexts[key] = context
        logger.debug("context_created", context_key=key, language=context.language)
        return context

    def get_context(self, key: str = DEFAULT_CONTEXT_KEY) -> ActiveContext:
        """Return the context stored under key.

        Raises:
            InvalidContextError: If no context exists for key.
        """
        context = self._contexts.get(key)
        if context is None:
            raise InvalidContextError(key)
        return context

    def set_context(self, context: ActiveContext, key: str = DEFAULT_CONTEXT_KEY) -> None:
        self._contexts[key] = replace(context)
        logger.debug("context_set", context_key=key)

    def has_context(self, key: str = DEFAULT_CONTEXT_KEY) -> bool:
        return key in self._contexts

    def context_keys(self) -> List[str]:
        return list(self._contexts)

    def clear_all(self) -> None:
        self._contexts.clear()
        logger.debug("contexts_cleared")

    # Scalar accessors

    def get_user_language(self, key: str = DEFAULT_CONTEXT_KEY) -> str:
        return self.get_context(key).language

    def set_user_language(self, language: str, key: str = DEFAULT_CONTEXT_KEY) -> None:
        self.get_context(key).language = language

    def get_admin_language(self, key: str = DEFAULT_CONTEXT_KEY) -> str:
        return self.get_context(key).admin_language

    def set_admin_language(self, language: str, key: str = DEFAULT_CONTEXT_KEY) -> None:
        self.get_context(key).admin_language = language

    def get_currency_code(self, key: str = DEFAULT_CONTEXT_KEY) -> CurrencyCode:
        return self.get_context(key).currency_code

    def set_currency_code(
        self, currency_code: Union[str, CurrencyCode], key: str = DEFAULT_CONTEXT_KEY
    ) -> None:
        """Set the context currency.

        Raises:
            InvalidContextError: If no context exists for key.
            ValueError: If currency_code is not a valid ISO 4217 code.
        """
        context = self.get_context(key)
        context.currency_code = coerce_currency_code(currency_code)

    def get_user_timezone(self, key: str = DEFAULT_CONTEXT_KEY) -> Timezone:
        return self.get_context(key).timezone

    def set_user_timezone(
        self, timezone: Union[str, Timezone], key: str = DEFAULT_CONTEXT_KEY
    ) -> None:
        context = self.get_context(key)
        context.timezone = coerce_timezone(timezone)

    def get_admin_timezone(self, key: str = DEFAULT_CONTEXT_KEY) -> Timezone:
        return self.get_context(key).admin_timezone

    def set_admin_timezone(
        self, timezone: Union[str, Timezone], key: str = DEFAULT_CONTEXT_KEY
    ) -> None:
        context = self.get_context(key)
        context.admin_timezone = coerce_timezone(timezone)

    def get_language_context_space(self, key: str = DEFAULT_CONTEXT_KEY) -> ContextSpace:
        return self.get_context(key).current_context_space

    def set_language_context_space(
        self, space: Union[str, ContextSpace], key: str = DEFAULT_CONTEXT_KEY
    ) -> None:
        context = self.get_context(key)
        if not isinstance(space, ContextSpace):
            space = ContextSpace.from_string(space)
        context.current_context_space = space
        logger.debug("context_space_changed", context_key=key, space=space.value)

    def current_language(self, key: str = DEFAULT_CONTEXT_KEY) -> str:
        """Language of the active space (admin language in admin space)."""
        return self.get_context(key).current_language

    def current_timezone(self, key: str = DEFAULT_CONTEXT_KEY) -> Timezone:
        return self.get_context(key).current_timezone
