"""Tests for i18n_engine.engine module."""

# pylint: disable=protected-access

import threading
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from i18n_engine import (
    Component,
    ComponentNotFoundError,
    ConstantConflictError,
    ConstantsSchemaValidationError,
    DuplicateComponentError,
    EngineConfig,
    I18nEngine,
    IncompleteRegistrationError,
    InvalidContextError,
    LanguageDefinition,
    LanguageNotFoundError,
    StringKeyNotFoundError,
    StringKeyNotRegisteredError,
)
from i18n_engine.engine import ENGINE_CONSTANTS_OWNER
from i18n_engine.models import ContextSpace
from i18n_engine.values import CurrencyCode, Timezone
from tests.factories.i18n import (
    AppKeys,
    AuthKeys,
    Priority,
    SiteConstants,
    TicketStatus,
    make_component,
    make_context,
    make_engine,
    make_language_definitions,
)


@pytest.mark.unit
class TestEngineInitialization:
    """Tests for I18nEngine construction."""

    def test_defaults(self, engine):
        assert engine.default_language == "en"
        assert engine.fallback_language == "en"
        assert engine.context_key == "default"
        assert engine.get_current_language() == "en"
        assert engine.get_currency_code() == CurrencyCode("USD")

    def test_requires_a_language(self):
        with pytest.raises(ValueError):
            I18nEngine([])

    def test_configured_default_and_fallback(self, languages):
        engine = I18nEngine(
            languages, EngineConfig(default_language="fr", fallback_language="en")
        )
        assert engine.default_language == "fr"
        assert engine.fallback_language == "en"
        assert engine.get_current_language() == "fr"

    def test_unknown_configured_language(self, languages):
        with pytest.raises(LanguageNotFoundError):
            I18nEngine(languages, EngineConfig(fallback_language="de"))

    def test_engine_constants_registered(self, languages):
        engine = I18nEngine(languages, EngineConfig(constants={"Site": "Acme"}))
        assert engine.resolve_constant_owner("Site") == ENGINE_CONSTANTS_OWNER
        assert engine.t("Welcome to {Site}") == "Welcome to Acme"

    def test_context_defaults_from_config(self, languages):
        engine = I18nEngine(
            languages,
            EngineConfig(default_currency_code="EUR", default_timezone="Europe/Paris"),
        )
        assert engine.get_currency_code() == CurrencyCode("EUR")
        assert engine.get_user_timezone() == Timezone("Europe/Paris")

    def test_engines_do_not_share_state(self, languages, app_component):
        first = make_engine(languages=languages, components=[app_component])
        second = make_engine(languages=languages)
        assert first.has_component("app")
        assert not second.has_component("app")


@pytest.mark.unit
class TestTranslate:
    """Tests for translate(), safe_translate() and get_translation_details()."""

    def test_returns_registered_string(self, populated_engine):
        assert populated_engine.translate("app", "welcome") == "Hi"
        assert populated_engine.translate("app", "welcome", language="fr") == "Salut"

    def test_uses_context_language(self, populated_engine):
        populated_engine.set_user_language("fr")
        assert populated_engine.translate("app", "welcome") == "Salut"

    def test_uses_admin_language_in_admin_space(self, populated_engine):
        populated_engine.set_admin_language("fr")
        populated_engine.switch_to_admin()
        assert populated_engine.translate("app", "welcome") == "Salut"
        populated_engine.switch_to_user()
        assert populated_engine.translate("app", "welcome") == "Hi"

    def test_alias(self, populated_engine):
        assert populated_engine.translate("auth", "login") == "Log in"

    def test_template_key_substitution(self, populated_engine):
        result = populated_engine.translate("app", "greetingTemplate", {"name": "Ada"})
        assert result == "Hello, Ada"

    def test_non_template_key_is_verbatim(self, engine):
        engine.register(Component("app", {"en": {"raw": "Hello {name}"}}))
        assert engine.translate("app", "raw", {"name": "Ada"}) == "Hello {name}"

    def test_template_suffix_is_case_sensitive(self, engine):
        engine.register(
            Component("app", {"en": {"greetingTEMPLATE": "Hi {name}", "lowtemplate": "Yo {name}"}})
        )
        assert engine.translate("app", "greetingTEMPLATE", {"name": "Ada"}) == "Hi {name}"
        assert engine.translate("app", "lowtemplate", {"name": "Ada"}) == "Yo Ada"

    def test_missing_component(self, engine):
        with pytest.raises(ComponentNotFoundError):
            engine.translate("missing", "key")

    def test_missing_key(self, populated_engine):
        with pytest.raises(StringKeyNotFoundError):
            populated_engine.translate("app", "missing")

    def test_unknown_language_falls_back(self, populated_engine):
        details = populated_engine.get_translation_details("app", "welcome", language="de")
        assert details.translation == "Hi"
        assert details.actual_language == "en"
        assert details.was_fallback is True

    def test_backfilled_key_reports_fallback(self, engine):
        engine.register(
            make_component(strings={"en": {"a": "A", "b": "B"}, "fr": {"a": "Fr-A"}})
        )
        details = engine.get_translation_details("app", "b", language="fr")
        assert details.translation == "B"
        assert details.was_fallback is True
        assert engine.get_translation_details("app", "a", language="fr").was_fallback is False

    @pytest.mark.parametrize(
        "component_id,key,expected",
        [
            ("missing", "key", "[missing.key]"),
            ("app", "missing", "[app.missing]"),
            ("", "", "[.]"),
            ("", "welcome", "[.welcome]"),
        ],
    )
    def test_safe_translate_placeholder(self, populated_engine, component_id, key, expected):
        assert populated_engine.safe_translate(component_id, key) == expected

    def test_safe_translate_success(self, populated_engine):
        assert populated_engine.safe_translate("app", "welcome", language="fr") == "Salut"

    def test_message_format_uses_formatter(self, languages):
        formatter = MagicMock(return_value="formatted")
        engine = make_engine(languages=languages, message_formatter=formatter)
        engine.register(
            Component(
                "cart",
                {"en": {"itemsTemplate": "{count, plural, one {# item} other {# items}}"}},
                message_format=True,
            )
        )
        assert engine.translate("cart", "itemsTemplate", {"count": 2}) == "formatted"
        template, variables, locale = formatter.call_args.args
        assert template.startswith("{count, plural")
        assert variables["count"] == 2
        assert locale == "en-US"

    def test_message_format_without_formatter(self, engine):
        engine.register(
            Component("cart", {"en": {"itemsTemplate": "{count} items"}}, message_format=True)
        )
        assert engine.translate("cart", "itemsTemplate", {"count": 3}) == "3 items"


@pytest.mark.unit
class TestTemplateProcessing:
    """Tests for t()."""

    def test_component_reference(self, populated_engine):
        assert populated_engine.t("{{app.welcome}}") == "Hi"

    def test_missing_reference_placeholder(self, populated_engine):
        assert populated_engine.t("{{missing.key}}") == "[missing.key]"

    def test_alias_reference(self, populated_engine):
        assert populated_engine.t("{{auth.login}}") == populated_engine.t(
            "{{authentication.login}}"
        )

    def test_whitespace_in_reference(self, populated_engine):
        assert populated_engine.t("{{ app . welcome }}!") == "Hi!"

    def test_language_argument(self, populated_engine):
        assert populated_engine.t("{{app.welcome}}", language="fr") == "Salut"

    def test_references_then_variables(self, populated_engine):
        result = populated_engine.t("{{app.greetingTemplate}} ({name})", {"name": "Ada"})
        assert result == "Hello, Ada (Ada)"

    def test_variable_precedence(self, engine):
        """Caller variables beat context variables which beat constants."""
        engine.register_constants("shop", {"currency": "USD", "currencyCode": "CAD"})
        engine.set_currency_code("EUR")
        assert engine.t("{currency}") == "USD"
        assert engine.t("{currencyCode}") == "EUR"
        assert engine.t("{currency}", {"currency": "GBP"}) == "GBP"

    def test_later_variables_override_earlier(self, engine):
        assert engine.t("{a}", {"a": 1}, {"a": 2}) == "2"

    def test_context_variables(self, engine):
        engine.set_admin_language("fr")
        engine.set_user_timezone("America/Toronto")
        assert engine.t("{language}/{adminLanguage}/{userLanguage}") == "en/fr/en"
        assert engine.t("{timezone}|{adminTimezone}") == "America/Toronto|UTC"
        engine.switch_to_admin()
        assert engine.t("{language} {timezone} {userTimezone}") == "fr UTC America/Toronto"

    def test_value_rendering(self, engine):
        result = engine.t(
            "{total} {currencyCode} {priority}",
            {"total": Decimal("12.50"), "priority": Priority.HIGH},
        )
        assert result == "12.50 USD 2"

    def test_unknown_variables_and_malformed_braces_kept(self, engine):
        assert engine.t("{unknown} {{literal}} {open") == "{unknown} {{literal}} {open"

    def test_over_long_template_returned_unprocessed(self, languages, app_component):
        engine = make_engine(
            languages=languages, components=[app_component], max_template_length=10
        )
        template = "{{app.welcome}} {name}"
        assert engine.t(template, {"name": "x"}) == template

    def test_empty_template(self, engine):
        assert engine.t("") == ""

    def test_enum_linked_to_component(self, populated_engine):
        populated_engine.register_enum(Priority, {"en": {1: "Low"}}, "Level", component_id="app")
        assert populated_engine.t("{{Level.welcome}}") == "Hi"

    def test_enum_without_component(self, engine, priority_translations):
        engine.register_enum(Priority, priority_translations)
        assert engine.t("{{Priority.1}} / {{Priority.HIGH}}") == "Low / High"
        assert engine.t("{{Priority.1}}", language="fr") == "Basse"
        assert engine.t("{{Priority.99}}") == "[Priority.99]"

    def test_component_id_beats_enum_name(self, populated_engine, priority_translations):
        populated_engine.register_enum(Priority, priority_translations, "app")
        assert populated_engine.t("{{app.welcome}}") == "Hi"

    def test_t_never_raises_for_unknown_context(self, populated_engine):
        populated_engine.clear_all()
        assert populated_engine.t("{{app.welcome}} {language}") == "Hi {language}"


@pytest.mark.unit
class TestRegistrationThroughEngine:
    """Registration entry points on the engine."""

    def test_register_twice(self, engine, app_component):
        engine.register(app_component)
        with pytest.raises(DuplicateComponentError):
            engine.register(make_component())

    def test_register_if_not_exists(self, engine, app_component):
        engine.register(app_component)
        result = engine.register_if_not_exists(make_component())
        assert result.is_valid is True
        assert result.missing_keys == []
        assert result.warnings == []
        assert result.errors == []

    def test_permissive_registration_with_gaps_is_valid(self, engine):
        result = engine.register(
            make_component(strings={"en": {"a": "A", "b": "B"}, "fr": {"a": "Fr-A"}})
        )
        assert result.is_valid is True
        assert result.errors == []
        assert len(result.warnings) == 1

    def test_strict_mode(self, languages):
        engine = make_engine(languages=languages, require_complete_strings=True)
        with pytest.raises(IncompleteRegistrationError):
            engine.register(make_component(strings={"en": {"a": "A"}, "fr": {}}))
        assert not engine.has_component("app")

    def test_update(self, engine):
        engine.register(make_component(strings={"en": {"a": "A"}}))
        engine.update("app", {"fr": {"a": "Fr-A"}})
        assert engine.translate("app", "a", language="fr") == "Fr-A"

    def test_register_language_later(self, populated_engine):
        populated_engine.register_language(LanguageDefinition("de", "Deutsch", "de-DE"))
        assert populated_engine.has_language("de")
        assert len(populated_engine.get_languages()) == 3
        assert populated_engine.translate("app", "welcome", language="de") == "Hi"

    def test_validate_all_components(self, engine):
        engine.register(make_component(strings={"en": {"a": "A"}, "fr": {}}))
        assert engine.validate_all_components().is_valid is True

    def test_translate_enum(self, engine, priority_translations):
        engine.register_enum(Priority, priority_translations)
        assert engine.has_enum(Priority)
        assert engine.translate_enum(Priority, Priority.LOW) == "Low"
        assert engine.translate_enum(Priority, Priority.LOW, language="fr") == "Basse"

    def test_translate_enum_missing_language_falls_back(self, engine):
        engine.register_enum(TicketStatus, {"en": {"open": "Open"}})
        assert engine.translate_enum(TicketStatus, TicketStatus.OPEN, language="fr") == "Open"

    def test_translate_enum_missing_value(self, engine, priority_translations):
        engine.register_enum(Priority, priority_translations)
        with pytest.raises(StringKeyNotFoundError):
            engine.translate_enum(Priority, 7)


@pytest.mark.unit
class TestConstantsThroughEngine:
    """Constants operations on the engine."""

    def test_conflict_and_update(self, engine):
        engine.register_constants("X", {"Site": "A"})
        with pytest.raises(ConstantConflictError):
            engine.register_constants("Y", {"Site": "B"})
        engine.register_constants("Y", {"Site": "A"})
        engine.update_constants("Y", {"Site": "B"})
        assert engine.resolve_constant_owner("Site") == "Y"
        assert engine.t("{Site}") == "B"

    def test_merge_and_replace(self, engine):
        engine.register_constants("X", {"Site": "A"})
        engine.merge_constants("X", {"Site": "B"})
        assert engine.get_constants("X") == {"Site": "B"}
        engine.replace_constants("X", {"Brand": "Acme"})
        assert engine.get_constants() == {"Brand": "Acme"}
        assert engine.resolve_constant_owner("Site") is None

    def test_schema_validation(self, engine):
        with pytest.raises(ConstantsSchemaValidationError):
            engine.register_constants("site", {"Site": "Acme"}, schema=SiteConstants)
        engine.register_constants(
            "site", {"Site": "Acme", "SupportEmail": "help@acme.test"}, schema=SiteConstants
        )
        with pytest.raises(ConstantsSchemaValidationError):
            engine.replace_constants("site", {"Site": "Other"})
        assert engine.t("{Site} <{SupportEmail}>") == "Acme <help@acme.test>"

    def test_schema_registered_ahead(self, engine):
        engine.register_constants_schema("site", SiteConstants)
        with pytest.raises(ConstantsSchemaValidationError):
            engine.update_constants("site", {"MaxUsers": 3})


@pytest.mark.unit
class TestStringKeysThroughEngine:
    """Translating string keys without naming their component."""

    @pytest.fixture
    def keyed_engine(self, populated_engine):
        populated_engine.register_string_key_enum(AppKeys)
        return populated_engine

    def test_register_returns_component_id(self, populated_engine):
        assert populated_engine.register_string_key_enum(AuthKeys) == "authentication"
        assert populated_engine.register_string_key_enum(AuthKeys) == "authentication"
        assert populated_engine.has_string_key_enum(AuthKeys)

    def test_translate_member(self, keyed_engine):
        assert keyed_engine.translate_string_key(AppKeys.WELCOME) == "Hi"
        assert keyed_engine.translate_string_key(AppKeys.WELCOME, language="fr") == "Salut"

    def test_translate_plain_value(self, keyed_engine):
        assert keyed_engine.translate_string_key("farewell", language="fr") == "Au revoir"

    def test_template_key_gets_variables(self, keyed_engine):
        assert keyed_engine.translate_string_key(AppKeys.GREETING, {"name": "Ada"}) == "Hello, Ada"

    def test_unregistered_key(self, keyed_engine):
        with pytest.raises(StringKeyNotRegisteredError):
            keyed_engine.translate_string_key(AuthKeys.LOGIN)
        assert keyed_engine.safe_translate_string_key(AuthKeys.LOGIN) == "[login]"
        assert keyed_engine.safe_translate_string_key("nope") == "[nope]"

    def test_registered_enum_without_component(self, engine):
        engine.register_string_key_enum(AppKeys)
        with pytest.raises(ComponentNotFoundError):
            engine.translate_string_key(AppKeys.WELCOME)
        assert engine.safe_translate_string_key(AppKeys.WELCOME) == "[app.welcome]"


@pytest.mark.unit
class TestContextThroughEngine:
    """Context operations on the engine."""

    def test_set_unknown_language(self, engine):
        with pytest.raises(LanguageNotFoundError):
            engine.set_user_language("de")
        with pytest.raises(LanguageNotFoundError):
            engine.set_admin_language("de")

    def test_unknown_context_key(self, engine):
        with pytest.raises(InvalidContextError):
            engine.get_context("missing")
        with pytest.raises(InvalidContextError):
            engine.set_user_language("fr", key="missing")

    def test_create_and_use_context(self, engine):
        engine.create_context("fr", key="session")
        assert engine.has_context("session")
        assert engine.get_user_language("session") == "fr"
        assert engine.get_user_language() == "en"

    def test_set_context_validates_languages(self, engine):
        with pytest.raises(LanguageNotFoundError):
            engine.set_context(make_context("de"))
        engine.set_context(make_context("fr", currency_code="GBP"))
        assert engine.get_current_language() == "fr"
        assert engine.t("{currencyCode}") == "GBP"

    def test_context_space(self, engine):
        engine.set_language_context_space("admin")
        assert engine.get_language_context_space() is ContextSpace.ADMIN
        engine.switch_to_user()
        assert engine.get_language_context_space() is ContextSpace.USER

    def test_timezones(self, engine):
        engine.set_admin_timezone("Asia/Tokyo")
        engine.switch_to_admin()
        assert engine.get_admin_timezone() == Timezone("Asia/Tokyo")
        assert engine.get_current_timezone() == Timezone("Asia/Tokyo")

    def test_invalid_timezone(self, engine):
        with pytest.raises(ValueError):
            engine.set_user_timezone("Not/AZone")

    def test_clear_all(self, populated_engine):
        populated_engine.create_context("fr", key="session")
        populated_engine.clear_all()
        assert populated_engine.has_context() is False
        assert populated_engine.has_context("session") is False
        with pytest.raises(InvalidContextError):
            populated_engine.get_context()
        assert populated_engine.translate("app", "welcome") == "Hi"
        populated_engine.create_context("fr")
        assert populated_engine.translate("app", "welcome") == "Salut"


@pytest.mark.unit
def test_concurrent_registration_and_translation():
    """Threads registering and translating on one engine do not corrupt it."""
    engine = make_engine(languages=make_language_definitions())
    errors = []

    def worker(index):
        try:
            component_id = f"component-{index}"
            engine.register(Component(component_id, {"en": {"key": f"value-{index}"}}))
            for _ in range(50):
                assert engine.translate(component_id, "key") == f"value-{index}"
                engine.t("{{%s.key}}" % component_id)
        except Exception as e:  # pylint: disable=broad-except
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(engine.get_components()) == 8
