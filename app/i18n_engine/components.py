"""Component registry: per-component multilingual string tables.

Components are registered once, validated against every language known to
the engine, and backfilled from the fallback language at registration time
so reads never have to repair missing data.
"""

from dataclasses import replace
from typing import Dict, List, Mapping, Optional, Set, Tuple

from core.logging import get_module_logger
from i18n_engine.errors import (
    ComponentNotFoundError,
    DuplicateComponentError,
    IncompleteRegistrationError,
    StringKeyNotFoundError,
    ValidationFailedError,
)
from i18n_engine.languages import LanguageRegistry
from i18n_engine.models import (
    Component,
    MissingKey,
    TranslationResponse,
    ValidationResult,
)

logger = get_module_logger()

StringTables = Dict[str, Dict[str, str]]


def _copy_tables(strings: Mapping[str, Mapping[str, str]]) -> StringTables:
    return {language: dict(table) for language, table in strings.items()}


class ComponentRegistry:
    """Registry of components, their aliases and their string tables.

    Component ids and aliases share a single namespace. Each component keeps
    two views of its strings: the tables as authored, and the completed
    tables where pairs missing for a registered language were copied from
    the fallback language.

    Attributes:
        fallback_language: Language that backfills missing pairs.
        require_complete_strings: Reject any component with a missing pair.
        allow_partial_registration: Accept components whose fallback
            language lacks required keys.
    """

    def __init__(
        self,
        languages: LanguageRegistry,
        fallback_language: Optional[str],
        require_complete_strings: bool = False,
        allow_partial_registration: bool = True,
    ):
        self._languages = languages
        self.fallback_language = fallback_language
        self.require_complete_strings = require_complete_strings
        self.allow_partial_registration = allow_partial_registration

        self._components: Dict[str, Component] = {}
        self._tables: Dict[str, StringTables] = {}
        self._filled: Dict[str, Set[Tuple[str, str]]] = {}
        self._identifiers: Dict[str, str] = {}

    def register(self, component: Component) -> ValidationResult:
        """Register a component and its string tables.

        Args:
            component: Component to register.

        Returns:
            ValidationResult listing every missing (language, key) pair.

        Raises:
            DuplicateComponentError: If the id or an alias is already in use.
            IncompleteRegistrationError: In strict mode, if any pair is missing.
            ValidationFailedError: If partial registration is disallowed and
                the fallback language lacks required keys.
        """
        for identifier in component.identifiers():
            owner = self._identifiers.get(identifier)
            if owner is not None:
                logger.warning(
                    "duplicate_component_identifier",
                    component_id=component.id,
                    identifier=identifier,
                    owner=owner,
                )
                raise DuplicateComponentError(identifier, owner)

        stored = replace(component, strings=_copy_tables(component.strings))
        result = self._validate_registration(stored)
        self._store(stored)

        logger.info(
            "component_registered",
            component_id=stored.id,
            aliases=list(stored.aliases),
            missing_key_count=len(result.missing_keys),
        )
        return result

    def register_if_not_exists(self, component: Component) -> ValidationResult:
        """Register a component unless its id or an alias is already in use.

        Returns:
            The registration result, or an empty valid result when the
            component was already present.
        """
        if any(ident in self._identifiers for ident in component.identifiers()):
            logger.debug("component_already_registered", component_id=component.id)
            return ValidationResult.valid()
        return self.register(component)

    def update(
        self, component_ref: str, strings: Mapping[str, Mapping[str, str]]
    ) -> ValidationResult:
        """Merge additional language tables into an existing component.

        Args:
            component_ref: Component id or alias.
            strings: Mapping {language_id: {string_key: message}} to merge.

        Returns:
            ValidationResult for the merged component.

        Raises:
            ComponentNotFoundError: If the component is not registered.
            IncompleteRegistrationError: In strict mode, if the merged
                component is still incomplete.
        """
        component_id = self.resolve_id(component_ref)
        existing = self._components[component_id]

        merged = _copy_tables(existing.strings)
        for language, table in strings.items():
            merged.setdefault(language, {}).update(table)

        updated = replace(existing, strings=merged)
        result = self._validate_registration(updated)
        self._store(updated)

        logger.info(
            "component_updated",
            component_id=component_id,
            languages=list(strings),
            missing_key_count=len(result.missing_keys),
        )
        return result

    def find_id(self, component_ref: str) -> Optional[str]:
        """Resolve an id or alias to the canonical id, or None."""
        return self._identifiers.get(component_ref)

    def resolve_id(self, component_ref: str) -> str:
        """Resolve an id or alias to the canonical id.

        Raises:
            ComponentNotFoundError: If nothing is registered under component_ref.
        """
        component_id = self.find_id(component_ref)
        if component_id is None:
            raise ComponentNotFoundError(component_ref)
        return component_id

    def has_component(self, component_ref: str) -> bool:
        return component_ref in self._identifiers

    def get_component(self, component_ref: str) -> Component:
        """Return the component as authored (without backfilled strings)."""
        return self._components[self.resolve_id(component_ref)]

    def get_components(self) -> List[Component]:
        return list(self._components.values())

    def get_strings(self, component_ref: str) -> StringTables:
        """Return a copy of the completed string tables of a component."""
        return _copy_tables(self._tables[self.resolve_id(component_ref)])

    def lookup(
        self, component_ref: str, key: str, language: Optional[str]
    ) -> TranslationResponse:
        """Find the raw string for a key.

        Pairs the target language cannot supply (typically a language
        registered after the component) are served from the fallback language.

        Args:
            component_ref: Component id or alias.
            key: Exact string key.
            language: Target language id; None means the fallback language.

        Returns:
            TranslationResponse carrying the raw (unsubstituted) string.

        Raises:
            ComponentNotFoundError: If the component is not registered.
            StringKeyNotFoundError: If no table can supply the key.
        """
        component_id = self.resolve_id(component_ref)
        tables = self._tables[component_id]
        target = language or self.fallback_language or ""

        value = tables.get(target, {}).get(key)
        if value is not None:
            was_fallback = (target, key) in self._filled[component_id]
            actual = self.fallback_language if was_fallback else target
            return TranslationResponse(value, actual or target, was_fallback)

        if self.fallback_language and target != self.fallback_language:
            value = tables.get(self.fallback_language, {}).get(key)
            if value is not None:
                logger.debug(
                    "used_fallback_translation",
                    component_id=component_id,
                    key=key,
                    requested_language=target,
                    fallback_language=self.fallback_language,
                )
                return TranslationResponse(value, self.fallback_language, True)

        raise StringKeyNotFoundError(component_id, key, target)

    def validate_all(self) -> ValidationResult:
        """Check that every read of every registered pair resolves to a string.

        Unlike registration validation, a pair only counts as missing when
        neither its own table nor the fallback table can supply it.
        """
        result = ValidationResult.valid()
        for component_id, component in self._components.items():
            tables = self._tables[component_id]
            fallback_table = tables.get(self.fallback_language or "", {})
            for language in self._languages.language_ids():
                table = tables.get(language, {})
                for key in component.required_keys():
                    if table.get(key) is not None:
                        continue
                    if fallback_table.get(key) is not None:
                        continue
                    result.missing_keys.append(
                        MissingKey(language, component_id, key)
                    )
                    result.errors.append(
                        f"Unresolvable key '{key}' for language '{language}' "
                        f"in component '{component_id}'"
                    )
        result.is_valid = not result.missing_keys
        return result

    def clear(self) -> None:
        self._components.clear()
        self._tables.clear()
        self._filled.clear()
        self._identifiers.clear()

    def __len__(self) -> int:
        return len(self._components)

    def _validate_registration(self, component: Component) -> ValidationResult:
        result = ValidationResult.valid()
        required = component.required_keys()

        for language in self._languages.language_ids():
            table = component.strings.get(language) or {}
            for key in required:
                if table.get(key) is not None:
                    continue
                message = (
                    f"Missing key '{key}' for language '{language}' "
                    f"in component '{component.id}'"
                )
                result.missing_keys.append(MissingKey(language, component.id, key))
                result.warnings.append(message)
                if self.require_complete_strings:
                    result.errors.append(message)

        result.is_valid = not result.errors

        if self.require_complete_strings and result.missing_keys:
            logger.warning(
                "incomplete_component_rejected",
                component_id=component.id,
                missing_key_count=len(result.missing_keys),
            )
            raise IncompleteRegistrationError(
                component.id, result.errors, result.missing_keys
            )

        if not self.allow_partial_registration:
            fallback_missing = [
                missing
                for missing in result.missing_keys
                if missing.language_id == self.fallback_language
            ]
            if fallback_missing:
                errors = [
                    f"Fallback language '{m.language_id}' is missing key "
                    f"'{m.string_key}' in component '{component.id}'"
                    for m in fallback_missing
                ]
                logger.warning(
                    "partial_component_rejected",
                    component_id=component.id,
                    missing_key_count=len(fallback_missing),
                )
                raise ValidationFailedError(component.id, errors, fallback_missing)

        return result

    def _store(self, component: Component) -> None:
        tables = _copy_tables(component.strings)
        fallback_table = component.strings.get(self.fallback_language or "") or {}
        filled: Set[Tuple[str, str]] = set()

        for language in self._languages.language_ids():
            table = tables.setdefault(language, {})
            for key in component.required_keys():
                if table.get(key) is not None:
                    continue
                value = fallback_table.get(key)
                if value is not None:
                    table[key] = value
                    filled.add((language, key))

        self._components[component.id] = component
        self._tables[component.id] = tables
        self._filled[component.id] = filled
        for identifier in component.identifiers():
            self._identifiers[identifier] = component.id
