"""Constants registry with per-name ownership.

Components contribute named values (site name, support email...) that
every component's templates can reference. Each name has exactly one
owning component; the merged view is the lowest-priority variable source
during template resolution.

A component may attach a pydantic model as the schema of its constants.
Once attached, every later write for that component is validated against
it before anything is stored.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from core.logging import get_module_logger
from i18n_engine.errors import ConstantConflictError, ConstantsSchemaValidationError

logger = get_module_logger()

Schema = Type[BaseModel]


class ConstantsRegistry:
    """Per-component constants with ownership tracking.

    Operations, from least to most forceful:

    - register: first writer wins, any value change is a conflict
    - merge: the owner may change its own values
    - update: takes ownership of every touched name
    - replace: discards the component's entry and rebuilds it

    Each of them takes an optional ``schema``; when given it is validated
    and remembered for the component, otherwise the remembered schema (if
    any) applies.

    Attributes:
        _entries: Dict mapping component id to its constants.
        _owners: Reverse index mapping constant name to owning component id.
        _schemas: Dict mapping component id to the pydantic model its
            constants must satisfy.
        _merged_cache: Cached flat view, invalidated on every mutation.
    """

    def __init__(self):
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._owners: Dict[str, str] = {}
        self._schemas: Dict[str, Schema] = {}
        self._merged_cache: Optional[Dict[str, Any]] = None

    def register(
        self,
        component_id: str,
        values: Mapping[str, Any],
        schema: Optional[Schema] = None,
    ) -> None:
        """Register constants for a component.

        Unowned names are claimed by component_id. A name that already has a
        value may only be registered again with an identical value.

        Args:
            component_id: Component contributing the constants.
            values: Mapping of constant name to value.
            schema: Optional pydantic model the component's constants must
                satisfy, now and on every later write.

        Raises:
            ConstantsSchemaValidationError: If the component's constants
                would not satisfy the schema.
            ConstantConflictError: If a name already carries a different
                value. Nothing is stored when either is raised.
        """
        self._validate_schema(component_id, self._with_entry(component_id, values), schema)
        for name, value in values.items():
            self._check_conflict(component_id, name, value, allow_owner_change=False)

        entry = self._entries.setdefault(component_id, {})
        for name, value in values.items():
            entry[name] = value
            self._owners.setdefault(name, component_id)

        self._remember_schema(component_id, schema)
        self._merged_cache = None
        logger.debug(
            "constants_registered", component_id=component_id, names=list(values)
        )

    def merge(
        self,
        component_id: str,
        values: Mapping[str, Any],
        schema: Optional[Schema] = None,
    ) -> None:
        """Merge constants into a component's entry.

        The owning component may change its own values; names owned by
        another component may only be merged with an identical value.

        Raises:
            ConstantsSchemaValidationError: If the merged entry fails the schema.
            ConstantConflictError: If a name owned by another component
                would change value.
        """
        self._validate_schema(component_id, self._with_entry(component_id, values), schema)
        for name, value in values.items():
            self._check_conflict(component_id, name, value, allow_owner_change=True)

        entry = self._entries.setdefault(component_id, {})
        for name, value in values.items():
            entry[name] = value
            self._owners.setdefault(name, component_id)

        self._remember_schema(component_id, schema)
        self._merged_cache = None
        logger.debug("constants_merged", component_id=component_id, names=list(values))

    def update(
        self,
        component_id: str,
        values: Mapping[str, Any],
        schema: Optional[Schema] = None,
    ) -> None:
        """Merge constants and take ownership of every touched name.

        This is the explicit override path: no conflict check is made, but
        the merged entry must still satisfy the component's schema.
        """
        self._validate_schema(component_id, self._with_entry(component_id, values), schema)

        entry = self._entries.setdefault(component_id, {})
        for name, value in values.items():
            previous_owner = self._owners.get(name)
            entry[name] = value
            self._owners[name] = component_id
            if previous_owner is not None and previous_owner != component_id:
                logger.info(
                    "constant_ownership_transferred",
                    name=name,
                    previous_owner=previous_owner,
                    owner=component_id,
                )

        self._remember_schema(component_id, schema)
        self._merged_cache = None

    def replace(
        self,
        component_id: str,
        values: Mapping[str, Any],
        schema: Optional[Schema] = None,
    ) -> None:
        """Replace a component's constants entirely.

        Names the component owned are released; the new names are claimed
        by component_id. The new values alone are checked against the schema.
        """
        self._validate_schema(component_id, dict(values), schema)

        for name in self._entries.get(component_id, {}):
            if self._owners.get(name) == component_id:
                del self._owners[name]

        self._entries[component_id] = dict(values)
        for name in values:
            self._owners[name] = component_id

        self._remember_schema(component_id, schema)
        self._merged_cache = None
        logger.debug(
            "constants_replaced", component_id=component_id, names=list(values)
        )

    def register_schema(self, component_id: str, schema: Schema) -> None:
        """Attach a schema ahead of the component's first constants."""
        self._schemas[component_id] = schema

    def get_schema(self, component_id: str) -> Optional[Schema]:
        return self._schemas.get(component_id)

    def resolve_owner(self, name: str) -> Optional[str]:
        """Return the id of the component owning a constant, or None."""
        return self._owners.get(name)

    def get(self, component_id: str) -> Optional[Dict[str, Any]]:
        entry = self._entries.get(component_id)
        return dict(entry) if entry is not None else None

    def has(self, component_id: str) -> bool:
        return component_id in self._entries

    def get_all(self) -> List[Tuple[str, Dict[str, Any]]]:
        return [(cid, dict(entry)) for cid, entry in self._entries.items()]

    def get_merged(self) -> Dict[str, Any]:
        """Fold every component's constants into one flat mapping.

        The owner's value wins for each name.
        """
        if self._merged_cache is None:
            merged: Dict[str, Any] = {}
            for component_id, entry in self._entries.items():
                for name, value in entry.items():
                    if self._owners.get(name) == component_id or name not in merged:
                        merged[name] = value
            self._merged_cache = merged
        return dict(self._merged_cache)

    def clear(self) -> None:
        self._entries.clear()
        self._owners.clear()
        self._schemas.clear()
        self._merged_cache = None

    def _with_entry(self, component_id: str, values: Mapping[str, Any]) -> Dict[str, Any]:
        return {**self._entries.get(component_id, {}), **values}

    def _validate_schema(
        self,
        component_id: str,
        candidate: Dict[str, Any],
        schema: Optional[Schema],
    ) -> None:
        effective = schema if schema is not None else self._schemas.get(component_id)
        if effective is None:
            return
        try:
            effective.model_validate(candidate)
        except ValidationError as e:
            field_errors = [
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in e.errors()
            ]
            logger.warning(
                "constants_schema_validation_failed",
                component_id=component_id,
                schema_name=effective.__name__,
                error_count=len(field_errors),
            )
            raise ConstantsSchemaValidationError(
                component_id, effective.__name__, field_errors
            ) from e

    def _remember_schema(self, component_id: str, schema: Optional[Schema]) -> None:
        if schema is not None:
            self._schemas[component_id] = schema

    def _check_conflict(
        self, component_id: str, name: str, value: Any, allow_owner_change: bool
    ) -> None:
        owner = self._owners.get(name)
        if owner is None:
            return
        if owner == component_id and allow_owner_change:
            return
        if self._entries[owner][name] != value:
            logger.warning(
                "constant_conflict",
                name=name,
                component_id=component_id,
                owner=owner,
            )
            raise ConstantConflictError(name, component_id, owner)
