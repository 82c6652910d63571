"""Enum translation and string-key enum registries.

Enums are tracked by an explicit, serializable tag instead of the class
object, so an enum re-created by a second import of its module still finds
its translations. The tag is the ``__i18n_component_id__`` attribute set by
the i18n_enum() decorator, or the dotted ``module.QualName`` of the class.

String-key enums reuse the same tag to name the component whose keys they
enumerate.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, Union

from core.logging import get_module_logger
from i18n_engine.errors import (
    ComponentNotFoundError,
    InvalidStringKeyEnumError,
    LanguageNotFoundError,
    StringKeyNotFoundError,
    StringKeyNotRegisteredError,
)

logger = get_module_logger()

ENUM_TAG_ATTRIBUTE = "__i18n_component_id__"

EnumRef = Union[str, Type[Enum], Enum]


def i18n_enum(component_id: str):
    """Class decorator attaching an explicit registry tag to an enum.

    Example:
        @i18n_enum("order-status")
        class OrderStatus(IntEnum):
            PENDING = 1
            SHIPPED = 2
    """

    def decorator(enum_type: Type[Enum]) -> Type[Enum]:
        setattr(enum_type, ENUM_TAG_ATTRIBUTE, component_id)
        return enum_type

    return decorator


def enum_tag(enum_ref: EnumRef) -> str:
    """Return the registry tag for an enum class, member or tag string."""
    if isinstance(enum_ref, str):
        return enum_ref
    if isinstance(enum_ref, Enum):
        enum_ref = type(enum_ref)
    explicit = getattr(enum_ref, ENUM_TAG_ATTRIBUTE, None)
    if explicit:
        return explicit
    return f"{enum_ref.__module__}.{enum_ref.__qualname__}"


@dataclass
class EnumEntry:
    """A registered enum and its translations.

    Attributes:
        tag: Registry tag (see enum_tag()).
        enum_name: Name used to reference the enum from templates.
        component_id: Component the enum name resolves to in templates, if any.
        members: Snapshot {member_name: member_value}.
        translations: {language_id: {value_or_name: text}} with string keys.
    """

    tag: str
    enum_name: str
    component_id: Optional[str] = None
    members: Dict[str, Any] = field(default_factory=dict)
    translations: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def lookup_candidates(self, value: Any) -> List[str]:
        """Keys to try for a value: direct value first, then member name."""
        candidates: List[str] = []
        if isinstance(value, Enum):
            candidates.extend([str(value.value), value.name])
        else:
            candidates.append(str(value))
            # Template keys arrive as text, so "1" matches a member valued 1
            for name, member_value in self.members.items():
                if member_value == value or str(member_value) == str(value):
                    candidates.append(name)
            if isinstance(value, str) and value in self.members:
                candidates.append(str(self.members[value]))
        return list(dict.fromkeys(candidates))


def _normalize_key(key: Any) -> str:
    if isinstance(key, Enum):
        return str(key.value)
    return str(key)


class EnumRegistry:
    """Registry of enum translations keyed by explicit tags."""

    def __init__(self):
        self._entries: Dict[str, EnumEntry] = {}
        self._names: Dict[str, str] = {}

    def register(
        self,
        enum_type: Type[Enum],
        translations: Mapping[str, Mapping[Any, str]],
        enum_name: str,
        component_id: Optional[str] = None,
    ) -> str:
        """Register translations for an enum.

        Args:
            enum_type: Enum class being translated.
            translations: {language_id: {value, member or name: text}}.
            enum_name: Name used in ``{{EnumName.key}}`` references.
            component_id: Component the enum name should resolve to.

        Returns:
            The tag the enum was registered under.
        """
        tag = enum_tag(enum_type)
        entry = EnumEntry(
            tag=tag,
            enum_name=enum_name,
            component_id=component_id,
            members={member.name: member.value for member in enum_type},
            translations={
                language: {_normalize_key(k): text for k, text in table.items()}
                for language, table in translations.items()
            },
        )
        if tag in self._entries:
            logger.debug("enum_reregistered", tag=tag, enum_name=enum_name)
        self._entries[tag] = entry
        self._names[enum_name] = tag
        logger.debug(
            "enum_registered", tag=tag, enum_name=enum_name, component_id=component_id
        )
        return tag

    def has(self, enum_ref: EnumRef) -> bool:
        return enum_tag(enum_ref) in self._entries or (
            isinstance(enum_ref, str) and enum_ref in self._names
        )

    def get(self, enum_ref: EnumRef) -> EnumEntry:
        """Return the entry for an enum class, member, tag or enum name.

        Raises:
            ComponentNotFoundError: If the enum is not registered.
        """
        tag = enum_tag(enum_ref)
        entry = self._entries.get(tag)
        if entry is None and isinstance(enum_ref, str):
            entry = self.resolve_name(enum_ref)
        if entry is None:
            raise ComponentNotFoundError(tag)
        return entry

    def resolve_name(self, enum_name: str) -> Optional[EnumEntry]:
        tag = self._names.get(enum_name)
        return self._entries.get(tag) if tag is not None else None

    def translate(
        self,
        enum_ref: EnumRef,
        value: Any,
        language: str,
        fallback_language: Optional[str] = None,
    ) -> str:
        """Translate an enum value.

        Looks up the direct value first, then the member name, in the
        requested language and then in the fallback language.

        Raises:
            ComponentNotFoundError: If the enum is not registered.
            LanguageNotFoundError: If neither language has translations.
            StringKeyNotFoundError: If no translation matches the value.
        """
        entry = self.get(enum_ref)
        languages = [language]
        if fallback_language and fallback_language != language:
            languages.append(fallback_language)

        tables = [entry.translations[lang] for lang in languages if lang in entry.translations]
        if not tables:
            raise LanguageNotFoundError(language)

        candidates = entry.lookup_candidates(value)
        for table in tables:
            for candidate in candidates:
                text = table.get(candidate)
                if text is not None:
                    return text

        raise StringKeyNotFoundError(entry.enum_name, _normalize_key(value), language)

    def clear(self) -> None:
        self._entries.clear()
        self._names.clear()


StringKey = Union[str, Enum]


def string_key_value(key: StringKey) -> str:
    """Plain string value of a string key or string-key enum member."""
    if isinstance(key, Enum):
        return str(key.value)
    return key


class StringKeyEnumRegistry:
    """Maps string-key enums to the component owning their keys.

    A string-key enum is a str-valued Enum tagged with i18n_enum(component_id)
    whose member values are string keys of that component:

        @i18n_enum("app")
        class AppKeys(str, Enum):
            WELCOME = "welcome"

    Registering such an enum lets callers translate a key without naming
    the component. Entries are keyed by the component tag, so registering a
    second enum for an already registered component is a no-op.
    """

    def __init__(self):
        self._enums: Dict[str, Type[Enum]] = {}

    def register(self, enum_type: Type[Enum]) -> str:
        """Register a string-key enum.

        Returns:
            The component id taken from the enum's tag.

        Raises:
            InvalidStringKeyEnumError: If enum_type is not an Enum with an
                i18n_enum tag and string member values.
        """
        name = getattr(enum_type, "__name__", repr(enum_type))
        if not isinstance(enum_type, type) or not issubclass(enum_type, Enum):
            raise InvalidStringKeyEnumError(name)
        component_id = getattr(enum_type, ENUM_TAG_ATTRIBUTE, None)
        if not component_id or not all(isinstance(m.value, str) for m in enum_type):
            raise InvalidStringKeyEnumError(name)

        if component_id in self._enums:
            return component_id

        self._enums[component_id] = enum_type
        logger.debug(
            "string_key_enum_registered",
            component_id=component_id,
            enum_name=name,
            key_count=len(enum_type),
        )
        return component_id

    def has(self, enum_type: Type[Enum]) -> bool:
        component_id = getattr(enum_type, ENUM_TAG_ATTRIBUTE, None)
        return component_id is not None and component_id in self._enums

    def get_all(self) -> List[Tuple[str, Type[Enum]]]:
        return list(self._enums.items())

    def safe_resolve_component_id(self, key: StringKey) -> Optional[str]:
        """Component owning key, or None.

        Enum members resolve through their class tag; plain strings through
        the first registered enum that has a member with that value.
        """
        if isinstance(key, Enum):
            component_id = getattr(type(key), ENUM_TAG_ATTRIBUTE, None)
            if component_id is not None and component_id in self._enums:
                return component_id
            return None

        for component_id, enum_type in self._enums.items():
            if any(member.value == key for member in enum_type):
                return component_id
        return None

    def resolve_component_id(self, key: StringKey) -> str:
        """Component owning key.

        Raises:
            StringKeyNotRegisteredError: If no registered enum holds the key.
        """
        component_id = self.safe_resolve_component_id(key)
        if component_id is None:
            raise StringKeyNotRegisteredError(string_key_value(key))
        return component_id

    def clear(self) -> None:
        self._enums.clear()
