"""Language registry for one engine instance."""

from typing import Dict, Iterable, List, Optional

from core.logging import get_module_logger
from i18n_engine.errors import DuplicateLanguageError, LanguageNotFoundError
from i18n_engine.models import LanguageDefinition

logger = get_module_logger()


class LanguageRegistry:
    """Append-only set of language definitions.

    Exactly one language is the default: the first one registered with
    ``is_default=True``, otherwise the first one registered.

    Attributes:
        _languages: Dict mapping language id to LanguageDefinition.
        _default_id: Id of the default language, None while empty.
    """

    def __init__(self, languages: Optional[Iterable[LanguageDefinition]] = None):
        self._languages: Dict[str, LanguageDefinition] = {}
        self._default_id: Optional[str] = None
        self._explicit_default = False
        if languages:
            self.register_languages(languages)

    def register_language(self, definition: LanguageDefinition) -> None:
        """Register a language definition.

        Args:
            definition: LanguageDefinition to add.

        Raises:
            DuplicateLanguageError: If the id or locale code is already registered.
        """
        if definition.id in self._languages:
            raise DuplicateLanguageError(definition.id)
        if self.get_language_by_code(definition.code) is not None:
            raise DuplicateLanguageError(definition.code)

        self._languages[definition.id] = definition

        if definition.is_default:
            if self._explicit_default:
                logger.warning(
                    "multiple_default_languages",
                    language_id=definition.id,
                    default_language=self._default_id,
                )
            else:
                self._default_id = definition.id
                self._explicit_default = True
        elif self._default_id is None:
            self._default_id = definition.id

        logger.debug("language_registered", language_id=definition.id)

    def register_languages(self, definitions: Iterable[LanguageDefinition]) -> None:
        for definition in definitions:
            self.register_language(definition)

    def has_language(self, language_id: str) -> bool:
        return language_id in self._languages

    def get_language(self, language_id: str) -> LanguageDefinition:
        """Get a language by id.

        Raises:
            LanguageNotFoundError: If the id is not registered.
        """
        definition = self._languages.get(language_id)
        if definition is None:
            raise LanguageNotFoundError(language_id)
        return definition

    def get_language_by_code(self, code: str) -> Optional[LanguageDefinition]:
        for definition in self._languages.values():
            if definition.code == code:
                return definition
        return None

    def get_all_languages(self) -> List[LanguageDefinition]:
        return list(self._languages.values())

    def language_ids(self) -> List[str]:
        return list(self._languages)

    def get_default_language(self) -> Optional[LanguageDefinition]:
        if self._default_id is None:
            return None
        return self._languages[self._default_id]

    def __len__(self) -> int:
        return len(self._languages)
