"""Component loading interface and YAML implementation.

Reads string tables from disk and turns them into Component objects ready
for registration. Loading is read-only; nothing is ever written back.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Set, Union

import yaml

from core.logging import get_module_logger
from i18n_engine.models import Component

logger = get_module_logger()

ALIASES_KEY = "_aliases"
MESSAGE_FORMAT_KEY = "_message_format"

LanguageTables = Dict[str, Dict[str, str]]


class ComponentLoader(ABC):
    """Abstract base for component loaders."""

    @abstractmethod
    def load(self, language_id: str) -> LanguageTables:
        """Load every component's strings for one language.

        Args:
            language_id: Language to load.

        Returns:
            Dict mapping component id to {string_key: message}.

        Raises:
            FileNotFoundError: If no source exists for the language.
            ValueError: If a source cannot be parsed.
        """
        pass

    @abstractmethod
    def load_all(self) -> List[Component]:
        """Load every component in every available language."""
        pass


class YAMLComponentLoader(ComponentLoader):
    """Loader for YAML string tables.

    Expects files named ``<name>.<language_id>.yml`` shaped as::

        authentication:
          _aliases: [auth]
          login: Log in
          greetingTemplate: Hello, {name}

    Several files may contribute to the same component and language.

    Attributes:
        translations_dir: Directory containing the YAML files.
        cache: Loaded tables per language id.
    """

    def __init__(self, translations_dir: Union[str, Path], use_cache: bool = True):
        self.translations_dir = Path(translations_dir)
        self.use_cache = use_cache
        self.cache: Dict[str, LanguageTables] = {}
        self._aliases: Dict[str, List[str]] = {}
        self._message_format: Set[str] = set()

        if not self.translations_dir.is_dir():
            raise ValueError(
                f"Translations directory not found: {self.translations_dir}"
            )

        logger.info(
            "initialized_yaml_loader",
            translations_dir=str(self.translations_dir),
            use_cache=use_cache,
        )

    def language_ids(self) -> List[str]:
        """Language ids present in the directory, from file names."""
        found = set()
        for yaml_file in self.translations_dir.glob("*.yml"):
            parts = yaml_file.stem.split(".")
            if len(parts) >= 2 and parts[-1]:
                found.add(parts[-1])
        return sorted(found)

    def load(self, language_id: str) -> LanguageTables:
        if self.use_cache and language_id in self.cache:
            logger.debug("loaded_from_cache", language=language_id)
            return self.cache[language_id]

        yaml_files = sorted(self.translations_dir.glob(f"*.{language_id}.yml"))
        if not yaml_files:
            raise FileNotFoundError(
                f"No string tables found for language {language_id} in {self.translations_dir}"
            )

        tables: LanguageTables = {}
        for yaml_file in yaml_files:
            try:
                with open(yaml_file, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                logger.error("yaml_parse_error", file=str(yaml_file), error=str(e))
                raise ValueError(f"Failed to parse {yaml_file}: {e}") from e
            if data:
                self._merge_yaml_data(tables, data, yaml_file)

        logger.info(
            "loaded_string_tables",
            language=language_id,
            file_count=len(yaml_files),
            component_count=len(tables),
        )

        if self.use_cache:
            self.cache[language_id] = tables
        return tables

    def load_all(self) -> List[Component]:
        """Load every language and assemble one Component per component id.

        Raises:
            ValueError: If the directory holds no string tables at all.
        """
        language_ids = self.language_ids()
        if not language_ids:
            raise ValueError(f"No string tables found in {self.translations_dir}")

        strings: Dict[str, LanguageTables] = {}
        for language_id in language_ids:
            for component_id, table in self.load(language_id).items():
                strings.setdefault(component_id, {})[language_id] = dict(table)

        return [
            Component(
                id=component_id,
                strings=tables,
                aliases=tuple(self._aliases.get(component_id, ())),
                message_format=component_id in self._message_format,
            )
            for component_id, tables in strings.items()
        ]

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("cleared_string_table_cache")

    def _merge_yaml_data(
        self, tables: LanguageTables, data: Any, source_file: Path
    ) -> None:
        if not isinstance(data, dict):
            logger.warning("invalid_yaml_format", file=str(source_file), expected="dict")
            return

        for component_id, messages in data.items():
            if not isinstance(messages, dict):
                logger.warning(
                    "invalid_component_format",
                    file=str(source_file),
                    component_id=component_id,
                    expected="dict",
                )
                continue

            component_id = str(component_id)
            table = tables.setdefault(component_id, {})
            for key, message in messages.items():
                if key == ALIASES_KEY:
                    self._add_aliases(component_id, message)
                elif key == MESSAGE_FORMAT_KEY:
                    if message:
                        self._message_format.add(component_id)
                elif message is not None:
                    table[str(key)] = str(message)

    def _add_aliases(self, component_id: str, aliases: Any) -> None:
        if isinstance(aliases, str):
            aliases = [aliases]
        known = self._aliases.setdefault(component_id, [])
        for alias in aliases or []:
            if str(alias) not in known:
                known.append(str(alias))
