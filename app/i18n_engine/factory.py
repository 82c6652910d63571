"""Factory functions for creating engines and services.

Builds engines from the application settings and, when a translations
directory is configured, registers every component found on disk.
"""

from pathlib import Path
from typing import Iterable, Optional, Union

from core.config import settings
from core.logging import get_module_logger
from i18n_engine.engine import I18nEngine
from i18n_engine.loader import ComponentLoader, YAMLComponentLoader
from i18n_engine.models import EngineConfig, LanguageDefinition, ValidationResult
from i18n_engine.service import I18nService

logger = get_module_logger()


def load_components(engine: I18nEngine, loader: ComponentLoader) -> ValidationResult:
    """Register every component a loader provides.

    Components already registered under the same id or alias are skipped.

    Returns:
        Aggregate ValidationResult of all registrations.
    """
    result = ValidationResult.valid()
    components = loader.load_all()
    for component in components:
        result.merge(engine.register_if_not_exists(component))
    logger.info(
        "components_loaded",
        component_count=len(components),
        missing_key_count=len(result.missing_keys),
    )
    return result


def create_engine(
    languages: Iterable[LanguageDefinition],
    config: Optional[EngineConfig] = None,
    translations_dir: Optional[Union[str, Path]] = None,
    use_cache: bool = True,
    preload: bool = True,
) -> I18nEngine:
    """Create and configure an I18nEngine.

    Args:
        languages: Language definitions for the engine.
        config: Engine settings (default: built from settings.i18n).
        translations_dir: YAML string tables (default: I18N_TRANSLATIONS_DIR).
        use_cache: Whether the loader caches parsed YAML.
        preload: Whether to register the components found on disk.

    Returns:
        I18nEngine: Configured engine.

    Raises:
        ValueError: If translations_dir does not exist or holds no tables.

    Usage:
        # Defaults from the environment
        engine = create_engine(languages)

        # Explicit string tables
        engine = create_engine(languages, translations_dir=Path("locales"))
    """
    if config is None:
        config = EngineConfig.from_settings(settings.i18n)
    if translations_dir is None and settings.i18n.TRANSLATIONS_DIR:
        translations_dir = Path(settings.i18n.TRANSLATIONS_DIR)

    engine = I18nEngine(languages, config)

    if translations_dir is None:
        logger.info("engine_created_without_string_tables")
        return engine

    if preload:
        loader = YAMLComponentLoader(translations_dir, use_cache=use_cache)
        load_components(engine, loader)
        logger.info(
            "engine_created_with_preload",
            translations_dir=str(translations_dir),
            component_count=len(engine.get_components()),
        )
    else:
        logger.info("engine_created_lazy", translations_dir=str(translations_dir))

    return engine


def create_service(default_instance_key: Optional[str] = None) -> I18nService:
    """Create an empty I18nService."""
    return I18nService(default_instance_key)
