"""Structured logging for the i18n engine.

configure_logging() runs once at import time; engine modules then take a
logger bound to their own module name with get_module_logger(). Under
pytest every record is dropped.
"""

import inspect
import logging
import sys
from typing import Any, List, Optional

import structlog
from structlog.stdlib import BoundLogger

from .config import settings

SILENT_LEVEL = logging.CRITICAL + 1


def _running_under_pytest() -> bool:
    return "pytest" in sys.modules


def _shared_processors() -> List[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _apply(processors: List[Any]) -> None:
    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=True,
    )


def configure_logging(
    log_level: Optional[str] = None,
    is_production: Optional[bool] = None,
) -> BoundLogger:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Level name such as "DEBUG"; defaults to settings.LOG_LEVEL.
        is_production: JSON output when true, console output otherwise;
            defaults to settings.is_production.

    Returns:
        The root structlog logger.
    """
    if _running_under_pytest():
        _apply(
            [
                structlog.stdlib.add_log_level,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ]
        )
        logging.basicConfig(format="%(message)s", level=SILENT_LEVEL, force=True)
        return structlog.stdlib.get_logger()

    production = settings.is_production if is_production is None else is_production
    renderer = (
        structlog.processors.JSONRenderer()
        if production
        else structlog.dev.ConsoleRenderer()
    )
    _apply(_shared_processors() + [renderer])

    level_name = (log_level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        format="%(message)s", level=getattr(logging, level_name, logging.INFO)
    )
    return structlog.stdlib.get_logger()


logger: BoundLogger = configure_logging()


def get_module_logger(**context: Any) -> BoundLogger:
    """Logger bound to the calling module, plus any extra context.

    ``component`` is the last dotted part of the module name and
    ``module_path`` the full name, so registry and engine events can be
    filtered per module.

    Example:
        logger = get_module_logger()
        service_logger = get_module_logger(instance_key="default")
    """
    frame = inspect.currentframe()
    module = inspect.getmodule(frame.f_back) if frame is not None else None
    if module is None:
        return logger.bind(component="unknown", **context)

    module_path = module.__name__
    return logger.bind(
        component=module_path.rsplit(".", 1)[-1], module_path=module_path, **context
    )
