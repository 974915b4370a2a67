"""
Logging setup.

Every module in the package logs through ``logging.getLogger(__name__)``;
this module decides where those records go and how they look.
"""

import logging
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

from docdb_ops_exceptions import ConfigurationError

from .settings import LoggingSettings

SIMPLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
JSON_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ConfigurationError(f"Unknown log level: {level!r}")
    return resolved


def configure_logging(
    settings: Optional[LoggingSettings] = None,
    logger_name: Optional[str] = None,
) -> logging.Logger:
    """
    Install a single stream handler according to ``settings``.

    Existing handlers on the target logger are replaced, so calling this
    twice does not duplicate output.

    Args:
        settings: Logging settings; loaded from the environment if omitted.
        logger_name: Logger to configure. Defaults to the root logger.

    Returns:
        The configured logger.

    Raises:
        ConfigurationError: If ``settings.level`` is not a known level name.
    """
    settings = settings or LoggingSettings()
    level = _resolve_level(settings.level)
    target = logging.getLogger(logger_name)
    target.handlers.clear()

    if not settings.enabled:
        target.addHandler(logging.NullHandler())
        target.propagate = False
        return target

    handler = logging.StreamHandler()
    if settings.format == "json":
        handler.setFormatter(JsonFormatter(JSON_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))

    target.addHandler(handler)
    target.setLevel(level)
    return target
