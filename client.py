"""
DocDB Client

This module provides the main client interface for document database
connections, tying settings, logging and the connection registry together.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from config import DocDBSettings, configure_logging, load_settings
from connection_management import ConnectionAttemptResult, ConnectionRegistry, Connector
from docdb_ops_exceptions import ConfigurationError

# Logger setup
logger = logging.getLogger(__name__)


class DocDBClient:
    """
    Main client interface for named document database connections.

    Loads settings, applies the logging settings, and owns a
    ``ConnectionRegistry`` built from them.

    Example:
        ```python
        with DocDBClient("docdb.yaml") as client:
            results = client.connect_all()
            primary = client.get("primary")
        ```
    """

    def __init__(
        self,
        config: Optional[Union[DocDBSettings, str, Path]] = None,
        connector: Optional[Connector] = None,
        configure_logs: bool = True,
    ):
        """
        Initialize the client.

        Args:
            config: Either a DocDBSettings object or a path to a config YAML file.
                   If None, settings are read from the environment.
            connector: Connector capability; defaults to the MongoDB connector.
            configure_logs: Whether to apply ``config.logging`` to the root logger.
        """
        if config is None:
            self.config = load_settings()
        elif isinstance(config, (str, Path)):
            self.config = load_settings(str(config))
        elif isinstance(config, DocDBSettings):
            self.config = config
        else:
            raise ConfigurationError("Invalid configuration type. Expected DocDBSettings, str, Path, or None.")

        if configure_logs:
            configure_logging(self.config.logging)

        self.registry = ConnectionRegistry.from_settings(self.config, connector=connector)
        logger.info(f"DocDBClient initialized with {len(self.config.connections)} configured connections")

    def connect_all(self) -> Dict[str, ConnectionAttemptResult]:
        """Connect every configured connection and register the successes."""
        return self.registry.connect_configured()

    def get(self, key: str) -> Optional[Any]:
        """Return the live handle registered under ``key``, or None."""
        return self.registry.get(key)

    def close(self):
        """Close every registered connection"""
        self.registry.close_all()
        logger.info("DocDBClient connections closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
