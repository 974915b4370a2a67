"""
Pydantic Settings for DocDB Operations

This module provides strongly-typed configuration settings using Pydantic,
with support for environment variables and YAML configuration files.
"""

import os
from pathlib import Path
from typing import Dict, Literal, Optional, Union

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from connection_management.models import ConnectionConfig, PoolOptions, RetryPolicy
from docdb_ops_exceptions import ConfigurationError


class RetrySettings(BaseSettings):
    """
    Default retry behaviour for connection attempts.

    These values are the defaults every connection config starts from; a
    config's own ``retry_policy`` overrides them field by field. The wait
    after failed attempt ``k`` is ``base_interval_ms * backoff_factor ** (k - 1)``.
    """
    model_config = SettingsConfigDict(env_prefix="DOCDB_RETRY_", case_sensitive=False)

    max_attempts: int = Field(5, ge=1,
                              description="Total connection attempts before giving up, including the first")
    base_interval_ms: int = Field(5000, ge=0,
                                  description="Wait in milliseconds after the first failed attempt")
    backoff_factor: float = Field(1.5, ge=1.0,
                                  description="Growth factor applied to the wait after each further failure")

    def to_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            base_interval_ms=self.base_interval_ms,
            backoff_factor=self.backoff_factor,
        )


class PoolSettings(BaseSettings):
    """
    Default connection pool options.

    Applied to every field a connection config leaves unset. An explicit
    ``0`` in a config is kept and not replaced by these defaults.
    """
    model_config = SettingsConfigDict(env_prefix="DOCDB_POOL_", case_sensitive=False)

    max_pool_size: int = Field(10, ge=0,
                               description="Maximum number of concurrent connections per client")
    min_pool_size: int = Field(2, ge=0,
                               description="Minimum number of connections kept open per client")
    server_selection_timeout_ms: int = Field(5000, ge=0,
                                             description="How long the driver waits to find a suitable server")
    socket_timeout_ms: int = Field(45000, ge=0,
                                   description="How long a send or receive on a socket may take")

    def to_options(self) -> PoolOptions:
        return PoolOptions(
            max_pool_size=self.max_pool_size,
            min_pool_size=self.min_pool_size,
            server_selection_timeout_ms=self.server_selection_timeout_ms,
            socket_timeout_ms=self.socket_timeout_ms,
        )


class LoggingSettings(BaseSettings):
    """
    Logging output settings.

    ``format`` selects between a plain one-line format and JSON records
    (one object per line), the latter suited to log aggregation.
    """
    model_config = SettingsConfigDict(env_prefix="DOCDB_LOG_", case_sensitive=False)

    enabled: bool = Field(True, description="Whether log records are emitted at all")
    level: str = Field("INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")
    format: Literal["simple", "json"] = Field("simple", description="Output format: simple or json")


class DocDBSettings(BaseSettings):
    """
    Main settings class consolidating all configuration categories.

    Usage:
        # Load from environment variables and defaults
        settings = DocDBSettings()

        # Load from YAML file
        settings = DocDBSettings.from_yaml('docdb.yaml')

        # Access nested settings
        attempts = settings.retry.max_attempts
        primary = settings.connections["primary"]

    A YAML file looks like::

        retry:
          max_attempts: 3
        logging:
          format: json
        connections:
          primary:
            uri: mongodb://db1:27017/app
          analytics:
            uri: mongodb://db2:27017/stats
            options:
              maxPoolSize: 4
            retry_policy:
              max_attempts: 1
    """
    model_config = SettingsConfigDict(
        env_prefix="DOCDB_",
        case_sensitive=False,
        env_nested_delimiter="__",
    )

    retry: RetrySettings = Field(default_factory=RetrySettings,
                                 description="Default retry policy for connection attempts")
    pool: PoolSettings = Field(default_factory=PoolSettings,
                               description="Default pool options for connections")
    logging: LoggingSettings = Field(default_factory=LoggingSettings,
                                     description="Logging output settings")
    connections: Dict[str, ConnectionConfig] = Field(default_factory=dict,
                                                     description="Named connections, connected in declaration order")

    @classmethod
    def from_yaml(cls, yaml_file: Union[str, Path]) -> "DocDBSettings":
        """Load settings from YAML file"""
        try:
            with open(yaml_file, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read settings file {yaml_file}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings file {yaml_file} must contain a mapping at the top level")

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid settings in {yaml_file}: {e}") from e

    def resolved(self) -> "DocDBSettings":
        """
        Copy of these settings with every connection's retry policy and pool
        options made explicit, i.e. merged over the defaults above.
        """
        policy = self.retry.to_policy()
        pool = self.pool.to_options()
        connections = {
            name: config.model_copy(update={
                "retry_policy": policy.merged(config.retry_policy),
                "options": (config.options or PoolOptions()).with_defaults(pool),
            })
            for name, config in self.connections.items()
        }
        return self.model_copy(update={"connections": connections})

    def to_yaml(self) -> str:
        """
        Render the resolved settings as YAML, in the layout ``from_yaml`` reads.

        Connections are written with their effective retry policy and pool
        options, so the file behaves the same even if the defaults change.

        Keys are written in declaration order, which is the order
        ``connect_configured`` connects in.
        """
        data = self.resolved().model_dump(mode="json", exclude_none=True)
        return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)


def load_settings(config_path: Optional[str] = None) -> DocDBSettings:
    """
    Load settings from file and/or environment variables.

    Args:
        config_path: Path to YAML configuration file. If None or file doesn't exist,
                    falls back to environment variables and default values.

    Returns:
        DocDBSettings object with loaded configuration

    Example:
        # Load from specific config file
        settings = load_settings("/path/to/docdb.yaml")

        # Load from environment variables and defaults
        settings = load_settings()
    """
    if config_path and os.path.exists(config_path):
        return DocDBSettings.from_yaml(config_path)
    try:
        return DocDBSettings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings in environment: {e}") from e


def save_settings(settings: DocDBSettings, config_path: Union[str, Path]) -> None:
    """Write ``settings`` to a YAML file that ``load_settings`` can read back."""
    try:
        with open(config_path, "w") as f:
            f.write(settings.to_yaml())
    except OSError as e:
        raise ConfigurationError(f"Cannot write settings file {config_path}: {e}") from e
