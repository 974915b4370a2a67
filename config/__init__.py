"""
Configuration Module

This module provides centralized configuration for document database
connection management:
- Default retry policy for connection attempts
- Default connection pool options
- Logging output settings
- Named connection definitions
- Configuration loading from YAML files and environment variables

Implements a flexible, environment-aware configuration system
with sensible defaults and comprehensive validation using Pydantic.
"""

from .settings import (
    DocDBSettings,
    RetrySettings,
    PoolSettings,
    LoggingSettings,
    load_settings,
    save_settings,
)
from .logging_setup import configure_logging

__all__ = [
    'DocDBSettings',
    'RetrySettings',
    'PoolSettings',
    'LoggingSettings',
    'load_settings',
    'save_settings',
    'configure_logging',
]
