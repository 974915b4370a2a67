"""
Connection Management Module

This module provides connection lifecycle management for a document database
client: establishing named connections, retrying failed attempts, and
tracking live connections so they can be looked up and closed later.

Key capabilities:
- Pool option sanitization (inverted pool bounds are corrected, not rejected)
- Deterministic exponential backoff bounded by a maximum number of attempts
- Optional cooperative cancellation of pending retries
- A registry owning named connection handles, with per-key failure isolation
- Best-effort teardown that never aborts on a single failed close
- A pluggable connector capability, with a PyMongo implementation
"""

from .models import (
    RetryPolicy,
    PoolOptions,
    ConnectionConfig,
    ConnectionStatus,
    ConnectionAttemptResult,
)
from .pool_validator import PoolOptionsValidator
from .connector import Connector, MongoConnector
from .retrying_connector import RetryingConnector
from .connection_registry import (
    ConnectionRegistry,
    DEFAULT_POOL_OPTIONS,
    get_default_registry,
    reset_default_registry,
)
from .uri import mask_uri
from .connection_exceptions import (
    ConnectionError,
    ConnectionTimeoutError,
    ConnectionAuthenticationError,
    ServerUnavailableError,
    ConnectionCancelledError,
    CloseError,
)

__all__ = [
    'RetryPolicy',
    'PoolOptions',
    'ConnectionConfig',
    'ConnectionStatus',
    'ConnectionAttemptResult',
    'PoolOptionsValidator',
    'Connector',
    'MongoConnector',
    'RetryingConnector',
    'ConnectionRegistry',
    'DEFAULT_POOL_OPTIONS',
    'get_default_registry',
    'reset_default_registry',
    'mask_uri',
    'ConnectionError',
    'ConnectionTimeoutError',
    'ConnectionAuthenticationError',
    'ServerUnavailableError',
    'ConnectionCancelledError',
    'CloseError',
]
