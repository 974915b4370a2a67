"""
Connection Registry

Owns the mapping from logical connection name to live connection handle
and orchestrates batch connection and teardown.

The registry is a plain ownership map, not a cache: an entry appears only
after a successful keyed connect and disappears only through ``close_one``
or ``close_all``. There is no expiry and no health-check eviction.
"""

import logging
import threading
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from docdb_ops_exceptions import ConfigurationError

from .connector import Connector, MongoConnector
from .models import ConnectionAttemptResult, ConnectionConfig, PoolOptions, RetryPolicy
from .retrying_connector import RetryingConnector

if TYPE_CHECKING:
    from config import DocDBSettings

logger = logging.getLogger(__name__)

ConfigLike = Union[ConnectionConfig, Mapping[str, Any]]

DEFAULT_POOL_OPTIONS = PoolOptions(
    max_pool_size=10,
    min_pool_size=2,
    server_selection_timeout_ms=5000,
    socket_timeout_ms=45000,
)


class ConnectionRegistry:
    """
    Registry of named, live database connections.

    Connections are opened through a ``RetryingConnector``; successful
    handles from ``connect_all`` are stored under their key and owned by the
    registry until closed through it.

    Concurrency: mutating operations (``connect_all``, ``close_one``,
    ``close_all``) are serialized by an operation lock, so concurrent callers
    of the same registry observe them one at a time. Lookups only take a
    short map lock and do not wait for an in-flight batch connect.

    Args:
        connector: Capability that opens and closes handles. Defaults to
            ``MongoConnector``.
        retry_policy: Default retry policy; per-config overrides apply on top.
        pool_defaults: Pool options used for fields a config leaves unset.
        settings: Optional settings to take the defaults and named
            connections from. Explicit ``retry_policy``/``pool_defaults``
            arguments win over the settings.
        retrying_connector: Pre-built retrying connector, mostly for tests.
            When given, ``connector`` is ignored.

    Example:
        ```python
        with ConnectionRegistry() as registry:
            results = registry.connect_all({
                "primary": {"uri": "mongodb://db1:27017/app"},
                "analytics": {"uri": "mongodb://db2:27017/stats",
                              "retry_policy": {"max_attempts": 1}},
            })
            client = registry.get("primary")
        ```
    """

    def __init__(
        self,
        connector: Optional[Connector] = None,
        retry_policy: Optional[RetryPolicy] = None,
        pool_defaults: Optional[PoolOptions] = None,
        settings: Optional["DocDBSettings"] = None,
        retrying_connector: Optional[RetryingConnector] = None,
    ):
        self.settings = settings
        if retry_policy is None:
            retry_policy = settings.retry.to_policy() if settings else RetryPolicy()
        if pool_defaults is None:
            pool_defaults = settings.pool.to_options() if settings else DEFAULT_POOL_OPTIONS

        self.retry_policy = retry_policy
        self.pool_defaults = pool_defaults
        self._retrying = retrying_connector or RetryingConnector(connector or MongoConnector())
        self._connections: Dict[str, Any] = {}
        self._map_lock = threading.Lock()
        self._operation_lock = threading.RLock()

        logger.debug(
            f"ConnectionRegistry initialized (max_attempts={retry_policy.max_attempts}, "
            f"base_interval_ms={retry_policy.base_interval_ms}, "
            f"backoff_factor={retry_policy.backoff_factor})"
        )

    @classmethod
    def from_settings(
        cls,
        settings: Optional["DocDBSettings"] = None,
        connector: Optional[Connector] = None,
    ) -> "ConnectionRegistry":
        """Build a registry whose defaults come from ``settings`` (loaded if omitted)."""
        from config import load_settings

        return cls(connector=connector, settings=settings or load_settings())

    @property
    def connector(self) -> Connector:
        return self._retrying.connector

    def connect(
        self,
        config: ConfigLike,
        cancel_event: Optional[threading.Event] = None,
    ) -> ConnectionAttemptResult:
        """
        Open one connection without registering it.

        Unset pool fields receive the registry's pool defaults and the
        config's retry policy is merged over the default policy. The caller
        owns the returned handle.

        Args:
            config: ``ConnectionConfig`` or an equivalent mapping.
            cancel_event: Optional event that cancels pending retries.

        Returns:
            ConnectionAttemptResult: Success with the handle, or Failure.
        """
        config = self._coerce_config(config)
        policy = self.retry_policy.merged(config.retry_policy)
        options = (config.options or PoolOptions()).with_defaults(self.pool_defaults)
        return self._retrying.attempt_connect(config.uri, options, policy, cancel_event=cancel_event)

    def connect_all(
        self,
        configs: Mapping[str, ConfigLike],
        cancel_event: Optional[threading.Event] = None,
    ) -> Dict[str, ConnectionAttemptResult]:
        """
        Connect every named config, one at a time, in the order given.

        Each success is stored under its key. An existing entry for the
        same key is replaced without being closed; closing it first is the
        caller's responsibility. A failure for one key never stops the
        remaining keys from being attempted; a config that does not validate
        is reported as a ``Failure`` carrying ``ConfigurationError``.

        Args:
            configs: Mapping of connection name to config.
            cancel_event: Optional event shared by every attempt sequence.

        Returns:
            Dict mapping every key to its ConnectionAttemptResult.
        """
        results: Dict[str, ConnectionAttemptResult] = {}
        with self._operation_lock:
            for key, config in configs.items():
                logger.debug(f"Connecting '{key}'")
                try:
                    config = self._coerce_config(config)
                except ValidationError as e:
                    logger.error(f"Invalid configuration for connection '{key}': {e}")
                    results[key] = ConnectionAttemptResult.failure(
                        ConfigurationError(f"Invalid configuration for connection '{key}': {e}"),
                        attempts=0,
                    )
                    continue
                result = self.connect(config, cancel_event=cancel_event)
                results[key] = result
                if result.succeeded:
                    self._register(key, result.handle)

        failed = [key for key, result in results.items() if not result.succeeded]
        if failed:
            logger.warning(
                f"{len(failed)} of {len(results)} connections failed: {', '.join(failed)}"
            )
        return results

    def connect_configured(
        self,
        cancel_event: Optional[threading.Event] = None,
    ) -> Dict[str, ConnectionAttemptResult]:
        """Connect every named connection declared in this registry's settings."""
        if self.settings is None or not self.settings.connections:
            logger.warning("No configured connections to connect")
            return {}
        return self.connect_all(self.settings.connections, cancel_event=cancel_event)

    def get(self, key: str) -> Optional[Any]:
        """Return the handle registered under ``key``, or None."""
        with self._map_lock:
            return self._connections.get(key)

    def keys(self) -> List[str]:
        with self._map_lock:
            return list(self._connections)

    def close_one(self, key: str) -> bool:
        """
        Close and remove the connection registered under ``key``.

        Absent keys are a no-op. The entry is removed even when closing the
        handle fails; the failure is logged.

        Returns:
            bool: True if an entry existed for ``key``.
        """
        with self._operation_lock:
            with self._map_lock:
                handle = self._connections.pop(key, None)
            if handle is None:
                logger.debug(f"No connection registered under '{key}', nothing to close")
                return False
            self._close_handle(key, handle)
            return True

    def close_all(self) -> None:
        """
        Close and remove every registered connection.

        A failing close is logged and the sweep continues with the next
        entry. The registry is empty afterwards.
        """
        with self._operation_lock:
            with self._map_lock:
                entries = list(self._connections.items())
                self._connections.clear()
            for key, handle in entries:
                self._close_handle(key, handle)

    def _register(self, key: str, handle: Any) -> None:
        with self._map_lock:
            previous = self._connections.get(key)
            self._connections[key] = handle
        if previous is not None and previous is not handle:
            logger.warning(
                f"Connection '{key}' replaced; the previous handle was not closed"
            )

    def _close_handle(self, key: str, handle: Any) -> None:
        try:
            self.connector.close(handle)
        except Exception as e:
            logger.error(f"Error closing connection '{key}': {e}", exc_info=True)
            return
        logger.info(f"Disconnected connection: {key}")

    @staticmethod
    def _coerce_config(config: ConfigLike) -> ConnectionConfig:
        if isinstance(config, ConnectionConfig):
            return config
        return ConnectionConfig.model_validate(config)

    def __len__(self) -> int:
        with self._map_lock:
            return len(self._connections)

    def __contains__(self, key: object) -> bool:
        with self._map_lock:
            return key in self._connections

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close_all()


_default_registry: Optional[ConnectionRegistry] = None
_default_lock = threading.Lock()


def get_default_registry() -> ConnectionRegistry:
    """
    Return the process-wide registry, creating it on first use.

    Nothing in the package calls this implicitly; callers that want one
    ambient registry opt in here. The instance is built from
    ``load_settings()``.
    """
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = ConnectionRegistry.from_settings()
        return _default_registry


def reset_default_registry() -> None:
    """Close every connection of the process-wide registry and discard it."""
    global _default_registry
    with _default_lock:
        registry, _default_registry = _default_registry, None
    if registry is not None:
        registry.close_all()
