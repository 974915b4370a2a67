"""
Database Connector

This module defines the capability the connection layer needs from a
database driver, opening a live handle and closing it, together with the
MongoDB implementation built on PyMongo.

Driver exceptions are translated into the package's connection exception
hierarchy so the retrying connector and the registry never depend on
driver-specific error types.
"""

import logging
from typing import Any, Callable, Optional, Protocol

from pymongo import MongoClient
from pymongo.errors import (
    ConfigurationError as PyMongoConfigurationError,
    ConnectionFailure,
    NetworkTimeout,
    OperationFailure,
    PyMongoError,
    ServerSelectionTimeoutError,
)

from .connection_exceptions import (
    CloseError,
    ConnectionAuthenticationError,
    ConnectionError,
    ConnectionTimeoutError,
    ServerUnavailableError,
)
from .models import PoolOptions
from .uri import mask_uri

logger = logging.getLogger(__name__)

# Server error codes reported for failed authentication / authorization
AUTH_ERROR_CODES = frozenset({13, 18})


class Connector(Protocol):
    """
    Capability that performs the actual network handshake.

    ``open`` returns a live handle or raises ``ConnectionError`` (or a
    subclass). ``close`` releases a handle and raises ``CloseError`` when it
    cannot; callers treat closing as best-effort.
    """

    def open(self, uri: str, options: PoolOptions) -> Any:
        ...

    def close(self, handle: Any) -> None:
        ...


class MongoConnector:
    """
    Connector backed by ``pymongo.MongoClient``.

    ``MongoClient`` connects lazily, so by default a ``ping`` command is sent
    right after construction to force server selection and authentication.
    That way a bad host or bad credentials fail the attempt instead of the
    first query.

    Args:
        ping: Whether to verify the connection with a ``ping`` command.
        client_factory: Callable building the client; defaults to
            ``MongoClient``. Mostly useful for tests.
    """

    def __init__(self, ping: bool = True, client_factory: Optional[Callable[..., Any]] = None):
        self.ping = ping
        self._client_factory = client_factory or MongoClient

    def open(self, uri: str, options: PoolOptions) -> Any:
        kwargs = options.to_driver_kwargs()
        logger.debug(f"Opening MongoDB client for {mask_uri(uri)} with options {sorted(kwargs)}")

        try:
            client = self._client_factory(uri, **kwargs)
        except PyMongoError as e:
            raise self._translate(e) from e

        if self.ping:
            try:
                client.admin.command("ping")
            except PyMongoError as e:
                self._close_quietly(client)
                raise self._translate(e) from e

        return client

    def close(self, handle: Any) -> None:
        try:
            handle.close()
        except PyMongoError as e:
            raise CloseError(f"Failed to close MongoDB client: {e}") from e

    @staticmethod
    def _translate(error: PyMongoError) -> ConnectionError:
        """Map a PyMongo error onto the connection exception hierarchy."""
        if isinstance(error, (ServerSelectionTimeoutError, NetworkTimeout)):
            return ConnectionTimeoutError(f"Timed out connecting to MongoDB: {error}")
        if isinstance(error, OperationFailure) and error.code in AUTH_ERROR_CODES:
            return ConnectionAuthenticationError(f"MongoDB authentication failed: {error}")
        if isinstance(error, ConnectionFailure):
            return ServerUnavailableError(f"MongoDB server unavailable: {error}")
        if isinstance(error, PyMongoConfigurationError):
            return ConnectionError(f"Invalid MongoDB connection configuration: {error}")
        return ConnectionError(f"MongoDB connection failed: {error}")

    @staticmethod
    def _close_quietly(client: Any) -> None:
        try:
            client.close()
        except PyMongoError as e:
            logger.warning(f"Error closing MongoDB client after failed ping: {e}")
