"""
Connection Management Exceptions

This module defines specialized exceptions for document database connection
management, providing detailed error reporting for connection-related issues.

Every exception here derives from the package-level ConnectionError, so
callers can catch all connection failures uniformly while still inspecting
the specific type carried by a failed ConnectionAttemptResult.
"""

from docdb_ops_exceptions import ConnectionError as BaseConnectionError


class ConnectionError(BaseConnectionError):
    """
    Base exception for all connection-related errors.

    Connector implementations raise this (or a subclass) when a single
    connection attempt fails. The retrying layer treats it as retryable.
    """
    pass


class ConnectionTimeoutError(ConnectionError):
    """
    Raised when a connection attempt times out.

    Typically the driver could not select a server within
    server_selection_timeout_ms, or a socket operation exceeded
    socket_timeout_ms.
    """
    pass


class ConnectionAuthenticationError(ConnectionError):
    """
    Raised when authentication to the database server fails.

    Retrying rarely helps here, but it is still reported through the same
    Failure result so that callers handle every terminal error in one place.
    """
    pass


class ServerUnavailableError(ConnectionError):
    """
    Raised when the database server is unreachable.

    Distinguishes server-side availability problems from client-side
    configuration problems.
    """
    pass


class ConnectionCancelledError(ConnectionError):
    """Raised when a retry sequence is cancelled before its next attempt."""
    pass


class CloseError(ConnectionError):
    """
    Raised when closing a connection handle fails.

    Closing is best-effort: the registry logs this error and keeps going.
    """
    pass
