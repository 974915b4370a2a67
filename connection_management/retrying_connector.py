"""
Retrying Connector

Establishes a single database connection, retrying failed attempts with
deterministic exponential backoff.

The retry sequence is a bounded state machine: ``Attempting(k)`` for
``k = 1..max_attempts``, ending in either ``Succeeded`` or ``Failed``. The
loop is driven by tenacity's ``Retrying`` iterator. There is no jitter and
no circuit breaker, so the wait after attempt ``k`` depends only on ``k``
and the policy.
"""

import logging
import threading
import time
from typing import Any, Callable, Optional

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    stop_when_event_set,
    wait_exponential,
)

from .connection_exceptions import ConnectionCancelledError, ConnectionError
from .connector import Connector
from .models import ConnectionAttemptResult, PoolOptions, RetryPolicy
from .pool_validator import PoolOptionsValidator
from .uri import mask_uri


class RetryingConnector:
    """
    Wraps a ``Connector`` with bounded retry and exponential backoff.

    Args:
        connector: Capability that opens and closes driver handles.
        logger: Logger receiving diagnostic events. Defaults to this
            module's logger.
        validator: Pool options validator; one sharing ``logger`` is built
            when omitted.
        sleep: Function called with the backoff wait in seconds. Defaults to
            ``time.sleep``, or to the cancel event's ``wait`` when a cancel
            event is supplied so a cancellation interrupts the wait.
    """

    def __init__(
        self,
        connector: Connector,
        logger: Optional[logging.Logger] = None,
        validator: Optional[PoolOptionsValidator] = None,
        sleep: Optional[Callable[[float], Any]] = None,
    ):
        self.connector = connector
        self._logger = logger or logging.getLogger(__name__)
        self._validator = validator or PoolOptionsValidator(self._logger)
        self._sleep = sleep

    def attempt_connect(
        self,
        uri: str,
        options: Optional[PoolOptions],
        policy: RetryPolicy,
        cancel_event: Optional[threading.Event] = None,
    ) -> ConnectionAttemptResult:
        """
        Connect to ``uri``, retrying according to ``policy``.

        Never raises for connection failures: the terminal failure is
        returned as a ``Failure`` result carrying the last attempt's
        exception unchanged. A connector returning ``None`` counts as a
        failed attempt.

        Args:
            uri: Connection URI passed to the connector.
            options: Pool options; validated before every attempt sequence.
            policy: Retry policy bounding the number of attempts and waits.
            cancel_event: Optional event. Once set, no further attempt is
                started and any backoff wait in progress ends early.

        Returns:
            ConnectionAttemptResult: ``Success`` with the live handle, or
            ``Failure`` with the last error.
        """
        validated = self._validator.validate(options)
        safe_uri = mask_uri(uri)
        attempts = 0

        stop = stop_after_attempt(policy.max_attempts)
        if cancel_event is not None:
            stop = stop | stop_when_event_set(cancel_event)

        retrying = Retrying(
            stop=stop,
            wait=wait_exponential(
                multiplier=policy.base_interval_ms / 1000.0,
                exp_base=policy.backoff_factor,
            ),
            retry=(
                retry_if_exception_type(Exception)
                & retry_if_not_exception_type(ConnectionCancelledError)
            ),
            sleep=self._resolve_sleep(cancel_event),
            before_sleep=lambda retry_state: self._log_retry(retry_state, safe_uri),
            reraise=True,
        )

        try:
            for attempt in retrying:
                with attempt:
                    if cancel_event is not None and cancel_event.is_set():
                        raise ConnectionCancelledError(
                            f"Connection to {safe_uri} cancelled before attempt {attempts + 1}"
                        )
                    attempts += 1
                    handle = self.connector.open(uri, validated)
                    if handle is None:
                        raise ConnectionError(f"Connector returned no handle for {safe_uri}")
        except ConnectionCancelledError as e:
            self._logger.warning(str(e), extra={"uri": safe_uri, "attempts": attempts})
            return ConnectionAttemptResult.failure(e, attempts=attempts)
        except Exception as e:
            self._logger.error(
                f"Failed to connect to {safe_uri} after {attempts} attempts: {e}",
                extra={"uri": safe_uri, "attempts": attempts},
            )
            return ConnectionAttemptResult.failure(e, attempts=attempts)

        self._logger.info(
            f"Successfully connected to {safe_uri}",
            extra={"uri": safe_uri, "attempts": attempts},
        )
        return ConnectionAttemptResult.success(handle, attempts=attempts)

    def _resolve_sleep(self, cancel_event: Optional[threading.Event]) -> Callable[[float], Any]:
        if self._sleep is not None:
            return self._sleep
        if cancel_event is not None:
            return cancel_event.wait
        return time.sleep

    def _log_retry(self, retry_state: RetryCallState, safe_uri: str) -> None:
        wait_ms = retry_state.next_action.sleep * 1000.0
        error = retry_state.outcome.exception()
        self._logger.warning(
            f"Connection attempt {retry_state.attempt_number} to {safe_uri} failed: {error}. "
            f"Retrying in {wait_ms:.0f}ms...",
            extra={"uri": safe_uri, "attempt": retry_state.attempt_number, "wait_ms": wait_ms},
        )
