"""
Pool options validator.

Sanitizes pool-size configuration before it reaches the database driver.
Inverted pool bounds are corrected with a warning rather than rejected, so
a slightly wrong configuration never prevents a connection from being made.
"""

import logging
from typing import Optional

from .models import PoolOptions


class PoolOptionsValidator:
    """
    Normalizes ``PoolOptions`` before a connection attempt.

    The only rule enforced is ``min_pool_size <= max_pool_size``. When both
    are set and the minimum exceeds the maximum, the minimum is lowered to
    half the maximum (rounded down) and a warning is logged. Callers must
    not rely on validation raising for malformed pool bounds.

    Field-level constraints (non-negative sizes and timeouts) are already
    enforced by the ``PoolOptions`` model itself.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(__name__)

    def validate(self, options: Optional[PoolOptions]) -> PoolOptions:
        """
        Return a sanitized copy of ``options``.

        Args:
            options: Options to validate. ``None`` yields empty options.

        Returns:
            The same values with inverted pool bounds corrected. The input
            object is never modified.
        """
        if options is None:
            return PoolOptions()

        min_size = options.min_pool_size
        max_size = options.max_pool_size
        if min_size is not None and max_size is not None and min_size > max_size:
            corrected = max_size // 2
            self._logger.warning(
                f"minPoolSize ({min_size}) cannot be greater than maxPoolSize ({max_size}). "
                f"Adjusting minPoolSize to {corrected}.",
                extra={"min_pool_size": min_size, "max_pool_size": max_size},
            )
            return options.model_copy(update={"min_pool_size": corrected})

        return options
