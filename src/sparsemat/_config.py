"""
Global configuration for sparsemat.

Provides:
- Default storage order and element dtype for new matrices
- Default execution policy and thread-pool size
- Environment overrides (read once, when the configuration is created)

Environment variables:
    SPARSEMAT_ORDER        'row' or 'col'
    SPARSEMAT_EXECUTION    'sequential' or 'parallel'
    SPARSEMAT_MAX_WORKERS  positive integer
"""

from __future__ import annotations

import logging
import os
from typing import Optional, Tuple, Union

import numpy as np

from ._error import InvalidArgumentError
from ._types import ExecutionPolicy, StorageOrder, resolve_dtype

logger = logging.getLogger("sparsemat.config")


def _env_order() -> StorageOrder:
    value = os.environ.get('SPARSEMAT_ORDER', '')
    if not value:
        return StorageOrder.ROW_MAJOR
    try:
        return StorageOrder.parse(value)
    except ValueError:
        logger.warning(f"Ignoring invalid SPARSEMAT_ORDER={value!r}")
        return StorageOrder.ROW_MAJOR


def _env_execution() -> ExecutionPolicy:
    value = os.environ.get('SPARSEMAT_EXECUTION', '')
    if not value:
        return ExecutionPolicy.SEQUENTIAL
    try:
        return ExecutionPolicy.parse(value)
    except ValueError:
        logger.warning(f"Ignoring invalid SPARSEMAT_EXECUTION={value!r}")
        return ExecutionPolicy.SEQUENTIAL


def _env_max_workers() -> Optional[int]:
    value = os.environ.get('SPARSEMAT_MAX_WORKERS', '')
    if not value:
        return None
    try:
        workers = int(value)
    except ValueError:
        workers = 0
    if workers <= 0:
        logger.warning(f"Ignoring invalid SPARSEMAT_MAX_WORKERS={value!r}")
        return None
    return workers


# =============================================================================
# Global Configuration State
# =============================================================================

class _Config:
    """
    Global configuration singleton.
    """

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        """Restore the defaults (environment overrides included)."""
        self._default_order = _env_order()
        self._default_dtype = np.dtype(np.float64)
        self._default_execution = _env_execution()
        self._max_workers = _env_max_workers()

    @property
    def default_order(self) -> StorageOrder:
        return self._default_order

    @default_order.setter
    def default_order(self, value: Union[StorageOrder, str]):
        self._default_order = StorageOrder.parse(value)

    @property
    def default_dtype(self) -> np.dtype:
        return self._default_dtype

    @default_dtype.setter
    def default_dtype(self, value):
        self._default_dtype = resolve_dtype(value)

    @property
    def default_execution(self) -> ExecutionPolicy:
        return self._default_execution

    @default_execution.setter
    def default_execution(self, value: Union[ExecutionPolicy, str]):
        self._default_execution = ExecutionPolicy.parse(value)
        logger.debug(f"Default execution policy set to {self._default_execution.value}")

    @property
    def max_workers(self) -> Optional[int]:
        """Thread-pool size for PARALLEL execution (None: executor default)."""
        return self._max_workers

    @max_workers.setter
    def max_workers(self, value: Optional[int]):
        if value is not None and int(value) <= 0:
            raise InvalidArgumentError(f"max_workers must be positive, got {value}")
        self._max_workers = None if value is None else int(value)

    def resolve_execution(
        self, execution: Optional[Union[ExecutionPolicy, str]]
    ) -> ExecutionPolicy:
        """Explicit policy if given, else the configured default."""
        if execution is None:
            return self._default_execution
        return ExecutionPolicy.parse(execution)


# Global config instance
_config = _Config()


# =============================================================================
# Public API
# =============================================================================

def get_config() -> _Config:
    """Get global configuration instance."""
    return _config


def set_defaults(
    order: Optional[Union[StorageOrder, str]] = None,
    dtype=None,
    execution: Optional[Union[ExecutionPolicy, str]] = None,
    max_workers: Optional[int] = None,
) -> None:
    """
    Set defaults used when an argument is omitted.

    Args:
        order: Storage order of new matrices ('row', 'col')
        dtype: Element dtype of new matrices
        execution: Execution policy ('sequential', 'parallel')
        max_workers: Thread-pool size for parallel execution

    Example:
        >>> sparsemat.set_defaults(order='col', execution='parallel')
    """
    if order is not None:
        _config.default_order = order
    if dtype is not None:
        _config.default_dtype = dtype
    if execution is not None:
        _config.default_execution = execution
    if max_workers is not None:
        _config.max_workers = max_workers


def get_defaults() -> Tuple[StorageOrder, np.dtype, ExecutionPolicy, Optional[int]]:
    """
    Get current defaults.

    Returns:
        Tuple of (order, dtype, execution, max_workers)
    """
    return (
        _config.default_order,
        _config.default_dtype,
        _config.default_execution,
        _config.max_workers,
    )


def reset_defaults() -> None:
    """Restore built-in defaults, re-reading the environment."""
    _config.reset()
