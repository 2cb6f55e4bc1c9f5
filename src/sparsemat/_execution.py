"""Scheduling of independent units of work.

Extraction-based loops (norm sums, matrix-vector rows, matrix-matrix
cells) call ``map_units``. Units only read shared state and return their
result; the caller writes outputs afterwards on its own thread.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, TypeVar, Union

from ._config import get_config
from ._types import ExecutionPolicy

__all__ = ['map_units']

U = TypeVar('U')
R = TypeVar('R')


def map_units(
    func: Callable[[U], R],
    units: Iterable[U],
    execution: Optional[Union[ExecutionPolicy, str]] = None,
) -> List[R]:
    """Apply ``func`` to every unit, preserving input order.

    Args:
        func: Pure function of one unit.
        units: Work items.
        execution: Policy; None uses the configured default.

    Returns:
        List of results in the order of ``units``.
    """
    config = get_config()
    policy = config.resolve_execution(execution)
    if policy is ExecutionPolicy.SEQUENTIAL:
        return [func(unit) for unit in units]

    with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
        return list(executor.map(func, units))
