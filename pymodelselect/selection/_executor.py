"""
Run independent work units serially or on a thread pool.

numpy and LAPACK release the GIL for the heavy parts of fitting, so
threads give real parallelism without pickling datasets.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Sequence, TypeVar

from pymodelselect.core.exceptions import InvalidParameterError

T = TypeVar('T')
R = TypeVar('R')


def resolve_workers(n_jobs: int | None, n_items: int) -> int:
    """
    Number of worker threads for `n_items` units.

    None or -1 means one per CPU.
    """
    if n_jobs is None or n_jobs == -1:
        requested = os.cpu_count() or 1
    elif isinstance(n_jobs, bool) or not isinstance(n_jobs, int) or n_jobs < 1:
        raise InvalidParameterError(
            f"n_jobs must be a positive int, -1 or None, got {n_jobs!r}",
            parameter='n_jobs',
            value=n_jobs,
        )
    else:
        requested = n_jobs
    return max(1, min(requested, n_items))


def run_units(
    items: Sequence[T],
    handler: Callable[[T], R],
    n_jobs: int | None = 1,
) -> list[R]:
    """
    Apply `handler` to every item and return results in input order.
    """
    if not items:
        return []

    workers = resolve_workers(n_jobs, len(items))
    if workers == 1:
        return [handler(item) for item in items]

    results: list[R | None] = [None] * len(items)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {pool.submit(handler, item): i for i, item in enumerate(items)}
        for future in as_completed(futures):
            results[futures[future]] = future.result()
    return results  # type: ignore[return-value]
