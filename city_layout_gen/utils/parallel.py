"""
Lightweight helpers for parallel execution.

- Uses ProcessPoolExecutor for the CPU-bound raster stages (escapes the GIL)
- Provides range splitting utilities for row-chunked work
- ``max_workers=1`` runs inline, which keeps tests and small grids cheap

Safe to import from Windows/macOS/Linux.
"""

from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor, as_completed
import logging
import os
from typing import Callable, Iterable, Any

log = logging.getLogger(__name__)


def cpu_count(default: int = 4) -> int:
    c = os.cpu_count() or default
    # cap so small grids don't overspawn
    return max(1, min(c, 12))


def resolve_workers(value) -> int:
    """Turn a config ``workers`` value into a usable count (0/None -> cpu_count)."""
    try:
        n = int(value or 0)
    except (TypeError, ValueError):
        n = 0
    return n if n > 0 else cpu_count()


def split_range(n: int, parts: int | None = None) -> list[tuple[int, int]]:
    """Split [0, n) into roughly-equal half-open ranges.

    Returns list of (start, end) with start < end. Empty if n <= 0.
    """
    if n <= 0:
        return []
    if parts is None or parts <= 0:
        parts = cpu_count()
    parts = max(1, min(parts, n))
    base, rem = divmod(n, parts)
    out = []
    s = 0
    for i in range(parts):
        e = s + base + (1 if i < rem else 0)
        if s < e:
            out.append((s, e))
        s = e
    return out


def run_process_map(
    worker: Callable[..., Any],
    args_list: Iterable[tuple[Any, ...]],
    max_workers: int | None = None,
    *,
    return_exceptions: bool = False,
) -> list[Any]:
    """Run worker over args tuples using processes, preserving order.

    worker must be a top-level function (picklable) because Windows uses spawn.
    With ``return_exceptions`` a failing call leaves its exception in the
    result slot instead of aborting the sibling calls.
    """
    args_list = list(args_list)
    if not args_list:
        return []
    if max_workers is None:
        max_workers = cpu_count()
    max_workers = max(1, min(max_workers, len(args_list)))

    results: list[Any] = [None] * len(args_list)
    if max_workers == 1:
        for i, args in enumerate(args_list):
            try:
                results[i] = worker(*args)
            except Exception as exc:
                if not return_exceptions:
                    raise
                results[i] = exc
        return results

    log.debug("process map: %d jobs on %d workers", len(args_list), max_workers)
    with ProcessPoolExecutor(max_workers=max_workers) as ex:
        fut_to_idx = {ex.submit(worker, *args): i for i, args in enumerate(args_list)}
        for fut in as_completed(fut_to_idx):
            i = fut_to_idx[fut]
            exc = fut.exception()
            if exc is None:
                results[i] = fut.result()
            elif return_exceptions:
                results[i] = exc
            else:
                raise exc
    return results
