"""
Wave-based fork/join over a thread pool.

Items are dispatched in fixed-size waves. Every call in a wave runs
concurrently and the whole wave is joined before the next one starts, so
at most ``wave_size`` calls are ever in flight. There is no cancellation:
a dispatched wave always runs to completion.
"""

from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ALL_COMPLETED, ThreadPoolExecutor, wait
from typing import Optional, TypeVar
import logging

logger = logging.getLogger(__name__)

InT = TypeVar("InT")
OutT = TypeVar("OutT")


def iter_waves(items: Sequence[InT], wave_size: int) -> Iterable[Sequence[InT]]:
    """Yield consecutive slices of at most ``wave_size`` items."""
    if wave_size < 1:
        raise ValueError("wave_size must be a positive integer")
    for start in range(0, len(items), wave_size):
        yield items[start : start + wave_size]


def run_in_waves(
    items: Iterable[InT],
    worker: Callable[[InT], OutT],
    *,
    wave_size: int,
    on_wave_complete: Optional[Callable[[int, int], None]] = None,
) -> list[OutT]:
    """
    Run ``worker`` over ``items`` in concurrent waves.

    Args:
        items: Inputs, dispatched in order
        worker: Function applied to each input
        wave_size: Number of concurrent calls per wave
        on_wave_complete: Called with (wave number, wave size) after each join

    Returns:
        Results in input order

    Raises:
        Exception: The first worker error, re-raised once its wave has joined
    """
    pending = list(items)
    results: list[OutT] = []
    if not pending:
        return results

    with ThreadPoolExecutor(max_workers=wave_size) as pool:
        for wave_no, wave in enumerate(iter_waves(pending, wave_size), start=1):
            futures = [pool.submit(worker, item) for item in wave]
            wait(futures, return_when=ALL_COMPLETED)

            logger.debug(f"Wave {wave_no} joined ({len(wave)} tasks)")
            if on_wave_complete is not None:
                on_wave_complete(wave_no, len(wave))

            # result() re-raises the worker's exception, if any
            results.extend(fut.result() for fut in futures)

    return results
