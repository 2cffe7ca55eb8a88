"""Bounded-concurrency execution of batch operations.

All units are launched together, at most ``limit`` run at once, and the
batch returns only after every unit has finished. A failing unit is
recorded and logged; it never cancels or aborts its siblings.
"""

import asyncio
from typing import Awaitable, Callable, Iterable, Optional

from loguru import logger

from obscli.errors import ObsError
from obscli.models import BatchResult, ObsResponse, UnitResult


async def run_batch(
    names: Iterable[str],
    worker: Callable[[str], Awaitable[ObsResponse]],
    limit: Optional[int] = None,
    label: str = "unit",
) -> BatchResult:
    """Run ``worker`` once per name and collect per-unit outcomes.

    Args:
        names: Unit identifiers (bucket names, file paths).
        worker: Coroutine function performing one unit's request.
        limit: Maximum units in flight; None means unbounded.
        label: Noun used in log messages.

    Returns:
        BatchResult with one UnitResult per name, in input order.
    """
    semaphore = asyncio.Semaphore(limit) if limit else None

    async def run_unit(name: str) -> UnitResult:
        try:
            if semaphore is None:
                response = await worker(name)
            else:
                async with semaphore:
                    response = await worker(name)
        except ObsError as e:
            logger.warning("Failed {} '{}': {}", label, name, e)
            return UnitResult(name=name, error=str(e))

        if not response.ok:
            logger.warning("Failed {} '{}': HTTP {}", label, name, response.status_code)
        return UnitResult(name=name, response=response)

    units = await asyncio.gather(*(run_unit(name) for name in names))
    return BatchResult(units=list(units))
