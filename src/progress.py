"""Advisory progress display while a lesson is generated.

The model gives no intermediate progress signal, so the percentage is
synthetic and only reflects elapsed time.
"""

import asyncio
from typing import Awaitable, TypeVar

from tqdm import tqdm

import config

T = TypeVar("T")


def synthetic_percent(
    elapsed: float,
    rate: float = config.PROGRESS_RATE,
    ceiling: int = config.PROGRESS_CEILING,
) -> int:
    """Percent shown after `elapsed` seconds; never reaches 100 before completion."""
    if elapsed <= 0:
        return 0
    return min(ceiling, int(elapsed * rate))


async def track_progress(
    awaitable: Awaitable[T],
    desc: str = "  Generating",
    interval: float = config.PROGRESS_INTERVAL,
) -> T:
    """
    Await `awaitable` while a tqdm bar ticks the synthetic percentage.

    Args:
        awaitable: The work to wait for
        desc: Progress bar label
        interval: Seconds between bar updates

    Returns:
        The awaitable's result. Its exception propagates unchanged.
    """
    loop = asyncio.get_running_loop()
    task = asyncio.ensure_future(awaitable)
    start = loop.time()

    with tqdm(total=100, desc=desc, unit="%") as pbar:
        try:
            while not task.done():
                await asyncio.wait({task}, timeout=interval)
                percent = synthetic_percent(loop.time() - start)
                if percent > pbar.n:
                    pbar.update(percent - pbar.n)
        finally:
            if not task.done():
                task.cancel()

        result = task.result()
        pbar.update(100 - pbar.n)

    return result
