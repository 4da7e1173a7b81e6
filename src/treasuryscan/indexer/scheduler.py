"""Bounded-concurrency execution of window pipelines in paced groups."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from treasuryscan.domain.enums import SkipReason
from treasuryscan.domain.models.run import RunTotals
from treasuryscan.domain.models.transfer import BlockRange

logger = logging.getLogger(__name__)

# Records its results into the RunTotals it is handed; that instance is owned by one window
WindowWorker = Callable[[BlockRange, RunTotals], Awaitable[None]]


def group_windows(windows: Sequence[BlockRange], size: int) -> list[list[BlockRange]]:
    """Partition `windows` into consecutive groups of at most `size`, preserving order."""
    if size < 1:
        raise ValueError(f"group size must be >= 1, got {size}")
    return [list(windows[i:i + size]) for i in range(0, len(windows), size)]


class BatchScheduler:
    """Runs one group of windows concurrently, waits for all of them, pauses, repeats.

    A failing window is logged and counted; it never aborts its group or later groups.
    Whatever a window recorded before it failed or timed out is still merged, since
    records it already committed stay in the ledger.
    """

    def __init__(
        self,
        max_concurrency: int,
        batch_delay_ms: int = 0,
        window_timeout: float | None = None,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self._max_concurrency = max_concurrency
        self._delay = batch_delay_ms / 1000
        self._window_timeout = window_timeout

    async def _run_window(self, window: BlockRange, partial: RunTotals, worker: WindowWorker) -> None:
        if self._window_timeout is None:
            await worker(window, partial)
        else:
            await asyncio.wait_for(worker(window, partial), timeout=self._window_timeout)

    async def run(
        self, windows: Sequence[BlockRange], worker: WindowWorker
    ) -> tuple[RunTotals, list[BlockRange]]:
        """Process every window. Returns merged totals and the windows that failed."""
        groups = group_windows(windows, self._max_concurrency)
        totals = RunTotals()
        failed: list[BlockRange] = []

        for idx, group in enumerate(groups, start=1):
            partials = [RunTotals() for _ in group]
            results = await asyncio.gather(
                *(self._run_window(w, p, worker) for w, p in zip(group, partials)),
                return_exceptions=True,
            )

            group_failed = 0
            for window, partial, result in zip(group, partials, results):
                if isinstance(result, BaseException):
                    if isinstance(result, (KeyboardInterrupt, SystemExit)):
                        raise result
                    group_failed += 1
                    failed.append(window)
                    logger.warning(
                        "Window %s failed after %d record(s) were written, the rest of its transfers are skipped: %r",
                        window, partial.records_written, result,
                    )
                totals = totals.merge(partial)

            if group_failed:
                totals.add_skip(SkipReason.WINDOW_FAILED, group_failed)

            logger.info(
                "Group %d/%d: %d windows (%d failed), blocks %d-%d, %d records written so far",
                idx, len(groups), len(group), group_failed,
                group[0].from_block, group[-1].to_block, totals.records_written,
            )

            if idx < len(groups) and self._delay > 0:
                await asyncio.sleep(self._delay)

        return totals, failed
