"""Bounded worker pool that checks dependency entries concurrently."""

import asyncio
import time

from peercompat.core.models import DependencyEntry, ResultRecord, RunSummary, ScanOptions
from peercompat.engine.aggregator import ResultAggregator
from peercompat.engine.checker import PackageChecker
from peercompat.engine.progress import ProgressPublisher
from peercompat.utils.logging import get_logger

logger = get_logger(__name__)


class WorkerPool:
    """Run ``min(jobs, N)`` workers over a shared FIFO queue of entries.

    Each worker dequeues one entry, checks it to completion, then takes the
    next. A failure while checking one entry yields a failure record and
    never stops the pool; the pool finishes once the queue is drained and
    every in-flight check has returned.
    """

    def __init__(
        self,
        checker: PackageChecker,
        options: ScanOptions,
        progress: ProgressPublisher | None = None,
    ) -> None:
        self.checker = checker
        self.options = options
        self.progress = progress or ProgressPublisher()
        self.summary: RunSummary | None = None
        self._finished = 0
        self._version_lookups = 0

    async def _process(self, entry: DependencyEntry, worker_id: int) -> ResultRecord:
        def on_status(status: str) -> None:
            self.progress.status(worker_id, status)

        try:
            record = await self.checker.check(entry, on_status)
        except Exception as e:
            logger.exception("Unexpected error while checking %s", entry.name)
            record = self.checker.failure_record(entry, f"unexpected error ({e})")

        if self.options.verbose:
            if record.failed:
                on_status(f"FAIL: {entry.name}")
            else:
                on_status(f"OK: {entry.name} -> {record.recommendation.display}")
        return record

    async def _worker(
        self,
        worker_id: int,
        queue: "asyncio.Queue[DependencyEntry]",
        aggregator: ResultAggregator,
        total: int,
    ) -> None:
        while True:
            try:
                entry = queue.get_nowait()
            except asyncio.QueueEmpty:
                break

            record = await self._process(entry, worker_id)
            await aggregator.add(record)
            self._version_lookups += record.versions_probed
            self._finished += 1
            self.progress.finished(self._finished, total)

        self.progress.status(worker_id, "Finished.")

    async def run(self, entries: list[DependencyEntry]) -> list[ResultRecord]:
        """Check every entry and return the results in final order.

        Args:
            entries: Dependency entries; read-only.

        Returns:
            Exactly one record per entry, runtime dependencies first, then
            by name.
        """
        started = time.monotonic()
        total = len(entries)
        worker_count = min(self.options.jobs, total)
        self._finished = 0
        self._version_lookups = 0

        aggregator = ResultAggregator()
        queue: asyncio.Queue[DependencyEntry] = asyncio.Queue()
        for entry in entries:
            queue.put_nowait(entry)

        self.progress.start(total, worker_count)
        try:
            if worker_count:
                await asyncio.gather(
                    *(
                        self._worker(worker_id, queue, aggregator, total)
                        for worker_id in range(worker_count)
                    )
                )
        finally:
            self.progress.complete()

        self.summary = RunSummary(
            packages=len(aggregator),
            version_lookups=self._version_lookups,
            concurrency=worker_count,
            target_major=self.options.target_major,
            mode=self.options.mode,
            elapsed_seconds=time.monotonic() - started,
            failures=aggregator.failures,
        )
        logger.debug(
            "Checked %d packages with %d workers (%d failures)",
            self.summary.packages,
            worker_count,
            self.summary.failures,
        )
        return aggregator.sorted_results()
