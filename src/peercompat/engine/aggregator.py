"""Collects one result record per dependency entry."""

import asyncio

from peercompat.core.models import ResultRecord


def result_sort_key(record: ResultRecord) -> tuple[bool, str, str]:
    """Runtime dependencies first, then locale-style name order.

    Names compare case-insensitively; on a tie lowercase sorts before
    uppercase.
    """
    return (record.is_dev, record.name.casefold(), record.name.swapcase())


class ResultAggregator:
    """Append-only result collection shared by all workers."""

    def __init__(self) -> None:
        self._results: list[ResultRecord] = []
        self._lock = asyncio.Lock()

    async def add(self, record: ResultRecord) -> None:
        async with self._lock:
            self._results.append(record)

    def __len__(self) -> int:
        return len(self._results)

    @property
    def failures(self) -> int:
        return sum(1 for record in self._results if record.failed)

    def sorted_results(self) -> list[ResultRecord]:
        """Return the results in final, deterministic order."""
        return sorted(self._results, key=result_sort_key)
