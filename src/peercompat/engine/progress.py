"""Progress events published by the worker pool.

The pool only knows the ``ProgressObserver`` interface; terminal rendering
lives in ``RichProgressObserver`` and is attached by the CLI. Events are
observational: an observer that raises is logged and ignored.
"""

from typing import Protocol

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from peercompat.utils.logging import get_logger

logger = get_logger(__name__)


class ProgressObserver(Protocol):
    """Receiver of scheduler progress events."""

    def on_start(self, total: int, worker_count: int) -> None: ...

    def on_status(self, worker_id: int, status: str) -> None: ...

    def on_finished(self, finished: int, total: int) -> None: ...

    def on_complete(self) -> None: ...


class ProgressTracker:
    """Pollable snapshot of run progress.

    Each worker writes only to its own status slot, so readers never need to
    coordinate with workers.
    """

    def __init__(self) -> None:
        self.total = 0
        self.finished = 0
        self.statuses: list[str] = []

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 100.0
        return self.finished / self.total * 100

    def on_start(self, total: int, worker_count: int) -> None:
        self.total = total
        self.finished = 0
        self.statuses = ["idle"] * worker_count

    def on_status(self, worker_id: int, status: str) -> None:
        self.statuses[worker_id] = status

    def on_finished(self, finished: int, total: int) -> None:
        self.finished = finished
        self.total = total

    def on_complete(self) -> None:
        pass


class ProgressPublisher:
    """Fans scheduler events out to any number of observers."""

    def __init__(self, observers: list[ProgressObserver] | None = None) -> None:
        self.observers: list[ProgressObserver] = list(observers or [])

    def subscribe(self, observer: ProgressObserver) -> None:
        self.observers.append(observer)

    def _emit(self, method: str, *args: object) -> None:
        for observer in self.observers:
            try:
                getattr(observer, method)(*args)
            except Exception as e:
                logger.debug("Progress observer %r failed on %s: %s", observer, method, e)

    def start(self, total: int, worker_count: int) -> None:
        self._emit("on_start", total, worker_count)

    def status(self, worker_id: int, status: str) -> None:
        self._emit("on_status", worker_id, status)

    def finished(self, finished: int, total: int) -> None:
        self._emit("on_finished", finished, total)

    def complete(self) -> None:
        self._emit("on_complete")


class RichProgressObserver:
    """Render overall progress and one status line per worker on stderr."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)
        self._progress: Progress | None = None
        self._overall: TaskID | None = None
        self._workers: list[TaskID] = []

    def on_start(self, total: int, worker_count: int) -> None:
        self._progress = Progress(
            TextColumn("{task.description}"),
            BarColumn(bar_width=40),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )
        self._overall = self._progress.add_task("Overall", total=total)
        self._workers = [
            self._progress.add_task(escape(f"  [Worker {i + 1}] idle"), total=None, start=False)
            for i in range(worker_count)
        ]
        self._progress.start()

    def on_status(self, worker_id: int, status: str) -> None:
        if self._progress is None:
            return
        self._progress.update(self._workers[worker_id], description=escape(f"  [Worker {worker_id + 1}] {status}"))

    def on_finished(self, finished: int, total: int) -> None:
        if self._progress is None or self._overall is None:
            return
        self._progress.update(self._overall, completed=finished, total=total)

    def on_complete(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
