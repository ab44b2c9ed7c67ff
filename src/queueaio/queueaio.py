"""Queueaio entrypoint."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, overload

from typing_extensions import Self, override

from queueaio._internal.common.constants import (
    DEFAULT_CONCURRENCY,
    DEFAULT_GROUP_SIZE,
    DEFAULT_TICK_INTERVAL,
    SchedulerEvent,
    SchedulerStatus,
)
from queueaio._internal.configuration import (
    SchedulerConfiguration,
    validate_concurrency,
    validate_group_size,
    validate_grouping,
    validate_worker,
)
from queueaio._internal.exceptions import InvalidConfigurationError
from queueaio._internal.scheduler import Scheduler

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from queueaio._internal.common.types import Listener, LoopFactory, Worker


class Queueaio(Scheduler):
    """An in-process queue with bounded concurrency and retry-to-front.

    Submitted payloads are handed to a single worker callable with the
    signature ``worker(data, task_id, done)``. The worker must call
    ``done(None)`` on success or ``done(exc)`` with an exception
    instance on failure; failed tasks go back to the front of the queue
    and are redelivered until they succeed.

    With grouping enabled the worker receives ``{task_id: payload}``
    batches of ``group_size`` tasks and ``task_id`` is ``None``.

    The queue starts paused. Call `resume()` (or use ``async with``) to
    start dispatching.

    Example:
        ```python
        async def worker(data, task_id, done):
            await send(data)
            done(None, task_id)

        async with Queueaio(worker, concurrency=4) as queue:
            for item in items:
                queue.submit(item)
            await queue.wait_all()
        ```

    """

    __slots__: tuple[str, ...] = ()

    def __init__(  # noqa: PLR0913
        self,
        worker: Worker | None = None,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
        group_size: int = DEFAULT_GROUP_SIZE,
        grouping: bool = False,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        loop_factory: LoopFactory = asyncio.get_running_loop,
    ) -> None:
        """Initialize a `Queueaio` instance.

        Invalid arguments raise the matching `InvalidConfigurationError`
        subclass immediately, since no ``error`` listener can be
        attached yet.
        """
        super().__init__(
            config=SchedulerConfiguration(
                loop_factory=loop_factory,
                tick_interval=tick_interval,
            )
        )
        self.set_concurrency(concurrency)
        self.set_group_size(group_size)
        self.set_grouping_enabled(grouping)
        if worker is not None:
            self.set_worker(worker)

    @override
    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}("
            f"status={self.status.value}, "
            f"concurrency={self.concurrency}, "
            f"pending={self.pending_count}, "
            f"in_flight={self.in_flight_count})"
        )

    @property
    def worker(self) -> Worker | None:
        return self._worker

    @property
    def has_worker(self) -> bool:
        return self._worker is not None

    @property
    def concurrency(self) -> int:
        return self._config.concurrency

    @property
    def group_size(self) -> int:
        return self._config.group_size

    @property
    def grouping_enabled(self) -> bool:
        return self._config.grouping

    @property
    def paused(self) -> bool:
        return self._config.paused

    @property
    def flushing(self) -> bool:
        return self._config.flushing

    @property
    def status(self) -> SchedulerStatus:
        if self._config.paused:
            return SchedulerStatus.PAUSED
        return SchedulerStatus.RUNNING

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def in_flight_count(self) -> int:
        """Number of dispatch units (tasks or batches) awaiting ``done``."""
        return len(self._dispatches)

    @property
    def in_flight_ids(self) -> tuple[int, ...]:
        return tuple(self._in_flight)

    @overload
    def on(
        self,
        event: SchedulerEvent | str,
        listener: None = None,
    ) -> Callable[[Listener], Listener]: ...

    @overload
    def on(
        self,
        event: SchedulerEvent | str,
        listener: Listener,
    ) -> Listener: ...

    def on(
        self,
        event: SchedulerEvent | str,
        listener: Listener | None = None,
    ) -> Listener | Callable[[Listener], Listener]:
        """Attach ``listener`` to ``event``; usable as a decorator."""
        return self.events.on(event, listener)

    def once(self, event: SchedulerEvent | str, listener: Listener) -> None:
        self.events.once(event, listener)

    def off(self, event: SchedulerEvent | str, listener: Listener) -> None:
        self.events.off(event, listener)

    def set_worker(self, worker: Worker) -> None:
        """Register the worker. The last registered worker wins."""
        try:
            self._worker = validate_worker(worker)
        except InvalidConfigurationError as exc:
            self._report(exc)
            return
        self.events.emit(SchedulerEvent.NEW_WORKER, worker)

    def set_concurrency(self, concurrency: int) -> None:
        """Set how many dispatch units may be in flight at once."""
        try:
            self._config.concurrency = validate_concurrency(concurrency)
        except InvalidConfigurationError as exc:
            self._report(exc)
            return
        self.events.emit(SchedulerEvent.CONCURRENCY_CHANGED, concurrency)
        self._run()

    def set_group_size(self, group_size: int) -> None:
        try:
            self._config.group_size = validate_group_size(group_size)
        except InvalidConfigurationError as exc:
            self._report(exc)
            return
        self.events.emit(SchedulerEvent.GROUPING_NUM_CHANGE, group_size)

    def set_grouping_enabled(self, enabled: bool) -> None:  # noqa: FBT001
        try:
            self._config.grouping = validate_grouping(enabled)
        except InvalidConfigurationError as exc:
            self._report(exc)
            return
        self.events.emit(SchedulerEvent.GROUPING_ENABLED_CHANGE, enabled)

    def _report(self, exc: Exception) -> None:
        self.events.emit(SchedulerEvent.ERROR, exc)

    async def wait_all(self, timeout: float | None = None) -> None:
        """Wait until no task is pending or in flight.

        A paused queue with pending tasks never becomes idle, so pass a
        ``timeout`` unless the queue is known to be running. On timeout
        `asyncio.TimeoutError` is raised.
        """
        if self._idle.is_set():
            return
        _ = await asyncio.wait_for(self._idle.wait(), timeout=timeout)

    async def startup(self) -> None:
        self.resume()

    async def shutdown(self, timeout: float | None = None) -> None:
        """Pause and wait for in-flight work to finish.

        Pending tasks stay queued and are dispatched again after
        `resume()`. In-flight workers are never cancelled; a worker that
        never calls ``done`` blocks this method until ``timeout``.
        """
        self.pause()
        if self._drained.is_set():
            return
        _ = await asyncio.wait_for(self._drained.wait(), timeout=timeout)

    async def __aenter__(self) -> Self:
        await self.startup()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_val: BaseException | None = None,
        exc_tb: TracebackType | None = None,
    ) -> None:
        await self.shutdown()
