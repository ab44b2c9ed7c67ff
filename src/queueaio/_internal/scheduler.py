from __future__ import annotations

import asyncio
import inspect
import logging
from collections import deque
from itertools import count
from typing import TYPE_CHECKING, Any

from queueaio._internal.common.constants import SchedulerEvent
from queueaio._internal.common.datastructures import Dispatch, Task
from queueaio._internal.completion import Completion
from queueaio._internal.emitter import EventEmitter
from queueaio._internal.exceptions import (
    BaseQueueaioError,
    NonErrorFailureError,
    WorkerFailureError,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from queueaio._internal.common.types import Worker
    from queueaio._internal.configuration import SchedulerConfiguration


logger = logging.getLogger("queueaio.scheduler")


class Scheduler:
    """Dispatch engine: pending queue, in-flight units and retries.

    All state is mutated from the event loop thread only. Worker calls
    are deferred with ``loop.call_soon`` and never run inside a
    scheduling pass.
    """

    __slots__: tuple[str, ...] = (
        "_config",
        "_dispatches",
        "_drained",
        "_idle",
        "_in_flight",
        "_pending",
        "_task_ids",
        "_tick_handle",
        "_unit_ids",
        "_worker",
        "_worker_tasks",
        "events",
    )

    def __init__(self, *, config: SchedulerConfiguration) -> None:
        self.events: EventEmitter = EventEmitter()
        self._config: SchedulerConfiguration = config
        self._worker: Worker | None = None
        self._task_ids: count[int] = count()
        self._unit_ids: count[int] = count()
        self._pending: deque[Task] = deque()
        self._in_flight: dict[int, Task] = {}
        self._dispatches: set[Dispatch] = set()
        self._worker_tasks: set[asyncio.Task[Any]] = set()
        self._tick_handle: asyncio.TimerHandle | None = None
        self._idle: asyncio.Event = asyncio.Event()
        self._drained: asyncio.Event = asyncio.Event()
        self._refresh_waiters()

    def submit(self, payload: Any) -> int:  # noqa: ANN401
        """Queue ``payload`` and return its task id.

        The id is assigned synchronously; the worker is called later.
        Submitting never fails, the pending queue is unbounded.
        """
        task = Task(id=next(self._task_ids), payload=payload)
        self._pending.append(task)
        logger.debug("Task %s submitted", task.id)
        self._refresh_waiters()
        self._run()
        return task.id

    def pause(self) -> None:
        """Stop starting new work. In-flight work runs to completion."""
        if self._config.paused:
            return
        self._config.paused = True
        self._disarm_tick()
        self.events.emit(SchedulerEvent.PAUSE)

    def resume(self) -> None:
        if not self._config.paused:
            return
        self._config.paused = False
        self.events.emit(SchedulerEvent.RESUME)
        self._run()
        if not self._config.paused:
            self._arm_tick()

    def clear(self) -> None:
        """Drop every pending task. In-flight tasks are left alone."""
        self.events.emit(SchedulerEvent.CLEARING)
        dropped = len(self._pending)
        self._pending.clear()
        self._refresh_waiters()
        logger.debug("Cleared %d pending tasks", dropped)
        self.events.emit(SchedulerEvent.CLEARED)

    def flush(self) -> None:
        """Allow the next grouped dispatch to send an undersized batch."""
        self._config.flushing = True
        self._run()

    def _run(self) -> None:
        capacity = max(0, self._config.concurrency - len(self._dispatches))
        to_start = min(self._available_units(), capacity)
        # One attempt more than can start: the surplus one is a no-op
        # unless there is no worker, in which case it pauses.
        for _ in range(to_start + 1):
            self._go()

    def _available_units(self) -> int:
        pending = len(self._pending)
        if not self._config.grouping:
            return pending
        full, rest = divmod(pending, self._config.group_size)
        return full + int(self._config.flushing and rest > 0)

    def _go(self) -> None:
        if self._config.paused:
            return
        if self._worker is None:
            msg = "There is no worker.  Reverting to paused."
            logger.warning(msg)
            self.events.emit(SchedulerEvent.STATUS, msg)
            self.pause()
            return
        if len(self._dispatches) >= self._config.concurrency:
            return
        if self._config.grouping:
            self._go_grouped()
        else:
            self._go_single()

    def _go_single(self) -> None:
        if not self._pending:
            return
        task = self._pending.popleft()
        self._start(Dispatch(unit_id=next(self._unit_ids), tasks=(task,)))

    def _go_grouped(self) -> None:
        group_size = self._config.group_size
        if not self._config.flushing and len(self._pending) < group_size:
            return
        take = min(group_size, len(self._pending))
        tasks = tuple(self._pending.popleft() for _ in range(take))
        if not tasks:
            return
        if len(tasks) < group_size:
            self._config.flushing = False
        self._start(
            Dispatch(unit_id=next(self._unit_ids), tasks=tasks, grouped=True)
        )

    def _start(self, dispatch: Dispatch) -> None:
        loop = self._config.loop_factory()
        worker = self._worker
        self._dispatches.add(dispatch)
        for task in dispatch.tasks:
            self._in_flight[task.id] = task
        self._refresh_waiters()

        done = Completion(scheduler=self, dispatch=dispatch, loop=loop)
        if dispatch.grouped:
            data, task_id = dispatch.batch(), None
        else:
            data, task_id = dispatch.tasks[0].payload, dispatch.tasks[0].id
        logger.debug(
            "Dispatching unit %s with tasks %s",
            dispatch.unit_id,
            list(dispatch.task_ids),
        )
        _ = loop.call_soon(self._invoke, worker, data, task_id, done, loop)

    def _invoke(  # noqa: PLR0913
        self,
        worker: Worker,
        data: Any,  # noqa: ANN401
        task_id: int | None,
        done: Completion,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        try:
            result = worker(data, task_id, done)
        except BaseQueueaioError:
            raise
        except Exception as exc:
            self._on_worker_raised(done, exc)
            return

        if inspect.isawaitable(result):
            task = loop.create_task(self._await_worker(result, done))
            self._worker_tasks.add(task)
            task.add_done_callback(self._on_worker_task_done)

    async def _await_worker(
        self,
        awaitable: Awaitable[Any],
        done: Completion,
    ) -> None:
        try:
            _ = await awaitable
        except BaseQueueaioError:
            raise
        except Exception as exc:
            self._on_worker_raised(done, exc)

    def _on_worker_raised(self, done: Completion, exc: Exception) -> None:
        if done.done:
            logger.error(
                "Worker raised after reporting completion for %r",
                done,
                exc_info=exc,
            )
            return
        done(exc)

    def _on_worker_task_done(self, task: asyncio.Task[Any]) -> None:
        self._worker_tasks.discard(task)
        if task.cancelled() or (exc := task.exception()) is None:
            return
        if isinstance(exc, BaseQueueaioError):
            # Same path an exception from a sync worker callback takes.
            task.get_loop().call_exception_handler(
                {
                    "message": f"Worker task {task.get_name()} failed",
                    "exception": exc,
                    "task": task,
                }
            )
        else:
            logger.error(
                "Worker task %s failed",
                task.get_name(),
                exc_info=exc,
            )

    def _complete(self, dispatch: Dispatch, error: object) -> None:
        if dispatch.completed:
            logger.warning(
                "done() called more than once for unit %s "
                "(tasks %s), ignoring",
                dispatch.unit_id,
                list(dispatch.task_ids),
            )
            return
        if error is not None and not isinstance(error, Exception):
            exc = NonErrorFailureError(error, dispatch.task_ids)
            self.events.emit(SchedulerEvent.ERROR, exc)
            return

        dispatch.completed = True
        self._dispatches.discard(dispatch)
        for task in dispatch.tasks:
            _ = self._in_flight.pop(task.id, None)

        if isinstance(error, Exception):
            self._requeue(dispatch, error)

        self._refresh_waiters()
        for task in dispatch.tasks:
            self.events.emit(SchedulerEvent.TASK_COMPLETE, task.id)
        self._run()

    def _requeue(self, dispatch: Dispatch, error: Exception) -> None:
        for task in reversed(dispatch.tasks):
            task.attempts += 1
            self._pending.appendleft(task)

        msg = (
            "Worker failed.  Returning task to front of queue.  "
            f"Error message: {error}"
        )
        logger.warning("%s (task_ids: %s)", msg, list(dispatch.task_ids))
        self.events.emit(SchedulerEvent.STATUS, msg)
        for task in dispatch.tasks:
            failure = WorkerFailureError(task.id, task.attempts, error)
            self.events.emit(SchedulerEvent.TASK_FAILED, task.id, failure)

    def _arm_tick(self) -> None:
        loop = self._config.loop_factory()
        self._tick_handle = loop.call_later(
            self._config.tick_interval,
            self._tick,
        )

    def _disarm_tick(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _tick(self) -> None:
        self._tick_handle = None
        if self._config.paused:
            return
        self._run()
        if not self._config.paused:
            self._arm_tick()

    def _refresh_waiters(self) -> None:
        if self._dispatches:
            self._drained.clear()
        else:
            self._drained.set()
        if self._dispatches or self._pending:
            self._idle.clear()
        else:
            self._idle.set()
