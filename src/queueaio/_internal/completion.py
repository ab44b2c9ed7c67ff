from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, final

from typing_extensions import override

if TYPE_CHECKING:
    from queueaio._internal.common.datastructures import Dispatch
    from queueaio._internal.scheduler import Scheduler

logger = logging.getLogger("queueaio.scheduler")


@final
class Completion:
    """The ``done`` callback handed to a worker for one dispatch unit.

    Call it exactly once with ``None`` on success or an exception
    instance on failure. It may be called from any thread.
    """

    __slots__: tuple[str, ...] = ("_dispatch", "_loop", "_scheduler")

    def __init__(
        self,
        *,
        scheduler: Scheduler,
        dispatch: Dispatch,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self._scheduler = scheduler
        self._dispatch = dispatch
        self._loop = loop

    @property
    def done(self) -> bool:
        return self._dispatch.completed

    @override
    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}("
            f"unit_id={self._dispatch.unit_id}, "
            f"task_ids={list(self._dispatch.task_ids)}, done={self.done})"
        )

    def __call__(
        self,
        error: object = None,
        task_id: int | None = None,
    ) -> None:
        if task_id is not None and task_id not in self._dispatch.task_ids:
            logger.debug(
                "done() got task_id %s outside of dispatch %s, ignoring it",
                task_id,
                self._dispatch.task_ids,
            )
        if self._in_loop_thread():
            self._scheduler._complete(self._dispatch, error)  # noqa: SLF001
        else:
            _ = self._loop.call_soon_threadsafe(
                self._scheduler._complete,  # noqa: SLF001
                self._dispatch,
                error,
            )

    def _in_loop_thread(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False
