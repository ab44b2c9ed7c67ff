from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Any, overload

from queueaio._internal.common.constants import SchedulerEvent

if TYPE_CHECKING:
    from collections.abc import Callable

    from queueaio._internal.common.types import Listener


logger = logging.getLogger("queueaio.emitter")


class _Once:
    __slots__: tuple[str, ...] = ("emitter", "event", "listener")

    def __init__(
        self,
        emitter: EventEmitter,
        event: SchedulerEvent,
        listener: Listener,
    ) -> None:
        self.emitter = emitter
        self.event = event
        self.listener = listener

    def __call__(self, *args: Any) -> Any:  # noqa: ANN401
        self.emitter.off(self.event, self)
        return self.listener(*args)


class EventEmitter:
    """Named-event listener registry.

    Emitting ``error`` while no listener is attached raises the error,
    so mistakes surface loudly unless the caller opts in to handling
    them.
    """

    __slots__: tuple[str, ...] = ("_listeners", "_listener_tasks")

    def __init__(self) -> None:
        self._listeners: defaultdict[SchedulerEvent, list[Listener]] = (
            defaultdict(list)
        )
        self._listener_tasks: set[asyncio.Task[Any]] = set()

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
        key = SchedulerEvent(event)

        def wrapper(listener: Listener) -> Listener:
            self._listeners[key].append(listener)
            return listener

        if listener is not None:
            return wrapper(listener)
        return wrapper

    def once(self, event: SchedulerEvent | str, listener: Listener) -> None:
        key = SchedulerEvent(event)
        self._listeners[key].append(_Once(self, key, listener))

    def off(self, event: SchedulerEvent | str, listener: Listener) -> None:
        listeners = self._listeners[SchedulerEvent(event)]
        for registered in listeners:
            if registered == listener or (
                isinstance(registered, _Once)
                and registered.listener == listener
            ):
                listeners.remove(registered)
                return

    def listeners(self, event: SchedulerEvent | str) -> list[Listener]:
        return [
            registered.listener
            if isinstance(registered, _Once)
            else registered
            for registered in self._listeners[SchedulerEvent(event)]
        ]

    def emit(self, event: SchedulerEvent | str, *args: Any) -> bool:  # noqa: ANN401
        key = SchedulerEvent(event)
        listeners = tuple(self._listeners[key])
        if key is SchedulerEvent.ERROR and not listeners:
            exc = args[0] if args else None
            if isinstance(exc, BaseException):
                raise exc
            msg = f"Unhandled error event: {exc!r}"
            raise RuntimeError(msg)

        for listener in listeners:
            if inspect.iscoroutinefunction(listener) or (
                isinstance(listener, _Once)
                and inspect.iscoroutinefunction(listener.listener)
            ):
                self._spawn(listener, args)
            else:
                _ = listener(*args)
        return bool(listeners)

    def _spawn(self, listener: Listener, args: tuple[Any, ...]) -> None:
        loop = asyncio.get_running_loop()
        task = loop.create_task(listener(*args))  # pyright: ignore[reportArgumentType]
        self._listener_tasks.add(task)
        task.add_done_callback(self._on_listener_done)

    def _on_listener_done(self, task: asyncio.Task[Any]) -> None:
        self._listener_tasks.discard(task)
        if not task.cancelled() and (exc := task.exception()) is not None:
            logger.error(
                "Async listener %s failed",
                task.get_name(),
                exc_info=exc,
            )
