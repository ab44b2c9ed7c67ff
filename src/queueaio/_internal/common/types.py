import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeAlias

Batch: TypeAlias = dict[int, Any]
LoopFactory: TypeAlias = Callable[[], asyncio.AbstractEventLoop]
Listener: TypeAlias = Callable[..., Awaitable[None] | None]


class Done(Protocol):
    def __call__(
        self,
        error: object = None,
        task_id: int | None = None,
    ) -> None: ...


Worker: TypeAlias = Callable[[Any, int | None, Done], Awaitable[None] | None]
