from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from queueaio._internal.common.constants import (
    DEFAULT_CONCURRENCY,
    DEFAULT_GROUP_SIZE,
    DEFAULT_TICK_INTERVAL,
)
from queueaio._internal.exceptions import (
    InvalidArgumentError,
    InvalidConcurrencyError,
    InvalidGroupSizeError,
    InvalidWorkerError,
)

if TYPE_CHECKING:
    from queueaio._internal.common.types import LoopFactory, Worker


@dataclass(slots=True, kw_only=True)
class SchedulerConfiguration:
    loop_factory: LoopFactory = asyncio.get_running_loop
    concurrency: int = DEFAULT_CONCURRENCY
    group_size: int = DEFAULT_GROUP_SIZE
    grouping: bool = False
    tick_interval: float = DEFAULT_TICK_INTERVAL
    paused: bool = True
    flushing: bool = False

    def __post_init__(self) -> None:
        if not _is_number(self.tick_interval) or self.tick_interval <= 0:
            msg = (
                f"tick_interval must be a positive number of seconds, "
                f"got {self.tick_interval!r}."
            )
            raise ValueError(msg)


def _is_int(value: Any) -> bool:  # noqa: ANN401
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:  # noqa: ANN401
    return isinstance(value, int | float) and not isinstance(value, bool)


def validate_worker(value: Any) -> Worker:  # noqa: ANN401
    if not callable(value):
        raise InvalidWorkerError(value)
    return value


def validate_concurrency(value: Any) -> int:  # noqa: ANN401
    if not _is_int(value) or value < 0:
        raise InvalidConcurrencyError(value)
    return value


def validate_group_size(value: Any) -> int:  # noqa: ANN401
    if not _is_int(value) or value < 1:
        raise InvalidGroupSizeError(value)
    return value


def validate_grouping(value: Any) -> bool:  # noqa: ANN401
    if not isinstance(value, bool):
        raise InvalidArgumentError(value, name="grouping", expected="a bool")
    return value
