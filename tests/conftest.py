import asyncio
from typing import Any, NamedTuple

import pytest

from queueaio import Done, Queueaio

TICK_INTERVAL = 0.01


class WorkerCall(NamedTuple):
    data: Any
    task_id: int | None
    done: Done


class ManualWorker:
    """Records every invocation and leaves completion to the test."""

    def __init__(self) -> None:
        self.calls: list[WorkerCall] = []

    def __call__(self, data: Any, task_id: int | None, done: Done) -> None:
        self.calls.append(WorkerCall(data, task_id, done))

    def complete(self, index: int = 0, error: object = None) -> None:
        call = self.calls[index]
        call.done(error, call.task_id)


def succeed(_data: Any, task_id: int | None, done: Done) -> None:
    done(None, task_id)


async def settle(rounds: int = 5) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


def create_queue(**kwargs: Any) -> Queueaio:
    kwargs.setdefault("tick_interval", TICK_INTERVAL)
    return Queueaio(**kwargs)


@pytest.fixture
def worker() -> ManualWorker:
    return ManualWorker()
