import asyncio
from typing import Any
from unittest.mock import Mock

from queueaio import Done
from tests.conftest import ManualWorker, create_queue, settle


async def test_batch_waits_for_group_size(worker: ManualWorker) -> None:
    queue = create_queue(worker=worker, grouping=True, group_size=3)
    queue.resume()
    _ = queue.submit("a")
    _ = queue.submit("b")
    await asyncio.sleep(0.05)
    assert worker.calls == []

    _ = queue.submit("c")
    await settle()

    assert len(worker.calls) == 1
    call = worker.calls[0]
    assert call.data == {0: "a", 1: "b", 2: "c"}
    assert call.task_id is None
    assert queue.in_flight_count == 1
    assert queue.in_flight_ids == (0, 1, 2)
    queue.pause()


async def test_flush_dispatches_partial_batch(worker: ManualWorker) -> None:
    queue = create_queue(worker=worker, grouping=True, group_size=3)
    queue.resume()
    _ = queue.submit("a")
    _ = queue.submit("b")
    await settle()
    assert worker.calls == []

    queue.flush()
    await settle()

    assert [call.data for call in worker.calls] == [{0: "a", 1: "b"}]
    assert not queue.flushing

    worker.complete(0)
    _ = queue.submit("c")
    await asyncio.sleep(0.05)
    assert len(worker.calls) == 1
    queue.pause()


async def test_flush_survives_until_partial_batch(
    worker: ManualWorker,
) -> None:
    queue = create_queue(worker=worker, grouping=True, group_size=2)
    queue.flush()
    assert queue.flushing

    for payload in ("a", "b", "c"):
        _ = queue.submit(payload)
    queue.resume()
    await settle()
    assert [call.data for call in worker.calls] == [{0: "a", 1: "b"}]
    assert queue.flushing

    worker.complete(0)
    await settle()
    assert worker.calls[1].data == {2: "c"}
    assert not queue.flushing
    queue.pause()


async def test_batch_failure_requeues_every_task(worker: ManualWorker) -> None:
    queue = create_queue(worker=worker, grouping=True, group_size=2)
    failed = Mock()
    completed: list[int] = []
    _ = queue.on("status", Mock())
    _ = queue.on("task-failed", failed)
    _ = queue.on("task-complete", completed.append)
    for payload in ("a", "b", "c"):
        _ = queue.submit(payload)
    queue.resume()
    await settle()

    worker.complete(0, OSError("disk full"))
    await settle()

    assert [call.data for call in worker.calls] == [
        {0: "a", 1: "b"},
        {0: "a", 1: "b"},
    ]
    assert [c.args[0] for c in failed.call_args_list] == [0, 1]
    assert completed == [0, 1]
    assert queue.pending_count == 1
    queue.pause()


async def test_concurrency_counts_batches(worker: ManualWorker) -> None:
    queue = create_queue(
        worker=worker,
        grouping=True,
        group_size=2,
        concurrency=2,
    )
    for num in range(7):
        _ = queue.submit(num)
    queue.resume()
    await settle()

    assert [call.data for call in worker.calls] == [{0: 0, 1: 1}, {2: 2, 3: 3}]
    assert queue.in_flight_count == 2
    assert queue.pending_count == 3

    worker.complete(1)
    await settle()
    assert worker.calls[2].data == {4: 4, 5: 5}
    assert queue.pending_count == 1
    queue.pause()


async def test_grouped_worker_end_to_end() -> None:
    batches: list[dict[int, Any]] = []

    async def worker(
        batch: dict[int, Any],
        _id: int | None,
        done: Done,
    ) -> None:
        await asyncio.sleep(0)
        batches.append(batch)
        done()

    async with create_queue(
        worker=worker,
        grouping=True,
        group_size=4,
        concurrency=2,
    ) as queue:
        for num in range(10):
            _ = queue.submit(num)
        queue.flush()
        await queue.wait_all(timeout=1)

    assert sorted(len(batch) for batch in batches) == [2, 4, 4]
    delivered = sorted(key for batch in batches for key in batch)
    assert delivered == list(range(10))


async def test_toggle_grouping_off(worker: ManualWorker) -> None:
    queue = create_queue(worker=worker, grouping=True, group_size=5)
    queue.resume()
    _ = queue.submit("a")
    await settle()
    assert worker.calls == []

    queue.set_grouping_enabled(False)
    await asyncio.sleep(0.05)
    assert [(call.data, call.task_id) for call in worker.calls] == [("a", 0)]
    queue.pause()
