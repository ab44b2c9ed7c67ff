from queueaio import Task
from queueaio._internal.common.datastructures import Dispatch


def test_task_defaults() -> None:
    task = Task(id=1, payload={"url": "https://"})
    assert task.attempts == 0
    assert task == Task(id=1, payload={"url": "https://"})


def test_dispatch() -> None:
    tasks = (Task(id=4, payload="a"), Task(id=5, payload="b"))
    dispatch = Dispatch(unit_id=0, tasks=tasks, grouped=True)
    assert dispatch.task_ids == (4, 5)
    assert dispatch.batch() == {4: "a", 5: "b"}
    assert not dispatch.completed
    assert dispatch != Dispatch(unit_id=0, tasks=tasks, grouped=True)
    assert len({dispatch, dispatch}) == 1
