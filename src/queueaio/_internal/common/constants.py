from __future__ import annotations

from enum import Enum, unique

DEFAULT_CONCURRENCY = 1
DEFAULT_GROUP_SIZE = 1
DEFAULT_TICK_INTERVAL = 0.1


@unique
class SchedulerStatus(str, Enum):
    PAUSED = "paused"
    RUNNING = "running"


@unique
class SchedulerEvent(str, Enum):
    ERROR = "error"
    STATUS = "status"
    TASK_COMPLETE = "task-complete"
    TASK_FAILED = "task-failed"
    NEW_WORKER = "new-worker"
    CONCURRENCY_CHANGED = "concurrency-changed"
    GROUPING_ENABLED_CHANGE = "grouping-enabled-change"
    GROUPING_NUM_CHANGE = "grouping-num-change"
    PAUSE = "pause"
    RESUME = "resume"
    CLEARING = "clearing"
    CLEARED = "cleared"

    @classmethod
    def _missing_(cls, value: object) -> SchedulerEvent | None:
        if isinstance(value, str) and value in EVENT_ALIASES:
            return cls(EVENT_ALIASES[value])
        return None


# Alternative names accepted wherever an event name is expected.
EVENT_ALIASES: dict[str, str] = {
    "worker-registered": SchedulerEvent.NEW_WORKER.value,
    "group-size-changed": SchedulerEvent.GROUPING_NUM_CHANGE.value,
    "grouping-changed": SchedulerEvent.GROUPING_ENABLED_CHANGE.value,
    "paused": SchedulerEvent.PAUSE.value,
    "resumed": SchedulerEvent.RESUME.value,
}
