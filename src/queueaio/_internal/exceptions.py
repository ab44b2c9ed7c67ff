from __future__ import annotations

from typing import Any


class BaseQueueaioError(Exception):
    pass


class InvalidConfigurationError(BaseQueueaioError, ValueError):
    """Raised when a scheduler setting receives a malformed value."""

    def __init__(self, value: Any, msg: str) -> None:  # noqa: ANN401
        self.value: Any = value
        super().__init__(msg)


class InvalidWorkerError(InvalidConfigurationError, TypeError):
    def __init__(self, value: Any) -> None:  # noqa: ANN401
        super().__init__(
            value,
            f"Worker must be a callable, got {type(value).__name__!r}.",
        )


class InvalidConcurrencyError(InvalidConfigurationError):
    def __init__(self, value: Any) -> None:  # noqa: ANN401
        super().__init__(
            value,
            (
                f"Invalid integer provided for concurrency: {value!r}. "
                "Concurrency must be an integer >= 0."
            ),
        )


class InvalidGroupSizeError(InvalidConfigurationError):
    def __init__(self, value: Any) -> None:  # noqa: ANN401
        super().__init__(
            value,
            (
                f"Invalid integer provided for group size: {value!r}. "
                "Group size must be a positive integer."
            ),
        )


class InvalidArgumentError(InvalidConfigurationError, TypeError):
    def __init__(self, value: Any, *, name: str, expected: str) -> None:  # noqa: ANN401
        self.name: str = name
        super().__init__(
            value,
            f"Invalid value for {name}: {value!r}. Expected {expected}.",
        )


class NonErrorFailureError(BaseQueueaioError):
    """Raised when a worker reports failure with a non-exception value.

    The completion callback accepts only ``None`` (success) or an
    ``Exception`` instance (failure). Anything else is a bug in the
    worker and is not retried.
    """

    def __init__(self, value: Any, task_ids: tuple[int, ...]) -> None:  # noqa: ANN401
        self.value: Any = value
        self.task_ids: tuple[int, ...] = task_ids
        super().__init__(
            "Non-error error returned from worker: "
            f"{value!r} (task_ids: {list(task_ids)})."
        )


class WorkerFailureError(BaseQueueaioError):
    """Describes one failed delivery of a task.

    Passed to ``task-failed`` listeners; the scheduler itself never
    raises it, the task is retried instead.
    """

    def __init__(self, task_id: int, attempt: int, reason: Exception) -> None:
        self.task_id: int = task_id
        self.attempt: int = attempt
        self.reason: Exception = reason
        super().__init__(
            f"task_id: {task_id}, attempt: {attempt}, failed_reason: {reason}"
        )
