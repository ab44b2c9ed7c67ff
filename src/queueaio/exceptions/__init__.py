"""Custom exceptions for the queueaio library.

This module defines the exceptions that the queueaio scheduler can
raise or report through its ``error`` and ``task-failed`` events.
Configuration errors are recoverable, contract violations by a worker
are not.
"""

from queueaio._internal.exceptions import (
    BaseQueueaioError,
    InvalidArgumentError,
    InvalidConcurrencyError,
    InvalidConfigurationError,
    InvalidGroupSizeError,
    InvalidWorkerError,
    NonErrorFailureError,
    WorkerFailureError,
)

__all__ = (
    "BaseQueueaioError",
    "InvalidArgumentError",
    "InvalidConcurrencyError",
    "InvalidConfigurationError",
    "InvalidGroupSizeError",
    "InvalidWorkerError",
    "NonErrorFailureError",
    "WorkerFailureError",
)
