"""Core scheduling components for the queueaio library.

This module exposes the in-process task queue: a single worker, a
concurrency limit, retry-to-front on failure and optional batching of
pending tasks into groups.
"""

from importlib.metadata import version as get_version

from queueaio._internal.common.constants import SchedulerEvent, SchedulerStatus
from queueaio._internal.common.datastructures import Task
from queueaio._internal.common.types import Batch, Done, Worker
from queueaio._internal.completion import Completion
from queueaio._internal.emitter import EventEmitter
from queueaio._internal.scheduler import Scheduler
from queueaio.queueaio import Queueaio

__version__ = get_version("queueaio")
__all__ = (
    "Batch",
    "Completion",
    "Done",
    "EventEmitter",
    "Queueaio",
    "Scheduler",
    "SchedulerEvent",
    "SchedulerStatus",
    "Task",
    "Worker",
)
