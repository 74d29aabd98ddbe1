"""
Cron-style Task Scheduling

A scheduling pass evaluates every registered event against the current instant
and runs the ones that are due. The pass is driven by an external timer,
typically a system cron entry that fires once a minute.

Core Concepts:

Event:
    A shell command bound to a cron expression, optional filters and
    post-run callbacks. Events with callbacks run in the foreground so the
    callbacks can observe completion. Events without them are launched in
    the background.

CallbackEvent:
    An event whose work is a Python callable called in-process.

Schedule:
    The registry that creates events and selects the due ones.

Mutex:
    The lock used to keep runs of the same event from overlapping, either on
    one host (file locks) or across hosts (a shared database table).
"""

from .errors import (
    SchedulingError,
    ScheduleExpressionError,
    ConfigurationError,
    InvalidArgumentError,
    InvalidOperationError,
)
from .domain import CronExpression, RunContext, Event, CallbackEvent
from .mutexes import Mutex, FileMutex, SqlAlchemyMutex
from .schedule import Schedule

__all__ = [
    "Schedule",
    "Event",
    "CallbackEvent",
    "CronExpression",
    "RunContext",
    "Mutex",
    "FileMutex",
    "SqlAlchemyMutex",
    "SchedulingError",
    "ScheduleExpressionError",
    "ConfigurationError",
    "InvalidArgumentError",
    "InvalidOperationError",
]
