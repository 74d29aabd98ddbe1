import logging
from datetime import timedelta
from typing import Any, Callable, List, Optional, Sequence, Union

from cron_scheduler.config import SchedulerSettings, get_settings
from cron_scheduler.domain.callback_event import CallbackEvent
from cron_scheduler.domain.context import RunContext
from cron_scheduler.domain.event import Event
from cron_scheduler.mutexes.file import FileMutex
from cron_scheduler.mutexes.protocol import Mutex
from cron_scheduler.mutexes.sqlalchemy import SqlAlchemyMutex

logger = logging.getLogger(__name__)


class Schedule:
    """
    Registry of scheduled events.

    All events created by a schedule share its mutex. When none is given the
    mutex comes from settings: a database mutex if `mutex_url` is configured,
    otherwise a file mutex under `mutex_path`.
    """

    def __init__(self, mutex: Optional[Mutex] = None, settings: Optional[SchedulerSettings] = None):
        self.settings: SchedulerSettings = settings or get_settings()
        if mutex is None:
            if self.settings.mutex_url:
                mutex = SqlAlchemyMutex(
                    self.settings.mutex_url,
                    expires_after=timedelta(seconds=self.settings.mutex_expires_after),
                )
            else:
                mutex = FileMutex(self.settings.mutex_path)
        self.mutex: Mutex = mutex
        self._events: List[Event] = []

    @property
    def events(self) -> List[Event]:
        return list(self._events)

    def call(self, callback: Union[str, Callable[..., Any]], parameters: Optional[Sequence[Any]] = None) -> CallbackEvent:
        """
        Add a new callback event to the schedule.
        """
        event = CallbackEvent(self.mutex, callback, parameters)
        self._events.append(event)
        return event

    def command(self, command: str) -> Event:
        """
        Add a new command of the application's CLI script to the schedule.
        """
        return self.exec(f"{self.settings.python_binary} {self.settings.cli_script_name} {command}")

    def exec(self, command: str) -> Event:
        """
        Add a new shell command event to the schedule.
        """
        event = Event(self.mutex, command)
        self._events.append(event)
        return event

    async def due_events(self, context: RunContext) -> List[Event]:
        """
        Get all the events on the schedule that are due, in registration order.
        """
        return [event for event in self._events if await event.is_due(context)]

    async def run_due_events(self, context: RunContext) -> List[Event]:
        """
        Run every due event one after another and return the events that ran.
        """
        events = await self.due_events(context)
        if not events:
            logger.info("No scheduled events are due")
        for event in events:
            logger.info("Running scheduled event: %s", event.summary_for_display)
            await event.run(context)
        return events
