import hashlib
import inspect
import logging
import os
from datetime import tzinfo
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Union

from cron_scheduler.domain.context import RunContext
from cron_scheduler.domain.expression import CronExpression
from cron_scheduler.errors import ConfigurationError, InvalidOperationError
from cron_scheduler.mutexes.file import FileMutex
from cron_scheduler.mutexes.protocol import Mutex

logger = logging.getLogger(__name__)

Predicate = Callable[[RunContext], Union[bool, Awaitable[bool]]]
Callback = Callable[[RunContext], Any]
LifecycleHandler = Callable[["Event"], Any]


async def maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class Event:
    """
    A shell command scheduled against a cron expression.

    Configuration methods mutate the event and return it, so calls can be chained:

        schedule.exec("php artisan inspire").daily_at("13:30").without_overlapping()
    """

    EVENT_BEFORE_RUN = "beforeRun"
    EVENT_AFTER_RUN = "afterRun"

    def __init__(self, mutex: Mutex, command: str):
        self.command: str = command
        self._mutex: Mutex = mutex
        self._expression: CronExpression = CronExpression()
        self._timezone: Optional[Union[str, tzinfo]] = None
        self._user: Optional[str] = None
        self._filter: Optional[Predicate] = None
        self._reject: Optional[Predicate] = None
        self._output: str = self.default_output
        self._redirect: str = " > "
        self._omit_errors: bool = False
        self._after_callbacks: List[Callback] = []
        self._description: Optional[str] = None
        self._handlers: Dict[str, List[LifecycleHandler]] = {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.summary_for_display!r}, expression={str(self._expression)!r})"

    # Lifecycle

    def on(self, name: str, handler: LifecycleHandler) -> "Event":
        """
        Attach a handler to a lifecycle signal (EVENT_BEFORE_RUN or EVENT_AFTER_RUN).
        """
        self._handlers.setdefault(name, []).append(handler)
        return self

    async def trigger(self, name: str) -> None:
        for handler in self._handlers.get(name, []):
            await maybe_await(handler(self))

    async def run(self, context: RunContext) -> Any:
        """
        Run the command.

        The command runs in the foreground when after-callbacks are registered so
        they can observe its completion. Otherwise it is launched in the background
        and this returns without waiting for it.
        """
        await self.trigger(self.EVENT_BEFORE_RUN)
        if self._after_callbacks:
            await self._run_command_in_foreground(context)
        else:
            await self._run_command_in_background(context)
        await self.trigger(self.EVENT_AFTER_RUN)

    async def _run_command_in_foreground(self, context: RunContext) -> None:
        command = self.build_command().strip("& ")
        logger.info("Running scheduled command: %s", command)
        exit_code = await context.launcher.run(command, context.script_root)
        logger.debug("Scheduled command finished with exit code %s", exit_code)
        await self._call_after_callbacks(context)

    async def _run_command_in_background(self, context: RunContext) -> None:
        command = self.build_command()
        logger.info("Launching scheduled command in background: %s", command)
        await context.launcher.launch(command, context.script_root)

    async def _call_after_callbacks(self, context: RunContext) -> None:
        for callback in self._after_callbacks:
            await maybe_await(callback(context))

    def build_command(self) -> str:
        command = self.command + self._redirect + self._output
        command += " &" if self._omit_errors else " 2>&1 &"
        if self._user:
            return f"sudo -u {self._user} {command}"
        return command

    def mutex_name(self) -> str:
        return "schedule-" + hashlib.sha1((str(self._expression) + self.command).encode()).hexdigest()

    # Due checks

    async def is_due(self, context: RunContext) -> bool:
        return self.expression_passes(context) and await self.filters_pass(context)

    def expression_passes(self, context: RunContext) -> bool:
        return self._expression.is_due(context.now(), self._timezone)

    async def filters_pass(self, context: RunContext) -> bool:
        if self._filter is not None and not await maybe_await(self._filter(context)):
            return False
        if self._reject is not None and await maybe_await(self._reject(context)):
            return False
        return True

    def when(self, callback: Predicate) -> "Event":
        """
        Only run the event when the callback returns True.
        """
        self._filter = callback
        return self

    def skip(self, callback: Predicate) -> "Event":
        """
        Skip the event when the callback returns True.
        """
        self._reject = callback
        return self

    # Overlap prevention

    def without_overlapping(self) -> "Event":
        """
        Skip a run while a previous run of the same event still holds its mutex.
        """
        async def release(context: RunContext) -> None:
            await self._mutex.release(self.mutex_name())

        async def locked(context: RunContext) -> bool:
            acquired = await self._mutex.acquire(self.mutex_name())
            if not acquired:
                logger.warning("Skipping '%s', a previous run is still in progress", self.summary_for_display)
            return not acquired

        return self.then(release).skip(locked)

    def on_one_server(self) -> "Event":
        """
        Run the event on a single server only. Requires a mutex shared between hosts.
        """
        if isinstance(self._mutex, FileMutex):
            raise ConfigurationError(
                "A mutex shared between servers is required, the file mutex only locks the local host."
            )
        return self.without_overlapping()

    # Output

    @property
    def default_output(self) -> str:
        return "NUL" if os.name == "nt" else "/dev/null"

    def send_output_to(self, location: str) -> "Event":
        self._redirect = " > "
        self._output = location
        return self

    def append_output_to(self, location: str) -> "Event":
        self._redirect = " >> "
        self._output = location
        return self

    def email_output_to(self, addresses: Union[str, Sequence[str]]) -> "Event":
        """
        E-mail the command output to the given addresses after each run.

        Raises:
            InvalidOperationError: If the output is not sent to a file.
        """
        if not self._output or self._output == self.default_output:
            raise InvalidOperationError("Must direct output to a file in order to e-mail results.")
        recipients = [addresses] if isinstance(addresses, str) else list(addresses)

        async def email(context: RunContext) -> None:
            await self._email_output(context, recipients)

        return self.then(email)

    async def _email_output(self, context: RunContext, addresses: List[str]) -> None:
        with open(context.script_root / self._output, encoding="utf-8", errors="replace") as f:
            text_body = f.read()

        if text_body.strip() == "":
            logger.debug("No output to e-mail for '%s'", self.summary_for_display)
            return
        if context.mailer is None:
            raise ConfigurationError("A mailer must be set on the run context to e-mail output.")

        await (
            context.mailer.compose()
            .set_text_body(text_body)
            .set_subject(self.email_subject)
            .set_to(addresses)
            .send()
        )

    @property
    def email_subject(self) -> str:
        if self._description:
            return f"Scheduled Job Output ({self._description})"
        return "Scheduled Job Output"

    # Callbacks

    def then(self, callback: Callback) -> "Event":
        """
        Register a callback to run after the command finishes.
        """
        self._after_callbacks.append(callback)
        return self

    def then_ping(self, url: str) -> "Event":
        async def ping(context: RunContext) -> None:
            await context.notifier.ping(url)

        return self.then(ping)

    # Frequencies

    def cron(self, expression: Union[str, CronExpression]) -> "Event":
        self._expression = expression if isinstance(expression, CronExpression) else CronExpression(expression)
        return self

    def _splice_into_position(self, position: int, value: Union[int, str]) -> "Event":
        return self.cron(self._expression.splice(position, value))

    def every_minute(self) -> "Event":
        return self.cron("* * * * * *")

    def every_n_minutes(self, minutes: Union[int, str]) -> "Event":
        return self.cron(f"*/{minutes} * * * * *")

    def every_five_minutes(self) -> "Event":
        return self.every_n_minutes(5)

    def every_ten_minutes(self) -> "Event":
        return self.every_n_minutes(10)

    def every_thirty_minutes(self) -> "Event":
        return self.cron("0,30 * * * * *")

    def hourly(self) -> "Event":
        return self.cron("0 * * * * *")

    def daily(self) -> "Event":
        return self.cron("0 0 * * * *")

    def daily_at(self, time: str) -> "Event":
        """
        Run daily at the given time ("10:00", "19:30", "7").
        """
        segments = time.split(":")
        minute = int(segments[1]) if len(segments) == 2 else 0
        return self._splice_into_position(2, int(segments[0]))._splice_into_position(1, minute)

    def at(self, time: str) -> "Event":
        return self.daily_at(time)

    def twice_daily(self) -> "Event":
        return self.cron("0 1,13 * * * *")

    def weekdays(self) -> "Event":
        return self._splice_into_position(5, "1-5")

    def days(self, *days: Union[int, Sequence[int]]) -> "Event":
        """
        Run on the given days of the week (0 is Sunday).
        """
        if len(days) == 1 and not isinstance(days[0], int):
            days = tuple(days[0])
        return self._splice_into_position(5, ",".join(str(day) for day in days))

    def sundays(self) -> "Event":
        return self.days(0)

    def mondays(self) -> "Event":
        return self.days(1)

    def tuesdays(self) -> "Event":
        return self.days(2)

    def wednesdays(self) -> "Event":
        return self.days(3)

    def thursdays(self) -> "Event":
        return self.days(4)

    def fridays(self) -> "Event":
        return self.days(5)

    def saturdays(self) -> "Event":
        return self.days(6)

    def weekly(self) -> "Event":
        return self.cron("0 0 * * 0 *")

    def weekly_on(self, day: int, time: str = "0:0") -> "Event":
        self.daily_at(time)
        return self._splice_into_position(5, day)

    def monthly(self) -> "Event":
        return self.cron("0 0 1 * * *")

    def yearly(self) -> "Event":
        return self.cron("0 0 1 1 * *")

    # Options

    def timezone(self, tz: Union[str, tzinfo]) -> "Event":
        self._timezone = tz
        return self

    def user(self, user: str) -> "Event":
        self._user = user
        return self

    def omit_errors(self, omit_errors: bool = True) -> "Event":
        self._omit_errors = omit_errors
        return self

    def description(self, description: str) -> "Event":
        self._description = description
        return self

    def get_description(self) -> Optional[str]:
        return self._description

    @property
    def expression(self) -> str:
        return str(self._expression)

    @property
    def summary_for_display(self) -> str:
        if self._description:
            return self._description
        return self.build_command()
