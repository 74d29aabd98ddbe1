import hashlib
import importlib
from typing import Any, Callable, Optional, Sequence, Union

from cron_scheduler.domain.context import RunContext
from cron_scheduler.domain.event import Event, maybe_await
from cron_scheduler.errors import InvalidArgumentError
from cron_scheduler.mutexes.protocol import Mutex


class CallbackEvent(Event):
    """
    An event that calls a Python callable in-process instead of running a command.

    The callback is either a callable or an import path such as
    "myapp.jobs:prune" or "myapp.jobs.prune". It is called with the bound
    parameters followed by the run context.
    """

    def __init__(self, mutex: Mutex, callback: Union[str, Callable[..., Any]], parameters: Optional[Sequence[Any]] = None):
        if not isinstance(callback, str) and not callable(callback):
            raise InvalidArgumentError("Invalid scheduled callback event. Must be string or callable.")

        super().__init__(mutex, "")
        self.callback: Union[str, Callable[..., Any]] = callback
        self.parameters: list = list(parameters or [])

    async def run(self, context: RunContext) -> Any:
        await self.trigger(self.EVENT_BEFORE_RUN)
        response = await maybe_await(self._resolve_callback()(*self.parameters, context))
        await self._call_after_callbacks(context)
        await self.trigger(self.EVENT_AFTER_RUN)
        return response

    def _resolve_callback(self) -> Callable[..., Any]:
        if callable(self.callback):
            return self.callback

        module_name, sep, attr = self.callback.partition(":")
        if not sep:
            module_name, _, attr = self.callback.rpartition(".")
        try:
            target = getattr(importlib.import_module(module_name), attr)
        except (ImportError, AttributeError, ValueError) as e:
            raise InvalidArgumentError(f"Cannot resolve scheduled callback '{self.callback}': {str(e)}") from e
        if not callable(target):
            raise InvalidArgumentError(f"Scheduled callback '{self.callback}' is not callable")
        return target

    def without_overlapping(self) -> "CallbackEvent":
        if not self._description:
            raise InvalidArgumentError(
                "A scheduled event name is required to prevent overlapping. "
                "Use the 'description' method before 'without_overlapping'."
            )
        return super().without_overlapping()

    def mutex_name(self) -> str:
        return "schedule-" + hashlib.sha1((self._description or "").encode()).hexdigest()

    @property
    def summary_for_display(self) -> str:
        if self._description:
            return self._description
        if isinstance(self.callback, str):
            return self.callback
        return getattr(self.callback, "__qualname__", "Callback")
