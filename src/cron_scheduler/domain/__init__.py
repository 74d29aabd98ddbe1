from .expression import CronExpression
from .context import RunContext
from .event import Event
from .callback_event import CallbackEvent

__all__ = ["CronExpression", "RunContext", "Event", "CallbackEvent"]
