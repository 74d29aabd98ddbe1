class SchedulingError(Exception):
    """
    Base class for all errors raised by the scheduler.
    """


class ScheduleExpressionError(SchedulingError, ValueError):
    """
    Raised when a cron expression cannot be evaluated.
    """


class ConfigurationError(SchedulingError):
    """
    Raised when an event is configured with collaborators that cannot honour it.
    """


class InvalidArgumentError(SchedulingError, ValueError):
    pass


class InvalidOperationError(SchedulingError, RuntimeError):
    pass
