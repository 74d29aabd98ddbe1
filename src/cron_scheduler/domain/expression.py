from datetime import datetime, tzinfo
from typing import List, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from croniter import croniter, CroniterError

from cron_scheduler.errors import ConfigurationError, ScheduleExpressionError


class CronExpression:
    """
    Six-field cron expression: minute, hour, day of month, month, day of week, second.

    The trailing seconds field is always a wildcard for the frequency helpers, so an
    expression matches every second of a matching minute. The sixth field is
    seconds, not a year: "0 0 * * * 2026" is rejected as out of range.
    Expressions are not validated until they are evaluated.
    """

    FIELD_COUNT = 6
    EVERY_MINUTE = "* * * * * *"

    def __init__(self, expression: str = EVERY_MINUTE):
        self._expression = expression

    def __str__(self) -> str:
        return self._expression

    def __repr__(self) -> str:
        return f"CronExpression({self._expression!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CronExpression):
            return self._expression == other._expression
        if isinstance(other, str):
            return self._expression == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._expression)

    @property
    def fields(self) -> List[str]:
        return self._expression.split()

    def splice(self, position: int, value: Union[int, str]) -> "CronExpression":
        """
        Return a new expression with the field at the given 1-based position replaced.
        """
        segments = self._expression.split()
        while len(segments) < position:
            segments.append("*")
        segments[position - 1] = str(value)
        return CronExpression(" ".join(segments))

    def is_due(self, instant: datetime, tz: Optional[Union[str, tzinfo]] = None) -> bool:
        """
        Check whether the expression matches the given instant.

        Args:
            instant (datetime): The instant to test. Naive values are taken as local time.
            tz (str | tzinfo | None): Zone to evaluate in. Defaults to the system zone.

        Raises:
            ScheduleExpressionError: If the expression is malformed.
        """
        if len(self.fields) != self.FIELD_COUNT:
            raise ScheduleExpressionError(
                f"Cron expression '{self._expression}' must have {self.FIELD_COUNT} fields, got {len(self.fields)}"
            )

        localized = instant.astimezone(_resolve_zone(tz)) if tz is not None else instant.astimezone()
        try:
            return croniter.match(self._expression, localized)
        except (CroniterError, ValueError) as e:
            raise ScheduleExpressionError(f"Invalid cron expression '{self._expression}': {str(e)}") from e


def _resolve_zone(tz: Union[str, tzinfo]) -> tzinfo:
    if isinstance(tz, tzinfo):
        return tz
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Unknown timezone '{tz}'") from e
