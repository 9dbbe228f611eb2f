"""Six-field cron expressions (sec min hour day month weekday)."""

from datetime import UTC, datetime

from croniter import croniter

from balance_exporter.helpers.errors import ConfigInvalidError


CRON_FIELD_COUNT = 6


class CronSchedule:
    """A validated cron expression with seconds in the first field.

    croniter expects the seconds field last, so the expression is rotated once
    at construction time.
    """

    def __init__(self, expression: str) -> None:
        """Parse and validate a cron expression.

        Args:
            expression: Cron expression such as ``"*/10 * * * * *"``

        Raises:
            ConfigInvalidError: If the expression is empty, does not have six
                fields, or is rejected by croniter
        """
        fields = (expression or "").split()
        if len(fields) != CRON_FIELD_COUNT:
            msg = (
                f"Invalid cron expression '{expression}': expected "
                f"{CRON_FIELD_COUNT} fields (sec min hour day month weekday)"
            )
            raise ConfigInvalidError(msg)

        self.expression = " ".join(fields)
        self._croniter_expression = " ".join([*fields[1:], fields[0]])

        if not croniter.is_valid(self._croniter_expression):
            msg = f"Invalid cron expression '{expression}'"
            raise ConfigInvalidError(msg)

    def next_fire_time(self, after: datetime | None = None) -> datetime:
        """Return the first fire time strictly after ``after`` (default: now, UTC)."""
        start = after or datetime.now(UTC)
        return croniter(self._croniter_expression, start).get_next(datetime)

    def seconds_until_next(self, after: datetime | None = None) -> float:
        """Return the delay in seconds until the next fire time."""
        start = after or datetime.now(UTC)
        return max((self.next_fire_time(start) - start).total_seconds(), 0.0)

    def __repr__(self) -> str:
        return f"CronSchedule({self.expression!r})"


__all__ = ["CronSchedule"]
