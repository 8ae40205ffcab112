"""
Comparable Unix-epoch timestamps for certificate validity checks.

Certificate validity bounds, transparency log integrated times and the current
time are all reduced to whole seconds before they are compared.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime

# Zero-argument callable returning the current time
Clock = Callable[[], datetime]

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def system_clock() -> datetime:
    """Return the current UTC time."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True, order=True)
class Timestamp:
    """Seconds since the Unix epoch, UTC."""

    seconds: int

    @classmethod
    def from_unix(cls, seconds: int) -> Timestamp:
        """
        Build a timestamp from signed 64-bit Unix-epoch seconds.

        Raises:
            TypeError: If seconds is not an int
            ValueError: If seconds does not fit in a signed 64-bit integer
        """
        if isinstance(seconds, bool) or not isinstance(seconds, int):
            msg = f"Unix timestamp must be an int, got {type(seconds).__name__}"
            raise TypeError(msg)
        if not INT64_MIN <= seconds <= INT64_MAX:
            msg = f"Unix timestamp out of signed 64-bit range: {seconds}"
            raise ValueError(msg)
        return cls(seconds)

    @classmethod
    def from_datetime(cls, value: datetime) -> Timestamp:
        """Build a timestamp from a datetime; naive values are taken as UTC."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return cls(int(value.timestamp() // 1))

    @classmethod
    def now(cls, clock: Clock | None = None) -> Timestamp:
        """Read the clock once and return the result as a timestamp."""
        return cls.from_datetime((clock or system_clock)())

    def to_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.seconds, tz=timezone.utc)

    def to_rfc2822(self) -> str:
        try:
            return format_datetime(self.to_datetime())
        except (OverflowError, ValueError, OSError):
            # Outside the range datetime can represent
            return f"@{self.seconds}"

    def __str__(self) -> str:
        return self.to_rfc2822()
