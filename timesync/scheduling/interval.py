from dataclasses import dataclass
from datetime import datetime, timedelta

from timesync.scheduling.errors import InvalidRange


@dataclass(frozen=True)
class Interval:
    """Half-open time range ``[start, end)``."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise InvalidRange(f'Invalid range: {self.end.isoformat()} is not after {self.start.isoformat()}.')

    @classmethod
    def from_duration(cls, start: datetime, duration_minutes: int) -> 'Interval':
        return cls(start, start + timedelta(minutes=duration_minutes))

    def overlaps(self, other: 'Interval') -> bool:
        return self.start < other.end and self.end > other.start

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end

    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)
