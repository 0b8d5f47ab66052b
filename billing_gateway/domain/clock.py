"""Injectable source of "today" so lifecycle rules never read the wall clock directly"""

from abc import ABC, abstractmethod
from datetime import date

from billing_gateway.utils.date_utils import civil_today


class Clock(ABC):
    """Provides the current civil date"""

    @abstractmethod
    def today(self) -> date:
        ...


class SystemClock(Clock):
    """Wall clock evaluated in a fixed IANA timezone"""

    def __init__(self, timezone: str):
        self.timezone = timezone

    def today(self) -> date:
        return civil_today(self.timezone)


class FixedClock(Clock):
    """Clock pinned to a given date, for tests and replays"""

    def __init__(self, current: date):
        self.current = current

    def today(self) -> date:
        return self.current

    def set(self, current: date) -> None:
        self.current = current
