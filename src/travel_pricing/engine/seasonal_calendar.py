"""
Seasonal Calendar - Maps a service date to a season or holiday label.

Holiday windows take precedence over the base season:
    tet_holiday  Jan 20 - Feb 15
    new_year     Dec 25 - Jan 5
Base seasons:
    winter       Dec 20 - end of Feb
    spring       Mar - May
    summer       Jun - Aug
    autumn       Sep 1 - Dec 19
"""
from datetime import datetime, timezone
from typing import Callable, Optional

from .models import DateLike, as_date


TET_HOLIDAY = "tet_holiday"
NEW_YEAR = "new_year"
WINTER = "winter"
SPRING = "spring"
SUMMER = "summer"
AUTUMN = "autumn"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SeasonalCalendar:
    """Fixed-window season lookup with an injectable clock for "today"."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or utc_now

    def season_of(self, when: DateLike) -> str:
        """Return the season label for a date, holidays first."""
        day = as_date(when)
        if self.is_tet_holiday(day):
            return TET_HOLIDAY
        if self.is_new_year_period(day):
            return NEW_YEAR
        return self.base_season(day)

    def current_season(self) -> str:
        return self.season_of(self.clock())

    @staticmethod
    def base_season(when: DateLike) -> str:
        day = as_date(when)
        month = day.month
        if (month == 12 and day.day >= 20) or month <= 2:
            return WINTER
        if 3 <= month <= 5:
            return SPRING
        if 6 <= month <= 8:
            return SUMMER
        return AUTUMN

    @staticmethod
    def is_tet_holiday(when: DateLike) -> bool:
        # Simplified window; the lunar date moves between late Jan and mid Feb
        day = as_date(when)
        return (day.month == 1 and day.day >= 20) or (day.month == 2 and day.day <= 15)

    @staticmethod
    def is_new_year_period(when: DateLike) -> bool:
        day = as_date(when)
        return (day.month == 12 and day.day >= 25) or (day.month == 1 and day.day <= 5)
