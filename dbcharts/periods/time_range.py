"""
Time Range Module - Calendar bucket boundaries for chart queries

This module provides:
- Clock / FixedClock: the source of "now" in a configured time zone
- LabelFormatter: machine and locale-aware ("fancy") bucket labels
- CalendarRangeGenerator: ordered bucket boundaries per granularity

Boundaries are naive datetimes in local wall-clock time. Membership of a
record in a bucket is decided by truncating both the boundary start and the
record timestamp with the granularity's machine format and comparing the
resulting strings.

Ordering rules:
1. hourly/daily/monthly walk forward from the start of the period
2. yearly/last_n_days/last_n_months walk backward from "now", then reverse,
   so every result is chronological (oldest first)
"""

from datetime import datetime, date, timedelta, tzinfo
from typing import List, Optional, Union
from enum import Enum
from dataclasses import dataclass
import calendar
import pendulum
import pytz
from dateutil.relativedelta import relativedelta
import structlog

from dbcharts.utils.errors import ConfigurationError, InvalidDateError

logger = structlog.get_logger(__name__)


class Granularity(str, Enum):
    """Calendar bucket sizes"""
    HOURLY = "HOURLY"
    DAILY = "DAILY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


# Machine formats double as the truncation used for bucket membership
MACHINE_FORMATS = {
    Granularity.HOURLY: "%d-%m-%Y %H:00:00",
    Granularity.DAILY: "%d-%m-%Y",
    Granularity.MONTHLY: "%m-%Y",
    Granularity.YEARLY: "%Y",
}

STEPS = {
    Granularity.HOURLY: relativedelta(hours=1),
    Granularity.DAILY: relativedelta(days=1),
    Granularity.MONTHLY: relativedelta(months=1),
    Granularity.YEARLY: relativedelta(years=1),
}


@dataclass(frozen=True)
class BucketBoundary:
    """Half-open interval [start, end) plus its labels"""
    start: datetime
    end: datetime
    granularity: Granularity
    label: str

    @property
    def key_format(self) -> str:
        """strftime format used to truncate timestamps for this bucket"""
        return MACHINE_FORMATS[self.granularity]

    @property
    def key(self) -> str:
        """Truncated representation of the boundary start"""
        return self.start.strftime(self.key_format)

    def matches(self, moment: datetime) -> bool:
        """True when ``moment`` truncates to the same key as this bucket"""
        return moment.strftime(self.key_format) == self.key


class Clock:
    """Current time in a configured time zone"""

    def __init__(self, tz: Union[str, tzinfo] = "UTC"):
        """Initialize clock with timezone"""
        if isinstance(tz, str):
            try:
                tz = pytz.timezone(tz)
            except pytz.UnknownTimeZoneError as e:
                raise ConfigurationError(f"Unknown time zone: {tz}", {"timezone": str(tz)}) from e
        self.tz = tz

    def _now(self) -> datetime:
        """Get current datetime in configured timezone"""
        return datetime.now(self.tz)

    def now(self) -> datetime:
        """Current local wall-clock time (naive)"""
        return self._now().replace(tzinfo=None)

    def today(self) -> date:
        """Get today's date in configured timezone"""
        return self._now().date()


class FixedClock(Clock):
    """Clock pinned to a single moment, for deterministic charts"""

    def __init__(self, moment: datetime, tz: Union[str, tzinfo] = "UTC"):
        super().__init__(tz)
        if moment.tzinfo is None:
            moment = self.tz.localize(moment) if hasattr(self.tz, "localize") else moment.replace(tzinfo=self.tz)
        self.moment = moment

    def _now(self) -> datetime:
        return self.moment.astimezone(self.tz)


def resolve_locale(language: str) -> str:
    """
    Map a language tag to a locale pendulum can render.

    Region variants fall back to their base language ("es_MX" -> "es").

    Raises:
        ConfigurationError: neither the tag nor its base language is known
    """
    candidates = [language]
    base = language.replace("-", "_").split("_")[0]
    if base and base != language:
        candidates.append(base)

    for candidate in candidates:
        try:
            pendulum.locale(candidate)
            return candidate
        except ValueError:
            continue

    raise ConfigurationError(f"Unsupported language: {language}", {"language": language})


class LabelFormatter:
    """Render bucket labels in machine or locale-aware form"""

    def __init__(
        self,
        language: str = "en",
        hour_format: str = "ddd, MMM D, YYYY h A",
        date_format: str = "dddd Do MMM, YYYY",
        month_format: str = "MMMM, YYYY",
        year_format: str = "YYYY",
    ):
        self.locale = resolve_locale(language)
        self.fancy_formats = {
            Granularity.HOURLY: hour_format,
            Granularity.DAILY: date_format,
            Granularity.MONTHLY: month_format,
            Granularity.YEARLY: year_format,
        }

    def format(self, moment: datetime, granularity: Granularity, fancy: bool = False) -> str:
        """Label for a bucket starting at ``moment``; first letter capitalized"""
        if fancy:
            rendered = pendulum.naive(
                moment.year, moment.month, moment.day, moment.hour, moment.minute, moment.second
            ).format(self.fancy_formats[granularity], locale=self.locale)
        else:
            rendered = moment.strftime(MACHINE_FORMATS[granularity])
        return rendered[:1].upper() + rendered[1:]


def _make_date(year: int, month: int, day: int) -> date:
    """Build a calendar date, refusing impossible combinations"""
    try:
        return date(int(year), int(month), int(day))
    except (TypeError, ValueError) as e:
        raise InvalidDateError(
            f"Invalid date: day={day}, month={month}, year={year}",
            {"day": day, "month": month, "year": year}
        ) from e


def _check_count(number: int) -> int:
    if number is None or int(number) < 0:
        raise InvalidDateError(f"Number of buckets must be zero or positive, got {number}", {"number": number})
    return int(number)


class CalendarRangeGenerator:
    """Generate ordered calendar bucket boundaries"""

    def __init__(self, clock: Optional[Clock] = None, formatter: Optional[LabelFormatter] = None):
        """Initialize generator with a clock and label formatter"""
        self.clock = clock or Clock()
        self.formatter = formatter or LabelFormatter()

    def _boundary(self, start: datetime, granularity: Granularity, fancy: bool) -> BucketBoundary:
        return BucketBoundary(
            start=start,
            end=start + STEPS[granularity],
            granularity=granularity,
            label=self.formatter.format(start, granularity, fancy),
        )

    def _walk_forward(self, begin: datetime, end: datetime, granularity: Granularity, fancy: bool) -> List[BucketBoundary]:
        """Boundaries from ``begin`` (inclusive) up to ``end`` (exclusive)"""
        boundaries = []
        step = STEPS[granularity]
        i = 0
        current = begin
        while current < end:
            boundaries.append(self._boundary(current, granularity, fancy))
            i += 1
            # Always offset from ``begin`` so month steps never drift (Jan 31 -> Feb 28 -> Mar 28)
            current = begin + step * i
        return boundaries

    def _walk_back(self, anchor: datetime, number: int, granularity: Granularity, fancy: bool) -> List[BucketBoundary]:
        """``number`` boundaries ending at ``anchor``, in chronological order"""
        step = STEPS[granularity]
        boundaries = [self._boundary(anchor - step * i, granularity, fancy) for i in range(number)]
        boundaries.reverse()
        return boundaries

    def hourly(
        self,
        day: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        fancy: bool = False,
    ) -> List[BucketBoundary]:
        """24 one-hour buckets covering a calendar day"""
        today = self.clock.today()
        target = _make_date(
            today.year if year is None else year,
            today.month if month is None else month,
            today.day if day is None else day,
        )
        begin = datetime(target.year, target.month, target.day)

        boundaries = self._walk_forward(begin, begin + timedelta(days=1), Granularity.HOURLY, fancy)
        logger.debug("Hourly range generated", day=target.isoformat(), buckets=len(boundaries))
        return boundaries

    def daily(
        self,
        month: Optional[int] = None,
        year: Optional[int] = None,
        fancy: bool = False,
    ) -> List[BucketBoundary]:
        """One bucket per day of a calendar month"""
        today = self.clock.today()
        first = _make_date(
            today.year if year is None else year,
            today.month if month is None else month,
            1,
        )
        begin = datetime(first.year, first.month, 1)

        boundaries = self._walk_forward(begin, begin + relativedelta(months=1), Granularity.DAILY, fancy)
        logger.debug(
            "Daily range generated",
            month=first.month,
            year=first.year,
            buckets=len(boundaries),
            days_in_month=calendar.monthrange(first.year, first.month)[1]
        )
        return boundaries

    def monthly(self, year: Optional[int] = None, fancy: bool = False) -> List[BucketBoundary]:
        """Twelve buckets, one per month of a calendar year"""
        first = _make_date(self.clock.today().year if year is None else year, 1, 1)
        begin = datetime(first.year, 1, 1)

        return self._walk_forward(begin, begin + relativedelta(years=1), Granularity.MONTHLY, fancy)

    def yearly(self, number: int = 4, fancy: bool = False) -> List[BucketBoundary]:
        """The ``number`` most recent calendar years, ending with the current one"""
        number = _check_count(number)
        today = self.clock.today()
        return self._walk_back(datetime(today.year, 1, 1), number, Granularity.YEARLY, fancy)

    def last_n_days(self, number: int = 7, fancy: bool = False) -> List[BucketBoundary]:
        """The ``number`` most recent days, ending today"""
        number = _check_count(number)
        today = self.clock.today()
        return self._walk_back(datetime(today.year, today.month, today.day), number, Granularity.DAILY, fancy)

    def last_n_months(self, number: int = 6, fancy: bool = False) -> List[BucketBoundary]:
        """The ``number`` most recent months, anchored on the first of the current month"""
        number = _check_count(number)
        today = self.clock.today()
        return self._walk_back(datetime(today.year, today.month, 1), number, Granularity.MONTHLY, fancy)
