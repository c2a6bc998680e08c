"""
Tests for the time_range module.

Tests cover:
- Bucket counts per granularity (including leap years)
- Chronological ordering of "most recent N" ranges
- Machine and locale-aware labels
- Defaults taken from the clock and rejection of impossible dates
"""

import pytest
from datetime import datetime, date, timedelta
from freezegun import freeze_time

from dbcharts.periods.time_range import (
    BucketBoundary,
    CalendarRangeGenerator,
    Clock,
    FixedClock,
    Granularity,
    LabelFormatter,
    resolve_locale,
)
from dbcharts.utils.errors import ConfigurationError, InvalidDateError


@pytest.fixture
def generator(clock):
    """Generator pinned to 2024-03-15"""
    return CalendarRangeGenerator(clock)


class TestHourly:
    """Test hourly boundaries"""

    def test_twenty_four_contiguous_hours(self, generator):
        """Test a day splits into 24 one-hour buckets"""
        boundaries = generator.hourly(1, 1, 2024)

        assert len(boundaries) == 24
        assert boundaries[0].start == datetime(2024, 1, 1, 0, 0, 0)
        assert boundaries[-1].end == datetime(2024, 1, 2, 0, 0, 0)
        for previous, current in zip(boundaries, boundaries[1:]):
            assert current.start - previous.start == timedelta(hours=1)
            assert previous.end == current.start

    def test_machine_labels(self, generator):
        """Test hourly labels use the dd-mm-yyyy HH:00:00 format"""
        labels = [b.label for b in generator.hourly(1, 1, 2024)]

        assert labels[0] == "01-01-2024 00:00:00"
        assert labels[1] == "01-01-2024 01:00:00"
        assert labels[-1] == "01-01-2024 23:00:00"

    def test_labels_strictly_increasing(self, generator):
        """Test machine keys increase hour by hour"""
        keys = [b.start for b in generator.hourly(29, 2, 2024)]
        assert keys == sorted(set(keys))

    def test_defaults_to_today(self, generator):
        """Test omitted arguments come from the clock"""
        boundaries = generator.hourly()
        assert boundaries[0].start == datetime(2024, 3, 15)

    def test_partial_arguments_default_individually(self, generator):
        """Test only the omitted component is taken from the clock"""
        boundaries = generator.hourly(day=2)
        assert boundaries[0].start == datetime(2024, 3, 2)

    def test_invalid_date_rejected(self, generator):
        """Test day 31 of February is an error, not clamped"""
        with pytest.raises(InvalidDateError):
            generator.hourly(31, 2, 2024)


class TestDaily:
    """Test daily boundaries"""

    @pytest.mark.parametrize(
        "month,year,expected",
        [
            (1, 2024, 31),
            (2, 2024, 29),
            (2, 2023, 28),
            (2, 1900, 28),
            (2, 2000, 29),
            (4, 2024, 30),
            (12, 2024, 31),
        ],
    )
    def test_one_bucket_per_day(self, generator, month, year, expected):
        """Test bucket count equals the month length"""
        assert len(generator.daily(month, year)) == expected

    def test_labels(self, generator):
        """Test daily labels use dd-mm-yyyy"""
        boundaries = generator.daily(2, 2024)
        assert boundaries[0].label == "01-02-2024"
        assert boundaries[-1].label == "29-02-2024"
        assert boundaries[-1].end == datetime(2024, 3, 1)

    def test_invalid_month_rejected(self, generator):
        """Test month 13 is an error"""
        with pytest.raises(InvalidDateError):
            generator.daily(13, 2024)

    def test_zero_month_rejected(self, generator):
        """Test month 0 is not treated as omitted"""
        with pytest.raises(InvalidDateError):
            generator.daily(0, 2024)


class TestMonthly:
    """Test monthly boundaries"""

    def test_twelve_months(self, generator):
        """Test a year has 12 buckets in order"""
        boundaries = generator.monthly(2023)

        assert len(boundaries) == 12
        assert [b.label for b in boundaries][:3] == ["01-2023", "02-2023", "03-2023"]
        assert boundaries[-1].label == "12-2023"
        assert boundaries[-1].end == datetime(2024, 1, 1)

    def test_defaults_to_current_year(self, generator):
        """Test omitted year comes from the clock"""
        assert generator.monthly()[0].label == "01-2024"


class TestMostRecent:
    """Test yearly / last_n_days / last_n_months"""

    def test_yearly_chronological(self, generator):
        """Test years end at the current one, oldest first"""
        labels = [b.label for b in generator.yearly(4)]
        assert labels == ["2021", "2022", "2023", "2024"]

    @freeze_time("2024-03-01 08:00:00")
    def test_last_n_days_crosses_leap_day(self):
        """Test stepping back across 29 February"""
        generator = CalendarRangeGenerator(Clock("UTC"))
        labels = [b.label for b in generator.last_n_days(3)]
        assert labels == ["28-02-2024", "29-02-2024", "01-03-2024"]

    @freeze_time("2024-03-31 23:00:00")
    def test_last_n_months_anchors_on_first_of_month(self):
        """Test month stepping from the 31st never skips February"""
        generator = CalendarRangeGenerator(Clock("UTC"))
        labels = [b.label for b in generator.last_n_months(3)]
        assert labels == ["01-2024", "02-2024", "03-2024"]

    @freeze_time("2024-01-10")
    def test_last_n_months_crosses_year_boundary(self):
        """Test months wrap into the previous year"""
        generator = CalendarRangeGenerator(Clock("UTC"))
        labels = [b.label for b in generator.last_n_months(3)]
        assert labels == ["11-2023", "12-2023", "01-2024"]

    @pytest.mark.parametrize("number", [0, 1, 5, 30])
    def test_exact_count_and_ascending(self, generator, number):
        """Test every 'most recent N' range has N ascending buckets"""
        for boundaries in (
            generator.yearly(number),
            generator.last_n_days(number),
            generator.last_n_months(number),
        ):
            assert len(boundaries) == number
            starts = [b.start for b in boundaries]
            assert starts == sorted(starts)
            assert len(set(starts)) == number

    def test_negative_count_rejected(self, generator):
        """Test a negative number of buckets is an error"""
        with pytest.raises(InvalidDateError):
            generator.last_n_days(-1)


class TestClock:
    """Test clock time zone handling"""

    def test_fixed_clock_local_date(self):
        """Test 'today' follows the clock's time zone"""
        clock = FixedClock(datetime(2024, 1, 2, 3, 0, 0), "UTC")
        new_york = FixedClock(clock.moment, "America/New_York")

        assert clock.today() == date(2024, 1, 2)
        assert new_york.today() == date(2024, 1, 1)
        assert new_york.now() == datetime(2024, 1, 1, 22, 0, 0)

    @freeze_time("2024-06-30 23:30:00")
    def test_clock_reads_frozen_time(self):
        """Test the system clock converts UTC now into the local zone"""
        assert Clock("UTC").today() == date(2024, 6, 30)
        assert Clock("Asia/Tokyo").today() == date(2024, 7, 1)

    def test_unknown_time_zone(self):
        """Test an unknown zone is a configuration error"""
        with pytest.raises(ConfigurationError):
            Clock("Mars/Olympus_Mons")


class TestLabelFormatter:
    """Test fancy label rendering"""

    def test_fancy_month_english(self):
        """Test default fancy month format"""
        formatter = LabelFormatter("en")
        assert formatter.format(datetime(2024, 1, 1), Granularity.MONTHLY, fancy=True) == "January, 2024"

    def test_fancy_day_english(self):
        """Test default fancy day format with ordinal"""
        formatter = LabelFormatter("en")
        assert formatter.format(datetime(2024, 1, 1), Granularity.DAILY, fancy=True) == "Monday 1st Jan, 2024"

    def test_fancy_label_capitalized_in_spanish(self):
        """Test lower-case locale names get a capital first letter"""
        formatter = LabelFormatter("es")
        assert formatter.format(datetime(2024, 1, 1), Granularity.MONTHLY, fancy=True) == "Enero, 2024"

    def test_locale_never_changes_machine_labels(self):
        """Test the comparison format ignores the language"""
        english = LabelFormatter("en").format(datetime(2024, 1, 1), Granularity.MONTHLY)
        spanish = LabelFormatter("es").format(datetime(2024, 1, 1), Granularity.MONTHLY)
        assert english == spanish == "01-2024"

    def test_custom_format(self):
        """Test caller-provided fancy formats"""
        formatter = LabelFormatter("en", month_format="MMM YY")
        assert formatter.format(datetime(2024, 12, 1), Granularity.MONTHLY, fancy=True) == "Dec 24"

    def test_region_falls_back_to_language(self):
        """Test unknown regional variants use the base language"""
        assert resolve_locale("es-XX") == "es"

    def test_unknown_language(self):
        """Test a language pendulum cannot render is rejected"""
        with pytest.raises(ConfigurationError):
            LabelFormatter("zz")


class TestBucketBoundary:
    """Test boundary membership"""

    def test_matches_by_truncation(self):
        """Test any moment inside the hour matches"""
        boundary = BucketBoundary(
            start=datetime(2024, 1, 1, 5),
            end=datetime(2024, 1, 1, 6),
            granularity=Granularity.HOURLY,
            label="x",
        )
        assert boundary.key == "01-01-2024 05:00:00"
        assert boundary.matches(datetime(2024, 1, 1, 5, 59, 59))
        assert not boundary.matches(datetime(2024, 1, 1, 6, 0, 0))
        assert not boundary.matches(datetime(2024, 1, 2, 5, 30, 0))
