"""
Periods Module - Calendar bucket generation
"""

from dbcharts.periods.time_range import (
    BucketBoundary,
    CalendarRangeGenerator,
    Clock,
    FixedClock,
    Granularity,
    LabelFormatter,
    MACHINE_FORMATS,
)

__all__ = [
    'BucketBoundary',
    'CalendarRangeGenerator',
    'Clock',
    'FixedClock',
    'Granularity',
    'LabelFormatter',
    'MACHINE_FORMATS',
]
