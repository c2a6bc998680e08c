"""
dbcharts - Bucket timestamped records into chart labels and values
"""

from dbcharts.services.database_chart import DatabaseChart
from dbcharts.services.chart_result import ChartResult
from dbcharts.services.records import ListRecordCollection
from dbcharts.periods.time_range import Clock, FixedClock, Granularity
from dbcharts.models.schemas import AggregateType

__version__ = "1.0.0"

__all__ = [
    'DatabaseChart',
    'ChartResult',
    'ListRecordCollection',
    'Clock',
    'FixedClock',
    'Granularity',
    'AggregateType',
]
