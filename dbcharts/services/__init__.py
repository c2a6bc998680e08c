"""
Services package for dbcharts
Contains the record collection interface, bucket aggregation, column grouping
and the fluent DatabaseChart entry point
"""

from dbcharts.services.chart_result import ChartResult, RecordWarning
from dbcharts.services.records import FieldReader, ListRecordCollection, RecordCollection
from dbcharts.services.bucket_aggregator import BucketAggregator
from dbcharts.services.grouping import GroupingEngine
from dbcharts.services.database_chart import DatabaseChart

__all__ = [
    'ChartResult',
    'RecordWarning',
    'FieldReader',
    'ListRecordCollection',
    'RecordCollection',
    'BucketAggregator',
    'GroupingEngine',
    'DatabaseChart',
]
