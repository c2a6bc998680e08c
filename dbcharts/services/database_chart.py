"""
Database Chart - Fluent entry point that turns records into chart labels and values

Usage:
    chart = (
        DatabaseChart(orders)
        .set_date_column("placed_at")
        .set_aggregate_column("total", "sum")
        .last_by_month(12, fancy=True)
    )
    chart.labels, chart.values

Every setter replaces the immutable ``ChartConfig`` and returns the chart so
calls can be chained. Every bucketing call replaces ``result`` and
``value_data``; nothing accumulates across calls.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union
import structlog

from dbcharts.config.settings import Settings, get_settings
from dbcharts.models.schemas import AggregateType, ChartConfig
from dbcharts.periods.time_range import BucketBoundary, CalendarRangeGenerator, Clock, LabelFormatter, resolve_locale
from dbcharts.services.bucket_aggregator import BucketAggregator
from dbcharts.services.chart_result import ChartResult, RecordWarning
from dbcharts.services.grouping import GroupingEngine
from dbcharts.services.records import FieldReader, RecordCollection, as_collection
from dbcharts.utils.date_parser import TimestampParser
from dbcharts.utils.errors import ChartError, UnsupportedAggregationError, log_chart_error

logger = structlog.get_logger(__name__)


class DatabaseChart:
    """
    Buckets a record collection by calendar period or by column value.

    Not safe for concurrent use: configuration and the latest result live on
    the instance. The record collection itself is only read.
    """

    def __init__(
        self,
        data: Union[RecordCollection, Iterable[Any], None] = None,
        clock: Optional[Clock] = None,
        settings: Optional[Settings] = None,
        reader: Optional[FieldReader] = None,
    ):
        """
        Create a chart over ``data``.

        Args:
            data: Record collection, or any iterable of records
            clock: Source of "now"; defaults to the configured time zone
            settings: Defaults for columns, formats and language
            reader: Field access strategy shared by every component
        """
        self.settings = settings or get_settings()
        self.clock = clock or Clock(self.settings.timezone)
        self.reader = reader or FieldReader()
        self.data = as_collection(data)

        self.config = ChartConfig.from_settings(self.settings)
        resolve_locale(self.config.language)

        self.aggregator = BucketAggregator(TimestampParser(self.clock.tz), self.reader)
        self.grouping = GroupingEngine(self.reader)

        self.result = ChartResult()
        self.value_data: Dict[str, RecordCollection] = {}

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def _replace(self, **changes) -> "DatabaseChart":
        self.config = self.config.model_copy(update=changes)
        return self

    def _replace_aggregation(self, **changes) -> "DatabaseChart":
        return self._replace(aggregation=self.config.aggregation.model_copy(update=changes))

    def set_data(self, data: Union[RecordCollection, Iterable[Any]]) -> "DatabaseChart":
        """Replace the records the chart is built from"""
        self.data = as_collection(data)
        return self

    def set_date_column(self, column: str) -> "DatabaseChart":
        """Record field used to place records in calendar buckets"""
        return self._replace(date_column=column)

    def set_date_format(self, fmt: str) -> "DatabaseChart":
        """Fancy day label format (pendulum tokens)"""
        return self._replace(date_format=fmt)

    def set_month_format(self, fmt: str) -> "DatabaseChart":
        """Fancy month label format (pendulum tokens)"""
        return self._replace(month_format=fmt)

    def set_hour_format(self, fmt: str) -> "DatabaseChart":
        """Fancy hour label format (pendulum tokens)"""
        return self._replace(hour_format=fmt)

    def set_year_format(self, fmt: str) -> "DatabaseChart":
        """Fancy year label format (pendulum tokens)"""
        return self._replace(year_format=fmt)

    def set_language(self, language: str) -> "DatabaseChart":
        """
        Locale for fancy labels (month and weekday names).

        Raises:
            ConfigurationError: pendulum has no such locale
        """
        resolve_locale(language)
        return self._replace(language=language)

    def set_preaggregated(self, preaggregated: bool = True) -> "DatabaseChart":
        """Read each bucket's value from one record instead of aggregating"""
        return self._replace_aggregation(preaggregated=bool(preaggregated))

    def set_aggregate_column(
        self,
        column: Optional[str],
        aggregate_type: Union[str, AggregateType, None] = AggregateType.SUM,
    ) -> "DatabaseChart":
        """
        Reduce raw buckets over ``column`` instead of counting them.

        Args:
            column: Record field to aggregate; None goes back to counting
            aggregate_type: One of count, sum, avg, min, max

        Raises:
            UnsupportedAggregationError: unknown aggregate name
        """
        if aggregate_type is not None:
            try:
                aggregate_type = AggregateType(
                    aggregate_type.lower() if isinstance(aggregate_type, str) else aggregate_type
                )
            except ValueError as e:
                error = UnsupportedAggregationError(
                    f"Unsupported aggregate: {aggregate_type}",
                    {"aggregate": str(aggregate_type), "supported": [t.value for t in AggregateType]}
                )
                log_chart_error("set_aggregate_column", error)
                raise error from e

        return self._replace_aggregation(aggregate_field=column, aggregate_type=aggregate_type)

    # ------------------------------------------------------------------
    # Result access
    # ------------------------------------------------------------------

    @property
    def labels(self) -> List[str]:
        return self.result.labels

    @property
    def values(self) -> List[Any]:
        return self.result.values

    @property
    def warnings(self) -> List[RecordWarning]:
        """Records skipped by the last calendar call, with the field that was unusable"""
        return self.result.warnings

    # ------------------------------------------------------------------
    # Calendar bucketing
    # ------------------------------------------------------------------

    def _generator(self) -> CalendarRangeGenerator:
        formatter = LabelFormatter(
            language=self.config.language,
            hour_format=self.config.hour_format,
            date_format=self.config.date_format,
            month_format=self.config.month_format,
            year_format=self.config.year_format,
        )
        return CalendarRangeGenerator(self.clock, formatter)

    def _bucket(self, operation: str, build: Callable[[CalendarRangeGenerator], Sequence[BucketBoundary]]) -> "DatabaseChart":
        try:
            boundaries = build(self._generator())
            result, value_data = self.aggregator.aggregate(
                self.data,
                boundaries,
                self.config.date_column,
                self.config.aggregation,
            )
        except ChartError as e:
            log_chart_error(operation, e)
            raise

        self.result = result
        self.value_data = value_data
        return self

    def group_by_hour(
        self,
        day: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        fancy: bool = False,
    ) -> "DatabaseChart":
        """One bucket per hour of a day (defaults to today)"""
        return self._bucket("group_by_hour", lambda g: g.hourly(day, month, year, fancy))

    def group_by_day(self, month: Optional[int] = None, year: Optional[int] = None, fancy: bool = False) -> "DatabaseChart":
        """One bucket per day of a month (defaults to the current month)"""
        return self._bucket("group_by_day", lambda g: g.daily(month, year, fancy))

    def group_by_month(self, year: Optional[int] = None, fancy: bool = False) -> "DatabaseChart":
        """One bucket per month of a year (defaults to the current year)"""
        return self._bucket("group_by_month", lambda g: g.monthly(year, fancy))

    def group_by_year(self, number: Optional[int] = None, fancy: bool = False) -> "DatabaseChart":
        """The ``number`` most recent years, oldest first"""
        number = self.settings.default_years if number is None else number
        return self._bucket("group_by_year", lambda g: g.yearly(number, fancy))

    def last_by_year(self, number: Optional[int] = None, fancy: bool = False) -> "DatabaseChart":
        """Alias for group_by_year()"""
        return self.group_by_year(number, fancy)

    def last_by_day(self, number: Optional[int] = None, fancy: bool = False) -> "DatabaseChart":
        """The ``number`` most recent days ending today, oldest first"""
        number = self.settings.default_days if number is None else number
        return self._bucket("last_by_day", lambda g: g.last_n_days(number, fancy))

    def last_by_month(self, number: Optional[int] = None, fancy: bool = False) -> "DatabaseChart":
        """The ``number`` most recent months ending with the current one, oldest first"""
        number = self.settings.default_months if number is None else number
        return self._bucket("last_by_month", lambda g: g.last_n_months(number, fancy))

    # ------------------------------------------------------------------
    # Column grouping
    # ------------------------------------------------------------------

    def group_by(
        self,
        column: str,
        relation_column: Optional[Union[str, Sequence[str]]] = None,
        labels_mapping: Optional[Dict[Any, Any]] = None,
    ) -> "DatabaseChart":
        """
        Count records per distinct value of ``column``.

        Args:
            column: Field whose value partitions the records
            relation_column: Field or dotted path giving the display label
            labels_mapping: Optional label -> display label table
        """
        try:
            result = self.grouping.group(self.data, column, relation_column, labels_mapping)
        except ChartError as e:
            log_chart_error("group_by", e)
            raise

        self.result = result
        self.value_data = {}
        return self
