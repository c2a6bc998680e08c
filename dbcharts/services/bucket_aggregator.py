"""
Bucket Aggregator - Reduces records falling in each calendar bucket to one value

For every boundary produced by the calendar range generator:
1. Records whose truncated timestamp equals the boundary key match the bucket
2. Pre-aggregated data: the first match supplies its aggregate field (0 if none)
3. Raw data: the matches are reduced over the configured field, or counted,
   and kept under the bucket label for later inspection
4. The label and value are appended in generation order

A record whose timestamp or aggregated value cannot be read matches no bucket
and is reported as a ``RecordWarning``; the rest of the chart is still built.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple
import structlog

from dbcharts.models.schemas import AggregationConfig
from dbcharts.periods.time_range import BucketBoundary
from dbcharts.services.chart_result import ChartResult, RecordWarning
from dbcharts.services.records import FieldReader, RecordCollection, coerce_number
from dbcharts.utils.date_parser import TimestampParser
from dbcharts.utils.errors import FieldLookupError, MalformedTimestampError, NonNumericValueError

logger = structlog.get_logger(__name__)

# Per-record problems that exclude the record instead of failing the call
RECORD_ERRORS = (FieldLookupError, MalformedTimestampError, NonNumericValueError)


class BucketAggregator:
    """
    Fills calendar buckets from a record collection.

    Every record is read once per call: its timestamp and, when the bucket
    value depends on it, its numeric field.
    """

    def __init__(self, parser: Optional[TimestampParser] = None, reader: Optional[FieldReader] = None):
        """Initialize aggregator with a timestamp parser and field reader"""
        self.parser = parser or TimestampParser()
        self.reader = reader or FieldReader()

    def _value_field(self, aggregation: AggregationConfig) -> Optional[str]:
        """Field whose value feeds the bucket, if any"""
        if aggregation.preaggregated:
            return aggregation.preaggregated_field
        if aggregation.uses_field:
            return aggregation.aggregate_field
        return None

    def _check_value(self, record: Any, aggregation: AggregationConfig) -> None:
        """Raise for a value that would break the bucket reduction"""
        name = self._value_field(aggregation)
        if name is None:
            return
        if aggregation.preaggregated:
            # The pre-aggregated field must be present; None stands for 0
            raw = self.reader.read(record, name)
        else:
            raw = self.reader.read_optional(record, name)
        if raw is not None:
            coerce_number(raw, name)

    def _read(self, record: Any, date_column: str, aggregation: AggregationConfig) -> datetime:
        """Local timestamp of a usable record"""
        moment = self.parser.parse(self.reader.read(record, date_column))
        self._check_value(record, aggregation)
        return moment

    def _read_all(
        self,
        collection: RecordCollection,
        date_column: str,
        aggregation: AggregationConfig,
    ) -> Tuple[Dict[int, Tuple[Any, datetime]], List[RecordWarning]]:
        """Map id(record) -> (record, local timestamp), collecting unusable records"""
        parsed: Dict[int, Tuple[Any, datetime]] = {}
        warnings: List[RecordWarning] = []

        for index, record in enumerate(collection):
            try:
                parsed[id(record)] = (record, self._read(record, date_column, aggregation))
            except RECORD_ERRORS as e:
                field = getattr(e, "field", None) or date_column
                raw = self.reader.read_optional(record, field)
                warnings.append(RecordWarning(index=index, field=field, value=raw, reason=e.message))
                logger.warning(
                    "Skipping unusable record",
                    index=index,
                    field=field,
                    code=e.code.value,
                    reason=e.message
                )

        return parsed, warnings

    def _read_or_none(self, record: Any, date_column: str, aggregation: AggregationConfig) -> Optional[datetime]:
        try:
            return self._read(record, date_column, aggregation)
        except RECORD_ERRORS:
            return None

    def _bucket_value(
        self,
        collection: RecordCollection,
        boundary: BucketBoundary,
        parsed: Dict[int, Tuple[Any, datetime]],
        date_column: str,
        aggregation: AggregationConfig,
        value_data: Dict[str, RecordCollection],
    ) -> Any:
        """Value of a single bucket"""
        key = boundary.key
        key_format = boundary.key_format

        def in_bucket(record: Any) -> bool:
            entry = parsed.get(id(record))
            if entry is not None and entry[0] is record:
                moment = entry[1]
            else:
                # Collections that build fresh objects on every iteration
                moment = self._read_or_none(record, date_column, aggregation)
            return moment is not None and moment.strftime(key_format) == key

        if aggregation.preaggregated:
            # One record per bucket already carries the aggregated value
            match = collection.first(in_bucket)
            if match is None:
                return 0
            raw = self.reader.read(match, aggregation.preaggregated_field)
            return 0 if raw is None else coerce_number(raw, aggregation.preaggregated_field)

        matches = collection.filter(in_bucket)
        if aggregation.uses_field:
            value = matches.reduce(aggregation.aggregate_field, aggregation.aggregate_type)
        else:
            value = matches.count()

        value_data[boundary.label] = matches
        return value

    def aggregate(
        self,
        collection: RecordCollection,
        boundaries: Sequence[BucketBoundary],
        date_column: str,
        aggregation: AggregationConfig,
    ) -> Tuple[ChartResult, Dict[str, RecordCollection]]:
        """
        Build labels and values for a sequence of calendar buckets.

        Args:
            collection: Records to bucket (never mutated)
            boundaries: Buckets in the order they should appear
            date_column: Record field holding the timestamp
            aggregation: How each bucket is reduced

        Returns:
            Tuple of (result, value_data) where value_data maps each label to
            the records that matched it (empty in pre-aggregated mode)
        """
        parsed, warnings = self._read_all(collection, date_column, aggregation)
        value_data: Dict[str, RecordCollection] = {}
        result = ChartResult(
            warnings=warnings,
            granularity=boundaries[0].granularity.value if boundaries else None
        )

        for boundary in boundaries:
            value = self._bucket_value(collection, boundary, parsed, date_column, aggregation, value_data)
            result.append(boundary.label, value)

        logger.info(
            "Calendar buckets aggregated",
            granularity=result.granularity,
            buckets=len(result),
            records=len(parsed) + len(warnings),
            skipped=len(warnings),
            preaggregated=aggregation.preaggregated,
            aggregate_type=aggregation.aggregate_type.value if aggregation.uses_field else "count"
        )
        return result, value_data
