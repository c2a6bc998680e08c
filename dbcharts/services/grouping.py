"""
Grouping Engine - Buckets records by a column value instead of a calendar period
"""

from typing import Any, Dict, Optional, Sequence, Union
import structlog

from dbcharts.services.chart_result import ChartResult
from dbcharts.services.records import FieldReader, RecordCollection, hashable_key, split_relation

logger = structlog.get_logger(__name__)


class GroupingEngine:
    """
    Counts records per distinct value of a column.

    Labels come from a representative record of each group: the column value
    itself, or the value reached by following a relation path such as
    ``"owner.team.name"``. An optional mapping rewrites labels for display.
    """

    def __init__(self, reader: Optional[FieldReader] = None):
        self.reader = reader or FieldReader()

    def _label(self, representative: Any, column: str, relation: Optional[Sequence[str]]) -> Any:
        if relation is None:
            return self.reader.read(representative, column)
        return self.reader.resolve(representative, relation)

    def group(
        self,
        collection: RecordCollection,
        column: str,
        relation_column: Optional[Union[str, Sequence[str]]] = None,
        labels_mapping: Optional[Dict[Any, Any]] = None,
    ) -> ChartResult:
        """
        Count records per distinct ``column`` value, in first-seen order.

        Args:
            collection: Records to group (never mutated)
            column: Field whose raw value partitions the records
            relation_column: Optional field or dotted path resolved for the label
            labels_mapping: Optional label -> display label table; unhashable
                labels are looked up by their string form

        Returns:
            ChartResult with one (label, count) entry per group

        Raises:
            FieldLookupError: a record lacks ``column`` or a relation segment
        """
        relation = split_relation(relation_column)
        mapping = labels_mapping or {}
        result = ChartResult()

        for _, members in collection.group_by(lambda record: self.reader.read(record, column)):
            label = self._label(members.first(), column, relation)
            label = mapping.get(hashable_key(label), label)
            result.append(str(label), members.count())

        logger.info(
            "Records grouped by column",
            column=column,
            relation=".".join(relation) if relation else None,
            groups=len(result),
            records=result.total
        )
        return result
