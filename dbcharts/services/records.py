"""
Record collection interface consumed by the bucketing engine.

The engine never assumes a storage backend. It needs a handful of read-only
operations (filter, group, reduce, count, first) and a way to read named
fields from a record. ``ListRecordCollection`` implements the interface over
any in-memory sequence of mappings or attribute-bearing objects.
"""
from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Protocol, Sequence, Tuple, Union, runtime_checkable

from dbcharts.models.schemas import AggregateType
from dbcharts.utils.errors import FieldLookupError, NonNumericValueError, UnsupportedAggregationError

_MISSING = object()


class FieldReader:
    """
    Reads named fields from records.

    Mappings are read by key, everything else by attribute. A missing field is
    always reported as ``FieldLookupError`` so callers can tell bad data apart
    from a bug.
    """

    def read(self, record: Any, name: str) -> Any:
        """Value of ``name`` on ``record``"""
        if isinstance(record, Mapping):
            value = record.get(name, _MISSING)
        else:
            value = getattr(record, name, _MISSING)
        if value is _MISSING:
            raise FieldLookupError(name, record)
        return value

    def read_optional(self, record: Any, name: str, default: Any = None) -> Any:
        """Value of ``name`` on ``record`` or ``default`` when absent"""
        try:
            return self.read(record, name)
        except FieldLookupError:
            return default

    def resolve(self, record: Any, path: Sequence[str]) -> Any:
        """Follow ``path`` one field at a time starting from ``record``"""
        value = record
        for segment in path:
            try:
                value = self.read(value, segment)
            except FieldLookupError as e:
                raise FieldLookupError(segment, value, ".".join(path)) from e
        return value


def split_relation(relation: Optional[Union[str, Sequence[str]]]) -> Optional[List[str]]:
    """Turn "a.b" (or ["a", "b"]) into the list of segments to follow"""
    if relation is None:
        return None
    if isinstance(relation, str):
        return relation.split(".")
    return list(relation)


def coerce_number(value: Any, field: str) -> Union[int, float, Decimal]:
    """Numeric value of ``field`` suitable for aggregation"""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float, Decimal)):
        return value
    if isinstance(value, str):
        for cast in (int, float):
            try:
                return cast(value.strip())
            except ValueError:
                continue
    raise NonNumericValueError(field, value)


def normalize_numbers(values: Sequence[Union[int, float, Decimal]]) -> List[Union[int, float, Decimal]]:
    """Bring mixed Decimal and float values to Decimal so they can be combined"""
    if not any(isinstance(v, Decimal) for v in values):
        return list(values)
    return [v if isinstance(v, Decimal) else Decimal(str(v)) for v in values]


def hashable_key(value: Any) -> Any:
    """``value`` itself when it can key a dict, otherwise its string form"""
    try:
        hash(value)
    except TypeError:
        return str(value)
    return value


@runtime_checkable
class RecordCollection(Protocol):
    """Minimal read-only interface over the caller's records"""

    def __iter__(self) -> Iterator[Any]: ...

    def filter(self, predicate: Callable[[Any], bool]) -> "RecordCollection": ...

    def group_by(self, key_fn: Callable[[Any], Any]) -> List[Tuple[Any, "RecordCollection"]]: ...

    def reduce(self, field: str, op: Union[str, AggregateType]) -> Union[int, float, Decimal]: ...

    def count(self) -> int: ...

    def first(self, predicate: Optional[Callable[[Any], bool]] = None) -> Optional[Any]: ...


class ListRecordCollection:
    """In-memory record collection backed by a list"""

    def __init__(self, records: Iterable[Any] = (), reader: Optional[FieldReader] = None):
        self._records = list(records)
        self.reader = reader or FieldReader()

    def __iter__(self) -> Iterator[Any]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, index: int) -> Any:
        return self._records[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ListRecordCollection):
            return self._records == other._records
        return NotImplemented

    def __repr__(self) -> str:
        return f"ListRecordCollection({len(self._records)} records)"

    def filter(self, predicate: Callable[[Any], bool]) -> "ListRecordCollection":
        """Records for which ``predicate`` is true, in original order"""
        return ListRecordCollection((r for r in self._records if predicate(r)), self.reader)

    def group_by(self, key_fn: Callable[[Any], Any]) -> List[Tuple[Any, "ListRecordCollection"]]:
        """
        Partition records by key, keeping first-occurrence order of keys.

        Unhashable keys (lists, dicts) are grouped by their string form.
        """
        groups: Dict[Any, List[Any]] = {}
        for record in self._records:
            groups.setdefault(hashable_key(key_fn(record)), []).append(record)
        return [(key, ListRecordCollection(members, self.reader)) for key, members in groups.items()]

    def count(self) -> int:
        return len(self._records)

    def first(self, predicate: Optional[Callable[[Any], bool]] = None) -> Optional[Any]:
        """First record matching ``predicate`` (or the first record at all)"""
        for record in self._records:
            if predicate is None or predicate(record):
                return record
        return None

    def reduce(self, field: str, op: Union[str, AggregateType]) -> Union[int, float, Decimal]:
        """
        Reduce the collection over ``field``.

        Records where the field is missing or None are skipped. An empty
        collection reduces to 0 for every operation.

        Raises:
            UnsupportedAggregationError: unknown operation
            NonNumericValueError: a value that is not a number
        """
        try:
            op = AggregateType(op.lower() if isinstance(op, str) else op)
        except ValueError as e:
            raise UnsupportedAggregationError(
                f"Unsupported aggregate: {op}",
                {"aggregate": str(op), "supported": [t.value for t in AggregateType]}
            ) from e

        if op == AggregateType.COUNT:
            return self.count()

        values = []
        for record in self._records:
            raw = self.reader.read_optional(record, field)
            if raw is None:
                continue
            values.append(coerce_number(raw, field))

        if not values:
            return 0
        values = normalize_numbers(values)
        if op == AggregateType.SUM:
            return sum(values)
        if op == AggregateType.AVG:
            return sum(values) / len(values)
        if op == AggregateType.MIN:
            return min(values)
        return max(values)


def as_collection(data: Union[RecordCollection, Iterable[Any], None]) -> RecordCollection:
    """Wrap plain iterables so the engine can treat every input the same way"""
    if data is None:
        return ListRecordCollection()
    if isinstance(data, RecordCollection):
        return data
    return ListRecordCollection(data)
