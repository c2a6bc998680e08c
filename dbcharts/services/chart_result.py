"""
Result structure produced by every bucketing operation.

Labels and values are index-aligned: ``values[i]`` is the aggregate of the
bucket labelled ``labels[i]``. Records skipped because a timestamp or value
could not be read are reported in ``warnings`` instead of failing the whole
chart.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Union
from decimal import Decimal

from dbcharts.services.records import normalize_numbers


@dataclass(frozen=True)
class RecordWarning:
    """A record left out of every bucket because one of its fields is unusable"""

    index: int
    field: str
    value: Any
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "field": self.field, "value": repr(self.value), "reason": self.reason}


@dataclass
class ChartResult:
    """
    Labels and values ready to hand to a chart.

    This is the contract between the bucketing engine and the rendering layer.
    """

    labels: List[str] = field(default_factory=list)
    values: List[Union[int, float, Decimal]] = field(default_factory=list)
    warnings: List[RecordWarning] = field(default_factory=list)
    granularity: Optional[str] = None

    def __post_init__(self):
        """Labels and values must stay aligned."""
        if len(self.labels) != len(self.values):
            raise ValueError(
                f"labels and values differ in length ({len(self.labels)} != {len(self.values)})"
            )

    def append(self, label: str, value: Union[int, float, Decimal]) -> None:
        """Add one bucket at the end"""
        self.labels.append(label)
        self.values.append(value)

    def __len__(self) -> int:
        return len(self.labels)

    @property
    def is_empty(self) -> bool:
        return not self.labels

    @property
    def total(self) -> Union[int, float, Decimal]:
        """Sum of every bucket value"""
        return sum(normalize_numbers(self.values))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "labels": list(self.labels),
            "values": list(self.values),
            "granularity": self.granularity,
            "warnings": [w.to_dict() for w in self.warnings],
        }
