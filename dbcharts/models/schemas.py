"""
Pydantic models for chart configuration
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from dbcharts.config.settings import Settings


class AggregateType(str, Enum):
    """Reductions a bucket can apply over a record field"""
    COUNT = "count"
    SUM = "sum"
    AVG = "avg"
    MIN = "min"
    MAX = "max"


class AggregationConfig(BaseModel):
    """
    How each bucket is reduced to a single value.

    When ``preaggregated`` is set the field/type pair is ignored and the value
    is read from ``preaggregated_field`` of the first matching record.
    """

    model_config = ConfigDict(frozen=True)

    preaggregated: bool = False
    aggregate_field: Optional[str] = None
    aggregate_type: Optional[AggregateType] = None
    preaggregated_field: str = "aggregate"

    @property
    def uses_field(self) -> bool:
        """True when raw buckets are reduced over a field instead of counted"""
        return bool(self.aggregate_field) and self.aggregate_type is not None


class ChartConfig(BaseModel):
    """Immutable chart configuration, replaced wholesale on every setter call"""

    model_config = ConfigDict(frozen=True)

    date_column: str = "created_at"
    language: str = "en"
    date_format: str = "dddd Do MMM, YYYY"
    month_format: str = "MMMM, YYYY"
    hour_format: str = "ddd, MMM D, YYYY h A"
    year_format: str = "YYYY"
    aggregation: AggregationConfig = Field(default_factory=AggregationConfig)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChartConfig":
        """Build the initial configuration from application settings"""
        return cls(
            date_column=settings.date_column,
            language=settings.language,
            date_format=settings.date_format,
            month_format=settings.month_format,
            hour_format=settings.hour_format,
            year_format=settings.year_format,
            aggregation=AggregationConfig(preaggregated_field=settings.preaggregated_field),
        )
