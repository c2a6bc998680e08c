"""Configuration models for dbcharts"""

from dbcharts.models.schemas import AggregateType, AggregationConfig, ChartConfig

__all__ = ["AggregateType", "AggregationConfig", "ChartConfig"]
