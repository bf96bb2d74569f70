"""Domain layer for data-visualizer."""
from .types import (
    AxisRule,
    AxisValue,
    ChartType,
    DEFAULT_STACK_GROUP,
    MeasureValue,
    PERCENT_SUFFIX,
    RowData,
    RowValue,
    ValueDisplay,
)

__all__ = ["AxisRule", "AxisValue", "ChartType", "DEFAULT_STACK_GROUP", "MeasureValue",
           "PERCENT_SUFFIX", "RowData", "RowValue", "ValueDisplay"]
