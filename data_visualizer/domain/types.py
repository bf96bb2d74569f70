"""
Core type definitions and constants.
"""
from __future__ import annotations

from typing import Literal, Union

RowValue = Union[str, int, float, bool, None]
RowData = dict[str, RowValue]
AxisValue = Union[str, int, float, bool]
MeasureValue = Union[int, float, None]

ValueDisplay = Literal["nominal", "percentOfTotal", "percentOfRow", "percentOfColumn"]
ChartType = Literal["line", "spline", "area", "areaspline", "bar", "column", "pie"]

DEFAULT_STACK_GROUP = "stack"
PERCENT_SUFFIX = "%"


class AxisRule:
    CONFIGURED = "configured"
    PROMOTED_SECONDARY = "promoted_secondary"
    FALLBACK_KEY = "fallback_key"
    CATALOG_SCAN = "catalog_scan"
