"""Filter, roll-up and series derivation pipeline for categorical row data."""
from .errors import (
    DataVisualizerError,
    ValidationError,
    ResolutionError,
)
from .models import (
    Item,
    Dimension,
    DimensionFilter,
    Filters,
    SeriesConfig,
    SeriesOut,
)
from .data_provider import DataProvider, to_number
from .chart_data import ChartData
from .series_resolver import (
    AxisResolution,
    can_use_axis,
    find_available_dimension,
    initialize_series_config,
    resolve_axes,
    resolve_series_config,
)
from .validator import (
    check_rows_against_dimensions,
    validate_dimensions,
    validate_filters,
    validate_rows,
)

__all__ = [
    "DataVisualizerError",
    "ValidationError",
    "ResolutionError",
    "Item",
    "Dimension",
    "DimensionFilter",
    "Filters",
    "SeriesConfig",
    "SeriesOut",
    "DataProvider",
    "to_number",
    "ChartData",
    "AxisResolution",
    "can_use_axis",
    "find_available_dimension",
    "initialize_series_config",
    "resolve_axes",
    "resolve_series_config",
    "check_rows_against_dimensions",
    "validate_dimensions",
    "validate_filters",
    "validate_rows",
]
