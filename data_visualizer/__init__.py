"""Filter, roll-up and series derivation for categorical chart and pivot data."""
from .analytics import (
    ChartData,
    DataProvider,
    DataVisualizerError,
    Dimension,
    DimensionFilter,
    Filters,
    Item,
    ResolutionError,
    SeriesConfig,
    SeriesOut,
    ValidationError,
)
from .services import ChartService, Dataset, GoalService, TableService

__all__ = [
    "ChartData",
    "DataProvider",
    "DataVisualizerError",
    "Dimension",
    "DimensionFilter",
    "Filters",
    "Item",
    "ResolutionError",
    "SeriesConfig",
    "SeriesOut",
    "ValidationError",
    "ChartService",
    "Dataset",
    "GoalService",
    "TableService",
]
