from __future__ import annotations


class DataVisualizerError(Exception):
    """Base error class for the data transformation pipeline."""


class ValidationError(DataVisualizerError):
    """Raised when rows, dimensions, filters or backends are malformed."""


class ResolutionError(DataVisualizerError):
    """Raised when a chart cannot be derived from the current configuration."""
