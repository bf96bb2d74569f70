"""Validate row data, dimension catalogs and filters at the pipeline boundary."""
from __future__ import annotations

import logging
from numbers import Number
from typing import Any, Iterable, Mapping

from pydantic import ValidationError as PydanticValidationError

from ..domain.types import RowData
from .errors import ValidationError
from .models import Dimension, Filters

logger = logging.getLogger(__name__)

_SCALAR_TYPES = (str, bool, Number, type(None))
_REQUIRED_DIMENSION_FIELDS = ("id", "name", "items")


def validate_rows(rows: Any) -> list[RowData]:
    """Check that ``rows`` is a list of uniform-shape mappings and copy them.

    Raises ValidationError on any violation.
    """
    if not isinstance(rows, list):
        raise ValidationError("Row data must be a list of mappings")

    copies: list[RowData] = []
    first_keys: set[str] | None = None
    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise ValidationError(f"Row at position {index} is not a mapping")
        keys = set(row.keys())
        if first_keys is None:
            first_keys = keys
        elif keys != first_keys:
            raise ValidationError(
                f"Row at position {index} does not match the shape of the first row"
            )
        for key, value in row.items():
            if not isinstance(value, _SCALAR_TYPES):
                raise ValidationError(
                    f"Row at position {index} has a non-scalar value for '{key}'"
                )
        copies.append(dict(row))
    return copies


def validate_dimensions(
    dimensions: Iterable[Dimension | Mapping[str, Any]] | None,
    *,
    unique_name_views: bool = True,
) -> list[Dimension]:
    """Parse and check a dimension catalog.

    Ids and internal names must be unique; display names (the row keys) too
    unless ``unique_name_views`` is False.
    """
    if dimensions is None:
        return []
    if isinstance(dimensions, (str, bytes, Mapping)) or not isinstance(dimensions, Iterable):
        raise ValidationError("Dimensions must be a list")

    parsed: list[Dimension] = []
    seen_ids: set[int] = set()
    seen_names: set[str] = set()
    seen_views: set[str] = set()

    for index, raw in enumerate(dimensions):
        dimension = _parse_dimension(raw, index)

        if dimension.id in seen_ids:
            raise ValidationError(f"Duplicate dimension id: {dimension.id}")
        seen_ids.add(dimension.id)

        if dimension.name in seen_names:
            raise ValidationError(f"Duplicate dimension name: {dimension.name}")
        seen_names.add(dimension.name)

        if unique_name_views:
            if dimension.name_view in seen_views:
                raise ValidationError(
                    f"Duplicate dimension display name: {dimension.name_view}"
                )
            seen_views.add(dimension.name_view)

        parsed.append(dimension)
    return parsed


def _parse_dimension(raw: Any, index: int) -> Dimension:
    if isinstance(raw, Dimension):
        return raw
    if not isinstance(raw, Mapping):
        raise ValidationError(f"Dimension at position {index} is not a valid object")

    missing = [name for name in _REQUIRED_DIMENSION_FIELDS if name not in raw]
    if "nameView" not in raw and "name_view" not in raw:
        missing.append("nameView")
    if missing:
        label = raw.get("name") or "unnamed"
        raise ValidationError(
            f"Dimension '{label}' is missing required field(s): {', '.join(missing)}"
        )
    try:
        return Dimension.model_validate(dict(raw))
    except PydanticValidationError as exc:
        raise ValidationError(f"Dimension at position {index} is invalid: {exc}") from exc


def validate_filters(filters: Filters | Mapping[str, Any] | None) -> Filters:
    if filters is None:
        return Filters()
    if isinstance(filters, Filters):
        return filters
    if not isinstance(filters, Mapping):
        raise ValidationError("Filters must be a Filters instance or a mapping")
    try:
        return Filters.model_validate(dict(filters))
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid filters: {exc}") from exc


def check_rows_against_dimensions(
    rows: list[RowData],
    dimensions: list[Dimension],
    measure_key: str,
) -> tuple[list[str], list[str]]:
    """Compare the data columns with the dimension catalog.

    Logs warnings rather than raising: a mismatch degrades the view but does
    not corrupt the data. Returns ``(missing_dimensions, extra_columns)``.
    """
    if not rows or not dimensions:
        return [], []

    data_keys = list(rows[0].keys())
    key_set = set(data_keys)

    missing = [
        dim.name_view
        for dim in dimensions
        if str(dim.id) not in key_set and dim.name not in key_set and dim.name_view not in key_set
    ]
    if missing:
        logger.warning(
            "No data column matches the id, name or nameView of dimension(s): %s",
            ", ".join(missing),
        )

    known = set()
    for dim in dimensions:
        known.update({str(dim.id), dim.name, dim.name_view})
    extra = [key for key in data_keys if key != measure_key and key not in known]
    if extra:
        logger.warning(
            "Data column(s) without a matching dimension will not be described: %s",
            ", ".join(extra),
        )
    return missing, extra
