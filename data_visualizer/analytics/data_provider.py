"""Filter and roll-up engine over an immutable snapshot of row data."""
from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping

from ..config import get_settings
from ..domain.types import AxisValue, MeasureValue, RowData
from .models import Dimension, Filters
from .validator import validate_dimensions, validate_filters, validate_rows

logger = logging.getLogger(__name__)

_UNRANKED = math.inf


def to_number(value: Any) -> MeasureValue:
    """Parse a measure cell into an int or float, or None when it is not numeric."""
    if value is None:
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return None if isinstance(value, float) and math.isnan(value) else value
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return None if math.isnan(number) else number


class DataProvider:
    """Owns raw rows and turns them into the currently visible, aggregated row set.

    Mutation is confined to ``set_data`` and the ``filters`` setter; every read
    recomputes from the stored snapshot.
    """

    def __init__(
        self,
        rows: list[RowData] | None = None,
        dimensions: Iterable[Dimension | Mapping[str, Any]] | None = None,
        *,
        year_key: str | None = None,
        measure_key: str | None = None,
        sort_rules: Mapping[str, Iterable[Any]] | None = None,
        coerce_missing_measure: bool | None = None,
    ) -> None:
        settings = get_settings()
        self._year_key = year_key or settings.year_key
        self._measure_key = measure_key or settings.measure_key
        self._coerce_missing_measure = (
            settings.coerce_missing_measure
            if coerce_missing_measure is None
            else coerce_missing_measure
        )
        self._filters = Filters()
        self._dimensions: list[Dimension] = []
        self._rows: list[RowData] = []
        self._columns: list[str] = []
        self._sort_rules: dict[str, dict[str, int]] = {}

        if dimensions is not None:
            self.set_dimensions(dimensions)
        if rows is not None:
            self.set_data(rows)
        for key, ordered in (sort_rules or {}).items():
            self.set_sort_rule(key, ordered)

    @property
    def year_key(self) -> str:
        return self._year_key

    @property
    def measure_key(self) -> str:
        return self._measure_key

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_data(self, rows: list[RowData]) -> None:
        """Replace the row snapshot; each row is shallow-copied."""
        self._rows = validate_rows(rows)
        self._columns = list(self._rows[0].keys()) if self._rows else []

    @property
    def filters(self) -> Filters:
        return self._filters

    @filters.setter
    def filters(self, filters: Filters | Mapping[str, Any] | None) -> None:
        self._filters = validate_filters(filters)

    def set_filters(self, filters: Filters | Mapping[str, Any] | None) -> None:
        self.filters = filters

    @property
    def dimensions(self) -> list[Dimension]:
        return self._dimensions

    def set_dimensions(self, dimensions: Iterable[Dimension | Mapping[str, Any]]) -> None:
        self._dimensions = validate_dimensions(dimensions)

    def set_sort_rule(self, key: str, ordered_values: Iterable[Any]) -> None:
        """Force an explicit value order for ``key``, overriding item ``order``."""
        ranks: dict[str, int] = {}
        for position, value in enumerate(ordered_values):
            ranks.setdefault(str(value), position)
        self._sort_rules[key] = ranks

    def clear_sort_rule(self, key: str) -> None:
        self._sort_rules.pop(key, None)

    def get_dimensions(self) -> list[Dimension]:
        """Catalog dimensions that are not currently rolled up."""
        rolled_up = set(self._filters.roll_up)
        return [dim for dim in self._dimensions if dim.name_view not in rolled_up]

    get_active_dimensions = get_dimensions

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_raw_data(self) -> list[RowData]:
        return [dict(row) for row in self._rows]

    def get_data(self) -> list[RowData]:
        return self.process_config()

    def get_keys(self) -> list[str]:
        rows = self.process_config()
        return list(rows[0].keys()) if rows else []

    get_active_keys = get_keys

    def get_values_by_key(self, key: str) -> list[AxisValue]:
        """Distinct values of ``key`` in the processed rows, in display order."""
        values: list[AxisValue] = []
        seen: set[Any] = set()
        for row in self.process_config():
            value = row.get(key)
            if value is None or value in seen:
                continue
            seen.add(value)
            values.append(value)

        if key == self._year_key:
            return values

        rank = self._rank_function(key)
        if rank is None:
            return values
        return sorted(values, key=rank)

    get_items = get_values_by_key

    def _rank_function(self, key: str):
        rule = self._sort_rules.get(key)
        if rule is not None:
            return lambda value: rule.get(str(value), _UNRANKED)

        dimension = next((dim for dim in self._dimensions if dim.name_view == key), None)
        if dimension is None or not any(item.order is not None for item in dimension.items):
            return None

        orders: dict[str, float] = {}
        for item in dimension.items:
            if item.order is not None:
                orders.setdefault(str(item.name), item.order)
        return lambda value: orders.get(str(value), _UNRANKED)

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def process_config(self) -> list[RowData]:
        """Apply the filters, then roll up; results keep first-insertion order."""
        accumulator: dict[tuple[Any, ...], RowData] = {}
        roll_up = set(self._filters.roll_up)

        for row in self._rows:
            if self._is_filtered(row):
                continue
            if not roll_up:
                key = tuple(row[column] for column in self._columns)
                accumulator[key] = dict(row)
            else:
                self._roll_up(row, roll_up, accumulator)

        logger.debug(
            "Processed %d row(s) into %d (roll_up=%s, filters=%d)",
            len(self._rows), len(accumulator), sorted(roll_up), len(self._filters.filter),
        )
        return list(accumulator.values())

    def _is_filtered(self, row: RowData) -> bool:
        return any(not entry.matches(row.get(entry.name)) for entry in self._filters.filter)

    def _roll_up(
        self,
        row: RowData,
        roll_up: set[str],
        accumulator: dict[tuple[Any, ...], RowData],
    ) -> None:
        measure = row.get(self._measure_key)
        working = {
            column: row[column]
            for column in self._columns
            if column != self._measure_key and column not in roll_up
        }
        key = tuple(working.values())

        existing = accumulator.get(key)
        if existing is not None:
            existing[self._measure_key] = self._sum_measures(existing[self._measure_key], measure)
        else:
            working[self._measure_key] = self._coerce_measure(measure)
            accumulator[key] = working

    def _coerce_measure(self, value: Any) -> MeasureValue:
        number = to_number(value)
        if number is None and self._coerce_missing_measure:
            return 0
        return number

    def _sum_measures(self, current: Any, value: Any) -> MeasureValue:
        left = self._coerce_measure(current)
        right = self._coerce_measure(value)
        if left is None:
            return right
        if right is None:
            return left
        return left + right
