"""
Dataset: owns one DataProvider plus the static dimension catalog.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping

from ..analytics.data_provider import DataProvider
from ..analytics.models import Dimension, Filters
from ..analytics.validator import (
    check_rows_against_dimensions,
    validate_dimensions,
    validate_filters,
    validate_rows,
)
from ..domain.types import RowData

logger = logging.getLogger(__name__)

DataUpdatedCallback = Callable[["Dataset"], None]


class Dataset:
    """Row data plus dimension catalog, with a synchronous "data updated" signal."""

    def __init__(
        self,
        dimensions: Iterable[Dimension | Mapping[str, Any]] | None,
        row_data: list[RowData] | None,
        *,
        id: int | None = None,
        enable_roll_up: bool = True,
        data_provider_factory: Callable[..., DataProvider] = DataProvider,
    ) -> None:
        self.id = id
        self.enable_roll_up = bool(enable_roll_up)
        self._dimensions = validate_dimensions(dimensions)
        self._row_data = validate_rows(row_data if row_data is not None else [])
        self._data_provider_factory = data_provider_factory
        self.data_provider = data_provider_factory(self._row_data, self._dimensions)

        self._subscribers: list[DataUpdatedCallback] = []
        self._notifying = False
        self._pending_notify = False

        check_rows_against_dimensions(
            self._row_data, self._dimensions, self.data_provider.measure_key
        )

    @property
    def dimensions(self) -> list[Dimension]:
        return self._dimensions

    # ------------------------------------------------------------------
    # Filters and change notification
    # ------------------------------------------------------------------

    def apply_filters(self, filters: Filters | Mapping[str, Any]) -> None:
        """Replace the active filters and notify subscribers in the same call stack.

        A subscriber that applies filters again while the fan-out is running
        does not start a nested fan-out; one follow-up round runs afterwards,
        and only if the filters actually changed.
        """
        parsed = validate_filters(filters)
        if self._notifying:
            if parsed != self.data_provider.filters:
                self.data_provider.filters = parsed
                self._pending_notify = True
            return

        self.data_provider.filters = parsed
        self.notify()

    def notify(self) -> None:
        if self._notifying:
            self._pending_notify = True
            return
        self._notifying = True
        try:
            self._pending_notify = False
            self._fan_out()
            if self._pending_notify:
                self._pending_notify = False
                self._fan_out()
                if self._pending_notify:
                    logger.warning(
                        "Filters changed again during the follow-up notification; "
                        "subscribers are not notified a third time"
                    )
        finally:
            self._notifying = False
            self._pending_notify = False

    def _fan_out(self) -> None:
        for callback in list(self._subscribers):
            callback(self)

    def subscribe(self, callback: DataUpdatedCallback) -> Callable[[], None]:
        self._subscribers.append(callback)
        return lambda: self.unsubscribe(callback)

    def unsubscribe(self, callback: DataUpdatedCallback) -> None:
        try:
            self._subscribers.remove(callback)
        except ValueError:
            logger.debug("Callback %r was not subscribed", callback)

    # ------------------------------------------------------------------
    # Catalog and data access
    # ------------------------------------------------------------------

    def get_dimension(self, dimension_id: int) -> Dimension | None:
        return next((dim for dim in self._dimensions if dim.id == dimension_id), None)

    def get_dimension_key(self, dimension_id: int | None) -> str | None:
        if dimension_id is None:
            return None
        dimension = self.get_dimension(dimension_id)
        return dimension.key if dimension else None

    def get_all_dimensions(self) -> list[Dimension]:
        return [dim.model_copy(deep=True) for dim in self._dimensions]

    def get_active_dimensions(self) -> list[Dimension]:
        return self.data_provider.get_active_dimensions()

    def get_raw_data(self) -> list[RowData]:
        return [dict(row) for row in self._row_data]

    def get_current_data(self) -> list[RowData]:
        return self.data_provider.get_data()

    def get_palette(self) -> dict[str, str]:
        """Item name -> explicit color, across every dimension of the catalog."""
        palette: dict[str, str] = {}
        for dimension in self._dimensions:
            for item in dimension.items:
                if item.color:
                    palette[str(item.name)] = item.color
        return palette

    def copy(self) -> "Dataset":
        """Independent dataset over the same rows, with a deep copy of the filters."""
        clone = Dataset(
            self.get_all_dimensions(),
            self.get_raw_data(),
            id=self.id,
            enable_roll_up=self.enable_roll_up,
            data_provider_factory=self._data_provider_factory,
        )
        clone.data_provider.filters = self.data_provider.filters.copy_deep()
        return clone
