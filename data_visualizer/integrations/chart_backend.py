"""
Chart backends: a capability interface plus a tag-based factory.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Protocol, runtime_checkable

from ..analytics.errors import ResolutionError, ValidationError
from ..analytics.models import SeriesOut
from ..config import get_settings
from ..domain.types import DEFAULT_STACK_GROUP, PERCENT_SUFFIX, AxisValue, ChartType

logger = logging.getLogger(__name__)


@runtime_checkable
class ChartBackend(Protocol):
    def render(
        self,
        series: Iterable[SeriesOut],
        categories: Iterable[AxisValue] | None = None,
    ) -> dict[str, Any]: ...

    def add_series(self, series: SeriesOut) -> None: ...

    def toggle_percent_mode(self) -> bool: ...


_ECHARTS_TYPES: dict[str, dict[str, Any]] = {
    "line": {"type": "line", "symbol": "circle", "symbolSize": 6},
    "spline": {"type": "line", "symbol": "circle", "symbolSize": 6, "smooth": True},
    "area": {"type": "line", "areaStyle": {}},
    "areaspline": {"type": "line", "areaStyle": {}, "smooth": True},
    "bar": {"type": "bar"},
    "column": {"type": "bar"},
    "pie": {"type": "pie"},
}


class EChartsBackend:
    """Builds an ECharts option dict from derived series; drawing stays with ECharts."""

    def __init__(
        self,
        chart_type: ChartType = "column",
        *,
        title: str = "",
        stacked: bool = False,
        measure_unit: str = "",
        percent_decimals: int | None = None,
    ) -> None:
        if chart_type not in _ECHARTS_TYPES:
            raise ValidationError(f"Unsupported chart type '{chart_type}'")
        self._chart_type = chart_type
        self._title = title
        self._stacked = stacked
        self._measure_unit = measure_unit
        self._decimals = (
            get_settings().percent_decimals if percent_decimals is None else percent_decimals
        )
        self._to_percent = False
        self._extra_series: list[SeriesOut] = []

    @property
    def to_percent(self) -> bool:
        return self._to_percent

    def add_series(self, series: SeriesOut) -> None:
        self._extra_series.append(series)

    def toggle_percent_mode(self) -> bool:
        if not self._stacked:
            raise ResolutionError("Percent mode requires stacked series")
        self._to_percent = not self._to_percent
        return self._to_percent

    def render(
        self,
        series: Iterable[SeriesOut],
        categories: Iterable[AxisValue] | None = None,
    ) -> dict[str, Any]:
        all_series = list(series) + self._extra_series
        if categories is None:
            categories = [point[0] for point in all_series[0].data] if all_series else []
        labels = list(categories)

        values = [[point[1] for point in s.data] for s in all_series]
        if self._to_percent:
            values = self._to_shares(values)

        if self._chart_type == "pie":
            return self._pie_option(all_series, values, labels)

        base = _ECHARTS_TYPES[self._chart_type]
        option_series = []
        for s, data in zip(all_series, values):
            entry: dict[str, Any] = {**base, "name": s.name, "data": data}
            if self._stacked:
                entry["stack"] = s.stack or DEFAULT_STACK_GROUP
            if s.color:
                entry["itemStyle"] = {"color": s.color}
            option_series.append(entry)

        category_axis = {"type": "category", "data": labels}
        value_axis: dict[str, Any] = {"type": "value", "name": self._measure_unit}
        if self._to_percent:
            value_axis["max"] = 100
        horizontal = self._chart_type == "bar"

        return {
            "title": {"text": self._title, "left": "center"},
            "legend": {"data": [s.name for s in all_series]},
            "tooltip": {"trigger": "item", "suffix": self._suffix()},
            "xAxis": value_axis if horizontal else category_axis,
            "yAxis": category_axis if horizontal else value_axis,
            "series": option_series,
        }

    def _pie_option(
        self,
        all_series: list[SeriesOut],
        values: list[list[Any]],
        labels: list[AxisValue],
    ) -> dict[str, Any]:
        option_series = [
            {
                "type": "pie",
                "name": s.name,
                "data": [
                    {"name": str(label), "value": value}
                    for label, value in zip(labels, data)
                    if value is not None
                ],
            }
            for s, data in zip(all_series, values)
        ]
        return {
            "title": {"text": self._title, "left": "center"},
            "tooltip": {"trigger": "item", "suffix": self._suffix()},
            "series": option_series,
        }

    def _suffix(self) -> str:
        return PERCENT_SUFFIX if self._to_percent else self._measure_unit

    def _to_shares(self, values: list[list[Any]]) -> list[list[Any]]:
        width = max((len(row) for row in values), default=0)
        totals = [0.0] * width
        for row in values:
            for index, value in enumerate(row):
                if value is not None:
                    totals[index] += value
        return [
            [
                round(value * 100 / totals[index], self._decimals)
                if value is not None and totals[index]
                else None
                for index, value in enumerate(row)
            ]
            for row in values
        ]


_BACKENDS: dict[str, Callable[..., Any]] = {}


def register_backend(tag: str, factory: Callable[..., Any]) -> None:
    _BACKENDS[tag.strip().lower()] = factory


def available_backends() -> list[str]:
    return sorted(_BACKENDS)


def create_backend(tag: str | None = None, **options: Any) -> ChartBackend:
    """Instantiate the backend registered under ``tag`` and check it conforms."""
    key = (tag or get_settings().default_backend).strip().lower()
    factory = _BACKENDS.get(key)
    if factory is None:
        raise ValidationError(
            f"Unknown chart backend '{key}'; available: {', '.join(available_backends())}"
        )
    backend = factory(**options)
    if not isinstance(backend, ChartBackend):
        raise ValidationError(f"Backend '{key}' does not implement the chart backend interface")
    logger.debug("Created chart backend %s", key)
    return backend


register_backend("echarts", EChartsBackend)
