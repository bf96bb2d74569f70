"""Project processed rows into named, stacked, axis-aligned chart series."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..config import get_settings
from ..domain.types import AxisValue, MeasureValue, RowData
from .data_provider import DataProvider, to_number
from .errors import ResolutionError
from .models import SeriesConfig, SeriesOut

logger = logging.getLogger(__name__)

SlotKey = tuple[AxisValue, ...]


def _display(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class _Axes:
    primary: str
    secondary: str | None
    stack: str | None
    primary_items: list[AxisValue]
    secondary_items: list[AxisValue]


@dataclass(frozen=True)
class _RowPoint:
    identity: tuple[Any, ...]
    name: str
    stack: str | None
    slot: SlotKey
    label: AxisValue
    value: MeasureValue
    color: str | None


@dataclass
class _SeriesBuilder:
    name: str
    stack: str | None
    color: str | None
    slots: dict[SlotKey, list[Any]] = field(default_factory=dict)

    def build(self) -> SeriesOut:
        return SeriesOut(
            name=self.name,
            stack=self.stack if self.stack != self.name else None,
            data=list(self.slots.values()),
            color=self.color,
        )


class ChartData:
    """Turns the rows of a configured DataProvider into render-ready series.

    Every series gets a copy of the same axis skeleton (all primary x secondary
    combinations, each starting as ``[label, None]``), so renderers receive
    fixed-length arrays even where no row exists for a combination.
    """

    def __init__(
        self,
        data_provider: DataProvider,
        series_config: SeriesConfig | Mapping[str, Any],
        color_palette: Mapping[str, str] | None = None,
        *,
        separator: str | None = None,
    ) -> None:
        self.data_provider = data_provider
        self.series_config = (
            series_config
            if isinstance(series_config, SeriesConfig)
            else SeriesConfig.model_validate(dict(series_config))
        )
        self._palette: dict[str, str] = dict(color_palette or {})
        self._separator = separator if separator is not None else get_settings().series_separator

    @property
    def color_palette(self) -> dict[str, str]:
        return dict(self._palette)

    def get_items(self, key: str) -> list[AxisValue]:
        return self.data_provider.get_values_by_key(key)

    def get_series(self) -> list[SeriesOut]:
        rows = self.data_provider.get_data()
        if not rows:
            return []

        axes = self._extract_axes(list(rows[0].keys()))
        skeleton = self._build_skeleton(axes)
        series: dict[tuple[Any, ...], _SeriesBuilder] = {}

        for row in rows:
            point = self._process_row(row, axes)
            builder = series.get(point.identity)
            if builder is None:
                builder = _SeriesBuilder(
                    name=point.name,
                    stack=point.stack,
                    color=point.color,
                    slots={key: list(slot) for key, slot in skeleton.items()},
                )
                series[point.identity] = builder

            if point.slot not in builder.slots:
                raise ResolutionError(
                    f"Axis value {point.slot!r} of series '{point.name}' is missing from the skeleton"
                )
            builder.slots[point.slot] = [point.label, point.value]

        logger.debug("Built %d series over %d axis slot(s)", len(series), len(skeleton))
        return [builder.build() for builder in series.values()]

    def get_series_dicts(self) -> list[dict[str, Any]]:
        return [series.to_dict() for series in self.get_series()]

    def _extract_axes(self, keys: list[str]) -> _Axes:
        config = self.series_config
        if not config.x1 or config.x1 not in keys:
            raise ResolutionError(
                f"Primary axis '{config.x1}' is not among the active keys: {', '.join(keys)}"
            )
        secondary = config.x2 if config.x2 and config.x2 in keys else None
        stack = config.stack if config.stack and config.stack in keys else None
        return _Axes(
            primary=config.x1,
            secondary=secondary,
            stack=stack,
            primary_items=self.get_items(config.x1),
            secondary_items=self.get_items(secondary) if secondary else [],
        )

    @staticmethod
    def _build_skeleton(axes: _Axes) -> dict[SlotKey, list[Any]]:
        skeleton: dict[SlotKey, list[Any]] = {}
        for item in axes.primary_items:
            if axes.secondary_items:
                for item2 in axes.secondary_items:
                    skeleton[(item, item2)] = [item2, None]
            else:
                skeleton[(item,)] = [item, None]
        return skeleton

    def _process_row(self, row: RowData, axes: _Axes) -> _RowPoint:
        measure_key = self.data_provider.measure_key
        parts: list[Any] = []
        stack: str | None = None
        color: str | None = None

        for key, value in row.items():
            if key in (axes.primary, axes.secondary, measure_key):
                continue
            parts.append(value)
            if key == axes.stack:
                stack = _display(value)
            if color is None and self._palette:
                color = self._palette.get(str(value)) or None

        primary = row.get(axes.primary)
        if primary is None or primary == "":
            raise ResolutionError(f"Row has no value for primary axis '{axes.primary}'")

        if axes.secondary_items:
            secondary = row.get(axes.secondary)
            slot: SlotKey = (primary, secondary)
            label = secondary
        else:
            slot = (primary,)
            label = primary

        if parts:
            name = self._separator.join(_display(part) for part in parts)
        else:
            name = self.series_config.measure or ""

        return _RowPoint(
            identity=tuple(parts),
            name=name,
            stack=stack,
            slot=slot,
            label=label,
            value=to_number(row.get(measure_key)),
            color=color,
        )
