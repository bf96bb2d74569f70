"""
Goal overlay: draws target rows against the chart's time axis.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..analytics.chart_data import ChartData
from ..analytics.data_provider import DataProvider
from ..analytics.errors import DataVisualizerError
from ..analytics.models import Filters, SeriesConfig
from ..domain.types import ChartType, RowData
from .chart_service import ChartConfiguration

logger = logging.getLogger(__name__)


class Goal(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    chart_type: ChartType = Field(default="line", alias="chartType")
    text: str = ""
    data: list[RowData] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _coerce_nulls(cls, values: Any) -> Any:
        if isinstance(values, dict) and values.get("data") is None:
            values = {**values, "data": []}
        return values


@dataclass(frozen=True)
class SavedGoalState:
    series_config: SeriesConfig
    filters: Filters


class GoalService:
    """Shows and hides a goal overlay on one chart configuration.

    Goal data is optional: every failure is logged and reported as ``None``
    instead of interrupting the chart it decorates.
    """

    def __init__(self, configuration: ChartConfiguration) -> None:
        self._configuration = configuration
        self._saved: SavedGoalState | None = None
        self._goal_chart_data: ChartData | None = None

    @property
    def is_showing(self) -> bool:
        return self._saved is not None

    def show_goal(self, goal: Goal | None) -> ChartData | None:
        if goal is None:
            logger.warning("No goal provided")
            return None
        if not goal.data:
            logger.warning("Goal '%s' has no data", goal.text)
            return None

        try:
            goal_chart_data = self._build_goal_chart_data(goal)
            self._roll_up_to_goal_axes(goal_chart_data.series_config)
        except DataVisualizerError as exc:
            logger.warning("Could not show goal '%s': %s", goal.text, exc)
            return None

        self._goal_chart_data = goal_chart_data
        return goal_chart_data

    def hide_goal(self) -> SavedGoalState | None:
        """Restore the series config and filters that were active before the goal."""
        saved = self._saved
        if saved is None:
            return None
        self._configuration.series_config = saved.series_config
        self._saved = None
        self._goal_chart_data = None
        self._configuration.dataset.apply_filters(saved.filters)
        return saved

    def _build_goal_chart_data(self, goal: Goal) -> ChartData:
        source = self._configuration.dataset.data_provider
        provider = DataProvider(
            goal.data, year_key=source.year_key, measure_key=source.measure_key
        )
        goal_dimensions = [
            key for key in provider.get_keys()
            if key not in (provider.measure_key, provider.year_key)
        ]
        series_config = SeriesConfig(
            x1=provider.year_key,
            x2=goal_dimensions[0] if goal_dimensions else None,
            stack=None,
            measure=self._configuration.series_config.measure,
        )
        return ChartData(provider, series_config, {})

    def _roll_up_to_goal_axes(self, goal_config: SeriesConfig) -> None:
        configuration = self._configuration
        dataset = configuration.dataset

        roll_up = [
            dimension.key
            for dimension in dataset.dimensions
            if dimension.key not in (goal_config.x1, goal_config.x2)
        ]
        if self._saved is None:
            self._saved = SavedGoalState(
                series_config=configuration.series_config.model_copy(),
                filters=dataset.data_provider.filters.copy_deep(),
            )
        configuration.series_config = goal_config.model_copy(update={"stack": None})
        dataset.apply_filters(Filters(roll_up=roll_up))
