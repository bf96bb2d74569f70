"""
Chart configuration service.

Builds ChartData for a dataset from display options, keeps the axis pairing
valid as dimensions get rolled up, and exposes a per-chart render entry point
that isolates core failures to the chart that raised them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, model_validator

from ..analytics.chart_data import ChartData
from ..analytics.errors import DataVisualizerError, ValidationError
from ..analytics.models import Dimension, DimensionFilter, SeriesConfig
from ..analytics.series_resolver import resolve_series_config
from ..domain.types import ChartType
from ..integrations.chart_backend import ChartBackend, create_backend
from .dataset import Dataset

logger = logging.getLogger(__name__)


class AxisOptions(BaseModel):
    """Dimension ids used for the primary and secondary category axis."""
    model_config = ConfigDict(populate_by_name=True)

    first_level: int | None = Field(default=None, alias="firstLevel")
    second_level: int | None = Field(default=None, alias="secondLevel")


class ChartOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    chart_type: ChartType = Field(default="column", alias="type")
    x_axis: AxisOptions = Field(default_factory=AxisOptions, alias="xAxis")
    measure_unit: str = Field(default="", alias="measureUnit")
    stacked: str | None = None
    filter_last_year: bool = Field(default=False, alias="filterLastYear")
    to_percent: bool = Field(default=False, alias="toPercent")
    backend: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _coerce_nulls(cls, values: Any) -> Any:
        if isinstance(values, dict):
            values = dict(values)
            for key in ("x_axis", "xAxis"):
                if key in values and values[key] is None:
                    values[key] = {}
            for key in ("measure_unit", "measureUnit"):
                if key in values and values[key] is None:
                    values[key] = ""
            if values.get("title") is None:
                values["title"] = ""
        return values


@dataclass
class ChartConfiguration:
    dataset: Dataset
    options: ChartOptions
    series_config: SeriesConfig
    chart_data: ChartData | None = None
    backend: ChartBackend | None = None


def get_palette_from_dataset(dataset: Dataset) -> dict[str, str]:
    return dataset.get_palette()


def _parse_options(options: ChartOptions | Mapping[str, Any]) -> ChartOptions:
    if isinstance(options, ChartOptions):
        return options
    try:
        return ChartOptions.model_validate(dict(options))
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid chart options: {exc}") from exc


class ChartService:
    """Factory and updater for chart configurations."""

    def __init__(self, backend_factory: Callable[..., ChartBackend] = create_backend) -> None:
        self._backend_factory = backend_factory

    def get_chart_configuration(
        self,
        dataset: Dataset,
        options: ChartOptions | Mapping[str, Any],
    ) -> ChartConfiguration:
        if dataset is None:
            raise ValidationError("A dataset is required to configure a chart")
        parsed = _parse_options(options)
        configuration = ChartConfiguration(
            dataset=dataset, options=parsed, series_config=SeriesConfig()
        )
        self.update_chart_data(configuration)
        configuration.backend = self._create_backend(parsed)
        if parsed.to_percent:
            self._enable_percent_mode(configuration)
        return configuration

    def get_split_configuration(
        self,
        dataset: Dataset,
        options: ChartOptions | Mapping[str, Any],
        dimension: Dimension,
    ) -> list[ChartConfiguration]:
        """One chart per selected item of ``dimension``, each on its own dataset copy."""
        if dataset is None or dimension is None:
            raise ValidationError("A dataset and a split dimension are required")
        parsed = _parse_options(options)
        key = dataset.get_dimension_key(dimension.id)
        if key is None:
            logger.warning("No data key found for split dimension '%s'", dimension.name_view)
            return []

        configurations = []
        for item in dimension.items:
            if not item.selected:
                continue
            dataset_copy = dataset.copy()
            filters = dataset_copy.data_provider.filters
            if key not in filters.roll_up:
                filters.roll_up.append(key)
            filters.filter.append(DimensionFilter(name=key, items=[item.name]))

            configuration = ChartConfiguration(
                dataset=dataset_copy,
                options=parsed.model_copy(update={"title": str(item.name)}, deep=True),
                series_config=SeriesConfig(),
            )
            self.update_chart_data(configuration)
            configuration.backend = self._create_backend(configuration.options)
            if parsed.to_percent:
                self._enable_percent_mode(configuration)
            configurations.append(configuration)
        return configurations

    def update_chart_data(self, configuration: ChartConfiguration) -> None:
        """Rebuild ChartData from the options, then resolve the usable axes."""
        dataset = configuration.dataset
        options = configuration.options
        series_config = SeriesConfig(
            x1=dataset.get_dimension_key(options.x_axis.first_level) or "",
            x2=dataset.get_dimension_key(options.x_axis.second_level),
            stack=options.stacked,
            measure=options.measure_unit,
        )
        configuration.series_config = series_config.model_copy()
        configuration.chart_data = ChartData(
            dataset.data_provider, series_config, get_palette_from_dataset(dataset)
        )
        self.update_series_config(configuration)

    def update_series_config(self, configuration: ChartConfiguration) -> None:
        if configuration.chart_data is None:
            raise ValidationError("Chart data has not been built for this configuration")
        if configuration.options.filter_last_year:
            self.filter_last_period(configuration)
        provider = configuration.dataset.data_provider
        configuration.chart_data.series_config = resolve_series_config(
            configuration.series_config,
            provider.filters.roll_up,
            configuration.dataset.dimensions,
            fallback_key=provider.year_key,
        )

    def filter_last_period(self, configuration: ChartConfiguration) -> None:
        """Restrict the time filter to the last period present in the data."""
        provider = configuration.dataset.data_provider
        try:
            periods = provider.get_values_by_key(provider.year_key)
        except DataVisualizerError as exc:
            logger.warning("Could not filter the last period: %s", exc)
            return
        if not periods:
            return
        last = periods[-1]
        year_filter = provider.filters.find(provider.year_key)
        if year_filter is not None:
            year_filter.items = [last]
        else:
            provider.filters.filter.append(DimensionFilter(name=provider.year_key, items=[last]))

    def render(self, configuration: ChartConfiguration) -> dict[str, Any] | None:
        """Backend payload for one chart, or None when this chart cannot be drawn."""
        if configuration.chart_data is None or configuration.backend is None:
            logger.warning("Chart '%s' is not fully configured", configuration.options.title)
            return None
        try:
            series = configuration.chart_data.get_series()
            return configuration.backend.render(series)
        except DataVisualizerError as exc:
            logger.warning("Chart '%s' could not be rendered: %s", configuration.options.title, exc)
            return None

    def toggle_percent_mode(self, configuration: ChartConfiguration) -> bool:
        if configuration.backend is None:
            raise ValidationError("Chart backend has not been created for this configuration")
        return configuration.backend.toggle_percent_mode()

    def _enable_percent_mode(self, configuration: ChartConfiguration) -> None:
        try:
            if not getattr(configuration.backend, "to_percent", False):
                configuration.backend.toggle_percent_mode()
        except DataVisualizerError as exc:
            logger.warning("Chart '%s' stays nominal: %s", configuration.options.title, exc)

    def watch(
        self,
        configuration: ChartConfiguration,
        on_render: Callable[[dict[str, Any] | None], None] | None = None,
    ) -> Callable[[], None]:
        """Re-resolve axes (and optionally re-render) whenever the dataset's filters change."""
        def _on_data_updated(_dataset: Dataset) -> None:
            try:
                self.update_series_config(configuration)
            except DataVisualizerError as exc:
                logger.warning(
                    "Chart '%s' has no usable axis after a filter change: %s",
                    configuration.options.title, exc,
                )
                if on_render is not None:
                    on_render(None)
                return
            if on_render is not None:
                on_render(self.render(configuration))

        return configuration.dataset.subscribe(_on_data_updated)

    def _create_backend(self, options: ChartOptions) -> ChartBackend:
        return self._backend_factory(
            options.backend,
            chart_type=options.chart_type,
            title=options.title,
            stacked=bool(options.stacked),
            measure_unit=options.measure_unit,
        )
