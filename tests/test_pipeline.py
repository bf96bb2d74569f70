"""Contract tests for the filter / roll-up / series pipeline.

Verifies that:
- DataProvider validates and snapshots its rows
- Filters exclude rows before roll-up aggregates them
- Distinct values honour encounter order and item ``order``
- ChartData emits axis-complete, deterministically named series
- Axis resolution falls back in a fixed order and fails loudly when exhausted
- Dataset fan-out is synchronous and re-entrancy safe
"""
from __future__ import annotations

import logging

import pytest

from data_visualizer.analytics.chart_data import ChartData
from data_visualizer.analytics.data_provider import DataProvider, to_number
from data_visualizer.analytics.errors import ResolutionError, ValidationError
from data_visualizer.analytics.models import Dimension, Filters, SeriesConfig
from data_visualizer.analytics.series_resolver import (
    can_use_axis,
    find_available_dimension,
    initialize_series_config,
    resolve_axes,
    resolve_series_config,
)
from data_visualizer.config import get_settings, reset_settings, update_settings
from data_visualizer.domain.types import AxisRule
from data_visualizer.services.dataset import Dataset


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def _clean_settings():
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def sample_rows() -> list[dict]:
    return [
        {"Año": 2023, "Región": "Norte", "Producto": "A", "valor": 100},
        {"Año": 2023, "Región": "Sur", "Producto": "A", "valor": 150},
        {"Año": 2024, "Región": "Norte", "Producto": "A", "valor": 120},
        {"Año": 2024, "Región": "Sur", "Producto": "B", "valor": 80},
        {"Año": 2023, "Región": "Norte", "Producto": "B", "valor": 30},
    ]


@pytest.fixture
def sample_dimensions() -> list[dict]:
    return [
        {
            "id": 1, "name": "anio", "nameView": "Año",
            "items": [{"id": 1, "name": 2023}, {"id": 2, "name": 2024}],
        },
        {
            "id": 2, "name": "region", "nameView": "Región",
            "items": [
                {"id": 1, "name": "Norte", "color": "#1976d2", "order": 2},
                {"id": 2, "name": "Sur", "color": "#dc004e", "order": 1},
            ],
        },
        {
            "id": 3, "name": "producto", "nameView": "Producto",
            "items": [{"id": 1, "name": "A", "order": 1}, {"id": 2, "name": "B"}],
        },
    ]


@pytest.fixture
def provider(sample_rows, sample_dimensions) -> DataProvider:
    return DataProvider(sample_rows, sample_dimensions)


@pytest.fixture
def dataset(sample_rows, sample_dimensions) -> Dataset:
    return Dataset(sample_dimensions, sample_rows, id=7)


# ============================================================================
# Row validation
# ============================================================================

class TestSetData:
    def test_rejects_non_list(self):
        with pytest.raises(ValidationError):
            DataProvider().set_data({"Año": 2023, "valor": 1})

    def test_rejects_inconsistent_shape(self):
        rows = [{"Año": 2023, "valor": 1}, {"Año": 2024, "Región": "Sur", "valor": 2}]
        with pytest.raises(ValidationError):
            DataProvider(rows)

    def test_rejects_row_that_is_not_a_mapping(self):
        with pytest.raises(ValidationError):
            DataProvider([{"Año": 2023, "valor": 1}, ["Año", 2024]])

    def test_rejects_missing_key_even_with_same_length(self):
        rows = [{"Año": 2023, "valor": 1}, {"Mes": 1, "valor": 2}]
        with pytest.raises(ValidationError):
            DataProvider(rows)

    def test_empty_list_is_valid(self):
        provider = DataProvider([])
        assert provider.get_data() == []
        assert provider.get_keys() == []

    def test_input_mutation_does_not_leak(self, sample_rows):
        provider = DataProvider(sample_rows)
        sample_rows[0]["valor"] = 999_999
        sample_rows.append(dict(sample_rows[0]))
        assert provider.get_data()[0]["valor"] == 100
        assert len(provider.get_data()) == 5

    def test_output_mutation_does_not_leak(self, provider):
        provider.get_data()[0]["valor"] = -1
        assert provider.get_data()[0]["valor"] == 100


# ============================================================================
# Filtering and roll-up
# ============================================================================

class TestProcessConfig:
    def test_pass_through_without_filters(self, provider, sample_rows):
        assert provider.get_data() == sample_rows

    def test_empty_roll_up_is_idempotent(self, provider):
        provider.filters = Filters(roll_up=[])
        first = provider.get_data()
        provider.filters = Filters(roll_up=[])
        assert provider.get_data() == first
        assert [row["valor"] for row in first] == [100, 150, 120, 80, 30]

    def test_identical_rows_collapse_without_roll_up(self):
        row = {"Año": 2023, "Región": "Norte", "valor": 10}
        provider = DataProvider([row, dict(row)])
        assert provider.get_data() == [row]

    def test_roll_up_sums_measure(self):
        provider = DataProvider([
            {"Año": 2023, "Región": "Norte", "valor": 100},
            {"Año": 2023, "Región": "Sur", "valor": 150},
        ])
        provider.filters = {"rollUp": ["Región"]}
        assert provider.get_data() == [{"Año": 2023, "valor": 250}]

    def test_roll_up_groups_by_remaining_keys(self, provider):
        provider.filters = Filters(roll_up=["Región"])
        assert provider.get_data() == [
            {"Año": 2023, "Producto": "A", "valor": 250},
            {"Año": 2024, "Producto": "A", "valor": 120},
            {"Año": 2024, "Producto": "B", "valor": 80},
            {"Año": 2023, "Producto": "B", "valor": 30},
        ]

    def test_aggregation_matches_group_sums(self, provider, sample_rows):
        provider.filters = Filters(roll_up=["Región", "Producto"])
        expected: dict[int, int] = {}
        for row in sample_rows:
            expected[row["Año"]] = expected.get(row["Año"], 0) + row["valor"]
        assert {row["Año"]: row["valor"] for row in provider.get_data()} == expected

    def test_filter_keeps_only_listed_values(self, provider):
        provider.filters = {"filter": [{"name": "Año", "items": [2023]}]}
        data = provider.get_data()
        assert len(data) == 3
        assert all(row["Año"] == 2023 for row in data)

    def test_filter_matches_by_string_form(self, provider):
        provider.filters = {"filter": [{"name": "Año", "items": ["2024"]}]}
        assert {row["Año"] for row in provider.get_data()} == {2024}

    def test_all_filter_entries_must_match(self, provider):
        provider.filters = {
            "filter": [
                {"name": "Año", "items": [2023]},
                {"name": "Región", "items": ["Norte"]},
            ]
        }
        assert [row["valor"] for row in provider.get_data()] == [100, 30]

    def test_null_value_never_matches_a_filter(self):
        provider = DataProvider([
            {"Año": 2023, "Región": None, "valor": 1},
            {"Año": 2023, "Región": "Sur", "valor": 2},
        ])
        provider.filters = {"filter": [{"name": "Región", "items": ["Sur", "None"]}]}
        assert provider.get_data() == [{"Año": 2023, "Región": "Sur", "valor": 2}]

    def test_filter_runs_before_roll_up(self, provider):
        provider.filters = {
            "filter": [{"name": "Región", "items": ["Sur"]}],
            "rollUp": ["Región", "Producto"],
        }
        assert provider.get_data() == [
            {"Año": 2023, "valor": 150},
            {"Año": 2024, "valor": 80},
        ]

    def test_missing_measures_coerce_to_zero_by_default(self):
        provider = DataProvider([
            {"Año": 2023, "Región": "Norte", "valor": "abc"},
            {"Año": 2023, "Región": "Sur", "valor": None},
            {"Año": 2023, "Región": "Este", "valor": "10"},
            {"Año": 2024, "Región": "Norte", "valor": None},
        ])
        provider.filters = Filters(roll_up=["Región"])
        assert provider.get_data() == [
            {"Año": 2023, "valor": 10},
            {"Año": 2024, "valor": 0},
        ]

    def test_missing_measures_can_stay_null(self):
        provider = DataProvider(
            [
                {"Año": 2023, "Región": "Norte", "valor": None},
                {"Año": 2023, "Región": "Sur", "valor": 5},
                {"Año": 2024, "Región": "Norte", "valor": None},
            ],
            coerce_missing_measure=False,
        )
        provider.filters = Filters(roll_up=["Región"])
        assert provider.get_data() == [
            {"Año": 2023, "valor": 5},
            {"Año": 2024, "valor": None},
        ]

    def test_coercion_follows_runtime_settings(self):
        update_settings({"coerce_missing_measure": "false"})
        provider = DataProvider([{"Año": 2023, "Región": "Norte", "valor": None}])
        provider.filters = Filters(roll_up=["Región"])
        assert provider.get_data() == [{"Año": 2023, "valor": None}]


class TestToNumber:
    def test_numbers_pass_through(self):
        assert to_number(3) == 3
        assert to_number(2.5) == 2.5

    def test_numeric_strings_are_parsed(self):
        assert to_number("12") == 12
        assert to_number(" 12.5 ") == 12.5

    def test_non_numeric_values_are_none(self):
        assert to_number(None) is None
        assert to_number("") is None
        assert to_number("n/a") is None
        assert to_number(float("nan")) is None

    def test_booleans_count_as_integers(self):
        assert to_number(True) == 1


# ============================================================================
# Keys and distinct values
# ============================================================================

class TestKeysAndValues:
    def test_keys_follow_roll_up(self, provider):
        assert provider.get_keys() == ["Año", "Región", "Producto", "valor"]
        provider.filters = Filters(roll_up=["Región"])
        assert provider.get_active_keys() == ["Año", "Producto", "valor"]

    def test_keys_empty_when_nothing_survives(self, provider):
        provider.filters = {"filter": [{"name": "Año", "items": [1999]}]}
        assert provider.get_keys() == []

    def test_year_values_keep_encounter_order(self):
        provider = DataProvider([
            {"Año": 2024, "valor": 1},
            {"Año": 2022, "valor": 1},
            {"Año": 2023, "valor": 1},
            {"Año": 2022, "valor": 4},
        ])
        assert provider.get_values_by_key("Año") == [2024, 2022, 2023]

    def test_item_order_sorts_values(self, provider):
        assert provider.get_values_by_key("Región") == ["Sur", "Norte"]

    def test_items_without_order_sort_last(self, sample_dimensions):
        provider = DataProvider(
            [
                {"Producto": "C", "valor": 1},
                {"Producto": "B", "valor": 1},
                {"Producto": "A", "valor": 1},
            ],
            sample_dimensions,
        )
        assert provider.get_values_by_key("Producto") == ["A", "C", "B"]

    def test_sort_rule_overrides_item_order(self, provider):
        provider.set_sort_rule("Región", ["Norte", "Sur"])
        assert provider.get_values_by_key("Región") == ["Norte", "Sur"]
        provider.clear_sort_rule("Región")
        assert provider.get_values_by_key("Región") == ["Sur", "Norte"]

    def test_year_key_ignores_item_order(self):
        dims = [{"id": 1, "name": "anio", "nameView": "Año",
                 "items": [{"id": 1, "name": 2023, "order": 1}, {"id": 2, "name": 2024, "order": 2}]}]
        provider = DataProvider([{"Año": 2024, "valor": 1}, {"Año": 2023, "valor": 1}], dims)
        assert provider.get_values_by_key("Año") == [2024, 2023]

    def test_unknown_key_has_no_values(self, provider):
        assert provider.get_values_by_key("Canal") == []

    def test_active_dimensions_exclude_rolled_up(self, provider):
        provider.filters = Filters(roll_up=["Región"])
        assert [dim.key for dim in provider.get_active_dimensions()] == ["Año", "Producto"]

    def test_duplicate_dimension_ids_are_rejected(self, sample_dimensions):
        sample_dimensions[1]["id"] = 1
        with pytest.raises(ValidationError):
            DataProvider([], sample_dimensions)


# ============================================================================
# ChartData series derivation
# ============================================================================

class TestChartData:
    def test_skeleton_fills_missing_axis_values_with_null(self):
        provider = DataProvider([
            {"Año": 2023, "Región": "Norte", "valor": 100},
            {"Año": 2024, "Región": "Sur", "valor": 50},
        ])
        chart = ChartData(provider, SeriesConfig(x1="Año", stack="Región"))
        series = chart.get_series()
        assert [s.name for s in series] == ["Norte", "Sur"]
        assert series[0].data == [[2023, 100], [2024, None]]
        assert series[1].data == [[2023, None], [2024, 50]]
        assert series[0].stack is None

    def test_secondary_axis_builds_cross_product(self, provider):
        provider.filters = Filters(roll_up=["Producto"])
        chart = ChartData(provider, SeriesConfig(x1="Año", x2="Región", measure="Ventas"))
        series = chart.get_series()
        assert len(series) == 1
        assert series[0].name == "Ventas"
        assert series[0].data == [["Sur", 150], ["Norte", 130], ["Sur", 80], ["Norte", 120]]

    def test_every_series_has_uniform_length(self, provider):
        chart = ChartData(provider, SeriesConfig(x1="Año", x2="Región"))
        series = chart.get_series()
        expected = len(provider.get_values_by_key("Año")) * len(provider.get_values_by_key("Región"))
        assert series
        assert all(len(s.data) == expected for s in series)

    def test_series_names_join_remaining_dimensions(self, sample_rows):
        provider = DataProvider(sample_rows)
        chart = ChartData(provider, SeriesConfig(x1="Año", stack="Región"))
        series = chart.get_series()
        assert [s.name for s in series] == ["Norte → A", "Sur → A", "Sur → B", "Norte → B"]
        assert [s.stack for s in series] == ["Norte", "Sur", "Sur", "Norte"]

    def test_series_identity_is_not_the_display_name(self):
        provider = DataProvider([
            {"Año": 2023, "Región": "A → B", "Producto": "C", "valor": 1},
            {"Año": 2023, "Región": "A", "Producto": "B → C", "valor": 2},
        ])
        series = ChartData(provider, SeriesConfig(x1="Año")).get_series()
        assert len(series) == 2
        assert series[0].name == series[1].name == "A → B → C"
        assert [s.data for s in series] == [[[2023, 1]], [[2023, 2]]]

    def test_custom_separator(self, sample_rows):
        chart = ChartData(DataProvider(sample_rows), SeriesConfig(x1="Año"), separator=" / ")
        assert chart.get_series()[0].name == "Norte / A"

    def test_palette_picks_first_matching_value(self, sample_rows):
        chart = ChartData(
            DataProvider(sample_rows),
            SeriesConfig(x1="Año", stack="Región"),
            {"Sur": "#dc004e", "B": "#4caf50"},
        )
        colors = {s.name: s.color for s in chart.get_series()}
        assert colors == {
            "Norte → A": None,
            "Sur → A": "#dc004e",
            "Sur → B": "#dc004e",
            "Norte → B": "#4caf50",
        }

    def test_null_measure_is_not_zero(self):
        provider = DataProvider([
            {"Año": 2023, "Región": "Norte", "valor": None},
            {"Año": 2024, "Región": "Norte", "valor": "12.5"},
        ])
        series = ChartData(provider, SeriesConfig(x1="Año")).get_series()
        assert series[0].data == [[2023, None], [2024, 12.5]]

    def test_empty_primary_value_is_fatal(self):
        provider = DataProvider([{"Año": "", "Región": "Norte", "valor": 1}])
        with pytest.raises(ResolutionError):
            ChartData(provider, SeriesConfig(x1="Año")).get_series()

    def test_primary_axis_must_be_active(self, provider):
        provider.filters = Filters(roll_up=["Año"])
        with pytest.raises(ResolutionError):
            ChartData(provider, SeriesConfig(x1="Año")).get_series()

    def test_no_rows_means_no_series(self, provider):
        provider.filters = {"filter": [{"name": "Año", "items": [1999]}]}
        assert ChartData(provider, SeriesConfig(x1="Año")).get_series() == []

    def test_get_items_delegates_to_provider(self, provider):
        chart = ChartData(provider, {"x1": "Año"})
        assert chart.get_items("Región") == ["Sur", "Norte"]

    def test_boolean_values_display_lowercase(self):
        provider = DataProvider([
            {"Año": 2023, "Activo": True, "valor": 1},
            {"Año": 2023, "Activo": False, "valor": 2},
        ])
        series = ChartData(provider, SeriesConfig(x1="Año", stack="Activo")).get_series()
        assert [s.name for s in series] == ["true", "false"]
        assert [s.stack for s in series] == [None, None]

    def test_series_serialise_to_dicts(self):
        provider = DataProvider([{"Año": 2023, "valor": 4}])
        chart = ChartData(provider, SeriesConfig(x1="Año", measure="Ventas"))
        assert chart.get_series_dicts() == [
            {"name": "Ventas", "stack": None, "data": [[2023, 4]], "color": None}
        ]


# ============================================================================
# Axis resolution
# ============================================================================

@pytest.fixture
def catalog(sample_dimensions) -> list[Dimension]:
    dims = [Dimension.model_validate(d) for d in sample_dimensions]
    dims.append(Dimension(id=4, name="canal", name_view="Canal"))
    return dims


class TestAxisResolution:
    def test_configured_axes_are_kept(self, catalog):
        config = SeriesConfig(x1="Región", x2="Producto", stack="Año", measure="Ventas")
        result = resolve_axes(config, [], catalog)
        assert (result.config.x1, result.config.x2) == ("Región", "Producto")
        assert (result.config.stack, result.config.measure) == ("Año", "Ventas")
        assert result.rule == AxisRule.CONFIGURED

    def test_rolled_up_secondary_is_dropped(self, catalog):
        config = resolve_series_config(SeriesConfig(x1="Región", x2="Producto"), ["Producto"], catalog)
        assert (config.x1, config.x2) == ("Región", None)

    def test_secondary_is_promoted(self, catalog):
        result = resolve_axes(SeriesConfig(x1="Región", x2="Producto"), ["Región"], catalog)
        assert (result.config.x1, result.config.x2) == ("Producto", None)
        assert result.rule == AxisRule.PROMOTED_SECONDARY

    def test_time_key_is_the_fallback(self, catalog):
        config = SeriesConfig(x1="Región", x2="Producto")
        for _ in range(3):
            result = resolve_axes(config, ["Región", "Producto"], catalog)
            assert (result.config.x1, result.config.x2) == ("Año", None)
            assert result.rule == AxisRule.FALLBACK_KEY

    def test_catalog_scan_when_time_key_rolled_up(self, catalog):
        result = resolve_axes(SeriesConfig(x1="Región", x2="Producto"), ["Región", "Producto", "Año"], catalog)
        assert result.config.x1 == "Canal"
        assert result.rule == AxisRule.CATALOG_SCAN

    def test_time_key_fallback_without_catalog_entry(self, catalog):
        without_year = [dim for dim in catalog if dim.key != "Año"]
        result = resolve_axes(
            SeriesConfig(x1="Región", x2="Producto"), ["Región", "Producto"], without_year,
            fallback_key="Año",
        )
        assert (result.config.x1, result.config.x2) == ("Año", None)
        assert result.rule == AxisRule.FALLBACK_KEY

    def test_exhaustion_is_fatal(self, catalog):
        with pytest.raises(ResolutionError):
            resolve_axes(SeriesConfig(x1="Región"), [dim.key for dim in catalog], catalog)

    def test_at_least_one_axis_is_required(self, catalog):
        with pytest.raises(ValidationError):
            resolve_axes(SeriesConfig(), [], catalog)

    def test_initialize_keeps_stack_and_measure(self):
        config = initialize_series_config(SeriesConfig(x1="Año", x2="Región", stack="Producto", measure="Ventas"))
        assert (config.x1, config.x2, config.stack, config.measure) == ("", None, "Producto", "Ventas")

    def test_helpers(self, catalog):
        assert can_use_axis("Año", ["Región"])
        assert not can_use_axis("Año", ["Año"])
        assert not can_use_axis(None, [])
        assert find_available_dimension(catalog, ["Año", "Región"]) == "Producto"
        assert find_available_dimension(catalog, [d.key for d in catalog]) is None


def _series_after_rolling_up_both_axes(dimensions, rows):
    dataset = Dataset(dimensions, rows)
    dataset.apply_filters({"rollUp": ["Región", "Producto"]})
    provider = dataset.data_provider
    config = resolve_series_config(
        SeriesConfig(x1="Región", x2="Producto", measure="Ventas"),
        provider.filters.roll_up,
        dataset.dimensions,
        fallback_key=provider.year_key,
    )
    return config, ChartData(provider, config).get_series()


class TestAxisFallbackSeries:
    def test_series_fall_back_to_years(self, sample_rows, sample_dimensions):
        config, series = _series_after_rolling_up_both_axes(sample_dimensions, sample_rows)
        assert (config.x1, config.x2) == ("Año", None)
        assert [s.name for s in series] == ["Ventas"]
        assert series[0].data == [[2023, 280], [2024, 200]]

    def test_series_fall_back_to_years_without_catalog_entry(self, sample_rows, sample_dimensions):
        config, series = _series_after_rolling_up_both_axes(sample_dimensions[1:], sample_rows)
        assert config.x1 == "Año"
        assert [point[0] for point in series[0].data] == [2023, 2024]
        assert [point[1] for point in series[0].data] == [280, 200]


# ============================================================================
# Dataset
# ============================================================================

class TestDataset:
    def test_apply_filters_notifies_subscribers(self, dataset):
        seen = []
        dataset.subscribe(lambda ds: seen.append(len(ds.get_current_data())))
        dataset.apply_filters({"rollUp": ["Región", "Producto"]})
        assert seen == [2]

    def test_unsubscribe_stops_notifications(self, dataset):
        calls = []
        unsubscribe = dataset.subscribe(lambda ds: calls.append(1))
        unsubscribe()
        dataset.apply_filters(Filters())
        assert calls == []

    def test_reentrant_apply_runs_one_follow_up_round(self, dataset):
        calls = []

        def subscriber(ds):
            calls.append(list(ds.data_provider.filters.roll_up))
            if len(calls) == 1:
                ds.apply_filters(Filters(roll_up=["Producto"]))

        dataset.subscribe(subscriber)
        dataset.apply_filters(Filters(roll_up=["Región"]))
        assert calls == [["Región"], ["Producto"]]

    def test_reentrant_apply_with_same_filters_does_not_loop(self, dataset):
        calls = []

        def subscriber(ds):
            calls.append(1)
            ds.apply_filters(Filters(roll_up=["Región"]))

        dataset.subscribe(subscriber)
        dataset.apply_filters(Filters(roll_up=["Región"]))
        assert calls == [1]

    def test_alternating_subscriber_stops_after_one_follow_up(self, dataset, caplog):
        calls = []

        def subscriber(ds):
            roll_up = list(ds.data_provider.filters.roll_up)
            calls.append(roll_up)
            ds.apply_filters(Filters(roll_up=[] if roll_up else ["Región"]))

        dataset.subscribe(subscriber)
        with caplog.at_level(logging.WARNING, logger="data_visualizer.services.dataset"):
            dataset.apply_filters(Filters(roll_up=["Región"]))
        assert calls == [["Región"], []]
        assert dataset.data_provider.filters.roll_up == ["Región"]
        assert "follow-up" in caplog.text

    def test_dimension_missing_required_field(self, sample_rows):
        with pytest.raises(ValidationError):
            Dataset([{"id": 1, "name": "anio", "items": []}], sample_rows)

    def test_mismatched_columns_only_warn(self, sample_rows, sample_dimensions, caplog):
        sample_dimensions.append({"id": 4, "name": "canal", "nameView": "Canal", "items": []})
        with caplog.at_level(logging.WARNING, logger="data_visualizer.analytics.validator"):
            Dataset(sample_dimensions[1:], sample_rows)
        assert "Canal" in caplog.text
        assert "Año" in caplog.text

    def test_catalog_access(self, dataset):
        assert dataset.get_dimension_key(2) == "Región"
        assert dataset.get_dimension_key(99) is None
        assert dataset.get_palette() == {"Norte": "#1976d2", "Sur": "#dc004e"}

    def test_dimension_accessors(self, dataset):
        dataset.apply_filters({"rollUp": ["Producto"]})
        assert [dim.key for dim in dataset.get_active_dimensions()] == ["Año", "Región"]
        copies = dataset.get_all_dimensions()
        copies[0].items.clear()
        assert len(dataset.get_dimension(1).items) == 2

    def test_raw_data_is_a_copy(self, dataset):
        dataset.get_raw_data()[0]["valor"] = 0
        assert dataset.get_raw_data()[0]["valor"] == 100

    def test_copy_is_independent(self, dataset):
        dataset.apply_filters({"rollUp": ["Producto"]})
        clone = dataset.copy()
        clone.data_provider.filters.roll_up.append("Región")
        assert dataset.data_provider.filters.roll_up == ["Producto"]
        assert clone.id == dataset.id


class TestSettings:
    def test_overrides_and_reset(self):
        assert get_settings().year_key == "Año"
        update_settings({"year_key": "Year", "percent_decimals": "1", "measure_key": None})
        current = get_settings()
        assert (current.year_key, current.percent_decimals, current.measure_key) == ("Year", 1, "valor")
        assert reset_settings().year_key == "Año"
