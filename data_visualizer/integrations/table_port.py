"""
Table-rendering port: pivot cells computed from processed rows with pandas.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol, runtime_checkable

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..analytics.models import Dimension
from ..config import get_settings
from ..domain.types import RowData, ValueDisplay

logger = logging.getLogger(__name__)

TOTAL_LABEL = "Total"
_ROW_PLACEHOLDER = "__rows__"
_COL_PLACEHOLDER = "__cols__"


class TableOptions(BaseModel):
    """Row/column key selection and display mode of a pivot table."""
    model_config = ConfigDict(populate_by_name=True)

    rows: list[str] = Field(default_factory=list)
    cols: list[str] = Field(default_factory=list)
    value_display: ValueDisplay = Field(default="nominal", alias="valueDisplay")
    row_totals: bool = Field(default=True, alias="totalRow")
    col_totals: bool = Field(default=True, alias="totalCol")
    digits_after_decimal: int | None = Field(default=None, alias="digitsAfterDecimal")
    sorters: dict[str, list[Any]] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _coerce_nulls(cls, values: Any) -> Any:
        if isinstance(values, dict):
            values = dict(values)
            for key in ("rows", "cols"):
                if values.get(key) is None:
                    values[key] = []
            for key in ("value_display", "valueDisplay"):
                if key in values and values[key] is None:
                    values[key] = "nominal"
            if values.get("sorters") is None:
                values["sorters"] = {}
        return values


@dataclass(frozen=True)
class PivotResult:
    frame: pd.DataFrame
    rows: list[str] = field(default_factory=list)
    cols: list[str] = field(default_factory=list)
    value_display: ValueDisplay = "nominal"

    @property
    def is_empty(self) -> bool:
        return self.frame.empty

    def cell(self, row: Any, col: Any) -> Any:
        value = self.frame.loc[row, col]
        return None if pd.isna(value) else value


@runtime_checkable
class TableRenderer(Protocol):
    def render(self, rows: list[RowData], options: TableOptions) -> PivotResult: ...


def build_sorters(dimensions: Iterable[Dimension]) -> dict[str, list[Any]]:
    """Item names ordered by ``Item.order`` for every dimension that defines one."""
    sorters: dict[str, list[Any]] = {}
    for dimension in dimensions:
        if not any(item.order is not None for item in dimension.items):
            continue
        ordered = sorted(
            dimension.items,
            key=lambda item: item.order if item.order is not None else float("inf"),
        )
        sorters[dimension.key] = [item.name for item in ordered]
    return sorters


def _natural_key(value: Any) -> tuple[int, Any]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value)
    return (1, str(value))


class PandasPivotRenderer:
    """Sums the measure over row x column key combinations.

    Fraction modes (``percentOf*``) return shares in ``[0, 1]``; formatting is
    left to whatever draws the table.
    """

    def __init__(self, measure_key: str | None = None) -> None:
        self._measure_key = measure_key or get_settings().measure_key

    def render(self, rows: list[RowData], options: TableOptions) -> PivotResult:
        if not rows:
            return PivotResult(pd.DataFrame(), list(options.rows), list(options.cols), options.value_display)

        df = pd.DataFrame(rows)
        if self._measure_key not in df.columns:
            logger.warning("Measure column '%s' missing from table data", self._measure_key)
            return PivotResult(pd.DataFrame(), list(options.rows), list(options.cols), options.value_display)
        df[self._measure_key] = pd.to_numeric(df[self._measure_key], errors="coerce")

        row_keys = [key for key in options.rows if key in df.columns]
        col_keys = [key for key in options.cols if key in df.columns]
        if not row_keys:
            df[_ROW_PLACEHOLDER] = TOTAL_LABEL
        if not col_keys:
            df[_COL_PLACEHOLDER] = TOTAL_LABEL

        frame = pd.pivot_table(
            df,
            values=self._measure_key,
            index=row_keys or [_ROW_PLACEHOLDER],
            columns=col_keys or [_COL_PLACEHOLDER],
            aggfunc="sum",
        )
        frame = self._order(frame, row_keys, col_keys, options.sorters)
        frame = self._apply_totals(frame, bool(row_keys), bool(col_keys), options)
        frame = self._apply_display(frame, bool(row_keys), bool(col_keys), options)
        if options.digits_after_decimal is not None:
            frame = frame.round(options.digits_after_decimal)
        if not row_keys:
            frame.index.name = None
        if not col_keys:
            frame.columns.name = None
        return PivotResult(frame, row_keys, col_keys, options.value_display)

    def _order(
        self,
        frame: pd.DataFrame,
        row_keys: list[str],
        col_keys: list[str],
        sorters: dict[str, list[Any]],
    ) -> pd.DataFrame:
        index = sorted(frame.index, key=lambda label: self._rank(label, row_keys, sorters))
        columns = sorted(frame.columns, key=lambda label: self._rank(label, col_keys, sorters))
        return frame.reindex(index=index, columns=columns)

    @staticmethod
    def _rank(label: Any, keys: list[str], sorters: dict[str, list[Any]]) -> tuple[Any, ...]:
        if not keys:
            return ()
        values = label if isinstance(label, tuple) else (label,)
        ranks = []
        for key, value in zip(keys, values):
            order = [str(name) for name in sorters.get(key, [])]
            if str(value) in order:
                ranks.append((0, order.index(str(value)), (0, 0)))
            else:
                ranks.append((1, 0, _natural_key(value)))
        return tuple(ranks)

    @staticmethod
    def _total_label(index: pd.Index) -> Any:
        if isinstance(index, pd.MultiIndex):
            return (TOTAL_LABEL,) + ("",) * (index.nlevels - 1)
        return TOTAL_LABEL

    def _apply_totals(
        self,
        frame: pd.DataFrame,
        has_rows: bool,
        has_cols: bool,
        options: TableOptions,
    ) -> pd.DataFrame:
        frame = frame.copy()
        if has_cols and (options.row_totals or options.value_display != "nominal"):
            frame[self._total_label(frame.columns)] = frame.sum(axis=1, min_count=1)
        if has_rows and (options.col_totals or options.value_display != "nominal"):
            totals = frame.sum(axis=0, min_count=1).to_frame().T
            label = self._total_label(frame.index)
            totals.index = (
                pd.MultiIndex.from_tuples([label], names=frame.index.names)
                if isinstance(label, tuple)
                else pd.Index([label], name=frame.index.name)
            )
            frame = pd.concat([frame, totals])
        return frame

    def _apply_display(
        self,
        frame: pd.DataFrame,
        has_rows: bool,
        has_cols: bool,
        options: TableOptions,
    ) -> pd.DataFrame:
        mode = options.value_display
        if mode == "nominal":
            return frame

        col_total = self._total_label(frame.columns) if has_cols else frame.columns[-1]
        row_total = self._total_label(frame.index) if has_rows else frame.index[-1]

        if mode == "percentOfTotal":
            grand = frame.loc[row_total, col_total]
            result = frame / grand if grand else frame * float("nan")
        elif mode == "percentOfRow":
            result = frame.div(frame[col_total], axis=0)
        else:
            result = frame.div(frame.loc[row_total], axis=1)

        if has_cols and not options.row_totals:
            result = result.drop(columns=[col_total])
        if has_rows and not options.col_totals:
            result = result.drop(index=[row_total])
        return result
