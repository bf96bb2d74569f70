from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..domain.types import AxisValue, MeasureValue

FilterValue = Union[str, int, float, bool]


class Item(BaseModel):
    """One categorical value of a dimension, as it appears in the row data."""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: Union[str, int, float]
    color: str | None = None
    order: float | None = None
    selected: bool = True

    @model_validator(mode="before")
    @classmethod
    def _coerce_nulls(cls, values: Any) -> Any:
        if isinstance(values, dict) and values.get("selected") is None:
            values = {**values, "selected": True}
        return values


class Dimension(BaseModel):
    """Categorical column descriptor; ``name_view`` is the key used inside rows."""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    name_view: str = Field(alias="nameView")
    items: list[Item] = Field(default_factory=list)
    selected: bool = True
    enable_multi: bool = Field(default=False, alias="enableMulti")
    type: int | None = None

    @model_validator(mode="before")
    @classmethod
    def _coerce_nulls(cls, values: Any) -> Any:
        if isinstance(values, dict):
            values = dict(values)
            if values.get("items") is None:
                values["items"] = []
            if values.get("selected") is None:
                values["selected"] = True
            for key in ("enable_multi", "enableMulti"):
                if key in values and values[key] is None:
                    values[key] = False
        return values

    @property
    def key(self) -> str:
        return self.name_view

    def find_item(self, value: Any) -> Item | None:
        for item in self.items:
            if item.name == value or str(item.name) == str(value):
                return item
        return None


class DimensionFilter(BaseModel):
    """Keep only rows whose value for ``name`` is one of ``items``."""
    name: str
    items: list[FilterValue] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _coerce_nulls(cls, values: Any) -> Any:
        if isinstance(values, dict) and values.get("items") is None:
            values = {**values, "items": []}
        return values

    def matches(self, value: Any) -> bool:
        if value is None:
            return False
        return any(item == value or str(item) == str(value) for item in self.items)


class Filters(BaseModel):
    """Active filter configuration.

    ``filter`` selects rows by dimension value, ``roll_up`` lists the dimension
    keys that are aggregated away (grouping by every other key).

    Example::

        Filters(filter=[{"name": "Año", "items": [2023, 2024]}], rollUp=["Región"])
    """
    model_config = ConfigDict(populate_by_name=True)

    filter: list[DimensionFilter] = Field(default_factory=list)
    roll_up: list[str] = Field(default_factory=list, alias="rollUp")

    @model_validator(mode="before")
    @classmethod
    def _coerce_nulls(cls, values: Any) -> Any:
        if isinstance(values, dict):
            values = dict(values)
            if values.get("filter") is None:
                values["filter"] = []
            for key in ("roll_up", "rollUp"):
                if key in values and values[key] is None:
                    values[key] = []
        return values

    def copy_deep(self) -> "Filters":
        return self.model_copy(deep=True)

    def find(self, name: str) -> DimensionFilter | None:
        for entry in self.filter:
            if entry.name == name:
                return entry
        return None


class SeriesConfig(BaseModel):
    """Which keys drive the primary axis, secondary axis and stack grouping."""
    x1: str = ""
    x2: str | None = None
    stack: str | None = None
    measure: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _coerce_nulls(cls, values: Any) -> Any:
        if isinstance(values, dict) and values.get("x1") is None:
            values = {**values, "x1": ""}
        return values


@dataclass(frozen=True)
class SeriesOut:
    """One render-ready series: axis-aligned ``[label, value]`` pairs."""
    name: str
    stack: str | None
    data: list[list[AxisValue | MeasureValue]] = field(default_factory=list)
    color: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "stack": self.stack,
            "data": [list(point) for point in self.data],
            "color": self.color,
        }
