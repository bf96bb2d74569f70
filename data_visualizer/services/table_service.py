"""
Table service: feeds processed rows and item ordering into an injected table renderer.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from ..analytics.errors import ValidationError
from ..integrations.table_port import (
    PandasPivotRenderer,
    PivotResult,
    TableOptions,
    TableRenderer,
    build_sorters,
)
from .dataset import Dataset

logger = logging.getLogger(__name__)


class TableService:
    def __init__(self, renderer: TableRenderer | None = None) -> None:
        renderer = renderer if renderer is not None else PandasPivotRenderer()
        if not isinstance(renderer, TableRenderer):
            raise ValidationError("Table renderer does not implement render(rows, options)")
        self._renderer = renderer

    def build_table(
        self,
        dataset: Dataset,
        options: TableOptions | Mapping[str, Any],
    ) -> PivotResult:
        parsed = self._parse_options(options)
        provider = dataset.data_provider
        active = set(provider.get_keys())

        rows = [key for key in parsed.rows if key in active]
        cols = [key for key in parsed.cols if key in active]
        dropped = [key for key in (*parsed.rows, *parsed.cols) if key not in active]
        if dropped and active:
            logger.warning("Table keys not present after roll-up are ignored: %s", ", ".join(dropped))

        sorters = build_sorters(dataset.dimensions)
        sorters.update(parsed.sorters)
        effective = parsed.model_copy(update={"rows": rows, "cols": cols, "sorters": sorters})
        return self._renderer.render(provider.get_data(), effective)

    @staticmethod
    def _parse_options(options: TableOptions | Mapping[str, Any]) -> TableOptions:
        if isinstance(options, TableOptions):
            return options
        try:
            return TableOptions.model_validate(dict(options))
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid table options: {exc}") from exc
