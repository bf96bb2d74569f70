"""Decide which dimensions drive the chart axes once some of them are rolled up."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from ..config import get_settings
from ..domain.types import AxisRule
from .errors import ResolutionError, ValidationError
from .models import Dimension, SeriesConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AxisResolution:
    config: SeriesConfig
    rule: str


def can_use_axis(axis: str | None, roll_up: Iterable[str]) -> bool:
    return bool(axis) and axis not in set(roll_up)


def find_available_dimension(
    dimensions: Iterable[Dimension],
    roll_up: Iterable[str],
) -> str | None:
    rolled_up = set(roll_up)
    for dimension in dimensions:
        if dimension.key and dimension.key not in rolled_up:
            return dimension.key
    return None


def initialize_series_config(config: SeriesConfig) -> SeriesConfig:
    return SeriesConfig(x1="", x2=None, stack=config.stack, measure=config.measure)


def resolve_axes(
    config: SeriesConfig,
    roll_up: Iterable[str],
    dimensions: Iterable[Dimension],
    *,
    fallback_key: str | None = None,
) -> AxisResolution:
    """Apply the fallback rules in order; the first applicable one wins.

    1. ``x1`` is not rolled up: keep it, plus ``x2`` when it is not rolled up.
    2. ``x2`` is not rolled up: promote it to sole primary axis.
    3. The fallback (time) key is not rolled up: use it as sole primary axis.
    4. First catalog dimension that is not rolled up.

    Raises ResolutionError when no dimension is left.
    """
    if not config.x1 and not config.x2:
        raise ValidationError("At least one axis (x1 or x2) is required in the series config")

    rolled_up = list(roll_up)
    catalog = list(dimensions)
    fallback = fallback_key or get_settings().year_key
    resolved = initialize_series_config(config)

    if can_use_axis(config.x1, rolled_up):
        resolved.x1 = config.x1
        if can_use_axis(config.x2, rolled_up):
            resolved.x2 = config.x2
        rule = AxisRule.CONFIGURED
    elif can_use_axis(config.x2, rolled_up):
        resolved.x1 = config.x2
        rule = AxisRule.PROMOTED_SECONDARY
    elif can_use_axis(fallback, rolled_up):
        resolved.x1 = fallback
        rule = AxisRule.FALLBACK_KEY
    else:
        available = find_available_dimension(catalog, rolled_up)
        if available is None:
            raise ResolutionError("No available dimension left for the primary axis")
        resolved.x1 = available
        rule = AxisRule.CATALOG_SCAN

    logger.debug("Resolved axes x1=%s x2=%s via %s", resolved.x1, resolved.x2, rule)
    return AxisResolution(config=resolved, rule=rule)


def resolve_series_config(
    config: SeriesConfig,
    roll_up: Iterable[str],
    dimensions: Iterable[Dimension],
    *,
    fallback_key: str | None = None,
) -> SeriesConfig:
    return resolve_axes(config, roll_up, dimensions, fallback_key=fallback_key).config
