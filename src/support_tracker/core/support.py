"""Nearest-support computation and support level validation."""

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, List, Optional, Sequence

from ..exceptions import ValidationException
from .models import TrackedSymbol


@dataclass(frozen=True)
class SupportInfo:
    """Nearest support level and the signed distance to it."""

    nearest_support: Optional[float] = None
    distance: Optional[float] = None
    distance_percent: Optional[float] = None


def _is_valid_level(level: Any) -> bool:
    if isinstance(level, bool) or not isinstance(level, Real):
        return False
    return math.isfinite(level) and level > 0


def compute_support(
    current_price: float, support_levels: Optional[Sequence[float]]
) -> SupportInfo:
    """
    Find the support level nearest to ``current_price``.

    Levels are scanned in the order given and a level only replaces the
    current candidate when it is strictly nearer, so on a tie the first
    minimal level wins. ``distance`` is positive while the price sits above
    the support and negative once it has broken below it. Both distances are
    rounded to two decimals.

    Args:
        current_price: Latest observed price
        support_levels: Positive support levels; empty yields an all-None result

    Returns:
        SupportInfo for the nearest level

    Raises:
        ValueError: If any level is non-positive or not a finite number
    """
    if not support_levels:
        return SupportInfo()

    if not math.isfinite(current_price):
        raise ValueError(f"Current price must be finite, got {current_price!r}")

    for level in support_levels:
        if not _is_valid_level(level):
            raise ValueError(f"Support levels must be positive numbers, got {level!r}")

    nearest_support = support_levels[0]
    min_distance = abs(current_price - nearest_support)

    for level in support_levels[1:]:
        distance = abs(current_price - level)
        if distance < min_distance:
            min_distance = distance
            nearest_support = level

    distance = current_price - nearest_support

    return SupportInfo(
        nearest_support=float(nearest_support),
        distance=round(distance, 2),
        distance_percent=round(distance / nearest_support * 100, 2),
    )


def normalize_symbol(symbol: Any) -> str:
    """Strip and uppercase a ticker symbol, rejecting empty input."""
    if not isinstance(symbol, str) or not symbol.strip():
        raise ValidationException(
            "Symbol must be a non-empty string",
            field_errors={"symbol": "required"},
        )
    return symbol.strip().upper()


def normalize_support_levels(support_levels: Any) -> List[float]:
    """
    Validate support levels and return them as floats, highest first.

    Raises:
        ValidationException: If the input is not a non-empty sequence of
            positive finite numbers
    """
    if support_levels is None or isinstance(support_levels, (str, bytes, dict)):
        raise ValidationException(
            "Support levels must be a list of numbers",
            field_errors={"support_levels": "must be a list"},
        )

    try:
        levels = list(support_levels)
    except TypeError:
        raise ValidationException(
            "Support levels must be a list of numbers",
            field_errors={"support_levels": "must be a list"},
        )

    if not levels:
        raise ValidationException(
            "At least one support level is required",
            field_errors={"support_levels": "must not be empty"},
        )

    invalid = [level for level in levels if not _is_valid_level(level)]
    if invalid:
        raise ValidationException(
            "Support levels must be positive numbers",
            field_errors={"support_levels": f"invalid values: {invalid}"},
        )

    return sorted((float(level) for level in levels), reverse=True)


def apply_support(record: TrackedSymbol) -> TrackedSymbol:
    """Return a copy of ``record`` with its derived support fields recomputed."""
    info = compute_support(record.last_price, record.support_levels)
    return record.model_copy(
        update={
            "nearest_support": info.nearest_support,
            "distance_to_nearest_support": info.distance,
            "distance_percent": info.distance_percent,
        }
    )
