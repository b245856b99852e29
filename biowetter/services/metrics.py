"""Pure classification rules and seasonal fallback estimates."""
from __future__ import annotations

import math
import random
from typing import Dict, Optional, Tuple

from ..entities import HazardReading, OzoneCategory, StressLevel, UVCategory

DEFAULT_TEMPERATURE_C = 15.0
DEFAULT_HUMIDITY_PCT = 65.0

FEELINGS: Dict[StressLevel, str] = {
    StressLevel.LOW: "Sehr angenehm",
    StressLevel.MODERATE: "Angenehm",
    StressLevel.ELEVATED: "Etwas belastend",
    StressLevel.HIGH: "Belastend",
}

SEASONAL_ESTIMATE = "seasonal-estimate"

_POLLEN_SPECIES = ("Hasel", "Erle", "Birke", "Gräser", "Roggen", "Beifuß", "Ambrosia")

# month -> (Hasel, Erle, Birke, Gräser, Roggen, Beifuß, Ambrosia)
_SEASONAL_POLLEN: Dict[int, Tuple[int, ...]] = {
    1: (0, 0, 0, 0, 0, 0, 0),
    2: (0, 0, 0, 0, 0, 0, 0),
    3: (2, 3, 1, 1, 0, 0, 0),
    4: (1, 2, 3, 1, 0, 0, 0),
    5: (1, 2, 3, 2, 2, 0, 0),
    6: (0, 0, 0, 3, 2, 1, 1),
    7: (0, 0, 0, 3, 1, 2, 1),
    8: (0, 0, 0, 3, 1, 2, 2),
    9: (0, 0, 0, 1, 0, 1, 1),
    10: (0, 0, 0, 1, 0, 0, 0),
    11: (0, 0, 0, 0, 0, 0, 0),
    12: (0, 0, 0, 0, 0, 0, 0),
}


def classify_stress(
    temperature_c: Optional[float],
    humidity_pct: Optional[float],
) -> Tuple[StressLevel, str]:
    """Map temperature and humidity onto a stress level and its feeling text.

    Extremes are checked first, High before Elevated, then the comfortable
    band; everything else is Moderate. Missing inputs fall back to 15 °C and
    65 % humidity.
    """
    temp = DEFAULT_TEMPERATURE_C if temperature_c is None else temperature_c
    humidity = DEFAULT_HUMIDITY_PCT if humidity_pct is None else humidity_pct

    if temp < 0 or temp > 35:
        level = StressLevel.HIGH
    elif temp < 5 or temp > 30:
        level = StressLevel.ELEVATED
    elif 15 <= temp <= 25 and 40 <= humidity <= 70:
        level = StressLevel.LOW
    else:
        level = StressLevel.MODERATE
    return level, FEELINGS[level]


def classify_uv(uv_index: float) -> UVCategory:
    if uv_index <= 2:
        return UVCategory.LOW
    if uv_index <= 5:
        return UVCategory.MODERATE
    if uv_index <= 7:
        return UVCategory.HIGH
    if uv_index <= 10:
        return UVCategory.VERY_HIGH
    return UVCategory.EXTREME_HIGH


def classify_ozone(ozone: float) -> OzoneCategory:
    """EU information thresholds in µg/m³."""
    if ozone < 120:
        return OzoneCategory.LOW
    if ozone < 180:
        return OzoneCategory.MODERATE
    if ozone < 240:
        return OzoneCategory.ELEVATED
    return OzoneCategory.HIGH


def seasonal_pollen_fallback(month: int) -> Dict[str, int]:
    if month not in _SEASONAL_POLLEN:
        raise ValueError(f"month must be 1-12, got {month}")
    return dict(zip(_POLLEN_SPECIES, _SEASONAL_POLLEN[month]))


def seasonal_uv_estimate(sunshine_minutes: Optional[float], month: int) -> float:
    """Base UV by month band plus one index step per 200 sunshine minutes, capped at 11."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1-12, got {month}")
    if 4 <= month <= 9:
        base_uv = 5
    elif month in (3, 10):
        base_uv = 3
    else:
        base_uv = 1
    sunshine = max(0.0, sunshine_minutes or 0.0)
    return float(min(11, base_uv + math.floor(sunshine / 200)))


def seasonal_uv_ozone_fallback(
    sunshine_minutes: Optional[float],
    month: int,
    rng: Optional[random.Random] = None,
) -> HazardReading:
    """Placeholder UV/ozone values derived from the calendar, not measured.

    The reading is always flagged ``estimated``.
    """
    uv_index = seasonal_uv_estimate(sunshine_minutes, month)
    rng = rng or random.Random()
    base_ozone = 100 if 5 <= month <= 8 else 70
    ozone = float(math.floor(base_ozone + rng.random() * 30 + 0.5))

    return HazardReading(
        uv_index=uv_index,
        uv_category=classify_uv(uv_index),
        ozone=ozone,
        ozone_category=classify_ozone(ozone),
        uv_source=SEASONAL_ESTIMATE,
        ozone_source=SEASONAL_ESTIMATE,
        estimated=True,
    )


__all__ = [
    "FEELINGS",
    "SEASONAL_ESTIMATE",
    "classify_ozone",
    "classify_stress",
    "classify_uv",
    "seasonal_pollen_fallback",
    "seasonal_uv_estimate",
    "seasonal_uv_ozone_fallback",
]
