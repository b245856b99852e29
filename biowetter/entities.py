from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


class StressLevel(str, Enum):
    """Biometeorological stress category."""

    LOW = "Low"
    MODERATE = "Moderate"
    ELEVATED = "Elevated"
    HIGH = "High"

    @property
    def label(self) -> str:
        return _STRESS_LABELS[self]


class UVCategory(str, Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    VERY_HIGH = "VeryHigh"
    EXTREME_HIGH = "ExtremeHigh"

    @property
    def label(self) -> str:
        return _UV_LABELS[self]


class OzoneCategory(str, Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    ELEVATED = "Elevated"
    HIGH = "High"

    @property
    def label(self) -> str:
        return _STRESS_LABELS[StressLevel(self.value)]


_STRESS_LABELS = {
    StressLevel.LOW: "Niedrig",
    StressLevel.MODERATE: "Moderat",
    StressLevel.ELEVATED: "Erhöht",
    StressLevel.HIGH: "Hoch",
}

_UV_LABELS = {
    UVCategory.LOW: "Niedrig",
    UVCategory.MODERATE: "Moderat",
    UVCategory.HIGH: "Hoch",
    UVCategory.VERY_HIGH: "Sehr hoch",
    UVCategory.EXTREME_HIGH: "Extrem hoch",
}


@dataclass(frozen=True)
class FieldSet:
    """Logical fields pulled out of one upstream region record.

    Every attribute is optional; providers decide which subset they need.
    """

    temperature_c: Optional[float] = None
    humidity_pct: Optional[float] = None
    description: Optional[str] = None
    condition: Optional[str] = None
    warning: Optional[str] = None
    date: Optional[str] = None
    stress_raw: Optional[str] = None
    feeling: Optional[str] = None
    sunshine_minutes: Optional[float] = None
    uv_index: Optional[float] = None
    ozone: Optional[float] = None
    pollen: Dict[str, int] = field(default_factory=dict)
    degraded_match: bool = False


@dataclass(frozen=True)
class WeatherReading:
    date: str
    stress_level: StressLevel
    feeling: str
    description: Optional[str]
    warning: Optional[str]
    temperature_c: Optional[float]
    humidity_pct: Optional[float]
    source: str
    sunshine_minutes: Optional[float] = None


@dataclass(frozen=True)
class PollenReading:
    levels: Dict[str, int]
    source: str
    estimated: bool = False


@dataclass(frozen=True)
class HazardReading:
    """UV index and ozone concentration, either measured or estimated."""

    uv_index: Optional[float]
    uv_category: Optional[UVCategory]
    ozone: Optional[float]
    ozone_category: Optional[OzoneCategory]
    uv_source: str
    ozone_source: str
    estimated: bool = False


@dataclass(frozen=True)
class UnifiedWeatherRecord:
    """The single record handed to the presentation layer.

    Serializes to camelCase JSON keys; optional values are always emitted,
    as ``null`` when absent.
    """

    region: str
    date: str
    stress_level: Optional[StressLevel] = None
    feeling: Optional[str] = None
    description: Optional[str] = None
    warning_notice: Optional[str] = None
    temperature_c: Optional[float] = None
    relative_humidity_pct: Optional[float] = None
    pollen: Optional[Mapping[str, int]] = None
    uv_index: Optional[float] = None
    uv_category: Optional[UVCategory] = None
    ozone_micrograms_m3: Optional[float] = None
    ozone_category: Optional[OzoneCategory] = None
    sources: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # mapping fields are stored as read-only views
        if self.pollen is not None:
            object.__setattr__(self, "pollen", MappingProxyType(dict(self.pollen)))
        object.__setattr__(self, "sources", MappingProxyType(dict(self.sources)))
        if (self.stress_level is None) != (self.feeling is None):
            raise ValueError("stress_level and feeling must be set together")
        if (self.uv_index is None) != (self.uv_category is None):
            raise ValueError("uv_index and uv_category must be set together")
        if (self.ozone_micrograms_m3 is None) != (self.ozone_category is None):
            raise ValueError("ozone_micrograms_m3 and ozone_category must be set together")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "region": self.region,
            "date": self.date,
            "stressLevel": _enum_value(self.stress_level),
            "feeling": self.feeling,
            "description": self.description,
            "warningNotice": self.warning_notice,
            "temperatureC": self.temperature_c,
            "relativeHumidityPct": self.relative_humidity_pct,
            "pollen": dict(self.pollen) if self.pollen is not None else None,
            "uvIndex": self.uv_index,
            "uvCategory": _enum_value(self.uv_category),
            "ozoneMicrogramsM3": self.ozone_micrograms_m3,
            "ozoneCategory": _enum_value(self.ozone_category),
            "sources": dict(self.sources),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "UnifiedWeatherRecord":
        pollen = payload.get("pollen")
        return cls(
            region=payload["region"],
            date=payload["date"],
            stress_level=_enum_or_none(StressLevel, payload.get("stressLevel")),
            feeling=payload.get("feeling"),
            description=payload.get("description"),
            warning_notice=payload.get("warningNotice"),
            temperature_c=payload.get("temperatureC"),
            relative_humidity_pct=payload.get("relativeHumidityPct"),
            pollen=dict(pollen) if pollen is not None else None,
            uv_index=payload.get("uvIndex"),
            uv_category=_enum_or_none(UVCategory, payload.get("uvCategory")),
            ozone_micrograms_m3=payload.get("ozoneMicrogramsM3"),
            ozone_category=_enum_or_none(OzoneCategory, payload.get("ozoneCategory")),
            sources=dict(payload.get("sources") or {}),
        )


def _enum_value(value: Optional[Enum]) -> Optional[str]:
    if value is None:
        return None
    return value.value


def _enum_or_none(enum_cls, value: Optional[str]):
    if value is None:
        return None
    return enum_cls(value)


__all__ = [
    "FieldSet",
    "HazardReading",
    "OzoneCategory",
    "PollenReading",
    "StressLevel",
    "UVCategory",
    "UnifiedWeatherRecord",
    "WeatherReading",
]
