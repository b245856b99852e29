"""Pydantic schema for the JSON contract served to the presentation layer."""
from __future__ import annotations

from typing import Annotated, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from biowetter.entities import OzoneCategory, StressLevel, UnifiedWeatherRecord, UVCategory

__all__ = ["BiowetterRecordSchema"]

PollenSeverity = Annotated[int, Field(ge=0, le=3)]


class BiowetterRecordSchema(BaseModel):
    """Every key is required; optional values must be present as ``null``."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    region: str = Field(min_length=1)
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    stress_level: Optional[StressLevel] = Field(alias="stressLevel")
    feeling: Optional[str]
    description: Optional[str]
    warning_notice: Optional[str] = Field(alias="warningNotice")
    temperature_c: Optional[float] = Field(alias="temperatureC")
    relative_humidity_pct: Optional[float] = Field(alias="relativeHumidityPct", ge=0, le=100)
    pollen: Optional[Dict[str, PollenSeverity]]
    uv_index: Optional[float] = Field(alias="uvIndex", ge=0, le=15)
    uv_category: Optional[UVCategory] = Field(alias="uvCategory")
    ozone_micrograms_m3: Optional[float] = Field(alias="ozoneMicrogramsM3", ge=0)
    ozone_category: Optional[OzoneCategory] = Field(alias="ozoneCategory")
    sources: Dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_pairs(self) -> "BiowetterRecordSchema":
        pairs = (
            ("stressLevel", self.stress_level, "feeling", self.feeling),
            ("uvIndex", self.uv_index, "uvCategory", self.uv_category),
            ("ozoneMicrogramsM3", self.ozone_micrograms_m3, "ozoneCategory", self.ozone_category),
        )
        for left_name, left, right_name, right in pairs:
            if (left is None) != (right is None):
                raise ValueError(f"{left_name} and {right_name} must both be set or both be null")
        return self

    @classmethod
    def from_record(cls, record: UnifiedWeatherRecord) -> "BiowetterRecordSchema":
        return cls.model_validate(record.to_dict())

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
