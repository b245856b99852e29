"""Deployment configuration for the Biowetter acquisition layer."""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional, Tuple

DWD_ALERTS_URL = "https://opendata.dwd.de/climate_environment/health/alerts"

DEFAULT_WEATHER_URLS: Tuple[str, ...] = (
    "https://api.brightsky.dev/current_weather?lat={lat}&lon={lon}&date={date}",
    f"{DWD_ALERTS_URL}/warnings/bgww.json",
    f"{DWD_ALERTS_URL}/warnings/BGWW.json",
    f"{DWD_ALERTS_URL}/biometeorology/biometeorology.json",
    f"{DWD_ALERTS_URL}/warnings/hessen.json",
    f"{DWD_ALERTS_URL}/warnings/biometeorology.csv",
)

DEFAULT_POLLEN_URLS: Tuple[str, ...] = (
    f"{DWD_ALERTS_URL}/s31fg.json",
    f"{DWD_ALERTS_URL}/pollenflug/pollenflug.json",
    f"{DWD_ALERTS_URL}/pollenflug/Pollenflug.json",
    f"{DWD_ALERTS_URL}/pollenflug/hessen.json",
    f"{DWD_ALERTS_URL}/pollenflug/pollenflug.xml",
    f"{DWD_ALERTS_URL}/pollenflug/pollenflug.csv",
)

DEFAULT_UV_URLS: Tuple[str, ...] = (
    f"{DWD_ALERTS_URL}/uvi.json",
    f"{DWD_ALERTS_URL}/uv/uv.json",
    f"{DWD_ALERTS_URL}/uv_index.json",
)

DEFAULT_OZONE_URLS: Tuple[str, ...] = (
    f"{DWD_ALERTS_URL}/ozon/ozon.json",
    f"{DWD_ALERTS_URL}/ozonvorhersage.json",
)

DEFAULT_HAZARD_URLS: Tuple[str, ...] = (
    f"{DWD_ALERTS_URL}/gefahrenindizes/gefahrenindizes.json",
    f"{DWD_ALERTS_URL}/gefahrenindizes.json",
)


@dataclass(frozen=True)
class BiowetterConfig:
    region: str = "Wiesbaden"
    latitude: float = 50.0826
    longitude: float = 8.2400
    # administrative state and nearest major city
    aliases: Tuple[str, ...] = ("hessen", "frankfurt")
    # DWD biometeorology region code for Hessen
    region_codes: Tuple[str, ...] = ("11",)
    weather_urls: Tuple[str, ...] = DEFAULT_WEATHER_URLS
    pollen_urls: Tuple[str, ...] = DEFAULT_POLLEN_URLS
    uv_urls: Tuple[str, ...] = DEFAULT_UV_URLS
    ozone_urls: Tuple[str, ...] = DEFAULT_OZONE_URLS
    hazard_urls: Tuple[str, ...] = DEFAULT_HAZARD_URLS
    timeout: float = 15.0
    user_agent: str = "Biowetter-Wiesbaden/1.0"
    extra_headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BiowetterConfig":
        environ = os.environ if environ is None else environ
        config = cls()
        overrides = {}
        if environ.get("BIOWETTER_REGION"):
            overrides["region"] = environ["BIOWETTER_REGION"]
        for name, attr in (
            ("BIOWETTER_LATITUDE", "latitude"),
            ("BIOWETTER_LONGITUDE", "longitude"),
            ("BIOWETTER_TIMEOUT", "timeout"),
        ):
            if environ.get(name):
                overrides[attr] = _float_setting(name, environ[name])
        if environ.get("BIOWETTER_USER_AGENT"):
            overrides["user_agent"] = environ["BIOWETTER_USER_AGENT"]
        for name, attr in (
            ("BIOWETTER_WEATHER_URLS", "weather_urls"),
            ("BIOWETTER_POLLEN_URLS", "pollen_urls"),
            ("BIOWETTER_UV_URLS", "uv_urls"),
            ("BIOWETTER_OZONE_URLS", "ozone_urls"),
            ("BIOWETTER_HAZARD_URLS", "hazard_urls"),
        ):
            if name in environ:
                overrides[attr] = _url_list(environ[name])
        return replace(config, **overrides)


def _float_setting(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be a number, got {raw!r}") from exc


def _url_list(raw: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


__all__ = ["BiowetterConfig"]
