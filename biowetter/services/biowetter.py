"""Aggregate the weather, pollen and UV/ozone pipelines into one record."""
from __future__ import annotations

import asyncio
import logging
import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Optional

from ..config import BiowetterConfig
from ..entities import HazardReading, PollenReading, StressLevel, UnifiedWeatherRecord, WeatherReading
from ..providers.base import ProviderError
from ..providers.hazards import UNAVAILABLE, HazardIndexProvider
from ..providers.pollen import PollenFeedProvider
from ..providers.weather import WeatherFeedProvider
from .metrics import FEELINGS, classify_uv, seasonal_uv_estimate

FALLBACK_DESCRIPTION = (
    "Die biometeorologischen Daten werden aktuell geladen. Falls diese Meldung länger "
    "erscheint, könnte der DWD-Server vorübergehend nicht erreichbar sein."
)
FALLBACK_WARNING = "Hinweis: Fallback-Daten werden angezeigt."


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class BiowetterService:
    """Run the three acquisition pipelines concurrently and merge the results.

    Pollen and UV/ozone always come back with at least a seasonal estimate.
    Only the weather pipeline can fail outright, in which case the hardcoded
    fallback record is returned without any pollen or UV/ozone data.
    """

    def __init__(
        self,
        config: Optional[BiowetterConfig] = None,
        *,
        weather_provider: Optional[WeatherFeedProvider] = None,
        pollen_provider: Optional[PollenFeedProvider] = None,
        hazard_provider: Optional[HazardIndexProvider] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config or BiowetterConfig()
        self.weather = weather_provider or WeatherFeedProvider(self.config)
        self.pollen = pollen_provider or PollenFeedProvider(self.config)
        self.hazards = hazard_provider or HazardIndexProvider(self.config, rng=rng)
        self.clock = clock or _utcnow
        self._log = logger or logging.getLogger(self.__class__.__name__)

    # Public API ---------------------------------------------------------
    def build_record(self, reference: Optional[datetime] = None) -> UnifiedWeatherRecord:
        """Return the unified record; never raises."""
        reference = reference or self.clock()
        try:
            return self.collect(reference)
        except Exception as exc:  # noqa: BLE001 - callers rely on always getting a record
            self._log.error("Building the Biowetter record failed", exc_info=exc)
            return self.fallback_record(reference)

    async def abuild_record(self, reference: Optional[datetime] = None) -> UnifiedWeatherRecord:
        reference = reference or self.clock()
        try:
            return await self.acollect(reference)
        except Exception as exc:  # noqa: BLE001 - callers rely on always getting a record
            self._log.error("Building the Biowetter record failed", exc_info=exc)
            return self.fallback_record(reference)

    def collect(self, reference: Optional[datetime] = None) -> UnifiedWeatherRecord:
        """Like :meth:`build_record` but lets unexpected faults propagate.

        Safe to call from inside a running event loop: the pipelines then run
        on a private loop in a worker thread.
        """
        reference = reference or self.clock()
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.acollect(reference))
        with ThreadPoolExecutor(max_workers=1) as executor:
            return executor.submit(asyncio.run, self.acollect(reference)).result()

    async def acollect(self, reference: datetime) -> UnifiedWeatherRecord:
        weather, pollen, hazards = await asyncio.gather(
            asyncio.to_thread(self._fetch_weather, reference),
            asyncio.to_thread(self.pollen.fetch, reference),
            asyncio.to_thread(self.hazards.fetch, reference),
        )
        if weather is None:
            return self.fallback_record(reference)
        if hazards.estimated and weather.sunshine_minutes:
            # sunshine duration only arrives with the weather reading
            uv_index = seasonal_uv_estimate(weather.sunshine_minutes, reference.month)
            hazards = replace(hazards, uv_index=uv_index, uv_category=classify_uv(uv_index))
        record = self.merge(weather, pollen, hazards)
        self._log.info(
            "Biowetter %s: Belastung %s, UV %s, Ozon %s",
            record.region,
            _label(record.stress_level),
            _label(record.uv_category),
            _label(record.ozone_category),
        )
        return record

    def merge(
        self,
        weather: WeatherReading,
        pollen: PollenReading,
        hazards: HazardReading,
    ) -> UnifiedWeatherRecord:
        return UnifiedWeatherRecord(
            region=self.config.region,
            date=weather.date,
            stress_level=weather.stress_level,
            feeling=weather.feeling,
            description=weather.description,
            warning_notice=weather.warning,
            temperature_c=weather.temperature_c,
            relative_humidity_pct=weather.humidity_pct,
            pollen=dict(pollen.levels),
            uv_index=hazards.uv_index,
            uv_category=hazards.uv_category,
            ozone_micrograms_m3=hazards.ozone,
            ozone_category=hazards.ozone_category,
            sources={
                "weather": weather.source,
                "pollen": pollen.source,
                "uv": hazards.uv_source,
                "ozone": hazards.ozone_source,
            },
        )

    def fallback_record(self, reference: datetime) -> UnifiedWeatherRecord:
        return UnifiedWeatherRecord(
            region=self.config.region,
            date=reference.date().isoformat(),
            stress_level=StressLevel.MODERATE,
            feeling=FEELINGS[StressLevel.MODERATE],
            description=FALLBACK_DESCRIPTION,
            warning_notice=FALLBACK_WARNING,
            sources={concern: UNAVAILABLE for concern in ("weather", "pollen", "uv", "ozone")},
        )

    # Helpers ------------------------------------------------------------
    def _fetch_weather(self, reference: datetime) -> Optional[WeatherReading]:
        try:
            return self.weather.fetch(reference)
        except ProviderError as exc:
            self._log.warning("Weather pipeline failed, falling back: %s", exc)
            return None


def _label(category) -> str:
    return category.label if category is not None else "-"


def get_unified_record(config: Optional[BiowetterConfig] = None) -> UnifiedWeatherRecord:
    """Build a fresh record for the configured region; never raises."""
    return BiowetterService(config or BiowetterConfig.from_env()).build_record()


__all__ = [
    "BiowetterService",
    "FALLBACK_DESCRIPTION",
    "FALLBACK_WARNING",
    "get_unified_record",
]
