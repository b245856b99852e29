"""Primary weather pipeline: Bright Sky current weather, then DWD biometeorology feeds."""
from __future__ import annotations

from datetime import datetime
from typing import List

from ..entities import FieldSet, WeatherReading
from ..services.metrics import FEELINGS, classify_stress
from .feed import FeedProvider
from .regions import normalize_stress


class WeatherFeedProvider(FeedProvider):
    name = "weather"
    accept = "application/json, text/csv, */*"

    def fetch(self, reference: datetime) -> WeatherReading:
        """Return the current reading or raise ``AllCandidatesExhausted``."""
        today = reference.date().isoformat()
        fields, source = self.first_fields(self.candidates(today), _has_weather)
        return self._build_reading(fields, today, source)

    def candidates(self, today: str) -> List[str]:
        return [
            url.replace("{lat}", f"{self.config.latitude}")
            .replace("{lon}", f"{self.config.longitude}")
            .replace("{date}", today)
            for url in self.config.weather_urls
        ]

    def _build_reading(self, fields: FieldSet, today: str, source: str) -> WeatherReading:
        temperature = round(fields.temperature_c, 1) if fields.temperature_c is not None else None
        humidity = round(fields.humidity_pct) if fields.humidity_pct is not None else None

        # an explicit upstream assessment wins over the derived one
        if fields.stress_raw:
            stress_level = normalize_stress(fields.stress_raw)
            feeling = fields.feeling or FEELINGS[stress_level]
        else:
            stress_level, feeling = classify_stress(temperature, humidity)

        description = fields.description or (
            f"Aktuelle Wetterbedingungen in {self.config.region}: "
            f"{fields.condition or 'Keine Beschreibung verfügbar'}."
        )
        return WeatherReading(
            date=fields.date or today,
            stress_level=stress_level,
            feeling=feeling,
            description=description,
            warning=fields.warning,
            temperature_c=temperature,
            humidity_pct=humidity,
            source=source,
            sunshine_minutes=fields.sunshine_minutes,
        )


def _has_weather(fields: FieldSet) -> bool:
    return any(
        value is not None
        for value in (
            fields.temperature_c,
            fields.humidity_pct,
            fields.stress_raw,
            fields.description,
            fields.condition,
        )
    )


__all__ = ["WeatherFeedProvider"]
