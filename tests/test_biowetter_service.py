from __future__ import annotations

import asyncio
import json
import logging
import random

import pytest
import responses

from biowetter.entities import PollenReading, StressLevel, UnifiedWeatherRecord, UVCategory
from biowetter.providers.hazards import UNAVAILABLE
from biowetter.services.biowetter import (
    FALLBACK_DESCRIPTION,
    FALLBACK_WARNING,
    BiowetterService,
    get_unified_record,
)
from biowetter.services.metrics import SEASONAL_ESTIMATE, seasonal_pollen_fallback

RECORD_KEYS = {
    "region",
    "date",
    "stressLevel",
    "feeling",
    "description",
    "warningNotice",
    "temperatureC",
    "relativeHumidityPct",
    "pollen",
    "uvIndex",
    "uvCategory",
    "ozoneMicrogramsM3",
    "ozoneCategory",
    "sources",
}


def make_service(config, reference, **kwargs) -> BiowetterService:
    return BiowetterService(config, clock=lambda: reference, rng=random.Random(3), **kwargs)


def test_total_outage_returns_fallback_record(config, reference):
    # nothing registered: every request raises ConnectionError
    with responses.RequestsMock():
        record = make_service(config, reference).build_record()

    assert record.region == "Wiesbaden"
    assert record.date == "2024-06-15"
    assert record.stress_level is StressLevel.MODERATE
    assert record.feeling == "Angenehm"
    assert record.description == FALLBACK_DESCRIPTION


def test_build_record_inside_running_event_loop(config, reference):
    service = make_service(config, reference)

    async def handler():
        return service.build_record()

    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add(responses.GET, config.weather_urls[0], json={"weather": {"temperature": 21.0, "relative_humidity": 50}})
        record = asyncio.run(handler())

    assert record.temperature_c == 21.0
    assert record.stress_level is StressLevel.LOW
    assert record.warning_notice != FALLBACK_WARNING
    assert record.warning_notice == FALLBACK_WARNING
    assert record.temperature_c is None
    assert record.relative_humidity_pct is None
    assert record.pollen is None
    assert record.uv_index is None and record.uv_category is None
    assert record.ozone_micrograms_m3 is None and record.ozone_category is None
    assert set(record.sources.values()) == {UNAVAILABLE}


def test_weather_only_fills_gaps_with_estimates(config, reference):
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            config.weather_urls[0],
            json={"weather": {"temperature": 22.0, "relative_humidity": 55, "condition": "dry"}},
        )
        record = make_service(config, reference).build_record()

    assert record.stress_level is StressLevel.LOW
    assert record.feeling == "Sehr angenehm"
    assert record.temperature_c == 22.0
    assert record.relative_humidity_pct == 55
    assert record.warning_notice is None
    assert record.pollen == seasonal_pollen_fallback(6)
    assert record.uv_index == 5.0
    assert record.uv_category is UVCategory.MODERATE
    assert 100 <= record.ozone_micrograms_m3 <= 130
    assert record.sources == {
        "weather": config.weather_urls[0],
        "pollen": SEASONAL_ESTIMATE,
        "uv": SEASONAL_ESTIMATE,
        "ozone": SEASONAL_ESTIMATE,
    }


def test_finished_record_is_logged_with_german_labels(config, reference, caplog):
    caplog.set_level(logging.INFO, logger="BiowetterService")

    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add(responses.GET, config.weather_urls[0], json={"weather": {"temperature": 22.0, "relative_humidity": 55}})
        make_service(config, reference).build_record()

    assert "Biowetter Wiesbaden: Belastung Niedrig, UV Moderat, Ozon " in caplog.text

def test_estimated_uv_uses_reported_sunshine(config, reference):
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            config.weather_urls[0],
            json={"weather": {"temperature": 24.0, "relative_humidity": 50, "sunshine_60": 60}},
        )
        record = make_service(config, reference).build_record()

    # 60 sunshine minutes stay below the first 200 minute step
    assert record.uv_index == 5.0

    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            config.weather_urls[0],
            json={"weather": {"temperature": 24.0, "sunshine": 600}},
        )
        record = make_service(config, reference).build_record()

    assert record.uv_index == 8.0
    assert record.uv_category is UVCategory.VERY_HIGH


def test_all_pipelines_live(config, reference):
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            config.weather_urls[0],
            json={"weather": {"temperature": 33.2, "relative_humidity": 40}},
        )
        rsps.add(
            responses.GET,
            config.pollen_urls[0],
            json={"content": [{"region_name": "Hessen", "Pollen": {"Graeser": {"today": "2"}}}]},
        )
        rsps.add(responses.GET, config.uv_urls[0], json={"content": [{"city": "Frankfurt", "forecast": {"today": 9}}]})
        rsps.add(responses.GET, config.ozone_urls[0], json={"regionen": [{"name": "Hessen", "ozon": 241}]})
        record = make_service(config, reference).build_record()

    assert record.stress_level is StressLevel.ELEVATED
    assert record.feeling == "Etwas belastend"
    assert record.pollen == {"Gräser": 2}
    assert record.uv_index == 9.0
    assert record.uv_category is UVCategory.VERY_HIGH
    assert record.ozone_micrograms_m3 == 241.0
    assert record.ozone_category.value == "High"
    assert record.sources == {
        "weather": config.weather_urls[0],
        "pollen": config.pollen_urls[0],
        "uv": config.uv_urls[0],
        "ozone": config.ozone_urls[0],
    }


def test_record_serializes_every_key(config, reference):
    with responses.RequestsMock():
        record = make_service(config, reference).build_record()

    payload = json.loads(json.dumps(record.to_dict()))

    assert set(payload) == RECORD_KEYS
    assert payload["temperatureC"] is None
    assert payload["pollen"] is None
    assert payload["stressLevel"] == "Moderate"
    assert UnifiedWeatherRecord.from_dict(payload) == record


class ExplodingPollenProvider:
    def fetch(self, reference) -> PollenReading:
        raise RuntimeError("pollen pipeline crashed")


def test_build_record_never_raises(config, reference):
    service = make_service(config, reference, pollen_provider=ExplodingPollenProvider())

    with responses.RequestsMock():
        record = service.build_record()

    assert record.warning_notice == FALLBACK_WARNING


def test_collect_propagates_unexpected_faults(config, reference):
    service = make_service(config, reference, pollen_provider=ExplodingPollenProvider())

    with responses.RequestsMock():
        with pytest.raises(RuntimeError, match="pollen pipeline crashed"):
            service.collect()


def test_async_build_record(config, reference):
    with responses.RequestsMock():
        record = asyncio.run(make_service(config, reference).abuild_record())

    assert record.description == FALLBACK_DESCRIPTION


def test_each_call_fetches_fresh_data(config, reference):
    service = make_service(config, reference)

    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, config.weather_urls[0], json={"weather": {"temperature": 20.0}})
        first = service.build_record()
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, config.weather_urls[0], json={"weather": {"temperature": -3.0}})
        second = service.build_record()

    assert first.temperature_c == 20.0
    assert second.temperature_c == -3.0
    assert second.stress_level is StressLevel.HIGH


def test_get_unified_record_reads_environment(monkeypatch, config):
    monkeypatch.setenv("BIOWETTER_REGION", "Mainz")
    for name in ("WEATHER", "POLLEN", "UV", "OZONE", "HAZARD"):
        monkeypatch.setenv(f"BIOWETTER_{name}_URLS", "https://offline.test/feed.json")

    with responses.RequestsMock():
        record = get_unified_record()

    assert record.region == "Mainz"
    assert record.warning_notice == FALLBACK_WARNING
