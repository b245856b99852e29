from __future__ import annotations

import pytest

from biowetter.config import DEFAULT_POLLEN_URLS, BiowetterConfig


def test_defaults_target_wiesbaden():
    config = BiowetterConfig.from_env({})

    assert config.region == "Wiesbaden"
    assert config.aliases == ("hessen", "frankfurt")
    assert config.region_codes == ("11",)
    assert config.pollen_urls == DEFAULT_POLLEN_URLS
    assert config.pollen_urls[0].endswith("/s31fg.json")
    assert "{lat}" in config.weather_urls[0]


def test_environment_overrides():
    config = BiowetterConfig.from_env(
        {
            "BIOWETTER_REGION": "Mainz",
            "BIOWETTER_LATITUDE": "49.99",
            "BIOWETTER_TIMEOUT": "3",
            "BIOWETTER_USER_AGENT": "Mainz-Test/2.0",
            "BIOWETTER_UV_URLS": " https://a.test/uv.json, ,https://b.test/uv.json ",
        }
    )

    assert config.region == "Mainz"
    assert config.latitude == 49.99
    assert config.longitude == 8.24
    assert config.timeout == 3.0
    assert config.user_agent == "Mainz-Test/2.0"
    assert config.uv_urls == ("https://a.test/uv.json", "https://b.test/uv.json")


def test_empty_url_list_disables_pipeline():
    config = BiowetterConfig.from_env({"BIOWETTER_HAZARD_URLS": ""})

    assert config.hazard_urls == ()


def test_invalid_number_is_reported():
    with pytest.raises(ValueError, match="BIOWETTER_TIMEOUT"):
        BiowetterConfig.from_env({"BIOWETTER_TIMEOUT": "soon"})
