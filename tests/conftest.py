from __future__ import annotations

from datetime import datetime, timezone

import pytest

from biowetter.config import BiowetterConfig


@pytest.fixture
def config() -> BiowetterConfig:
    return BiowetterConfig(
        weather_urls=(
            "https://brightsky.test/current_weather",
            "https://dwd.test/warnings/bgww.json",
            "https://dwd.test/warnings/biometeorology.csv",
        ),
        pollen_urls=(
            "https://dwd.test/s31fg.json",
            "https://dwd.test/pollenflug/pollenflug.xml",
        ),
        uv_urls=("https://dwd.test/uvi.json",),
        ozone_urls=("https://dwd.test/ozon/ozon.json",),
        hazard_urls=("https://dwd.test/gefahrenindizes.json",),
        timeout=1.0,
    )


@pytest.fixture
def reference() -> datetime:
    return datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
