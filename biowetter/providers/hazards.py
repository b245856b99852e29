"""UV index and ozone pipeline (DWD hazard indices)."""
from __future__ import annotations

import math
import random
from contextlib import closing
from datetime import datetime
from typing import Optional, Tuple

from ..entities import HazardReading
from ..services.metrics import classify_ozone, classify_uv, seasonal_uv_ozone_fallback
from .base import AllCandidatesExhausted
from .feed import FeedProvider

UNAVAILABLE = "unavailable"


class HazardIndexProvider(FeedProvider):
    """Query UV feeds, then ozone feeds, then the combined hazard index.

    When neither value turns up anywhere the seasonal estimate is returned, so
    ``fetch`` always produces a reading.
    """

    name = "uv/ozone"

    def __init__(self, *args, rng: Optional[random.Random] = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.rng = rng or random.Random()

    def fetch(self, reference: datetime, sunshine_minutes: Optional[float] = None) -> HazardReading:
        uv_index, uv_source = self._find(self.config.uv_urls, "uv_index")
        ozone, ozone_source = self._find(self.config.ozone_urls, "ozone")

        if uv_index is None or ozone is None:
            with closing(self.iter_fields(self.config.hazard_urls)) as found:
                for fields, url in found:
                    if uv_index is None and fields.uv_index is not None:
                        uv_index, uv_source = fields.uv_index, url
                    if ozone is None and fields.ozone is not None:
                        ozone, ozone_source = fields.ozone, url
                    if uv_index is not None and ozone is not None:
                        break

        if uv_index is None and ozone is None:
            self._log.warning("All UV/ozone feeds failed, using seasonal estimate for month %s", reference.month)
            return seasonal_uv_ozone_fallback(sunshine_minutes, reference.month, self.rng)

        uv_index = round(uv_index, 1) if uv_index is not None else None
        ozone = float(math.floor(ozone + 0.5)) if ozone is not None else None
        return HazardReading(
            uv_index=uv_index,
            uv_category=classify_uv(uv_index) if uv_index is not None else None,
            ozone=ozone,
            ozone_category=classify_ozone(ozone) if ozone is not None else None,
            uv_source=uv_source or UNAVAILABLE,
            ozone_source=ozone_source or UNAVAILABLE,
        )

    def _find(self, candidates, attribute: str) -> Tuple[Optional[float], Optional[str]]:
        try:
            fields, url = self.first_fields(candidates, lambda fields: getattr(fields, attribute) is not None)
        except AllCandidatesExhausted:
            self._log.info("No %s value in %d candidates", attribute, len(candidates))
            return None, None
        return getattr(fields, attribute), url


__all__ = ["HazardIndexProvider", "UNAVAILABLE"]
