"""Pollen pipeline backed by the DWD pollen hazard index."""
from __future__ import annotations

from datetime import datetime

from ..entities import PollenReading
from ..services.metrics import SEASONAL_ESTIMATE, seasonal_pollen_fallback
from .base import AllCandidatesExhausted
from .feed import FeedProvider


class PollenFeedProvider(FeedProvider):
    name = "pollen"
    accept = "application/json, application/xml, text/csv, */*"

    def fetch(self, reference: datetime) -> PollenReading:
        """Live pollen levels, or the seasonal table when no feed answers."""
        try:
            fields, source = self.first_fields(self.config.pollen_urls, lambda fields: bool(fields.pollen))
        except AllCandidatesExhausted:
            self._log.warning("All pollen feeds failed, using seasonal estimate for month %s", reference.month)
            return PollenReading(
                levels=seasonal_pollen_fallback(reference.month),
                source=SEASONAL_ESTIMATE,
                estimated=True,
            )
        return PollenReading(levels=dict(fields.pollen), source=source)


__all__ = ["PollenFeedProvider"]
