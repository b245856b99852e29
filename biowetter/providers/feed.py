from __future__ import annotations

import logging
from contextlib import closing
from typing import Callable, Iterable, Iterator, Optional, Tuple

import requests

from ..config import BiowetterConfig
from ..entities import FieldSet
from .base import AllCandidatesExhausted, EndpointProber, ParseError, RegionNotFound, RequestConfig
from .parsers import parse_payload
from .regions import extract_record


class FeedProvider:
    """Base class wiring prober, parser and region extractor together."""

    name = "feed"
    accept = "application/json, */*"

    def __init__(
        self,
        config: Optional[BiowetterConfig] = None,
        *,
        session: Optional[requests.Session] = None,
        prober: Optional[EndpointProber] = None,
    ) -> None:
        self.config = config or BiowetterConfig()
        self.prober = prober or EndpointProber(
            session=session,
            request_config=RequestConfig(
                timeout=self.config.timeout,
                accept=self.accept,
                user_agent=self.config.user_agent,
            ),
            extra_headers=self.config.extra_headers,
        )
        self._log = logging.getLogger(self.__class__.__name__)

    def iter_fields(self, candidates: Iterable[str]) -> Iterator[Tuple[FieldSet, str]]:
        """Yield the extracted fields of every candidate that decodes."""
        with closing(self.prober.iter_results(candidates)) as results:
            for result in results:
                try:
                    node = parse_payload(result.text, result.format)
                    fields = extract_record(
                        node,
                        self.config.region,
                        aliases=self.config.aliases,
                        codes=self.config.region_codes,
                    )
                except (ParseError, RegionNotFound) as exc:
                    self._log.info("Candidate %s unusable: %s", result.url, exc)
                    continue
                if fields.degraded_match:
                    self._log.info("No %s record in %s, using first entry", self.config.region, result.url)
                yield fields, result.url

    def first_fields(
        self,
        candidates: Iterable[str],
        usable: Callable[[FieldSet], bool],
    ) -> Tuple[FieldSet, str]:
        candidates = list(candidates)
        with closing(self.iter_fields(candidates)) as found:
            for fields, url in found:
                if usable(fields):
                    return fields, url
                self._log.info("Candidate %s carries no %s data", url, self.name)
        raise AllCandidatesExhausted(candidates, f"no usable {self.name} feed")


__all__ = ["FeedProvider"]
