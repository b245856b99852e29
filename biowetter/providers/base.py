from __future__ import annotations

import logging
from contextlib import closing, contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Mapping, Optional
from urllib.parse import urlparse

import requests
from requests import Response


class ProviderError(RuntimeError):
    """Base provider error."""


class EndpointUnavailable(ProviderError):
    """A single candidate endpoint could not deliver a usable payload."""


class AllCandidatesExhausted(ProviderError):
    """Raised when every candidate endpoint of a pipeline failed."""

    def __init__(self, candidates: Iterable[str], message: str = "all candidates exhausted") -> None:
        super().__init__(message)
        self.candidates = tuple(candidates)


class ParseError(ProviderError):
    """Raised when a payload cannot be decoded."""

    def __init__(self, message: str, kind: str = "malformed") -> None:
        super().__init__(message)
        self.kind = kind


class RegionNotFound(ProviderError):
    """Raised when a decoded payload holds no region records at all."""


class PayloadFormat(str, Enum):
    JSON = "json"
    XML = "xml"
    CSV = "csv"


@dataclass
class RequestConfig:
    timeout: float = 15.0
    accept: str = "application/json, */*"
    user_agent: str = "Biowetter-Wiesbaden/1.0"

    def headers(self, extra: Optional[Mapping[str, str]] = None) -> dict:
        headers = {"Accept": self.accept, "User-Agent": self.user_agent}
        if extra:
            headers.update(extra)
        return headers


@dataclass(frozen=True)
class ProbeResult:
    url: str
    status_code: int
    content_type: str
    text: str

    @property
    def format(self) -> Optional[PayloadFormat]:
        return detect_format(self.content_type, self.url, self.text)


def detect_format(content_type: str, url: str, text: str = "") -> Optional[PayloadFormat]:
    """Guess the payload format from header, then URL suffix, then content."""
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    if "json" in mime:
        return PayloadFormat.JSON
    if "xml" in mime:
        return PayloadFormat.XML
    if "csv" in mime:
        return PayloadFormat.CSV

    path = urlparse(url).path.lower()
    for suffix, payload_format in ((".json", PayloadFormat.JSON), (".xml", PayloadFormat.XML), (".csv", PayloadFormat.CSV)):
        if path.endswith(suffix):
            return payload_format

    head = text.lstrip()[:1]
    if head in ("{", "["):
        return PayloadFormat.JSON
    if head == "<":
        return PayloadFormat.XML
    if head:
        return PayloadFormat.CSV
    return None


class EndpointProber:
    """Try candidate URLs in order and hand back the first usable payload.

    Every candidate gets exactly one GET. Network errors, timeouts, any
    non-200 status and empty bodies all count as a failed candidate; the
    prober keeps no state between calls. Without an injected session each
    probing pass opens its own ``requests.Session`` and closes it when done.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        request_config: Optional[RequestConfig] = None,
        extra_headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.request_config = request_config or RequestConfig()
        self.session = session
        self.extra_headers = dict(extra_headers or {})
        self._log = logging.getLogger(self.__class__.__name__)

    def probe(self, candidates: Iterable[str]) -> ProbeResult:
        candidates = list(candidates)
        with closing(self.iter_results(candidates)) as results:
            for result in results:
                return result
        raise AllCandidatesExhausted(candidates)

    def iter_results(self, candidates: Iterable[str]) -> Iterator[ProbeResult]:
        with self._open_session() as session:
            for url in candidates:
                try:
                    result = self._get(session, url)
                except EndpointUnavailable as exc:
                    self._log.info("Candidate %s failed: %s", url, exc)
                    continue
                yield result

    def fetch(self, url: str) -> ProbeResult:
        with self._open_session() as session:
            return self._get(session, url)

    @contextmanager
    def _open_session(self) -> Iterator[requests.Session]:
        if self.session is not None:
            yield self.session
            return
        with requests.Session() as session:
            yield session

    def _get(self, session: requests.Session, url: str) -> ProbeResult:
        try:
            response = session.get(
                url,
                timeout=self.request_config.timeout,
                headers=self.request_config.headers(self.extra_headers),
            )
        except requests.Timeout as exc:
            raise EndpointUnavailable("timeout") from exc
        except requests.RequestException as exc:
            raise EndpointUnavailable(f"request failed: {exc.__class__.__name__}") from exc
        return self._handle_response(url, response)

    def _handle_response(self, url: str, response: Response) -> ProbeResult:
        if response.status_code == 429:
            self._log.warning("Quota exceeded for %s", url)
            raise EndpointUnavailable("quota exceeded")
        if response.status_code != 200:
            raise EndpointUnavailable(f"HTTP {response.status_code}")
        text = response.text
        if not text or not text.strip():
            raise EndpointUnavailable("empty body")
        return ProbeResult(
            url=url,
            status_code=response.status_code,
            content_type=response.headers.get("Content-Type", ""),
            text=text,
        )


__all__ = [
    "AllCandidatesExhausted",
    "EndpointProber",
    "EndpointUnavailable",
    "ParseError",
    "PayloadFormat",
    "ProbeResult",
    "ProviderError",
    "RegionNotFound",
    "RequestConfig",
    "detect_format",
]
