"""Locate the target region inside a decoded feed and pull out logical fields.

Upstream feeds disagree on nesting, casing and language. All of that is kept
in the tables below: adding a schema variant means adding a key, not a branch.
"""
from __future__ import annotations

import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..entities import FieldSet, StressLevel
from .base import RegionNotFound
from .parsers import TEXT_KEY, GenericNode

CONTAINER_KEYS: Tuple[str, ...] = (
    "regionen",
    "regions",
    "warnings",
    "warnungen",
    "data",
    "content",
    "weather",
)

NAME_KEYS: Tuple[str, ...] = (
    "region",
    "name",
    "region_name",
    "regionname",
    "partregion_name",
    "city",
    "ort",
    "stadt",
)

CODE_KEYS: Tuple[str, ...] = ("code", "id", "regionid")

# Values that arrive as nested nodes are unwrapped through these keys in order.
VALUE_KEYS: Tuple[str, ...] = (TEXT_KEY, "today", "heute", "value")

FIELD_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "temperature_c": ("temperature", "temperatur", "temp", "lufttemperatur"),
    "humidity_pct": ("relative_humidity", "relativehumidity", "humidity", "luftfeuchtigkeit", "feuchte"),
    "description": ("beschreibung", "description", "text", "summary"),
    "condition": ("condition", "wetterzustand", "zustand"),
    "warning": ("warnung", "warning", "alert", "hinweis"),
    "date": ("date", "datum", "issued", "ausgegeben"),
    "stress_raw": ("belastung", "stress", "belastungsstufe", "belastungstufe", "level"),
    "feeling": ("gefuehl", "gefühl", "feeling", "empfinden"),
    "sunshine_minutes": ("sunshine_60", "sunshine", "sonnenscheindauer", "sunshine_30"),
    "uv_index": ("uvindex", "uv_index", "uvi", "uv", "forecast", "value"),
    "ozone": ("ozon", "ozone", "ozonvorhersage", "o3", "value"),
}

FIELD_RANGES: Dict[str, Tuple[float, float]] = {
    "temperature_c": (-60.0, 60.0),
    "humidity_pct": (0.0, 100.0),
    "sunshine_minutes": (0.0, 1440.0),
    "uv_index": (0.0, 15.0),
    "ozone": (0.0, 1000.0),
}

POLLEN_CONTAINER_KEYS: Tuple[str, ...] = ("pollen", "pollenflug")

# canonical output name -> upstream spellings
POLLEN_SPECIES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Hasel", ("hasel", "hazel")),
    ("Erle", ("erle", "alder")),
    ("Esche", ("esche", "ash")),
    ("Birke", ("birke", "birch")),
    ("Gräser", ("gräser", "graeser", "süßgräser", "suessgraeser", "grass", "grasses")),
    ("Roggen", ("roggen", "rye")),
    ("Beifuß", ("beifuß", "beifuss", "mugwort")),
    ("Ambrosia", ("ambrosia", "ragweed")),
)

POLLEN_RANGE = (0.0, 3.0)

# checked in this order; first keyword contained in the raw string wins
STRESS_KEYWORDS: Tuple[Tuple[StressLevel, Tuple[str, ...]], ...] = (
    (StressLevel.LOW, ("niedrig", "low", "gering")),
    (StressLevel.MODERATE, ("moderat", "moderate", "mäßig", "maessig")),
    (StressLevel.ELEVATED, ("erhöht", "erhoeht", "elevated")),
    (StressLevel.HIGH, ("hoch", "high", "stark")),
)

_MAX_DEPTH = 6
_NUMBER_RE = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")
_RANGE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*-\s*(\d+(?:\.\d+)?)")
_ISO_DATE_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")
_GERMAN_DATE_RE = re.compile(r"(\d{1,2})\.(\d{1,2})\.(\d{4})")


def extract_record(
    node: GenericNode,
    region: str,
    aliases: Sequence[str] = (),
    codes: Sequence[str] = (),
) -> FieldSet:
    records = find_candidate_records(node)
    if not records:
        raise RegionNotFound("payload holds no region records")
    names = tuple(name.casefold() for name in (region, *aliases) if name)
    record, degraded = match_region(records, names, tuple(str(code) for code in codes))
    return extract_fields(record, degraded=degraded)


def find_candidate_records(node: GenericNode, depth: int = 0) -> List[Mapping[str, Any]]:
    if depth > _MAX_DEPTH:
        return []
    if isinstance(node, list):
        return [item for item in node if isinstance(item, Mapping)]
    if not isinstance(node, Mapping):
        return []

    folded = _fold(node)
    for key in CONTAINER_KEYS:
        value = folded.get(key)
        if isinstance(value, (list, Mapping)):
            records = find_candidate_records(value, depth + 1)
            if records:
                return records

    features = node.get("features")
    if isinstance(features, list):
        properties = [
            feature["properties"]
            for feature in features
            if isinstance(feature, Mapping) and isinstance(feature.get("properties"), Mapping)
        ]
        if properties:
            return properties

    # XML documents arrive wrapped in their root element
    if len(node) == 1:
        ((key, value),) = node.items()
        if isinstance(value, list) or _is_wrapper(str(key), value):
            records = find_candidate_records(value, depth + 1)
            if records:
                return records
    return [node]


def match_region(
    records: Sequence[Mapping[str, Any]],
    names: Iterable[str],
    codes: Iterable[str] = (),
) -> Tuple[Mapping[str, Any], bool]:
    """Return the first record naming the region, else the first record.

    The second element is ``True`` when nothing matched and the first record
    was taken as a stand-in.
    """
    if not records:
        raise RegionNotFound("no records to match")
    names = tuple(names)
    codes = tuple(codes)
    for record in records:
        if _record_matches(record, names, codes):
            return record, False
    return records[0], True


def extract_fields(record: Mapping[str, Any], degraded: bool = False) -> FieldSet:
    values: Dict[str, Any] = {}
    for field_name in ("temperature_c", "humidity_pct", "sunshine_minutes", "uv_index", "ozone"):
        low, high = FIELD_RANGES[field_name]
        values[field_name] = parse_number(lookup(record, FIELD_SYNONYMS[field_name]), low, high)
    for field_name in ("description", "condition", "warning", "stress_raw", "feeling"):
        values[field_name] = _as_text(lookup(record, FIELD_SYNONYMS[field_name]))
    values["date"] = parse_date(lookup(record, FIELD_SYNONYMS["date"]))
    values["pollen"] = extract_pollen(record)
    return FieldSet(degraded_match=degraded, **values)


def extract_pollen(record: Mapping[str, Any]) -> Dict[str, int]:
    container = lookup(record, POLLEN_CONTAINER_KEYS, unwrap=False)
    if not isinstance(container, Mapping):
        container = record
    levels: Dict[str, int] = {}
    for canonical, synonyms in POLLEN_SPECIES:
        value = parse_number(lookup(container, synonyms), *POLLEN_RANGE)
        if value is not None:
            levels[canonical] = int(math.floor(value + 0.5))
    return levels


def lookup(record: Mapping[str, Any], synonyms: Sequence[str], unwrap: bool = True) -> Any:
    """Return the value of the first synonym present in ``record``.

    Exact keys are tried before a case-insensitive pass.
    """
    value = _first_present(record, synonyms)
    if value is None:
        value = _first_present(_fold(record), [key.casefold() for key in synonyms])
    if unwrap:
        return unwrap_value(value)
    return value


def unwrap_value(value: Any) -> Any:
    depth = 0
    while isinstance(value, Mapping) and depth < _MAX_DEPTH:
        depth += 1
        for key in VALUE_KEYS:
            if key in value:
                value = value[key]
                break
        else:
            return None
    return value


def parse_number(value: Any, low: float = -math.inf, high: float = math.inf) -> Optional[float]:
    """Permissive number parsing; out-of-range or non-finite values are dropped."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        number = _parse_number_text(value)
        if number is None:
            return None
    else:
        return None
    if not math.isfinite(number) or not low <= number <= high:
        return None
    return number


def parse_date(value: Any) -> Optional[str]:
    text = _as_text(value)
    if not text:
        return None
    match = _ISO_DATE_RE.match(text)
    if match:
        return match.group(0)
    match = _GERMAN_DATE_RE.match(text)
    if match:
        day, month, year = match.groups()
        return f"{year}-{int(month):02d}-{int(day):02d}"
    return None


def normalize_stress(raw: Optional[str]) -> StressLevel:
    text = (raw or "").casefold()
    for level, keywords in STRESS_KEYWORDS:
        if any(keyword.casefold() in text for keyword in keywords):
            return level
    return StressLevel.MODERATE


# helpers ------------------------------------------------------------
def _is_wrapper(key: str, value: Any) -> bool:
    """A single-key mapping wraps records unless its value is itself a field value."""
    if not isinstance(value, Mapping) or not value:
        return False
    if key == TEXT_KEY:
        return False
    return not any(value_key in value for value_key in VALUE_KEYS)


def _record_matches(record: Mapping[str, Any], names: Sequence[str], codes: Sequence[str]) -> bool:
    folded = _fold(record)
    for key in NAME_KEYS:
        value = _as_text(unwrap_value(folded.get(key)))
        if value and any(name in value.casefold() for name in names):
            return True
    for key in CODE_KEYS:
        value = _as_text(unwrap_value(folded.get(key)))
        if value and value in codes:
            return True
    return False


def _fold(record: Mapping[str, Any]) -> Dict[str, Any]:
    return {str(key).casefold(): value for key, value in record.items()}


def _first_present(record: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (Mapping, list)):
        return None
    text = str(value).strip()
    return text or None


def _parse_number_text(raw: str) -> Optional[float]:
    text = raw.strip()
    if "," in text and "." not in text:
        text = text.replace(",", ".")
    match = _RANGE_RE.fullmatch(text)
    if match:
        return (float(match.group(1)) + float(match.group(2))) / 2
    match = _NUMBER_RE.match(text)
    if not match:
        return None
    return float(match.group(0))


__all__ = [
    "FIELD_SYNONYMS",
    "POLLEN_SPECIES",
    "extract_fields",
    "extract_pollen",
    "extract_record",
    "find_candidate_records",
    "lookup",
    "match_region",
    "normalize_stress",
    "parse_date",
    "parse_number",
]
