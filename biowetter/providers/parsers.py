"""Decode raw feed payloads into plain dicts and lists.

JSON is decoded as-is. XML elements become dicts with their attributes merged
in, repeated siblings collapse into lists and element text lands under
``TEXT_KEY``. CSV becomes a list of dicts keyed by the header row.
"""
from __future__ import annotations

import csv
import io
import json
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Union

from .base import ParseError, PayloadFormat

TEXT_KEY = "_text"

GenericNode = Union[Dict[str, Any], List[Any], str, int, float, bool, None]


def parse_payload(text: str, payload_format: Optional[PayloadFormat]) -> GenericNode:
    if text.startswith("\ufeff"):
        text = text[1:]
    if payload_format is PayloadFormat.JSON:
        return _parse_json(text)
    if payload_format is PayloadFormat.XML:
        return _parse_xml(text)
    if payload_format is PayloadFormat.CSV:
        return _parse_csv(text)
    raise ParseError(f"unsupported payload format: {payload_format!r}", kind="unsupported")


def _parse_json(text: str) -> GenericNode:
    try:
        return json.loads(text)
    except ValueError as exc:
        raise ParseError(f"invalid json: {exc}") from exc


def _parse_xml(text: str) -> Dict[str, Any]:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ParseError(f"invalid xml: {exc}") from exc
    return {_localname(root.tag): _element_to_node(root)}


def _localname(tag: str) -> str:
    if "}" in tag:
        return tag.split("}", 1)[1]
    return tag


def _element_to_node(element: ET.Element) -> Dict[str, Any]:
    node: Dict[str, Any] = {_localname(name): value for name, value in element.attrib.items()}
    children: Dict[str, Any] = {}
    for child in element:
        key = _localname(child.tag)
        value = _element_to_node(child)
        if key not in children:
            children[key] = value
        elif isinstance(children[key], list):
            children[key].append(value)
        else:
            children[key] = [children[key], value]
    node.update(children)
    text = (element.text or "").strip()
    if text:
        node[TEXT_KEY] = text
    return node


def _parse_csv(text: str) -> List[Dict[str, str]]:
    sample = text[:2048]
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=",;\t")
    except csv.Error:
        dialect = csv.excel

    try:
        rows = [row for row in csv.reader(io.StringIO(text), dialect) if any(cell.strip() for cell in row)]
    except csv.Error as exc:
        raise ParseError(f"invalid csv: {exc}") from exc
    if not rows:
        raise ParseError("empty csv")

    header = [name.strip() for name in rows[0]]
    if not any(header):
        raise ParseError("csv header is empty")

    # ragged rows: zip() maps positionally and drops surplus cells
    return [
        {name: cell.strip() for name, cell in zip(header, row) if name}
        for row in rows[1:]
    ]


__all__ = ["GenericNode", "TEXT_KEY", "parse_payload"]
