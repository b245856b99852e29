from __future__ import annotations

import pytest

from biowetter.providers.base import ParseError, PayloadFormat
from biowetter.providers.parsers import TEXT_KEY, parse_payload


def test_json_payload_is_decoded():
    node = parse_payload('{"regionen": [{"name": "Hessen", "ozon": 101}]}', PayloadFormat.JSON)

    assert node == {"regionen": [{"name": "Hessen", "ozon": 101}]}


def test_json_byte_order_mark_is_ignored():
    assert parse_payload("\ufeff[1, 2]", PayloadFormat.JSON) == [1, 2]


def test_malformed_json_is_not_repaired():
    with pytest.raises(ParseError) as excinfo:
        parse_payload('{"regionen": [', PayloadFormat.JSON)

    assert excinfo.value.kind == "malformed"


def test_xml_merges_attributes_and_collects_siblings():
    payload = """<?xml version="1.0" encoding="UTF-8"?>
    <pollenflug ausgegeben="2024-06-15">
      <region name="Hessen" code="11">
        <hasel>0</hasel>
        <graeser stufe="hoch">3</graeser>
      </region>
      <region name="Bayern" code="09">
        <hasel>1</hasel>
      </region>
    </pollenflug>
    """

    node = parse_payload(payload, PayloadFormat.XML)

    root = node["pollenflug"]
    assert root["ausgegeben"] == "2024-06-15"
    assert isinstance(root["region"], list)
    hessen, bayern = root["region"]
    assert hessen["name"] == "Hessen"
    assert hessen["code"] == "11"
    assert hessen["hasel"] == {TEXT_KEY: "0"}
    assert hessen["graeser"] == {"stufe": "hoch", TEXT_KEY: "3"}
    assert bayern["hasel"] == {TEXT_KEY: "1"}


def test_xml_namespaces_are_stripped():
    payload = '<ns:uv xmlns:ns="urn:dwd"><ns:region name="Hessen"><ns:wert>4</ns:wert></ns:region></ns:uv>'

    node = parse_payload(payload, PayloadFormat.XML)

    assert node == {"uv": {"region": {"name": "Hessen", "wert": {TEXT_KEY: "4"}}}}


def test_malformed_xml_raises_parse_error():
    with pytest.raises(ParseError):
        parse_payload("<region><name>Hessen</region>", PayloadFormat.XML)


def test_csv_rows_are_keyed_by_header():
    payload = "region;temperatur;luftfeuchtigkeit\nHessen;21,5;60\nBayern;19,0;70\n"

    rows = parse_payload(payload, PayloadFormat.CSV)

    assert rows == [
        {"region": "Hessen", "temperatur": "21,5", "luftfeuchtigkeit": "60"},
        {"region": "Bayern", "temperatur": "19,0", "luftfeuchtigkeit": "70"},
    ]


def test_csv_ragged_rows_map_positionally():
    payload = "name,uv,ozon\nHessen,5\nBayern,6,140,extra\n\n"

    rows = parse_payload(payload, PayloadFormat.CSV)

    assert rows == [
        {"name": "Hessen", "uv": "5"},
        {"name": "Bayern", "uv": "6", "ozon": "140"},
    ]


def test_empty_csv_raises_parse_error():
    with pytest.raises(ParseError):
        parse_payload("\n\n", PayloadFormat.CSV)


def test_unknown_format_is_unsupported():
    with pytest.raises(ParseError) as excinfo:
        parse_payload("anything", None)

    assert excinfo.value.kind == "unsupported"
