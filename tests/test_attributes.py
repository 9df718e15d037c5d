"""Tests for attribute parsing, serialization and strategy tables."""

import pytest

from droid_agent.a11y.attributes import (
    LIVE_VIEW_STRATEGIES,
    REPLAY_STRATEGIES,
    AttributeKind,
    ensure_exhaustive,
    parse_attribute,
    serialize_value,
    supported_names,
)
from droid_agent.a11y.geometry import Bounds
from droid_agent.a11y.node_info import ContentSize
from droid_agent.core.errors import EXIT_UNSUPPORTED_ATTRIBUTE, UnsupportedAttributeError


@pytest.mark.parametrize(
    "name, kind",
    [
        ("text", AttributeKind.TEXT),
        ("content-desc", AttributeKind.CONTENT_DESC),
        ("contentDescription", AttributeKind.CONTENT_DESC),
        ("CONTENT_DESC", AttributeKind.CONTENT_DESC),
        ("resourceId", AttributeKind.RESOURCE_ID),
        ("resource_id", AttributeKind.RESOURCE_ID),
        ("className", AttributeKind.CLASS),
        ("Long-Clickable", AttributeKind.LONG_CLICKABLE),
        ("selectionStart", AttributeKind.SELECTION_START),
        ("contentSize", AttributeKind.CONTENT_SIZE),
    ],
)
def test_from_string_normalizes(name, kind):
    assert AttributeKind.from_string(name) is kind


def test_from_string_unknown():
    assert AttributeKind.from_string("elevation") is None
    assert AttributeKind.from_string("") is None


def test_parse_attribute_raises_for_unknown():
    with pytest.raises(UnsupportedAttributeError) as exc_info:
        parse_attribute("elevation")
    err = exc_info.value
    assert err.name == "elevation"
    assert err.exit_code == EXIT_UNSUPPORTED_ATTRIBUTE
    assert "Hint" in str(err)
    assert "resource-id" in str(err)


def test_supported_names_cover_every_kind():
    assert len(supported_names()) == len(AttributeKind) == 20


def test_serialize_value():
    assert serialize_value(None) is None
    assert serialize_value("abc") == "abc"
    assert serialize_value("") == ""
    assert serialize_value(True) == "true"
    assert serialize_value(False) == "false"
    assert serialize_value(7) == "7"
    assert serialize_value(Bounds(1, 2, 3, 4)) == "[1,2][3,4]"


def test_serialize_content_size():
    out = serialize_value(ContentSize(width=1, height=2, top=3, left=4))
    assert '"scrollableOffset":0' in out


def test_strategy_tables_are_total():
    for kind in AttributeKind:
        assert kind in LIVE_VIEW_STRATEGIES
        assert kind in REPLAY_STRATEGIES


def test_ensure_exhaustive_reports_missing_kinds():
    partial = {AttributeKind.TEXT: lambda e: None}
    with pytest.raises(RuntimeError, match="SELECTION_END"):
        ensure_exhaustive(partial, "partial")
