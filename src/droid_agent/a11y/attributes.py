"""Attribute names and the per-variant extraction tables.

Every element variant answers ``get_attribute`` from a table mapping each
:class:`AttributeKind` to one extraction function. Tables are checked when
this module is imported, so a kind without a strategy fails at import time
rather than at the first lookup.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel

from droid_agent.a11y.geometry import Bounds
from droid_agent.a11y.node_info import ContentSize
from droid_agent.core.errors import UnsupportedAttributeError


class AttributeKind(str, Enum):
    TEXT = "text"
    CONTENT_DESC = "content-desc"
    CLASS = "class"
    RESOURCE_ID = "resource-id"
    CONTENT_SIZE = "contentSize"
    ENABLED = "enabled"
    CHECKABLE = "checkable"
    CHECKED = "checked"
    CLICKABLE = "clickable"
    FOCUSABLE = "focusable"
    FOCUSED = "focused"
    LONG_CLICKABLE = "long-clickable"
    SCROLLABLE = "scrollable"
    SELECTED = "selected"
    DISPLAYED = "displayed"
    PASSWORD = "password"
    BOUNDS = "bounds"
    PACKAGE = "package"
    SELECTION_START = "selection-start"
    SELECTION_END = "selection-end"

    @property
    def aliases(self) -> tuple[str, ...]:
        return (self.value, *_EXTRA_ALIASES.get(self, ()))

    @classmethod
    def from_string(cls, name: str) -> Optional[AttributeKind]:
        if not name:
            return None
        return _LOOKUP.get(_normalize(name))


# Spellings that differ from the canonical name by more than case or separators
_EXTRA_ALIASES: dict[AttributeKind, tuple[str, ...]] = {
    AttributeKind.CONTENT_DESC: ("contentDescription",),
    AttributeKind.CLASS: ("className",),
}


def _normalize(name: str) -> str:
    return re.sub(r"[-_\s]", "", name).lower()


_LOOKUP: dict[str, AttributeKind] = {
    _normalize(alias): kind for kind in AttributeKind for alias in kind.aliases
}


def supported_names() -> list[str]:
    return [kind.value for kind in AttributeKind]


def parse_attribute(name: str) -> AttributeKind:
    """Resolve *name* or raise before anything touches the native handle."""
    kind = AttributeKind.from_string(name)
    if kind is None:
        raise UnsupportedAttributeError(name, supported_names())
    return kind


def serialize_value(value: Any) -> Optional[str]:
    """Canonical string form of an extracted attribute value."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Bounds):
        return value.to_short_string()
    if isinstance(value, ContentSize):
        return value.to_json()
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    return str(value)


Strategy = Callable[[Any], Any]


def ensure_exhaustive(table: Mapping[AttributeKind, Strategy], variant: str) -> None:
    missing = [kind.name for kind in AttributeKind if kind not in table]
    if missing:
        raise RuntimeError(
            f"{variant} attribute table has no strategy for: {', '.join(missing)}"
        )


# ------------------------------------------------------------------
# Shared extraction helpers
# ------------------------------------------------------------------


def _selection_bound(upper: bool) -> Strategy:
    """Both selection attributes read one range and project one end of it."""

    def extract(element: Any) -> Optional[int]:
        selection = element.node_info().selection_range
        if selection is None:
            return None
        return selection[1] if upper else selection[0]

    return extract


def _content_size(element: Any) -> ContentSize:
    return ContentSize.from_bounds(element.bounds(), scrollable=element.handle.is_scrollable())


def _from_node_info(field: str) -> Strategy:
    return lambda element: getattr(element.node_info(), field)


def _native(method: str) -> Strategy:
    return lambda element: getattr(element.handle, method)()


# Flags both handle kinds answer natively
_NATIVE_FLAGS: dict[AttributeKind, Strategy] = {
    AttributeKind.ENABLED: _native("is_enabled"),
    AttributeKind.CHECKABLE: _native("is_checkable"),
    AttributeKind.CHECKED: _native("is_checked"),
    AttributeKind.CLICKABLE: _native("is_clickable"),
    AttributeKind.FOCUSABLE: _native("is_focusable"),
    AttributeKind.FOCUSED: _native("is_focused"),
    AttributeKind.LONG_CLICKABLE: _native("is_long_clickable"),
    AttributeKind.SCROLLABLE: _native("is_scrollable"),
    AttributeKind.SELECTED: _native("is_selected"),
}

LIVE_VIEW_STRATEGIES: dict[AttributeKind, Strategy] = {
    AttributeKind.TEXT: _native("get_text"),
    AttributeKind.CONTENT_DESC: _native("get_content_description"),
    AttributeKind.CLASS: _native("get_class_name"),
    AttributeKind.RESOURCE_ID: _native("get_resource_name"),
    AttributeKind.CONTENT_SIZE: _content_size,
    **_NATIVE_FLAGS,
    AttributeKind.DISPLAYED: _from_node_info("visible"),
    AttributeKind.PASSWORD: _from_node_info("password"),
    AttributeKind.BOUNDS: lambda element: element.bounds(),
    AttributeKind.PACKAGE: _from_node_info("package_name"),
    AttributeKind.SELECTION_START: _selection_bound(upper=False),
    AttributeKind.SELECTION_END: _selection_bound(upper=True),
}

# Replay handles have no resource-name accessor
REPLAY_STRATEGIES: dict[AttributeKind, Strategy] = {
    AttributeKind.TEXT: _native("get_text"),
    AttributeKind.CONTENT_DESC: _native("get_content_description"),
    AttributeKind.CLASS: _native("get_class_name"),
    AttributeKind.RESOURCE_ID: _from_node_info("resource_id"),
    AttributeKind.CONTENT_SIZE: _content_size,
    **_NATIVE_FLAGS,
    AttributeKind.DISPLAYED: _from_node_info("visible"),
    AttributeKind.PASSWORD: _from_node_info("password"),
    AttributeKind.BOUNDS: lambda element: element.bounds(),
    AttributeKind.PACKAGE: _from_node_info("package_name"),
    AttributeKind.SELECTION_START: _selection_bound(upper=False),
    AttributeKind.SELECTION_END: _selection_bound(upper=True),
}

ensure_exhaustive(LIVE_VIEW_STRATEGIES, "live-view")
ensure_exhaustive(REPLAY_STRATEGIES, "selector-replay")
