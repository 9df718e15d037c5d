"""Offline accessibility backend over a uiautomator XML dump.

Provides both native handle kinds, a device and a node-info bridge over a
parsed ``adb shell uiautomator dump`` tree, so that elements can be driven
without an instrumented device.

Input format::

    <hierarchy rotation="0">
      <node index="0" text="" resource-id="" class="android.widget.FrameLayout"
            package="com.android.settings" content-desc="" checkable="false"
            checked="false" clickable="false" enabled="true" focusable="false"
            focused="false" scrollable="false" long-clickable="false"
            password="false" selected="false" bounds="[0,0][1080,2400]">
        <node ...>...</node>
      </node>
    </hierarchy>
"""

from __future__ import annotations

import logging
import pathlib
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Union

from droid_agent.a11y.geometry import Bounds, Point
from droid_agent.a11y.handles import DeviceContext, PositionMapper
from droid_agent.a11y.node_info import NodeInfo
from droid_agent.a11y.positioning import DisplayPositionMapper
from droid_agent.a11y.selector import LiveSelector, ReplaySelector
from droid_agent.constants import NO_SELECTION
from droid_agent.core.errors import HierarchyParseError, ObjectNotFoundError, StaleElementError

logger = logging.getLogger(__name__)

_FLAG_ATTRS = {
    "checkable": "checkable",
    "checked": "checked",
    "clickable": "clickable",
    "enabled": "enabled",
    "focusable": "focusable",
    "focused": "focused",
    "scrollable": "scrollable",
    "long-clickable": "long_clickable",
    "password": "password",
    "selected": "selected",
}


@dataclass(eq=False)
class UiNode:
    class_name: str = ""
    resource_id: str = ""
    text: str = ""
    content_desc: str = ""
    package_name: str = ""
    bounds: Bounds = field(default_factory=lambda: Bounds(0, 0, 0, 0))
    checkable: bool = False
    checked: bool = False
    clickable: bool = False
    enabled: bool = True
    focusable: bool = False
    focused: bool = False
    scrollable: bool = False
    long_clickable: bool = False
    password: bool = False
    selected: bool = False
    visible_to_user: bool = True
    selection_start: int = NO_SELECTION
    selection_end: int = NO_SELECTION
    parent: Optional[UiNode] = field(default=None, repr=False)
    children: list[UiNode] = field(default_factory=list, repr=False)
    attached: bool = True

    def iter_descendants(self, max_depth: int | None = None) -> Iterator[UiNode]:
        """Pre-order walk below this node; children are depth 1."""

        def _walk(node: UiNode, depth: int) -> Iterator[UiNode]:
            if max_depth is not None and depth > max_depth:
                return
            for child in node.children:
                yield child
                yield from _walk(child, depth + 1)

        return _walk(self, 1)

    def describe(self) -> str:
        ident = self.resource_id or self.text or self.content_desc or "-"
        return f"{self.class_name}[{ident}] {self.bounds.to_short_string()}"


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() == "true"


def _parse_int(value: str | None) -> int:
    if value is None or not value.strip():
        return NO_SELECTION
    try:
        return int(value)
    except ValueError:
        return NO_SELECTION


def _node_from_xml(el: ET.Element, parent: UiNode | None) -> UiNode:
    attrs = el.attrib
    raw_bounds = attrs.get("bounds")
    try:
        bounds = Bounds.parse(raw_bounds) if raw_bounds else Bounds(0, 0, 0, 0)
    except ValueError as exc:
        raise HierarchyParseError(str(exc)) from exc

    node = UiNode(
        class_name=attrs.get("class", ""),
        resource_id=attrs.get("resource-id", ""),
        text=attrs.get("text", ""),
        content_desc=attrs.get("content-desc", ""),
        package_name=attrs.get("package", ""),
        bounds=bounds,
        visible_to_user=_parse_bool(attrs.get("visible-to-user"), True),
        selection_start=_parse_int(attrs.get("selection-start")),
        selection_end=_parse_int(attrs.get("selection-end")),
        parent=parent,
    )
    for xml_name, field_name in _FLAG_ATTRS.items():
        setattr(node, field_name, _parse_bool(attrs.get(xml_name), getattr(node, field_name)))
    node.children = [_node_from_xml(child, node) for child in el if child.tag == "node"]
    return node


def _matches(node: UiNode, selector: Union[LiveSelector, ReplaySelector]) -> bool:
    for name, expected in selector.criteria().items():
        if name == "text_contains":
            if expected not in node.text:
                return False
        elif getattr(node, name) != expected:
            return False
    if selector.bounds is not None:
        return node.bounds == selector.bounds
    return True


class UiHierarchy:
    """A parsed dump plus the gestures issued against it."""

    def __init__(self, roots: list[UiNode]):
        self.roots = roots
        self.gestures: list[dict[str, Any]] = []

    @classmethod
    def from_xml(cls, text: str) -> UiHierarchy:
        text = text.strip()
        start = text.find("<hierarchy")
        if start == -1:
            raise HierarchyParseError("no <hierarchy> element")
        try:
            root = ET.fromstring(text[start:])
        except ET.ParseError as exc:
            raise HierarchyParseError(str(exc)) from exc
        roots = [_node_from_xml(el, None) for el in root if el.tag == "node"]
        hierarchy = cls(roots)
        logger.debug("Parsed hierarchy with %d nodes", sum(1 for _ in hierarchy.iter_nodes()))
        return hierarchy

    @classmethod
    def from_file(cls, path: str | pathlib.Path) -> UiHierarchy:
        try:
            text = pathlib.Path(path).read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise HierarchyParseError(f"not UTF-8 text ({exc.reason})") from exc
        return cls.from_xml(text)

    @property
    def screen(self) -> Bounds:
        if not self.roots:
            return Bounds(0, 0, 0, 0)
        return Bounds(
            min(r.bounds.left for r in self.roots),
            min(r.bounds.top for r in self.roots),
            max(r.bounds.right for r in self.roots),
            max(r.bounds.bottom for r in self.roots),
        )

    def iter_nodes(self) -> Iterator[UiNode]:
        for root in self.roots:
            yield root
            yield from root.iter_descendants()

    def detach(self, node: UiNode) -> None:
        """Drop *node* from the tree, as when a view leaves the screen."""
        if node.parent is not None:
            node.parent.children.remove(node)
        elif node in self.roots:
            self.roots.remove(node)
        node.attached = False
        for d in node.iter_descendants():
            d.attached = False

    def visible_bounds(self, node: UiNode) -> Bounds:
        bounds = node.bounds
        parent = node.parent
        while parent is not None:
            bounds = bounds.intersect(parent.bounds)
            parent = parent.parent
        return bounds.intersect(self.screen)

    def record_gesture(self, action: str, start: Point, end: Point, steps: int) -> None:
        self.gestures.append({
            "action": action,
            "from": (start.x, start.y),
            "to": (end.x, end.y),
            "steps": steps,
        })


class HierarchyLiveHandle:
    """Live-view handle pinned to one node."""

    def __init__(self, node: UiNode, hierarchy: UiHierarchy):
        self._node = node
        self._hierarchy = hierarchy

    @property
    def node(self) -> UiNode:
        if not self._node.attached:
            raise StaleElementError(self._node.describe())
        return self._node

    def get_text(self) -> Optional[str]:
        return self.node.text

    def get_content_description(self) -> Optional[str]:
        return self.node.content_desc or None

    def get_class_name(self) -> Optional[str]:
        return self.node.class_name

    def get_resource_name(self) -> Optional[str]:
        return self.node.resource_id or None

    def is_enabled(self) -> bool:
        return self.node.enabled

    def is_checkable(self) -> bool:
        return self.node.checkable

    def is_checked(self) -> bool:
        return self.node.checked

    def is_clickable(self) -> bool:
        return self.node.clickable

    def is_focusable(self) -> bool:
        return self.node.focusable

    def is_focused(self) -> bool:
        return self.node.focused

    def is_long_clickable(self) -> bool:
        return self.node.long_clickable

    def is_scrollable(self) -> bool:
        return self.node.scrollable

    def is_selected(self) -> bool:
        return self.node.selected

    def get_visible_bounds(self) -> Bounds:
        return self._hierarchy.visible_bounds(self.node)

    def get_visible_center(self) -> Point:
        return self.get_visible_bounds().center()

    def clear(self) -> None:
        self.node.text = ""

    def find_object(self, selector: LiveSelector) -> Optional[HierarchyLiveHandle]:
        for candidate in self.node.iter_descendants(selector.max_depth):
            if _matches(candidate, selector):
                return HierarchyLiveHandle(candidate, self._hierarchy)
        return None

    def find_objects(self, selector: LiveSelector) -> list[HierarchyLiveHandle]:
        return [
            HierarchyLiveHandle(candidate, self._hierarchy)
            for candidate in self.node.iter_descendants(selector.max_depth)
            if _matches(candidate, selector)
        ]

    def drag(self, dest: Point, steps: int) -> None:
        self._hierarchy.record_gesture("drag", self.get_visible_center(), dest, steps)

    def __repr__(self) -> str:
        return f"HierarchyLiveHandle({self._node.describe()})"


class HierarchyReplayHandle:
    """Selector-replay handle; resolves its node afresh on every call."""

    def __init__(
        self,
        selector: ReplaySelector,
        hierarchy: UiHierarchy,
        parent: HierarchyReplayHandle | None = None,
    ):
        self.selector = selector
        self._hierarchy = hierarchy
        self._parent = parent

    def resolve(self) -> UiNode:
        if self._parent is not None:
            scope = self._parent.resolve().iter_descendants()
        else:
            scope = self._hierarchy.iter_nodes()
        wanted = self.selector.instance or 0
        seen = 0
        for candidate in scope:
            if _matches(candidate, self.selector):
                if seen == wanted:
                    return candidate
                seen += 1
        raise ObjectNotFoundError(self.selector.describe())

    def exists(self) -> bool:
        try:
            self.resolve()
        except ObjectNotFoundError:
            return False
        return True

    def get_text(self) -> Optional[str]:
        return self.resolve().text

    def get_content_description(self) -> Optional[str]:
        return self.resolve().content_desc or None

    def get_class_name(self) -> Optional[str]:
        return self.resolve().class_name

    def is_enabled(self) -> bool:
        return self.resolve().enabled

    def is_checkable(self) -> bool:
        return self.resolve().checkable

    def is_checked(self) -> bool:
        return self.resolve().checked

    def is_clickable(self) -> bool:
        return self.resolve().clickable

    def is_focusable(self) -> bool:
        return self.resolve().focusable

    def is_focused(self) -> bool:
        return self.resolve().focused

    def is_long_clickable(self) -> bool:
        return self.resolve().long_clickable

    def is_scrollable(self) -> bool:
        return self.resolve().scrollable

    def is_selected(self) -> bool:
        return self.resolve().selected

    def get_bounds(self) -> Bounds:
        return self.resolve().bounds

    def get_child(self, selector: ReplaySelector) -> HierarchyReplayHandle:
        # Lazy, like the platform: existence is checked by the caller
        return HierarchyReplayHandle(selector, self._hierarchy, parent=self)

    def clear_text_field(self) -> None:
        self.resolve().text = ""

    def drag_to(self, dest: Point, steps: int) -> None:
        self._hierarchy.record_gesture("drag", self.get_bounds().center(), dest, steps)

    def __repr__(self) -> str:
        return f"HierarchyReplayHandle({self.selector.describe()})"


class HierarchyDevice:
    """Top-level search; ties go to the first node in pre-order."""

    def __init__(self, hierarchy: UiHierarchy):
        self.hierarchy = hierarchy

    def find_object(
        self, selector: Union[LiveSelector, ReplaySelector]
    ) -> HierarchyLiveHandle | HierarchyReplayHandle | None:
        if isinstance(selector, ReplaySelector):
            handle = HierarchyReplayHandle(selector, self.hierarchy)
            return handle if handle.exists() else None
        for node in self.hierarchy.iter_nodes():
            if _matches(node, selector):
                return HierarchyLiveHandle(node, self.hierarchy)
        return None

    def find_objects(self, selector: LiveSelector) -> list[HierarchyLiveHandle]:
        return [
            HierarchyLiveHandle(node, self.hierarchy)
            for node in self.hierarchy.iter_nodes()
            if _matches(node, selector)
        ]


def hierarchy_node_info(handle: Any) -> NodeInfo:
    """Accessibility bridge for both hierarchy handle kinds."""
    if isinstance(handle, HierarchyLiveHandle):
        node = handle.node
    elif isinstance(handle, HierarchyReplayHandle):
        node = handle.resolve()
    else:
        raise TypeError(f"Not a hierarchy handle: {type(handle).__name__}")

    hierarchy = handle._hierarchy
    selection = None
    if node.selection_start != NO_SELECTION or node.selection_end != NO_SELECTION:
        selection = (node.selection_start, node.selection_end)
    return NodeInfo(
        class_name=node.class_name or None,
        resource_id=node.resource_id or None,
        text=node.text or None,
        content_desc=node.content_desc or None,
        package_name=node.package_name or None,
        visible=node.visible_to_user and not hierarchy.visible_bounds(node).is_empty(),
        password=node.password,
        scrollable=node.scrollable,
        bounds=node.bounds,
        selection_range=selection,
    )


def build_context(
    hierarchy: UiHierarchy, mapper: PositionMapper | None = None
) -> DeviceContext:
    if mapper is None:
        screen = hierarchy.screen
        mapper = DisplayPositionMapper(screen.width, screen.height)
    return DeviceContext(
        device=HierarchyDevice(hierarchy),
        to_node_info=hierarchy_node_info,
        position_mapper=mapper,
    )
