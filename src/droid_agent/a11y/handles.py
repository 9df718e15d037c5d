"""Native handle protocols and the collaborators elements depend on."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, Sequence, Union, runtime_checkable

from droid_agent.a11y.geometry import Bounds, Point
from droid_agent.a11y.node_info import NodeInfo
from droid_agent.a11y.selector import (
    LiveSelector,
    ReplaySelector,
    to_live_selector,
    to_replay_selector,
)


@runtime_checkable
class LiveHandle(Protocol):
    """Always-fresh view of one node. Cannot run replay-kind searches."""

    def get_text(self) -> Optional[str]: ...
    def get_content_description(self) -> Optional[str]: ...
    def get_class_name(self) -> Optional[str]: ...
    def get_resource_name(self) -> Optional[str]: ...
    def is_enabled(self) -> bool: ...
    def is_checkable(self) -> bool: ...
    def is_checked(self) -> bool: ...
    def is_clickable(self) -> bool: ...
    def is_focusable(self) -> bool: ...
    def is_focused(self) -> bool: ...
    def is_long_clickable(self) -> bool: ...
    def is_scrollable(self) -> bool: ...
    def is_selected(self) -> bool: ...
    def get_visible_bounds(self) -> Bounds: ...
    def get_visible_center(self) -> Point: ...
    def clear(self) -> None: ...
    def find_object(self, selector: LiveSelector) -> Optional[LiveHandle]: ...
    def find_objects(self, selector: LiveSelector) -> Sequence[LiveHandle]: ...
    def drag(self, dest: Point, steps: int) -> None: ...


@runtime_checkable
class ReplayHandle(Protocol):
    """A selector replayed against the current tree on every call."""

    def get_text(self) -> Optional[str]: ...
    def get_content_description(self) -> Optional[str]: ...
    def get_class_name(self) -> Optional[str]: ...
    def is_enabled(self) -> bool: ...
    def is_checkable(self) -> bool: ...
    def is_checked(self) -> bool: ...
    def is_clickable(self) -> bool: ...
    def is_focusable(self) -> bool: ...
    def is_focused(self) -> bool: ...
    def is_long_clickable(self) -> bool: ...
    def is_scrollable(self) -> bool: ...
    def is_selected(self) -> bool: ...
    def get_bounds(self) -> Bounds: ...
    def exists(self) -> bool: ...
    def get_child(self, selector: ReplaySelector) -> Optional[ReplayHandle]: ...
    def clear_text_field(self) -> None: ...
    def drag_to(self, dest: Point, steps: int) -> None: ...


NativeHandle = Union[LiveHandle, ReplayHandle]


class Device(Protocol):
    """Process-wide top-level search."""

    def find_object(
        self, selector: Union[LiveSelector, ReplaySelector]
    ) -> Optional[NativeHandle]: ...


class PositionMapper(Protocol):
    def to_device_absolute(self, point: Point) -> Point: ...


@dataclass
class DeviceContext:
    """Collaborators shared by every element located on one device.

    Passed explicitly so tests can substitute any of them.
    """

    device: Device
    to_node_info: Callable[[Any], NodeInfo]
    position_mapper: PositionMapper
    to_replay_selector: Callable[[NodeInfo], ReplaySelector] = to_replay_selector
    to_live_selector: Callable[[NodeInfo], LiveSelector] = to_live_selector
