"""Element contract and its two native-handle variants."""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Mapping, Optional, Union

from droid_agent.a11y.attributes import (
    LIVE_VIEW_STRATEGIES,
    REPLAY_STRATEGIES,
    AttributeKind,
    parse_attribute,
    serialize_value,
)
from droid_agent.a11y.geometry import Bounds, Point
from droid_agent.a11y.handles import DeviceContext, LiveHandle, ReplayHandle
from droid_agent.a11y.node_info import NodeInfo
from droid_agent.a11y.selector import By, LiveSelector, ReplaySelector
from droid_agent.core.errors import ElementNotFoundError, UnsupportedDragTargetError

logger = logging.getLogger(__name__)

Selector = Union[LiveSelector, ReplaySelector]


class AndroidElement(ABC):
    """A located UI element, whatever native handle backs it.

    The handle belongs to this element alone and is only good for the
    locate-and-act cycle that produced it.
    """

    _attribute_strategies: ClassVar[Mapping[AttributeKind, Callable[[Any], Any]]]

    def __init__(
        self,
        context: DeviceContext,
        is_single_match: bool,
        by: By,
        context_id: str | None = None,
    ):
        self.context = context
        self.is_single_match = is_single_match
        self.by = by
        self.context_id = context_id
        self.element_id = str(uuid.uuid4())

    @property
    @abstractmethod
    def handle(self) -> Any: ...

    def node_info(self) -> NodeInfo:
        """Fresh snapshot through the accessibility bridge. Never cached."""
        return self.context.to_node_info(self.handle)

    def get_attribute(self, name: str) -> Optional[str]:
        kind = parse_attribute(name)
        value = self._attribute_strategies[kind](self)
        return serialize_value(value)

    @abstractmethod
    def get_name(self) -> Optional[str]: ...

    @abstractmethod
    def get_content_desc(self) -> Optional[str]: ...

    @abstractmethod
    def bounds(self) -> Bounds: ...

    @abstractmethod
    def center(self) -> Point:
        """Where a drag aimed at this element lands."""

    @abstractmethod
    def clear(self) -> None: ...

    @abstractmethod
    def get_child(self, selector: Selector) -> Optional[AndroidElement]: ...

    @abstractmethod
    def get_children(self, selector: Selector, by: By) -> list[AndroidElement]: ...

    @abstractmethod
    def _drag(self, dest: Point, steps: int) -> None: ...

    def drag_to(self, target: object, steps: int) -> bool:
        """Drag this element onto *target*'s centre.

        Returns False without touching the device when *target* is not a
        located element.
        """
        try:
            dest = drag_destination(target)
        except UnsupportedDragTargetError as exc:
            logger.error("%s", exc)
            return False
        self._drag(dest, steps)
        return True

    def drag_to_coordinates(self, x: float, y: float, steps: int) -> bool:
        """Drag to a reported-space point; the drop outcome is not verified."""
        dest = self.context.position_mapper.to_device_absolute(Point(x, y))
        self._drag(dest.truncated(), steps)
        return True

    def _resolver(self):
        from droid_agent.a11y.resolver import CrossVariantResolver
        return CrossVariantResolver(self.context)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(id={self.element_id[:8]}, by={self.by.describe()!r}, "
            f"single={self.is_single_match})"
        )


def drag_destination(target: object) -> Point:
    """Centre point of a drag destination; only located elements have one."""
    if isinstance(target, (LiveViewElement, ReplayElement)):
        return target.center()
    raise UnsupportedDragTargetError(type(target).__name__)


class LiveViewElement(AndroidElement):
    """Element backed by a live-view handle."""

    _attribute_strategies = LIVE_VIEW_STRATEGIES

    def __init__(
        self,
        handle: LiveHandle,
        context: DeviceContext,
        is_single_match: bool,
        by: By,
        context_id: str | None = None,
    ):
        super().__init__(context, is_single_match, by, context_id)
        self._handle = handle

    @property
    def handle(self) -> LiveHandle:
        return self._handle

    def get_name(self) -> Optional[str]:
        return self._handle.get_content_description()

    def get_content_desc(self) -> Optional[str]:
        return self._handle.get_content_description()

    def bounds(self) -> Bounds:
        return self._handle.get_visible_bounds()

    def center(self) -> Point:
        return self._handle.get_visible_center()

    def clear(self) -> None:
        self._handle.clear()

    def get_child(self, selector: Selector) -> Optional[AndroidElement]:
        if isinstance(selector, ReplaySelector):
            # The live search API cannot take a replay selector
            return self._resolver().find_child(self, selector)
        found = self._handle.find_object(selector)
        if found is None:
            return None
        return LiveViewElement(found, self.context, True, self.by, self.context_id)

    def get_children(self, selector: Selector, by: By) -> list[AndroidElement]:
        if isinstance(selector, ReplaySelector):
            return self._resolver().find_children(self, selector, by)
        return [
            LiveViewElement(h, self.context, False, by, self.context_id)
            for h in self._handle.find_objects(selector)
        ]

    def _drag(self, dest: Point, steps: int) -> None:
        self._handle.drag(dest, steps)


class ReplayElement(AndroidElement):
    """Element backed by a selector-replay handle."""

    _attribute_strategies = REPLAY_STRATEGIES

    def __init__(
        self,
        handle: ReplayHandle,
        context: DeviceContext,
        is_single_match: bool,
        by: By,
        context_id: str | None = None,
    ):
        super().__init__(context, is_single_match, by, context_id)
        self._handle = handle

    @property
    def handle(self) -> ReplayHandle:
        return self._handle

    def get_name(self) -> Optional[str]:
        return self._handle.get_content_description()

    def get_content_desc(self) -> Optional[str]:
        return self._handle.get_content_description()

    def bounds(self) -> Bounds:
        return self._handle.get_bounds()

    def center(self) -> Point:
        return self._handle.get_bounds().center()

    def clear(self) -> None:
        self._handle.clear_text_field()

    def get_child(self, selector: Selector) -> Optional[AndroidElement]:
        if isinstance(selector, LiveSelector):
            return self._resolver().find_child(self, selector)
        child = self._handle.get_child(selector)
        if child is None or not child.exists():
            return None
        return ReplayElement(child, self.context, True, self.by, self.context_id)

    def get_children(self, selector: Selector, by: By) -> list[AndroidElement]:
        if isinstance(selector, LiveSelector):
            return self._resolver().find_children(self, selector, by)
        if selector.instance is not None:
            child = self._handle.get_child(selector)
            if child is None or not child.exists():
                return []
            return [ReplayElement(child, self.context, False, by, self.context_id)]
        # Replay handles only expose one child per query; walk the instances
        found: list[AndroidElement] = []
        instance = 0
        while True:
            child = self._handle.get_child(selector.with_instance(instance))
            if child is None or not child.exists():
                break
            found.append(ReplayElement(child, self.context, False, by, self.context_id))
            instance += 1
        return found

    def _drag(self, dest: Point, steps: int) -> None:
        self._handle.drag_to(dest, steps)


def locate(
    context: DeviceContext,
    selector: Selector,
    by: By | None = None,
    context_id: str | None = None,
) -> AndroidElement:
    """Top-level search; the selector kind decides the element variant."""
    if by is None:
        strategy = "-android uiautomator" if isinstance(selector, ReplaySelector) else "selector"
        by = By(strategy=strategy, value=selector.describe())
    handle = context.device.find_object(selector)
    if handle is None:
        raise ElementNotFoundError(selector.describe())
    if isinstance(selector, ReplaySelector):
        return ReplayElement(handle, context, True, by, context_id)
    return LiveViewElement(handle, context, True, by, context_id)
