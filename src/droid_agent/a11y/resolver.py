"""Descendant search across handle kinds.

A live-view handle cannot run a replay selector and a replay handle cannot
run a live selector. When an element is asked for children with the other
kind's selector, the resolver re-locates the element's own node through the
device as the other kind, then runs the search there. This costs one extra
top-level search per call.

Failures while re-locating mean "no match": a fallback search that finds
nothing must look like an ordinary search that finds nothing.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from droid_agent.a11y.element import AndroidElement, LiveViewElement, ReplayElement
from droid_agent.a11y.handles import DeviceContext, LiveHandle, ReplayHandle
from droid_agent.a11y.selector import By, LiveSelector, ReplaySelector
from droid_agent.core.errors import NativeOperationError

logger = logging.getLogger(__name__)


class CrossVariantResolver:
    """Answers searches whose selector kind differs from the element's handle kind."""

    def __init__(self, context: DeviceContext):
        self.context = context

    # ------------------------------------------------------------------
    # Single match
    # ------------------------------------------------------------------

    def find_child(
        self, element: AndroidElement, selector: Union[LiveSelector, ReplaySelector]
    ) -> Optional[AndroidElement]:
        if isinstance(element, LiveViewElement) and isinstance(selector, ReplaySelector):
            anchor = self._relocate_as_replay(element.handle)
            if anchor is None:
                return None
            child = anchor.get_child(selector)
            if child is None or not child.exists():
                return None
            return ReplayElement(child, self.context, True, element.by, element.context_id)

        if isinstance(element, ReplayElement) and isinstance(selector, LiveSelector):
            anchor = self._relocate_as_live(element.handle)
            if anchor is None:
                return None
            found = anchor.find_object(selector)
            if found is None:
                return None
            return LiveViewElement(found, self.context, True, element.by, element.context_id)

        # Kinds already agree; nothing to reconcile
        return element.get_child(selector)

    # ------------------------------------------------------------------
    # Multiple matches
    # ------------------------------------------------------------------

    def find_children(
        self,
        element: AndroidElement,
        selector: Union[LiveSelector, ReplaySelector],
        by: By,
    ) -> list[AndroidElement]:
        if isinstance(element, LiveViewElement) and isinstance(selector, ReplaySelector):
            anchor = self._relocate_as_replay(element.handle)
            if anchor is None:
                return []
            proxy = ReplayElement(anchor, self.context, True, by, element.context_id)
            return proxy.get_children(selector, by)

        if isinstance(element, ReplayElement) and isinstance(selector, LiveSelector):
            anchor = self._relocate_as_live(element.handle)
            if anchor is None:
                return []
            proxy = LiveViewElement(anchor, self.context, True, by, element.context_id)
            return proxy.get_children(selector, by)

        return element.get_children(selector, by)

    # ------------------------------------------------------------------
    # Re-location
    # ------------------------------------------------------------------

    def _relocate_as_replay(self, handle: Any) -> Optional[ReplayHandle]:
        found = self._relocate(handle, self.context.to_replay_selector)
        if not isinstance(found, ReplayHandle):
            if found is not None:
                logger.debug("Re-location returned %s, not a replay handle", type(found).__name__)
            return None
        return found

    def _relocate_as_live(self, handle: Any) -> Optional[LiveHandle]:
        found = self._relocate(handle, self.context.to_live_selector)
        if not isinstance(found, LiveHandle):
            if found is not None:
                logger.debug("Re-location returned %s, not a live handle", type(found).__name__)
            return None
        return found

    def _relocate(self, handle: Any, synthesize) -> Any:
        try:
            info = self.context.to_node_info(handle)
            selector = synthesize(info)
            logger.debug("Re-locating node via %s", selector.describe())
            return self.context.device.find_object(selector)
        except NativeOperationError as exc:
            logger.debug("Re-location failed, treating as no match: %s", exc)
            return None
