# product_crawler/extraction/capture.py
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .overlay import Overlay
from .selector_synthesizer import synthesize_selector

logger = logging.getLogger(__name__)

SELECTOR_CAPTURED = "selector-captured"


class Subscription:
    """Handle for a registered listener. release() is idempotent."""

    def __init__(self, release_fn: Callable[[], None]):
        self._release_fn = release_fn
        self.active = True

    def release(self):
        if not self.active:
            return
        self.active = False
        self._release_fn()


class ListenerRegistry:
    """Event name -> handlers, with explicit subscription handles."""

    def __init__(self):
        self._handlers: Dict[str, List[Callable]] = {}

    def listen(self, event: str, handler: Callable) -> Subscription:
        self._handlers.setdefault(event, []).append(handler)

        def _remove():
            handlers = self._handlers.get(event, [])
            if handler in handlers:
                handlers.remove(handler)

        return Subscription(_remove)

    def dispatch(self, event: str, *args) -> List[Any]:
        return [handler(*args) for handler in list(self._handlers.get(event, []))]

    def count(self, event: str) -> int:
        return len(self._handlers.get(event, []))

    def clear(self):
        self._handlers.clear()


@dataclass
class CaptureSession:
    """State between 'start capture for field X' and the completing click."""
    field: str
    active: bool = True
    handles: List[Subscription] = field(default_factory=list)


@dataclass
class Selection:
    node: Any
    selector: str


class CaptureController:
    """
    Interactive capture on one document. Click and hover events are delivered
    through click()/hover()/unhover(); they only have an effect while a
    session registered its listeners.
    """

    def __init__(self, document, overlay: Optional[Overlay] = None):
        self.document = document
        self.overlay = overlay or Overlay(document)
        self.session: Optional[CaptureSession] = None
        self._selected: Dict[str, Selection] = {}
        self._page_listeners = ListenerRegistry()
        self._subscribers = ListenerRegistry()

    @property
    def selections(self) -> Dict[str, str]:
        return {name: selection.selector for name, selection in self._selected.items()}

    def selected_node(self, field_name: str):
        selection = self._selected.get(field_name)
        return selection.node if selection else None

    def listener_count(self) -> int:
        return sum(self._page_listeners.count(event) for event in ("click", "mouseover", "mouseout"))

    def subscribe(self, callback: Callable[[Dict[str, str]], None]) -> Subscription:
        """Registers a callback for 'selector captured' events ({field, selector})."""
        return self._subscribers.listen(SELECTOR_CAPTURED, callback)

    def start_capture(self, field_name: str) -> Dict[str, Any]:
        # A previous session must not leave a second click handler behind.
        self._end_session()
        self.overlay.clear_hover()

        session = CaptureSession(field=field_name)
        session.handles = [
            self._page_listeners.listen("click", self._on_click),
            self._page_listeners.listen("mouseover", self._on_hover),
            self._page_listeners.listen("mouseout", self._on_unhover),
        ]
        self.session = session
        logger.info("Started selection for field: %s", field_name)
        return {"success": True, "field": field_name}

    def click(self, node) -> Optional[str]:
        results = self._page_listeners.dispatch("click", node)
        if not results:
            logger.debug("Click ignored, no capture session is active.")
            return None
        return results[0]

    def hover(self, node):
        self._page_listeners.dispatch("mouseover", node)

    def unhover(self, node):
        self._page_listeners.dispatch("mouseout", node)

    def _on_click(self, node) -> Optional[str]:
        session = self.session
        if session is None or not session.active:
            return None
        field_name = session.field
        self.overlay.clear_hover()
        selector = synthesize_selector(self.document, node)
        logger.info("Captured selector %s for field %s", selector, field_name)

        previous = self._selected.get(field_name)
        if previous is not None and previous.node is not node:
            self.overlay.unmark_selected(previous.node)
        self._selected[field_name] = Selection(node=node, selector=selector)
        self.overlay.mark_selected(node, field_name)

        self._end_session()
        self._subscribers.dispatch(SELECTOR_CAPTURED, {"field": field_name, "selector": selector})
        return selector

    def _on_hover(self, node):
        if self.session is None:
            return
        current = self._selected.get(self.session.field)
        if current is not None and current.node is node:
            return
        self.overlay.mark_hover(node)

    def _on_unhover(self, node):
        self.overlay.unmark_hover(node)

    def _end_session(self):
        if self.session is None:
            return
        for handle in self.session.handles:
            handle.release()
        self.session.active = False
        self.session = None

    def cancel(self):
        """Ends the current session without capturing. Safe when no session is active."""
        self._end_session()
        self.overlay.clear_hover()

    def clear_captures(self):
        self.cancel()
        self._selected.clear()
        self.overlay.clear()
        logger.info("Cleared all selections")

    def close(self):
        """Tears everything down when the page goes away."""
        self.clear_captures()
        self._subscribers.clear()
