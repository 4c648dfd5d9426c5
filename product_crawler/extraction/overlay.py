# product_crawler/extraction/overlay.py
import logging
from typing import Dict

from lxml import etree

logger = logging.getLogger(__name__)

# Every attribute the overlay writes starts with this prefix, so the selector
# synthesizer can ignore them.
MARKER_ATTRIBUTE_PREFIX = "data-crawler-"
SELECTED_ATTRIBUTE = "data-crawler-selected"
HOVER_ATTRIBUTE = "data-crawler-hover"
OVERLAY_CONTAINER_ID = "crawler-overlay-container"

SELECTED_OUTLINE = "outline: 3px solid #10b981; outline-offset: 2px"
HOVER_OUTLINE = "outline: 2px solid #3b82f6; outline-offset: 2px"


def label_text(field: str) -> str:
    return f"Selected: {field}"


class Overlay:
    """
    Visual marking of captured and hovered nodes. This is the only place that
    writes to the document; it keeps the original inline style of every node
    it touches so the marks can be undone.
    """

    def __init__(self, document):
        self.document = document
        self._container = None
        self._labels: Dict[str, etree._Element] = {}
        self._saved_styles: Dict[int, tuple] = {}

    def _remember_style(self, node):
        key = id(node)
        if key not in self._saved_styles:
            self._saved_styles[key] = (node, node.get("style"))

    def _restore_style(self, node):
        saved = self._saved_styles.pop(id(node), None)
        if saved is None:
            return
        original = saved[1]
        if original is None:
            node.attrib.pop("style", None)
        else:
            node.set("style", original)

    def _ensure_container(self):
        if self._container is None:
            self._container = etree.SubElement(self.document.body, "div")
            self._container.set("id", OVERLAY_CONTAINER_ID)
            self._container.set("style", "position: fixed; top: 0; left: 0; pointer-events: none; z-index: 999999")
            logger.debug("Overlay container attached to the document.")
        return self._container

    def mark_hover(self, node):
        if node.get(SELECTED_ATTRIBUTE) is not None:
            return
        self._remember_style(node)
        node.set("style", HOVER_OUTLINE)
        node.set(HOVER_ATTRIBUTE, "")

    def unmark_hover(self, node):
        # Selected nodes keep their green outline.
        if node.get(HOVER_ATTRIBUTE) is None or node.get(SELECTED_ATTRIBUTE) is not None:
            return
        node.attrib.pop(HOVER_ATTRIBUTE, None)
        self._restore_style(node)

    def clear_hover(self):
        for node in list(self.document.root.iter()):
            if isinstance(node.tag, str) and node.get(HOVER_ATTRIBUTE) is not None:
                self.unmark_hover(node)

    def mark_selected(self, node, field: str):
        node.attrib.pop(HOVER_ATTRIBUTE, None)
        self._remember_style(node)
        node.set("style", SELECTED_OUTLINE)
        node.set(SELECTED_ATTRIBUTE, field)

        previous = self._labels.pop(field, None)
        if previous is not None and previous.getparent() is not None:
            previous.getparent().remove(previous)
        label = etree.SubElement(self._ensure_container(), "div")
        label.text = label_text(field)
        self._labels[field] = label

    def unmark_selected(self, node):
        node.attrib.pop(SELECTED_ATTRIBUTE, None)
        node.attrib.pop(HOVER_ATTRIBUTE, None)
        self._restore_style(node)

    def clear(self):
        """Removes every mark, label and the container. Safe to call repeatedly."""
        for node, _ in list(self._saved_styles.values()):
            node.attrib.pop(SELECTED_ATTRIBUTE, None)
            node.attrib.pop(HOVER_ATTRIBUTE, None)
            self._restore_style(node)
        if self._container is not None and self._container.getparent() is not None:
            self._container.getparent().remove(self._container)
        self._container = None
        self._labels.clear()
