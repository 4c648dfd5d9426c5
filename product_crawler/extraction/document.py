# product_crawler/extraction/document.py
import logging
import re
from typing import Iterable, List, Optional, Union
from urllib.parse import urljoin, urlparse

import lxml.html
from lxml import etree
from lxml.cssselect import CSSSelector, SelectorError

logger = logging.getLogger(__name__)

# Subtrees a browser never renders as text.
SKIPPED_TEXT_TAGS = {"script", "style", "noscript", "template"}
# Elements that start a new line in rendered text.
BLOCK_TAGS = {
    "address", "article", "aside", "blockquote", "dd", "details", "div", "dl", "dt",
    "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4", "h5",
    "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre", "section", "summary",
    "table", "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
}

EMPTY_DOCUMENT = "<html><head></head><body></body></html>"


def is_element(node) -> bool:
    """Comments and processing instructions carry a non-string tag in lxml."""
    return node is not None and isinstance(node.tag, str)


def element_children(node) -> List:
    return [child for child in node if is_element(child)]


class PageDocument:
    """A parsed page: the lxml root plus the URL and title it was loaded from."""

    def __init__(self, root, url: str = "", title: Optional[str] = None):
        self.root = root
        self.url = url or ""
        if title is None:
            title = (root.findtext(".//title") or "").strip()
        self.title = title
        self._compiled = {}

    @classmethod
    def from_html(cls, html: Union[str, bytes], url: str = "", title: Optional[str] = None) -> "PageDocument":
        """Parses raw markup into a document. Markup without elements yields an empty <html> tree."""
        if not html or not html.strip():
            logger.debug("Empty HTML handed in for %s, using an empty document.", url or "<no url>")
            html = EMPTY_DOCUMENT
        try:
            root = lxml.html.document_fromstring(html)
        except etree.ParserError as e:
            # Comment-only or whitespace-and-comment markup has no root element.
            logger.debug("No elements in HTML for %s (%s), using an empty document.", url or "<no url>", e)
            root = lxml.html.document_fromstring(EMPTY_DOCUMENT)
        return cls(root, url=url, title=title)

    @property
    def origin(self) -> str:
        parsed = urlparse(self.url)
        if not parsed.scheme or not parsed.netloc:
            return ""
        return f"{parsed.scheme}://{parsed.netloc}"

    @property
    def body(self):
        body = self.root.find(".//body")
        return body if body is not None else self.root

    def resolve_url(self, value: str) -> str:
        """Resolves a possibly relative URL the way a DOM URL property would."""
        return urljoin(self.url, value) if self.url else value

    def _selector(self, selector: str) -> CSSSelector:
        compiled = self._compiled.get(selector)
        if compiled is None:
            # Raises cssselect.SelectorError for malformed or unsupported selectors.
            try:
                compiled = CSSSelector(selector, translator="html")
            except ValueError as e:
                # Escapes that decode to control characters yield an XPath lxml refuses.
                raise SelectorError(f"Selector {selector!r} has no valid XPath form: {e}") from e
            self._compiled[selector] = compiled
        return compiled

    def query_all(self, selector: str) -> List:
        return self._selector(selector)(self.root)

    def query(self, selector: str):
        matches = self.query_all(selector)
        return matches[0] if matches else None

    def count(self, selector: str) -> int:
        return len(self.query_all(selector))

    def iter_elements(self, tag: Optional[str] = None) -> Iterable:
        return (el for el in self.root.iter(tag or etree.Element) if is_element(el))

    def node_at_path(self, indices: List[int]):
        """
        Resolves a list of element-child indices, starting below the root <html>
        element. Returns None when the path does not exist in this tree.
        """
        node = self.root
        for index in indices:
            children = element_children(node)
            if index < 0 or index >= len(children):
                logger.debug("Element path %s breaks at index %s.", indices, index)
                return None
            node = children[index]
        return node

    @staticmethod
    def raw_text(node) -> str:
        return node.text_content() or ""

    @staticmethod
    def rendered_text(node) -> str:
        """
        Approximates innerText: hidden text containers are skipped and block
        elements are put on their own lines.
        """
        parts: List[str] = []
        _collect_rendered_text(node, parts)
        text = "".join(parts)
        return re.sub(r"[ \t]*\n\s*", "\n", text).strip()


def _collect_rendered_text(node, parts: List[str]):
    tag = node.tag.lower()
    is_block = tag in BLOCK_TAGS
    if is_block:
        parts.append("\n")
    if tag == "br":
        parts.append("\n")
    if node.text:
        parts.append(node.text)
    for child in node:
        if is_element(child) and child.tag.lower() not in SKIPPED_TEXT_TAGS:
            _collect_rendered_text(child, parts)
        if child.tail:
            parts.append(child.tail)
    if is_block:
        parts.append("\n")
