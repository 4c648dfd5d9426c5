# product_crawler/extraction/selector_synthesizer.py
"""
Builds a CSS selector for a node the operator clicked.

Cheap, stable selectors (ids, semantic classes, data attributes) are tried
first and kept only if they match exactly one node in the document. The
positional path at the end is returned without a uniqueness check so that a
selector is always produced.
"""
import logging
import re
from typing import List, Optional

from lxml.cssselect import SelectorError

from .document import PageDocument, is_element
from .overlay import MARKER_ATTRIBUTE_PREFIX

logger = logging.getLogger(__name__)

# How many levels (the node itself included) the positional path covers.
POSITIONAL_PATH_DEPTH = 3

# Class tokens that describe presentation rather than meaning. Ordered
# (name, pattern) pairs; a token matching any pattern is skipped.
UTILITY_CLASS_RULES = (
    ("framework-prefix", re.compile(r"^(?:js|react|ng|vue|svelte)-")),
    ("state-variant", re.compile(r"^[a-z0-9-]+:")),
    ("spacing", re.compile(r"^-?(?:p|px|py|pt|pr|pb|pl|ps|pe|m|mx|my|mt|mr|mb|ml|ms|me|gap|space)-")),
    ("layout", re.compile(
        r"^(?:flex|grid|block|inline|inline-block|inline-flex|hidden|visible|invisible|contents|"
        r"absolute|relative|fixed|sticky|static|overflow|items|justify|self|place|float|clear|inset|z)(?:-|$)"
    )),
    ("sizing", re.compile(r"^(?:w|h|min-w|min-h|max-w|max-h|size|basis)-")),
    ("typography", re.compile(
        r"^(?:text|font|leading|tracking|truncate|whitespace|break|hyphens|italic|not-italic|underline|"
        r"line-through|no-underline|uppercase|lowercase|capitalize|normal-case|antialiased)(?:-|$)"
    )),
    ("colour", re.compile(r"^(?:bg|border|rounded|ring|outline|from|via|to|fill|stroke|divide|decoration)(?:-|$)")),
    ("palette", re.compile(
        r"^(?:black|white|gray|grey|red|green|blue|yellow|purple|pink|indigo|teal|orange|amber|emerald|"
        r"cyan|sky|violet|fuchsia|rose|lime|slate|zinc|neutral|stone)(?:-\d+)?$"
    )),
    ("effects", re.compile(
        r"^(?:shadow|opacity|transition|duration|ease|delay|animate|transform|scale|rotate|translate|"
        r"skew|cursor|hover|focus|active|sr-only|not-sr-only)(?:-|$)"
    )),
    ("css-in-js", re.compile(r"^(?:css|sc|jsx|emotion)-[A-Za-z0-9]+$")),
    ("hashed", re.compile(r"^(?=[A-Za-z0-9]*\d)(?=[A-Za-z0-9]*[A-Z])(?=[A-Za-z0-9]*[a-z])[A-Za-z0-9]{16,}$")),
)


def utility_rule_for(token: str) -> Optional[str]:
    """Name of the first utility rule the class token matches, or None."""
    for name, pattern in UTILITY_CLASS_RULES:
        if pattern.search(token):
            return name
    return None


def is_utility_class(token: str) -> bool:
    return utility_rule_for(token) is not None


def meaningful_classes(node) -> List[str]:
    """Class tokens of the node in DOM order, utility tokens removed."""
    return [token for token in (node.get("class") or "").split() if not is_utility_class(token)]


def css_escape(ident: str) -> str:
    """Escapes an identifier for use in a selector, following CSS.escape()."""
    out = []
    for index, char in enumerate(ident):
        code = ord(char)
        if code == 0:
            out.append("\ufffd")
        elif 0x01 <= code <= 0x1F or code == 0x7F \
                or (index == 0 and char.isdigit() and code < 0x80) \
                or (index == 1 and char.isdigit() and code < 0x80 and ident[0] == "-"):
            out.append(f"\\{code:x} ")
        elif index == 0 and char == "-" and len(ident) == 1:
            out.append("\\-")
        elif code >= 0x80 or char in "-_" or (char.isascii() and char.isalnum()):
            out.append(char)
        else:
            out.append("\\" + char)
    return "".join(out)


def css_string(value: str) -> str:
    """Quotes an attribute value."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\a ")
    return f'"{escaped}"'


def _tag(node) -> str:
    return node.tag.lower()


def _is_unique(document: PageDocument, selector: str) -> bool:
    try:
        return document.count(selector) == 1
    except SelectorError as e:
        logger.debug("Candidate selector %r rejected by the CSS parser: %s", selector, e)
        return False


def _same_tag_position(node) -> int:
    """1-based position of the node among its preceding siblings with the same tag."""
    position = 1
    sibling = node.getprevious()
    while sibling is not None:
        if sibling.tag == node.tag:
            position += 1
        sibling = sibling.getprevious()
    return position


def positional_path(node, depth: int = POSITIONAL_PATH_DEPTH) -> str:
    """tag.classes:nth-of-type(n) segments for the node and its ancestors, outermost first."""
    segments = []
    current = node
    level = 0
    while is_element(current) and level < depth:
        segment = _tag(current) + "".join("." + css_escape(c) for c in meaningful_classes(current))
        segment += f":nth-of-type({_same_tag_position(current)})"
        segments.insert(0, segment)
        current = current.getparent()
        level += 1
    return " ".join(segments)


def synthesize_selector(document: PageDocument, node) -> str:
    """
    Returns a selector for the node, trying in order: id, single semantic class,
    data attribute, all semantic classes, role, then the positional path.
    """
    if not is_element(node):
        return ""

    tag = _tag(node)
    node_id = (node.get("id") or "").strip()
    if node_id:
        return f"#{css_escape(node_id)}"

    classes = meaningful_classes(node)
    if classes:
        # Only the first semantic token is tried on its own.
        selector = f"{tag}.{css_escape(classes[0])}"
        if _is_unique(document, selector):
            logger.debug("Unique single-class selector: %s", selector)
            return selector

    for name, value in node.attrib.items():
        if not name.startswith("data-") or name.startswith(MARKER_ATTRIBUTE_PREFIX):
            continue
        selector = f"{tag}[{css_escape(name)}={css_string(value)}]"
        if _is_unique(document, selector):
            logger.debug("Unique data-attribute selector: %s", selector)
            return selector

    if classes:
        selector = tag + "".join("." + css_escape(c) for c in classes)
        if _is_unique(document, selector):
            logger.debug("Unique class-combination selector: %s", selector)
            return selector

    role = node.get("role")
    if role:
        selector = f"{tag}[role={css_string(role)}]"
        if _is_unique(document, selector):
            logger.debug("Unique role selector: %s", selector)
            return selector

    selector = positional_path(node)
    logger.debug("Falling back to positional path: %s", selector)
    return selector
