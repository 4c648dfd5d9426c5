# product_crawler/extraction/field_extractor.py
import logging
import re
from typing import Optional
from urllib.parse import urlparse

from .document import PageDocument, is_element
from .overlay import label_text

logger = logging.getLogger(__name__)

# Tags whose DOM 'src' property resolves the attribute to an absolute URL.
SRC_PROPERTY_TAGS = {"img", "source", "iframe", "embed", "video", "audio", "input", "script", "track"}
# Attributes probed for an image URL, in order. Lazy loaders keep the real URL in data-*.
IMAGE_SOURCE_ATTRIBUTES = ("src", "data-src", "data-original", "data-lazy-src", "data-image", "href")

# SKU patterns, matched against the page URL first and then <meta> values.
SKU_PATTERNS = (
    ("url-sku-id", re.compile(r"sku[_-]?id[=:]\s*([a-zA-Z0-9\-_]+)", re.IGNORECASE)),
    ("url-product-id", re.compile(r"product[_-]?id[=:]\s*([a-zA-Z0-9\-_]+)", re.IGNORECASE)),
    ("url-item-id", re.compile(r"item[_-]?id[=:]\s*([a-zA-Z0-9\-_]+)", re.IGNORECASE)),
    ("json-sku", re.compile(r'"sku":\s*"([^"]+)"', re.IGNORECASE)),
    ("json-product-id", re.compile(r'"productId":\s*"([^"]+)"', re.IGNORECASE)),
    ("json-item-id", re.compile(r'"itemId":\s*"([^"]+)"', re.IGNORECASE)),
    ("attr-data-sku", re.compile(r'data-sku[=:]\s*"([^"]+)"', re.IGNORECASE)),
    ("attr-data-product-id", re.compile(r'data-product-id[=:]\s*"([^"]+)"', re.IGNORECASE)),
    ("attr-data-item-id", re.compile(r'data-item-id[=:]\s*"([^"]+)"', re.IGNORECASE)),
)
SKU_DATA_ATTRIBUTES = ("data-sku", "data-product-id", "data-item-id")


def _absolutize(document: PageDocument, value: str) -> str:
    if value.startswith("//"):
        scheme = urlparse(document.url).scheme or "https"
        return f"{scheme}:{value}"
    if value.startswith("/") and document.origin:
        return document.origin + value
    return value


def _probe_image_source(document: PageDocument, node) -> str:
    src = (node.get("src") or "").strip()
    if src and node.tag.lower() in SRC_PROPERTY_TAGS:
        return document.resolve_url(src)
    for attribute in IMAGE_SOURCE_ATTRIBUTES:
        value = (node.get(attribute) or "").strip()
        if value:
            return _absolutize(document, value)
    return ""


def extract_image(document: PageDocument, node) -> Optional[str]:
    value = _probe_image_source(document, node)
    if not value:
        # Wrappers (links, picture frames) usually hold the image one level down.
        for img in node.iterdescendants("img"):
            value = _probe_image_source(document, img)
            break
    logger.debug("Image extraction result: %s", value)
    return value or None


def extract_text(document: PageDocument, node, field: str) -> str:
    text = document.rendered_text(node) or document.raw_text(node)
    # Drop the capture label in case it ended up inside the node.
    text = re.sub(re.escape(label_text(field)), "", text, flags=re.IGNORECASE)
    return text.strip()


def extract(document: PageDocument, node, field: str) -> Optional[str]:
    """Extracts the value of a field from a located node. Never raises."""
    if not is_element(node):
        return None
    try:
        if field == "image":
            return extract_image(document, node)
        return extract_text(document, node, field)
    except Exception as e:
        logger.error("Error extracting %s from <%s>: %s", field, node.tag, e, exc_info=True)
        return None


def match_sku_patterns(text: str) -> Optional[str]:
    for name, pattern in SKU_PATTERNS:
        match = pattern.search(text or "")
        if match and match.group(1):
            logger.debug("SKU pattern %s matched: %s", name, match.group(1))
            return match.group(1)
    return None


def sku_from_url(url: str) -> Optional[str]:
    return match_sku_patterns(url)


def sku_from_meta(document: PageDocument) -> Optional[str]:
    for meta in document.iter_elements("meta"):
        content = meta.get("content") or meta.get("value") or ""
        sku = match_sku_patterns(content)
        if sku:
            return sku
    return None


def sku_from_data_attributes(document: PageDocument) -> Optional[str]:
    for element in document.query_all(", ".join(f"[{name}]" for name in SKU_DATA_ATTRIBUTES)):
        for name in SKU_DATA_ATTRIBUTES:
            value = element.get(name)
            if value:
                return value
    return None


def auto_detect_sku(document: PageDocument) -> Optional[str]:
    """Looks for a SKU in the page URL, then <meta> tags, then data attributes."""
    sku = sku_from_url(document.url)
    if sku:
        logger.info("Auto-detected SKU from URL: %s", sku)
        return sku
    sku = sku_from_meta(document)
    if sku:
        logger.info("Auto-detected SKU from meta tag: %s", sku)
        return sku
    sku = sku_from_data_attributes(document)
    if sku:
        logger.info("Auto-detected SKU from data attribute: %s", sku)
        return sku
    logger.debug("No SKU auto-detected.")
    return None


def resolve_sku(document: PageDocument, extracted: Optional[str]) -> Optional[str]:
    """A SKU in the URL always wins; otherwise the selector value is kept when it is non-empty."""
    url_sku = sku_from_url(document.url)
    if url_sku:
        if extracted and extracted != url_sku:
            logger.info("Using URL-based SKU %s over extracted value %s", url_sku, extracted)
        return url_sku
    if extracted:
        return extracted
    return auto_detect_sku(document)
