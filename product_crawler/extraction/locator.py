# product_crawler/extraction/locator.py
import logging
from typing import Dict, Optional, Tuple

from lxml.cssselect import SelectorError

from .document import PageDocument

logger = logging.getLogger(__name__)

# Generic, content-agnostic selectors tried in order when a captured selector
# stops matching. Fields missing from this table fail closed.
FALLBACK_SELECTORS: Dict[str, Tuple[str, ...]] = {
    "price": (
        '[data-testid*="price"]',
        '[class*="price"]',
        '[class*="Price"]',
        'span[class*="price"]',
        'div[class*="price"]',
        '[data-price]',
        '.price',
        '.Price',
        '[class*="cost"]',
        '[class*="Cost"]',
    ),
    "image": (
        'img[src*="product"]',
        'img[src*="image"]',
        'img[data-src*="product"]',
        'img[data-src*="image"]',
        '[class*="product-image"]',
        '[class*="ProductImage"]',
        '[class*="main-image"]',
        '[class*="MainImage"]',
        'img:first-of-type',
        'img',
    ),
    "sku": (
        '[data-sku]',
        '[data-product-id]',
        '[data-item-id]',
        '[class*="sku"][class*="product"]',
        '[class*="SKU"][class*="product"]',
        '[class*="product-id"]',
        '[class*="ProductId"]',
        '[class*="sku-number"]',
        '[class*="SKU-number"]',
        '[class*="sku-id"]',
        '[class*="SKU-id"]',
    ),
}


def _first_match(document: PageDocument, selector: str):
    try:
        return document.query(selector)
    except SelectorError as e:
        logger.warning("Selector %r could not be parsed: %s", selector, e)
        return None


def locate(document: PageDocument, selector: Optional[str], field: str):
    """
    Finds the node for a field: the captured selector first, then the field's
    fallback selectors in order. Returns None when nothing matches.
    """
    if selector and selector.strip():
        node = _first_match(document, selector.strip())
        if node is not None:
            return node
        logger.info("Selector failed for %s: %s", field, selector)

    for fallback in FALLBACK_SELECTORS.get(field, ()):
        node = _first_match(document, fallback)
        if node is not None:
            logger.info("Found %s with fallback selector: %s", field, fallback)
            return node

    logger.debug("No node located for %s.", field)
    return None
