# product_crawler/extraction/page_agent.py
import logging
from typing import Dict, Optional

from ..models import ATTRIBUTE_SECTIONS, ExtractionRecord
from .capture import CaptureController
from .document import PageDocument
from .field_extractor import extract, resolve_sku
from .locator import locate
from .spec_parser import parse_spec_block

logger = logging.getLogger(__name__)


def _extract_field(document: PageDocument, field: str, selector: Optional[str]) -> Optional[str]:
    if not selector or not selector.strip():
        return None
    try:
        node = locate(document, selector, field)
        if node is None:
            logger.warning("No element found for %s selector: %s", field, selector)
            return None
        value = extract(document, node, field)
        logger.debug("Extracted %s: %r", field, value)
        return value
    except Exception as e:
        logger.error("Error extracting %s: %s", field, e, exc_info=True)
        return None


def crawl_page_data(document: PageDocument, selectors: Dict[str, str]) -> ExtractionRecord:
    """
    Extracts every field of the selector map from the document. A field that
    cannot be located or extracted is recorded as None without affecting the
    others. Attribute sections are parsed into tech_specs / tech_specs_2.
    """
    record = ExtractionRecord(source_url=document.url, page_title=document.title)
    for field, selector in (selectors or {}).items():
        record.fields[field] = _extract_field(document, field, selector)

    record.fields["sku"] = resolve_sku(document, record.fields.get("sku"))

    for section, slot in ATTRIBUTE_SECTIONS.items():
        raw_text = record.fields.pop(section, None)
        if raw_text:
            logger.debug("Raw %s text (%d chars): %s", section, len(raw_text), raw_text)
            setattr(record, slot, parse_spec_block(raw_text))
        elif section in (selectors or {}):
            logger.warning("No %s data found, %s left empty.", section, slot)

    return record


class PageAgent:
    """Answers the start-capture, clear-captures and crawl requests for one loaded page."""

    def __init__(self, document: PageDocument):
        self.document = document
        self.capture = CaptureController(document)

    def handle_message(self, message: Dict) -> Optional[Dict]:
        message_type = (message or {}).get("type")
        logger.debug("Received message: %s", message)

        if message_type == "start-element-selection":
            return self.capture.start_capture(message.get("field"))

        if message_type == "clear-selections":
            self.capture.clear_captures()
            return None

        if message_type == "crawl-current-page":
            logger.info("Crawling %s with selectors: %s", self.document.url, message.get("selectors"))
            record = crawl_page_data(self.document, message.get("selectors") or {})
            return {"data": record.to_dict()}

        logger.warning("Ignoring unknown message type: %s", message_type)
        return None

    def close(self):
        self.capture.close()
