# product_crawler/extraction/__init__.py

# The extraction core: selector synthesis, resilient locating, field extraction and spec parsing.
from .document import PageDocument
from .selector_synthesizer import synthesize_selector
from .locator import locate, FALLBACK_SELECTORS
from .field_extractor import extract, auto_detect_sku, resolve_sku
from .spec_parser import parse_spec_block, SPEC_CATALOGUE
from .capture import CaptureController, Subscription
from .page_agent import PageAgent, crawl_page_data
