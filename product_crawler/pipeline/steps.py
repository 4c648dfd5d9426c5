# product_crawler/pipeline/steps.py
import logging
from typing import Dict, Optional, Union
from rich.pretty import pprint

from .. import config
from ..delegates import DownloaderDelegate, FileManagerDelegate, WebScraperDelegate
from ..extraction import PageDocument, crawl_page_data
from ..models import ExtractionRecord, PageSnapshot

logger = logging.getLogger(__name__)

PageLoader = Union[WebScraperDelegate, DownloaderDelegate]

async def step_capture_selector(url: str, field: str, web_scraper: WebScraperDelegate, file_manager: FileManagerDelegate) -> Optional[str]:
    """
    Live capture: the operator clicks the element for `field` on `url`; the
    synthesized selector is stored under 'selector_<field>'.
    """
    logger.info("--- CAPTURE: SELECTING ELEMENT FOR '%s' ---", field)
    selector = await web_scraper.capture_selector(url, field, config.REQUEST_TIMEOUT, config.CAPTURE_TIMEOUT)
    if not selector:
        logger.error("No selector captured for %s on %s.", field, url)
        return None

    file_manager.store_selector(field, selector)
    logger.info("--- CAPTURE COMPLETE: %s -> %s ---", field, selector)
    return selector


async def step_1_capture_snapshot(url: str, loader: PageLoader, file_manager: FileManagerDelegate) -> Optional[PageSnapshot]:
    """
    Step 1: Loads the page and saves its HTML as a snapshot.
    Returns the snapshot, or None if the page could not be loaded.
    """
    logger.info("--- STEP 1: LOADING PAGE AND SAVING SNAPSHOT ---")
    loaded = await loader.get_page(url, config.REQUEST_TIMEOUT)
    if not loaded:
        logger.error("Failed to retrieve HTML content for %s.", url)
        return None

    html_content, final_url, title = loaded
    if not html_content:
        logger.error("Empty HTML content retrieved for %s.", url)
        return None
    logger.debug("HTML content retrieved (first 200 chars): %s", html_content[:200])

    snapshot = file_manager.save_snapshot(html_content, url, final_url, title or "")
    logger.info("--- STEP 1 COMPLETE ---")
    return snapshot


def step_2_crawl_snapshot(snapshot: PageSnapshot, selectors: Dict[str, str], file_manager: FileManagerDelegate) -> Optional[ExtractionRecord]:
    """
    Step 2: Runs the extraction core on a saved snapshot with the selector map
    and saves the resulting record.
    """
    logger.info("--- STEP 2: CRAWLING SNAPSHOT OF %s ---", snapshot.url)
    valid_selectors = {field: selector for field, selector in selectors.items() if selector and selector.strip()}
    if not valid_selectors:
        logger.error("No selectors captured. Capture at least one selector before crawling.")
        return None

    html_content = file_manager.load_snapshot_html(snapshot)
    if html_content is None:
        return None

    document = PageDocument.from_html(html_content, url=snapshot.final_url or snapshot.url, title=snapshot.title or None)
    record = crawl_page_data(document, selectors)

    missing = [field for field, value in record.fields.items() if value is None]
    if missing:
        logger.warning("Fields without a value: %s", missing)
    logger.debug("Crawled record:")
    pprint(record.to_dict(), max_length=20, max_string=100)

    file_manager.save_record(record)
    logger.info("--- STEP 2 COMPLETE ---")
    return record
