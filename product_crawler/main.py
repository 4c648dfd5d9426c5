# product_crawler/main.py
import logging
from typing import Dict, List, Optional
from . import config
from .delegates import FileManagerDelegate, WebScraperDelegate, DownloaderDelegate
from .models import ExtractionRecord
from .pipeline.steps import step_capture_selector, step_1_capture_snapshot, step_2_crawl_snapshot

logger = logging.getLogger(__name__)

async def capture(field: str, url: str, file_manager: Optional[FileManagerDelegate] = None) -> Optional[str]:
    """Opens a visible browser on the page and stores the selector of the element the operator clicks."""
    file_manager = file_manager or FileManagerDelegate(base_path=config.DATA_PATH)
    async with WebScraperDelegate(user_agent=config.USER_AGENT, viewport=config.VIEWPORT, headless=False) as web_scraper:
        return await step_capture_selector(url, field, web_scraper, file_manager)


async def main(steps_to_run: List[int], url: Optional[str], selectors: Dict[str, str], static: bool = False,
               file_manager: Optional[FileManagerDelegate] = None) -> Optional[ExtractionRecord]:
    """The main orchestrator: snapshot one page, then crawl it with the selector map."""

    file_manager = file_manager or FileManagerDelegate(base_path=config.DATA_PATH)
    snapshot = None

    if 1 in steps_to_run:
        if not url:
            logger.error("Step 1 needs a page URL (--url or a config with urls).")
            return None
        if static:
            async with DownloaderDelegate(user_agent=config.USER_AGENT) as downloader:
                snapshot = await step_1_capture_snapshot(url, downloader, file_manager)
        else:
            async with WebScraperDelegate(user_agent=config.USER_AGENT, viewport=config.VIEWPORT) as web_scraper:
                snapshot = await step_1_capture_snapshot(url, web_scraper, file_manager)
        if snapshot is None:
            logger.error("Step 1 failed to load the page. Cannot proceed to Step 2.")
            return None
    else:
        # If step 1 is skipped, crawl the most recent snapshot (of this URL, when one is given).
        snapshot = file_manager.latest_snapshot(url)
        if snapshot is None:
            logger.error("Cannot run Step 2: no saved snapshot found. Please run Step 1 first (e.g., without --steps 2).")
            return None
        logger.warning("Step 1 skipped. Re-crawling snapshot of %s", snapshot.url)

    record = None
    if 2 in steps_to_run:
        record = step_2_crawl_snapshot(snapshot, selectors, file_manager)
    else:
        logger.info("Step 2 skipped as per --steps argument.")

    logger.info("Main pipeline process finished.")
    return record
