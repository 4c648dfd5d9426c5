# product_crawler/delegates/downloader_delegate.py
import logging
import httpx
from typing import Optional, Dict, Tuple

logger = logging.getLogger(__name__)

class DownloaderDelegate:
    """Fetches the static HTML of a product page, without running its scripts."""
    def __init__(self, user_agent: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.user_agent = user_agent
        self.transport = transport # Tests pass an httpx.MockTransport here
        self.client = None # Will be initialized in __aenter__

    async def __aenter__(self):
        self.client = httpx.AsyncClient(headers={"User-Agent": self.user_agent}, transport=self.transport)
        logger.debug("DownloaderDelegate httpx.AsyncClient initialized.")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client:
            await self.client.aclose()
            logger.debug("DownloaderDelegate httpx.AsyncClient closed.")

    async def get_page(self, url: str, timeout: int, headers: Optional[Dict[str, str]] = None) -> Optional[Tuple[str, str, Optional[str]]]:
        """
        Downloads the HTML of a page. Returns (html, final_url, title) or None.
        The title is left to the HTML parser since no browser ran the page.
        """
        if not self.client:
            logger.error("HTTP client not initialized. Cannot download page.")
            return None

        try:
            logger.debug("Attempting to download page from: %s", url)
            response = await self.client.get(url, headers=headers, follow_redirects=True, timeout=timeout / 1000)
            response.raise_for_status()

            content_type = response.headers.get("content-type", "").lower()
            if content_type and "html" not in content_type:
                logger.warning("URL %s returned non-HTML content: %s", url, content_type)
                return None

            logger.info("Successfully downloaded page HTML for %s.", url)
            return response.text, str(response.url), None
        except httpx.HTTPStatusError as e:
            logger.error("HTTP error downloading page from %s: %s - Response: %s", url, e, e.response.text[:200])
        except httpx.RequestError as e:
            logger.error("Network error downloading page from %s: %s", url, e)
        return None
