# product_crawler/delegates/web_scraper_delegate.py
import asyncio
import logging
from playwright.async_api import async_playwright, Playwright, BrowserContext, Page
from typing import Dict, List, Optional, Tuple

from ..extraction import PageAgent, PageDocument

logger = logging.getLogger(__name__)

CAPTURE_BINDING = "crawlerCapture"

# Injected into the page for live capture. Hovered elements get a blue outline;
# the first click is swallowed and reported back as a list of element-child
# indices from <html> down to the clicked element.
CAPTURE_SCRIPT = """
() => {
  const outlines = new WeakMap();
  const over = (e) => {
    outlines.set(e.target, e.target.style.outline);
    e.target.style.outline = '2px solid #3b82f6';
  };
  const out = (e) => {
    if (outlines.has(e.target)) {
      e.target.style.outline = outlines.get(e.target);
      outlines.delete(e.target);
    }
  };
  const pathOf = (el) => {
    const path = [];
    while (el && el !== document.documentElement && el.parentElement) {
      path.unshift(Array.prototype.indexOf.call(el.parentElement.children, el));
      el = el.parentElement;
    }
    return path;
  };
  const click = (e) => {
    e.preventDefault();
    e.stopPropagation();
    document.removeEventListener('mouseover', over);
    document.removeEventListener('mouseout', out);
    document.removeEventListener('click', click, true);
    out(e);
    window.%s(pathOf(e.target));
  };
  document.addEventListener('mouseover', over);
  document.addEventListener('mouseout', out);
  document.addEventListener('click', click, true);
}
""" % CAPTURE_BINDING

class WebScraperDelegate:
    """Loads pages in a Playwright browser and runs live selector capture."""
    def __init__(self, user_agent: str, viewport: Dict, headless: bool = True):
        self.user_agent = user_agent
        self.viewport = viewport
        self.headless = headless
        self._playwright: Optional[Playwright] = None
        self._browser = None
        self._context: Optional[BrowserContext] = None

    async def __aenter__(self):
        logger.debug("Starting Playwright and launching browser (headless=%s)...", self.headless)
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self.headless)
        self._context = await self._browser.new_context(
            user_agent=self.user_agent,
            viewport=self.viewport,
        )
        logger.debug("Playwright browser launched and context created.")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        logger.debug("Closing browser, context, and stopping Playwright...")
        if self._context:
            await self._context.close()
        if self._browser:
            await self._browser.close()
        if self._playwright:
            await self._playwright.stop()
        logger.debug("Playwright resources released.")

    async def _open(self, url: str, timeout: int) -> Page:
        page = await self._context.new_page()
        logger.info("Navigating to: %s", url)
        try:
            await page.goto(url, wait_until="domcontentloaded", timeout=timeout)
        except Exception:
            await page.close()
            raise
        try:
            await page.wait_for_load_state("networkidle", timeout=timeout)
        except Exception as e:
            # Pages with long-polling never go idle; the DOM is usable anyway.
            logger.debug("Network idle state not reached for %s: %s", url, e)
        return page

    async def get_page(self, url: str, timeout: int) -> Optional[Tuple[str, str, Optional[str]]]:
        """
        Navigates to the URL and returns (rendered html, final url, title),
        or None if the page could not be loaded.
        """
        if not self._context:
            logger.error("Browser context not initialized. Cannot fetch page HTML.")
            return None

        page = None
        try:
            page = await self._open(url, timeout)
            html_content = await page.content()
            title = await page.title()
            logger.info("Successfully fetched page HTML content for %s.", url)
            return html_content, page.url, title
        except Exception as e:
            logger.error("Failed to load page HTML from %s: %s", url, e)
            return None
        finally:
            if page:
                await page.close()

    async def capture_selector(self, url: str, field: str, timeout: int, capture_timeout: int) -> Optional[str]:
        """
        Opens the page, waits for the operator to click the element holding
        `field` and returns the selector synthesized for it.
        """
        if not self._context:
            logger.error("Browser context not initialized. Cannot start capture.")
            return None

        loop = asyncio.get_running_loop()
        captured: asyncio.Future = loop.create_future()

        async def _on_capture(source, path: List[int]):
            if captured.done():
                return
            try:
                # Snapshot the DOM as it is at click time.
                document = PageDocument.from_html(await source["page"].content(), url=source["page"].url)
                agent = PageAgent(document)
                agent.capture.subscribe(lambda event: logger.info("Selector captured: %s", event))
                agent.handle_message({"type": "start-element-selection", "field": field})
                node = document.node_at_path(path)
                if node is None:
                    logger.warning("Clicked element path %s not found in the page snapshot.", path)
                    captured.set_result(None)
                    return
                captured.set_result(agent.capture.click(node))
            except Exception as e:
                logger.error("Failed to capture selector for %s: %s", field, e, exc_info=True)
                captured.set_result(None)

        page = None
        try:
            page = await self._open(url, timeout)
            await page.expose_binding(CAPTURE_BINDING, _on_capture)
            await page.evaluate(CAPTURE_SCRIPT)
            logger.info("Click the element holding '%s' in the browser window...", field)
            return await asyncio.wait_for(captured, timeout=capture_timeout / 1000)
        except asyncio.TimeoutError:
            logger.warning("No element clicked for %s within %d seconds.", field, capture_timeout // 1000)
            return None
        except Exception as e:
            logger.error("Live capture failed on %s: %s", url, e)
            return None
        finally:
            if page:
                await page.close()
