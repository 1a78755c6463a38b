"""
FGAS Directory Scraper

The FGAS register has no public API. Its company directory is a search
widget embedded in iframes that loads results from a background JSON
endpoint (/Activity/401). This module drives the widget with headless
Chromium and reads the results off those background responses.

Flow:
    1. Launch browser, open the directory page
    2. Find the iframe holding the search inputs and the one holding paging
    3. Listen for results responses, feeding them into a ResultAccumulator
    4. Fill the search form and click search
    5. Click "next page" until enough companies are collected or paging ends
    6. Truncate, normalize, close the browser
"""

import asyncio
import logging
import re
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple
from urllib.parse import urlparse

from playwright.async_api import (
    Error as PlaywrightError,
    Frame,
    Locator,
    Page,
    Response,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from ..config import (
    BROWSER_ARGS,
    BROWSER_LAUNCH_TIMEOUT,
    DEFAULT_NUMBER_OF_RECORDS,
    FGAS_CITY_INPUT,
    FGAS_COMPANY_INPUT,
    FGAS_DIRECTORY_URL,
    FGAS_IFRAME_SELECTOR,
    FGAS_NEXT_ICON,
    FGAS_PAGINATION_MARKER,
    FGAS_RESULTS_PATH,
    FGAS_SEARCH_BUTTON,
    IFRAME_TIMEOUT,
    INPUT_TIMEOUT,
    NAVIGATION_TIMEOUT,
    RESULTS_RESPONSE_TIMEOUT,
    SETTLE_AFTER_PAGE,
    SETTLE_AFTER_SEARCH,
    get_proxy_url,
)
from ..exceptions import FrameNotFound, InvalidRequest, ScrapeError
from ..parsers import Source, dedupe_key, normalize

logger = logging.getLogger(__name__)

NEXT_BUTTON_SELECTOR = "button.q-btn:not([disabled]):not(.q-btn--disabled)"
NEXT_ICON_TEXT = re.compile(rf"^\s*{re.escape(FGAS_NEXT_ICON)}\s*$")


def is_results_response(response: Response) -> bool:
    """True for the background GET that carries a page of directory results."""
    return FGAS_RESULTS_PATH in response.url and response.request.method == "GET"


def extract_companies(payload: Any) -> List[Dict]:
    """
    Pull company entries out of a results payload.

    The payload is a JSON object whose values are entries; only mappings
    with a non-empty "Company" are companies.
    """
    if not isinstance(payload, dict):
        return []
    return [
        entry for entry in payload.values()
        if isinstance(entry, dict) and entry.get("Company")
    ]


class ResultAccumulator:
    """Companies collected from intercepted results responses.

    Entries are deduplicated by company name and kept in discovery order.
    Every handled results response (parsed or skipped) bumps `handled` and
    wakes anyone blocked in wait_for_response().
    """

    def __init__(self):
        self.entries: List[Dict] = []
        self.handled = 0
        self._seen = set()
        self._signal = asyncio.Event()

    def __len__(self):
        return len(self.entries)

    def add_page(self, payload: Any) -> int:
        """Ingest one results payload. Returns the number of new companies."""
        added = 0
        for entry in extract_companies(payload):
            name = entry["Company"]
            key = dedupe_key(name)
            if key in self._seen:
                continue
            self._seen.add(key)
            self.entries.append(entry)
            added += 1
            logger.info("Added: %s (total: %d)", name, len(self.entries))
        self._mark_handled()
        return added

    def _mark_handled(self):
        self.handled += 1
        self._signal.set()

    async def on_response(self, response: Response):
        """Page "response" listener."""
        if not is_results_response(response):
            return

        if not response.ok:
            logger.warning("FGAS API response for %s was not OK: %s", response.url, response.status)
            self._mark_handled()
            return

        try:
            payload = await response.json()
        except (PlaywrightError, ValueError) as e:
            logger.warning("Failed to parse FGAS response JSON: %s", e)
            self._mark_handled()
            return

        self.add_page(payload)

    async def wait_for_response(self, since: int, timeout: float) -> bool:
        """
        Wait until more than `since` responses have been handled.

        Returns False if `timeout` seconds pass first.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while self.handled <= since:
            remaining = deadline - loop.time()
            if remaining <= 0:
                return False
            self._signal.clear()
            try:
                await asyncio.wait_for(self._signal.wait(), remaining)
            except asyncio.TimeoutError:
                return False
        return True

    def take(self, count: int) -> List[Dict]:
        """First `count` entries in discovery order."""
        return self.entries[:count]


async def collect_pages(
    accumulator: ResultAccumulator,
    turn_page: Callable[[], Awaitable[bool]],
    wanted: int,
    since: int,
    first_settle: float = SETTLE_AFTER_SEARCH,
    page_settle: float = SETTLE_AFTER_PAGE,
) -> None:
    """
    Page through results until `wanted` companies are collected.

    Args:
        accumulator: Receives results from the response listener
        turn_page: Clicks "next page" and waits for its response.
                   Returns False when there is no enabled next page.
        wanted: Number of companies requested
        since: accumulator.handled before the search was submitted
        first_settle: Max seconds to wait for the search results to be handled
        page_settle: Max seconds to wait for each further page to be handled
    """
    settle = first_settle
    while len(accumulator) < wanted:
        await accumulator.wait_for_response(since, settle)
        if len(accumulator) >= wanted:
            break

        since = accumulator.handled
        if not await turn_page():
            logger.info("No more Next button or it's disabled.")
            break
        settle = page_settle


def browser_proxy_settings(proxy_url: Optional[str]) -> Optional[Dict[str, str]]:
    """Translate a proxy URL into Playwright's proxy settings."""
    if not proxy_url:
        return None
    parsed = urlparse(proxy_url)
    if not parsed.hostname:
        return None
    port_str = f":{parsed.port}" if parsed.port else ""
    settings = {"server": f"{parsed.scheme or 'http'}://{parsed.hostname}{port_str}"}
    if parsed.username:
        settings["username"] = parsed.username
        settings["password"] = parsed.password or ""
    return settings


async def locate_frames(page: Page) -> Tuple[Frame, Frame]:
    """Find the (input frame, pagination frame) of the directory widget."""
    try:
        await page.wait_for_selector(FGAS_IFRAME_SELECTOR, timeout=IFRAME_TIMEOUT)
    except PlaywrightTimeoutError as e:
        raise FrameNotFound("Directory widget iframe did not load") from e

    input_frame = None
    pagination_frame = None

    for frame in page.frames:
        if frame is page.main_frame or frame.is_detached():
            continue
        if await frame.query_selector(FGAS_COMPANY_INPUT):
            input_frame = frame
        if await frame.query_selector(FGAS_PAGINATION_MARKER):
            pagination_frame = frame

    if input_frame is None or pagination_frame is None:
        raise FrameNotFound("Could not locate input and pagination frames.")

    return input_frame, pagination_frame


async def find_next_button(frame: Frame) -> Optional[Locator]:
    """Enabled "next page" button in the pagination frame, or None."""
    buttons = frame.locator(NEXT_BUTTON_SELECTOR).filter(
        has=frame.locator("i", has_text=NEXT_ICON_TEXT)
    )
    if await buttons.count() == 0:
        return None
    return buttons.first


class FgasDirectoryScraper:
    """Drives the FGAS company directory in headless Chromium.

    One scraper call owns one browser; nothing is shared between calls.

    Args:
        headless: Run Chromium without a window (default: True).
        proxy_url: Outbound proxy, falls back to SCRAPER_PROXY_URL.
    """

    def __init__(self, headless: bool = True, proxy_url: Optional[str] = None):
        self.headless = headless
        self.proxy_url = proxy_url if proxy_url is not None else get_proxy_url()

    async def scrape(self, company_name: str, city: str, number_of_records: int) -> List[Dict]:
        """Return up to number_of_records raw FGAS entries."""
        launch_kwargs = {
            "headless": self.headless,
            "args": BROWSER_ARGS,
            "timeout": BROWSER_LAUNCH_TIMEOUT,
        }
        proxy = browser_proxy_settings(self.proxy_url)
        if proxy:
            launch_kwargs["proxy"] = proxy

        async with async_playwright() as playwright:
            browser = None
            try:
                browser = await playwright.chromium.launch(**launch_kwargs)
                context = await browser.new_context()
                page = await context.new_page()
                page.set_default_navigation_timeout(NAVIGATION_TIMEOUT)

                await page.goto(FGAS_DIRECTORY_URL, wait_until="networkidle")
                input_frame, pagination_frame = await locate_frames(page)

                accumulator = ResultAccumulator()
                page.on("response", accumulator.on_response)

                since = accumulator.handled
                await self._submit_search(page, input_frame, company_name, city)

                async def turn_page() -> bool:
                    button = await find_next_button(pagination_frame)
                    if button is None:
                        return False
                    async with page.expect_response(is_results_response, timeout=RESULTS_RESPONSE_TIMEOUT):
                        await button.click()
                    return True

                await collect_pages(accumulator, turn_page, number_of_records, since)
                return accumulator.take(number_of_records)

            except PlaywrightError as e:
                raise ScrapeError(f"FGAS scrape failed: {e}") from e
            finally:
                if browser is not None:
                    await browser.close()

    async def _submit_search(self, page: Page, frame: Frame, company_name: str, city: str):
        if company_name:
            await frame.wait_for_selector(FGAS_COMPANY_INPUT, state="visible", timeout=INPUT_TIMEOUT)
            await frame.fill(FGAS_COMPANY_INPUT, company_name)

        if city:
            await frame.wait_for_selector(FGAS_CITY_INPUT, state="visible", timeout=INPUT_TIMEOUT)
            await frame.fill(FGAS_CITY_INPUT, city)

        # Click inside expect_response so a fast response isn't missed
        async with page.expect_response(is_results_response, timeout=RESULTS_RESPONSE_TIMEOUT):
            await frame.click(FGAS_SEARCH_BUTTON)


async def scrape_directory(
    company_name: str = "",
    city: str = "",
    number_of_records: int = DEFAULT_NUMBER_OF_RECORDS,
    scraper: Optional[FgasDirectoryScraper] = None,
) -> Dict[str, Any]:
    """
    Search the FGAS company directory.

    Args:
        company_name: Company name to search for
        city: City to search in
        number_of_records: Maximum number of companies to return; 0 returns none
        scraper: Optional configured scraper

    Returns:
        {"source": "fgas", "normalized": [NormalizedRecord, ...]}

    Raises:
        InvalidRequest: If both company_name and city are empty, or
                        number_of_records is negative
        FrameNotFound: If the search widget cannot be found
        ScrapeError: On any browser timeout or failure
    """
    if not company_name and not city:
        raise InvalidRequest("At least one of companyName or city is required.")
    if number_of_records < 0:
        raise InvalidRequest("numberOfRecords must not be negative.")

    entries = []
    if number_of_records > 0:
        scraper = scraper or FgasDirectoryScraper()
        entries = await scraper.scrape(company_name, city, number_of_records)

    return {
        "source": Source.FGAS.value,
        "normalized": [normalize(entry, Source.FGAS) for entry in entries],
    }
