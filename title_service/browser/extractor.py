"""
Purpose:
- Navigate to a validated URL in a headless browser and read the page title.
- Classify browser failures into the small error taxonomy the API exposes.

Notes:
- TitleExtractor is the narrow seam the HTTP layer depends on; tests swap in fakes.
- PlaywrightTitleExtractor launches an isolated Chromium per call and always
  closes page + browser, whatever happens. Close failures are logged, never raised.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import List, Optional, Protocol

from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from ..core.logging import log_event
from .schema import ErrorCode, PageTitle

logger = logging.getLogger(__name__)

_TIMEOUT_EXCEEDED = re.compile(r"\bTimeout \d+ms exceeded")

HTTP_STATUS_BY_CODE = {
    ErrorCode.NAV_TIMEOUT: 504,
    ErrorCode.REQ_TIMEOUT: 504,
    ErrorCode.DNS_FAIL: 502,
    ErrorCode.NET_TIMEOUT: 502,
    ErrorCode.UNKNOWN_ERROR: 502,
}


class ExtractionError(Exception):
    """A classified failure of the title-extraction delegate."""

    def __init__(self, code: ErrorCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_CODE.get(self.code, 502)


class TitleExtractor(Protocol):
    async def extract_title(
        self,
        url: str,
        *,
        nav_timeout_ms: int,
        wait_until: str,
        cancel: Optional[asyncio.Event] = None,
    ) -> PageTitle:
        ...


def classify_error(exc: BaseException) -> ErrorCode:
    # Messages embed the target URL and call log, so only match browser error tokens.
    message = str(exc)
    if isinstance(exc, PlaywrightTimeoutError):
        return ErrorCode.NAV_TIMEOUT
    if "net::ERR_NAME_NOT_RESOLVED" in message:
        return ErrorCode.DNS_FAIL
    if "net::" in message:
        return ErrorCode.NET_TIMEOUT
    if _TIMEOUT_EXCEEDED.search(message):
        return ErrorCode.NAV_TIMEOUT
    return ErrorCode.UNKNOWN_ERROR


class PlaywrightTitleExtractor:
    def __init__(self, browser_args: Optional[List[str]] = None):
        self.browser_args = list(browser_args or [])

    async def extract_title(
        self,
        url: str,
        *,
        nav_timeout_ms: int,
        wait_until: str,
        cancel: Optional[asyncio.Event] = None,
    ) -> PageTitle:
        async with async_playwright() as pw:
            browser = None
            page = None
            try:
                browser = await pw.chromium.launch(headless=True, args=self.browser_args)
                logger.debug("browser launched for %s", url)
                page = await browser.new_page()
                response = await page.goto(url, wait_until=wait_until, timeout=nav_timeout_ms)
                logger.debug("navigation finished for %s (wait_until=%s)", url, wait_until)
                if cancel is not None and cancel.is_set():
                    # request already answered; skip the remaining page work
                    return PageTitle()
                title = await page.title()
                return PageTitle(title=title, status=response.status if response is not None else None)
            except Exception as exc:
                raise ExtractionError(classify_error(exc), str(exc)) from exc
            finally:
                await self._release(page, browser)

    async def _release(self, page, browser) -> None:
        if page is not None:
            try:
                await page.close()
            except Exception as exc:
                log_event(logger, "page_close_error", logging.WARNING, error=str(exc))
        if browser is not None:
            try:
                await browser.close()
            except Exception as exc:
                log_event(logger, "browser_close_error", logging.WARNING, error=str(exc))
