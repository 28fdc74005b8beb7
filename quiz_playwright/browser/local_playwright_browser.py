from __future__ import annotations

"""Local Chromium session used by the explorer."""

import logging
from typing import Iterable, Optional

from playwright.async_api import Browser, BrowserContext, Playwright, Route, async_playwright

logger = logging.getLogger(__name__)

LAUNCH_ARGS = ["--no-sandbox", "--disable-dev-shm-usage"]


class LocalPlaywrightBrowser:
    """Async context manager owning Playwright, the browser and one context.

    Requests to ``blocked_hosts`` (tracking and ad endpoints) and all image
    requests are aborted; they only slow the quiz down.
    """

    def __init__(self, headless: bool = True, blocked_hosts: Iterable[str] = (), block_images: bool = True) -> None:
        self.headless = headless
        self.blocked_hosts = tuple(blocked_hosts)
        self.block_images = block_images
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    @property
    def browser_context(self) -> BrowserContext:
        if self._context is None:
            raise RuntimeError("Browser is not running; use 'async with LocalPlaywrightBrowser(...)'")
        return self._context

    async def __aenter__(self) -> "LocalPlaywrightBrowser":
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self.headless, args=LAUNCH_ARGS)
        self._context = await self._browser.new_context()
        await self._context.route("**/*", self._filter_request)
        logger.info("Launched Chromium (headless=%s)", self.headless)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if self._context is not None:
                await self._context.close()
            if self._browser is not None:
                await self._browser.close()
        finally:
            if self._playwright is not None:
                await self._playwright.stop()
            self._context = None
            self._browser = None
            self._playwright = None
            logger.info("Browser closed")

    def is_blocked(self, url: str, resource_type: str) -> bool:
        if self.block_images and resource_type == "image":
            return True
        return any(url.startswith(host) for host in self.blocked_hosts)

    async def _filter_request(self, route: Route) -> None:
        request = route.request
        if self.is_blocked(request.url, request.resource_type):
            await route.abort()
        else:
            await route.fallback()
