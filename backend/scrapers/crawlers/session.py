"""
Browser session for listing crawls.

Owns one Chromium process for the lifetime of a crawl request and hands out
tabs with a bounded navigation timeout.
"""

import asyncio
from typing import Optional, List
from playwright.async_api import async_playwright, Browser, Page
import logging

from ..exceptions import SessionError

logger = logging.getLogger("scraper.session")

DEFAULT_LAUNCH_ARGS = [
    '--no-sandbox',
    '--disable-setuid-sandbox',
    '--disable-dev-shm-usage',
]


class BrowserSession:
    """
    One isolated headless browser process.

    Usage:
        async with BrowserSession(timeout=30.0) as session:
            page = await session.new_page()
            ...
    """

    def __init__(
        self,
        timeout: float = 30.0,
        headless: bool = True,
        launch_args: Optional[List[str]] = None
    ):
        """
        Initialize the session.

        Args:
            timeout: Navigation timeout in seconds, applied to every page
            headless: Run browser in headless mode
            launch_args: Chromium command-line switches
        """
        self.timeout = timeout
        self.headless = headless
        self.launch_args = launch_args if launch_args is not None else list(DEFAULT_LAUNCH_ARGS)
        self._playwright = None
        self._browser: Optional[Browser] = None

    @property
    def is_open(self) -> bool:
        return self._browser is not None

    async def open(self) -> 'BrowserSession':
        """
        Start Playwright and launch Chromium.

        Raises:
            SessionError: If the browser cannot be launched
        """
        if self._browser is not None:
            return self

        try:
            self._playwright = await async_playwright().start()
            logger.debug("Launching Chromium browser...")
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=self.launch_args,
                handle_sigint=False,
                handle_sigterm=False,
                handle_sighup=False,
            )
            if not self._browser.is_connected():
                raise Exception("Browser launched but not connected")
        except Exception as e:
            logger.error(f"Failed to launch browser: {e}")
            # Release anything that was partially started
            await self.close()
            raise SessionError(f"Failed to launch browser: {e}") from e

        logger.info("Browser session started")
        return self

    async def new_page(self) -> Page:
        """Open a new tab with the session's navigation timeout applied."""
        if self._browser is None:
            raise SessionError("Browser session is not open")
        page = await self._browser.new_page()
        page.set_default_navigation_timeout(int(self.timeout * 1000))
        return page

    async def close(self):
        """Close the browser and all of its pages. Safe to call more than once."""
        cleanup_timeout = 5.0

        if self._browser:
            try:
                await asyncio.wait_for(self._browser.close(), timeout=cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Browser close timed out, forcing cleanup")
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")
            self._browser = None
            logger.info("Browser session closed")

        if self._playwright:
            try:
                await asyncio.wait_for(self._playwright.stop(), timeout=cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Playwright stop timed out, forcing cleanup")
            except Exception as e:
                logger.warning(f"Error stopping playwright: {e}")
            self._playwright = None

    async def __aenter__(self):
        """Async context manager entry."""
        return await self.open()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
