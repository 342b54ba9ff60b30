"""
Listing page navigation.

Builds the listing URL for a (keyword, page number, location) triple, loads
it into a tab and reports whether the page offers a next-page control.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote
import logging

from .config import SiteConfig
from .exceptions import NavigationError

logger = logging.getLogger("scraper.navigator")


@dataclass
class NavigationOutcome:
    """Result of loading one listing page."""
    url: str
    keyword: str
    page_number: int
    status: Optional[int] = None


class PageNavigator:
    """Loads listing pages for a single SiteConfig."""

    def __init__(self, site: SiteConfig):
        self.site = site

    def build_url(self, keyword: str, page_number: int, lci: str) -> str:
        """
        Build the listing URL.

        Examples:
            ("plumber", 2, "abc") ->
            https://www.google.com/localservices/prolist?hl=en-GB&gl=uk&ssta=1&q=plumber&oq=plumber&src=2&page=2&lci=abc
        """
        encoded = quote(keyword, safe='')
        params = dict(self.site.query_params)
        src = params.pop('src', None)

        parts = [f"{k}={v}" for k, v in params.items()]
        parts.append(f"q={encoded}")
        parts.append(f"oq={encoded}")
        if src is not None:
            parts.append(f"src={src}")
        parts.append(f"page={page_number}")
        parts.append(f"lci={lci}")
        return f"{self.site.listing_url}?{'&'.join(parts)}"

    async def navigate(self, page, keyword: str, page_number: int, lci: str) -> NavigationOutcome:
        """
        Load a listing page and wait for the network to go idle.

        Args:
            page: Playwright page (tab)
            keyword: Search keyword
            page_number: 1-based listing page number
            lci: Location-context identifier

        Returns:
            NavigationOutcome

        Raises:
            NavigationError: On timeout or any navigation failure
        """
        url = self.build_url(keyword, page_number, lci)
        logger.debug(f"Navigating to {url}")
        try:
            response = await page.goto(url, wait_until='networkidle')
        except Exception as e:
            raise NavigationError(url, str(e)) from e

        status = response.status if response is not None else None
        if status is not None and status >= 400:
            logger.warning(f"HTTP {status} for {url}")
        return NavigationOutcome(url=url, keyword=keyword, page_number=page_number, status=status)

    async def has_next_page(self, page) -> bool:
        """Return True if the next-page control is present on the loaded page."""
        next_button = await page.query_selector(self.site.next_page_selector)
        return next_button is not None
