"""
Per-keyword pagination.

Drives Navigating -> Extracting -> CheckingNext -> {Navigating | Done} for a
single keyword on its own tab. Pagination stops only when the next-page
control disappears, or when the optional page ceiling is reached.
"""

import asyncio
from enum import Enum
from typing import Optional
import logging

from .base import CrawlResult, KeywordCrawlState, Colors
from .config import SiteConfig
from .extractor import CardExtractor
from .navigator import PageNavigator

logger = logging.getLogger("scraper.keyword")


class CrawlPhase(Enum):
    """States of the per-keyword pagination machine."""
    NAVIGATING = "navigating"
    EXTRACTING = "extracting"
    CHECKING_NEXT = "checking_next"
    DONE = "done"


class KeywordCrawler:
    """Crawls every listing page for one keyword at a time."""

    def __init__(
        self,
        session,
        navigator: PageNavigator,
        extractor: CardExtractor,
        site: SiteConfig,
        page_delay_seconds: Optional[float] = None,
        max_pages: Optional[int] = None
    ):
        """
        Args:
            session: Open BrowserSession that provides tabs
            navigator: Page navigator for the site
            extractor: Card extractor for the site
            site: Site configuration
            page_delay_seconds: Pause before loading the next page, defaults to the site's value
            max_pages: Stop after this many pages per keyword (None = no ceiling)
        """
        self.session = session
        self.navigator = navigator
        self.extractor = extractor
        self.site = site
        self.page_delay_seconds = site.page_delay_seconds if page_delay_seconds is None else page_delay_seconds
        self.max_pages = max_pages

    async def crawl(self, keyword: str, start_page: int, lci: str, result: CrawlResult) -> KeywordCrawlState:
        """
        Crawl all pages for a keyword, appending records to `result`.

        Args:
            keyword: Search keyword
            start_page: First page number to load
            lci: Location-context identifier
            result: Shared accumulator for the whole request

        Returns:
            Final KeywordCrawlState

        Raises:
            NavigationError: If any page fails to load
        """
        logger.info(f"\n{Colors.cyan('❯❯❯')}")
        logger.info(f"Scraping results for keyword: {Colors.bold(keyword)}")

        state = KeywordCrawlState(keyword=keyword, current_page=start_page)
        page = await self.session.new_page()
        phase = CrawlPhase.NAVIGATING

        try:
            while phase != CrawlPhase.DONE:
                if phase == CrawlPhase.NAVIGATING:
                    logger.info(f"Scraping page {state.current_page} for keyword: {keyword}")
                    await self.navigator.navigate(page, keyword, state.current_page, lci)
                    phase = CrawlPhase.EXTRACTING

                elif phase == CrawlPhase.EXTRACTING:
                    records, stats = await self.extractor.extract(page, keyword, state.current_page)
                    result.extend(records, stats)
                    state.pages_crawled += 1
                    logger.info(
                        f"Scraped {len(records)} results from page {state.current_page}"
                        + (f" ({Colors.red(f'{stats.failed} failed')})" if stats.failed else "")
                    )
                    phase = CrawlPhase.CHECKING_NEXT

                elif phase == CrawlPhase.CHECKING_NEXT:
                    state.has_more_pages = await self.navigator.has_next_page(page)
                    if not state.has_more_pages:
                        phase = CrawlPhase.DONE
                    elif self.max_pages is not None and state.pages_crawled >= self.max_pages:
                        logger.warning(
                            f"{Colors.yellow('Page ceiling')} of {self.max_pages} reached for "
                            f"'{keyword}', stopping with more pages available"
                        )
                        phase = CrawlPhase.DONE
                    else:
                        state.current_page += 1
                        await asyncio.sleep(self.page_delay_seconds)
                        phase = CrawlPhase.NAVIGATING
        finally:
            try:
                await page.close()
            except Exception as e:
                logger.warning(f"Error closing tab for '{keyword}': {e}")

        logger.info(f"Finished '{keyword}' after {state.pages_crawled} page(s)")
        return state
