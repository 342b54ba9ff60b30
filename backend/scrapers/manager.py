"""
Crawl Orchestrator - runs one crawl request end to end.

Validates the request, owns the browser session for the request's lifetime,
crawls keywords sequentially and returns the aggregated result.
"""

from typing import Any, Callable, Optional, Union, Mapping
import logging

from .base import CrawlRequest, CrawlResult, Colors
from .config import SiteConfig, get_site_config
from .crawlers.session import BrowserSession
from .extractor import CardExtractor
from .keyword_crawler import KeywordCrawler
from .navigator import PageNavigator

logger = logging.getLogger("scraper.orchestrator")


class CrawlOrchestrator:
    """
    Runs crawl requests against one listing site.

    Usage:
        orchestrator = CrawlOrchestrator()
        result = await orchestrator.run({'keywords': ['plumber'], 'lci': '123'})
    """

    def __init__(
        self,
        site: Optional[SiteConfig] = None,
        session_factory: Callable[..., Any] = BrowserSession,
        timeout: Optional[float] = None,
        headless: Optional[bool] = None,
        card_settle_seconds: Optional[float] = None,
        page_delay_seconds: Optional[float] = None,
        max_pages: Optional[int] = None
    ):
        """
        Initialize the orchestrator. Unset options fall back to application settings.

        Args:
            site: Site configuration (defaults to the local services listing)
            session_factory: Callable returning an unopened session
            timeout: Navigation timeout in seconds
            headless: Run browser in headless mode
            card_settle_seconds: Wait after expanding each card
            page_delay_seconds: Wait between listing pages
            max_pages: Per-keyword page ceiling (None = unbounded)
        """
        from api.config import settings

        self.site = site or get_site_config()
        self.session_factory = session_factory
        self.timeout = settings.scraper_timeout if timeout is None else timeout
        self.headless = settings.scraper_headless if headless is None else headless
        self.card_settle_seconds = (
            settings.scraper_card_settle_seconds if card_settle_seconds is None else card_settle_seconds
        )
        self.page_delay_seconds = (
            settings.scraper_page_delay_seconds if page_delay_seconds is None else page_delay_seconds
        )
        self.max_pages = settings.scraper_max_pages if max_pages is None else max_pages

    def _build_keyword_crawler(self, session) -> KeywordCrawler:
        return KeywordCrawler(
            session=session,
            navigator=PageNavigator(self.site),
            extractor=CardExtractor(self.site, settle_seconds=self.card_settle_seconds),
            site=self.site,
            page_delay_seconds=self.page_delay_seconds,
            max_pages=self.max_pages,
        )

    async def run(self, request: Union[CrawlRequest, Mapping[str, Any]]) -> CrawlResult:
        """
        Run a crawl request.

        Args:
            request: CrawlRequest or raw request body

        Returns:
            CrawlResult with records in (keyword, page, card) order

        Raises:
            CrawlRequestError: If the request is invalid (no browser is launched)
            SessionError: If the browser cannot be launched
            NavigationError: If any listing page fails to load
        """
        request = CrawlRequest.from_payload(request)
        result = CrawlResult()

        logger.info(
            f"Starting the scraping process for {len(request.keywords)} keyword(s) "
            f"from page {request.page} (lci={request.lci})"
        )

        session = self.session_factory(timeout=self.timeout, headless=self.headless)
        await session.open()
        try:
            crawler = self._build_keyword_crawler(session)
            for keyword in request.keywords:
                await crawler.crawl(keyword, request.page, request.lci, result)
        except Exception as e:
            logger.error(f"{Colors.red('Scrape failed')}: {e}")
            raise
        finally:
            await session.close()

        result.finish()
        duration = result.duration_seconds or 0
        logger.info(
            f"✅ Scrape complete in {duration:.1f}s: {len(result)} records from "
            f"{len(result.pages)} page(s), {result.failed_cards} card errors"
        )
        return result


async def run_crawl(request: Union[CrawlRequest, Mapping[str, Any]], **options) -> CrawlResult:
    """
    Run a single crawl request with a fresh orchestrator.

    Args:
        request: CrawlRequest or raw request body
        **options: Passed to CrawlOrchestrator

    Returns:
        CrawlResult
    """
    orchestrator = CrawlOrchestrator(**options)
    return await orchestrator.run(request)
