"""
Playwright-based listing crawler.

This module provides the crawl pipeline for paginated search-results
listings:
- Browser session management (one Chromium process per request)
- Per-keyword pagination over listing pages
- Per-card expansion and field extraction with per-card error isolation
"""

from .base import CrawlRequest, CrawlResult, BusinessRecord, KeywordCrawlState, NONE_VALUE
from .config import SITES, SiteConfig, get_site_config
from .exceptions import ScraperError, CrawlRequestError, SessionError, NavigationError
from .manager import CrawlOrchestrator, run_crawl

__all__ = [
    'CrawlRequest',
    'CrawlResult',
    'BusinessRecord',
    'KeywordCrawlState',
    'NONE_VALUE',
    'SITES',
    'SiteConfig',
    'get_site_config',
    'ScraperError',
    'CrawlRequestError',
    'SessionError',
    'NavigationError',
    'CrawlOrchestrator',
    'run_crawl',
]
