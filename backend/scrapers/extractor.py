"""
Card extraction for a loaded listing page.

Every result card must be expanded before its details render, so cards are
processed one at a time: click, settle, snapshot, read fields. A failure on
one card is logged and that card is dropped; its siblings are unaffected.
"""

import asyncio
from typing import Dict, List, Optional
from bs4 import BeautifulSoup
import logging

from .base import BusinessRecord, PageStats, Colors
from .config import SiteConfig
from .exceptions import ScraperError
from .utils.extractors import FieldReader, build_field_readers, read_fields

logger = logging.getLogger("scraper.extractor")


class CardExtractor:
    """Expands and reads every result card on the current page."""

    def __init__(
        self,
        site: SiteConfig,
        settle_seconds: Optional[float] = None,
        readers: Optional[Dict[str, FieldReader]] = None
    ):
        """
        Args:
            site: Site configuration (selectors)
            settle_seconds: Wait after expanding a card, defaults to the site's value
            readers: Field readers keyed by BusinessRecord field name
        """
        self.site = site
        self.settle_seconds = site.card_settle_seconds if settle_seconds is None else settle_seconds
        self.readers = readers if readers is not None else build_field_readers(site.field_selectors)

    async def _expand(self, card):
        target = await card.query_selector(self.site.expand_selector)
        if target is None:
            raise ScraperError(f"Expand target '{self.site.expand_selector}' not found in card")
        # Synthetic click, the card does not need to be in the viewport
        await target.dispatch_event('click')
        await asyncio.sleep(self.settle_seconds)

    async def _read_card(self, page, card, keyword: str, page_number: int) -> BusinessRecord:
        await self._expand(card)
        soup = BeautifulSoup(await page.content(), 'html.parser')
        fields = read_fields(soup, self.readers)
        return BusinessRecord(keyword=keyword, page=page_number, **fields)

    async def extract(self, page, keyword: str, page_number: int) -> tuple[List[BusinessRecord], PageStats]:
        """
        Extract every card on the loaded page, in DOM order.

        Args:
            page: Playwright page with a listing loaded
            keyword: Keyword the page belongs to (record tag)
            page_number: Listing page number (record tag)

        Returns:
            (records, stats) - failed cards are omitted from records
        """
        cards = await page.query_selector_all(self.site.card_selector)
        stats = PageStats(keyword=keyword, page=page_number, found=len(cards))
        logger.info(f"Found {len(cards)} cards on page {page_number} for '{keyword}'")

        records: List[BusinessRecord] = []
        for idx, card in enumerate(cards, 1):
            try:
                record = await self._read_card(page, card, keyword, page_number)
            except Exception as e:
                stats.failed += 1
                logger.error(f"   {Colors.red('[ERR]')} card {idx}/{len(cards)}: {e}")
                continue
            records.append(record)
            logger.debug(f"   {Colors.green('[OK]')} card {idx}/{len(cards)}: {record.name}")

        stats.extracted = len(records)
        return records, stats
