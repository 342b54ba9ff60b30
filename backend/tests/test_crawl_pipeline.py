"""
Tests for the navigator, card extractor and per-keyword pagination.
"""

import asyncio
import pytest

from conftest import FAIL, FakePage, FakeSessionFactory, detail_html, full_card
from scrapers.base import CrawlResult, NONE_VALUE
from scrapers.exceptions import NavigationError
from scrapers.extractor import CardExtractor
from scrapers.keyword_crawler import KeywordCrawler
from scrapers.navigator import PageNavigator


async def load(page, navigator, keyword, page_number, lci='abc'):
    return await navigator.navigate(page, keyword, page_number, lci)


class TestPageNavigator:
    """Test listing URL building and page loading."""

    def test_build_url(self, site):
        """Test that the listing URL carries every query parameter in order."""
        url = PageNavigator(site).build_url('plumber', 2, 'abc')
        assert url == (
            "https://www.google.com/localservices/prolist?hl=en-GB&gl=uk&ssta=1"
            "&q=plumber&oq=plumber&src=2&page=2&lci=abc"
        )

    def test_build_url_encodes_keyword(self, site):
        """Test that keywords are percent-encoded in q and oq."""
        url = PageNavigator(site).build_url('boiler repair & service', 1, '42')
        assert "q=boiler%20repair%20%26%20service" in url
        assert "oq=boiler%20repair%20%26%20service" in url

    def test_navigate(self, site):
        """Test that navigation records the loaded URL and status."""
        navigator = PageNavigator(site)
        page = FakePage({'plumber': {1: ([full_card("A")], False)}})

        outcome = asyncio.run(load(page, navigator, 'plumber', 1))

        assert outcome.page_number == 1
        assert outcome.status == 200
        assert page.visited == [outcome.url]

    def test_navigate_timeout(self, site):
        """Test that a load timeout becomes a NavigationError with the URL."""
        navigator = PageNavigator(site)
        page = FakePage({}, fail_on={('plumber', 1)})

        with pytest.raises(NavigationError) as exc_info:
            asyncio.run(load(page, navigator, 'plumber', 1))
        assert "page=1" in exc_info.value.url

    def test_has_next_page(self, site):
        """Test that the next-page control is detected."""
        navigator = PageNavigator(site)
        page = FakePage({'plumber': {1: ([], True), 2: ([], False)}})

        asyncio.run(load(page, navigator, 'plumber', 1))
        assert asyncio.run(navigator.has_next_page(page)) is True

        asyncio.run(load(page, navigator, 'plumber', 2))
        assert asyncio.run(navigator.has_next_page(page)) is False


class TestCardExtractor:
    """Test card expansion and field extraction."""

    def extract(self, site, cards):
        page = FakePage({'plumber': {1: (cards, False)}})
        asyncio.run(load(page, PageNavigator(site), 'plumber', 1))
        extractor = CardExtractor(site, settle_seconds=0)
        return asyncio.run(extractor.extract(page, 'plumber', 1))

    def test_extracts_cards_in_dom_order(self, site):
        """Test that records follow the cards' DOM order."""
        records, stats = self.extract(site, [full_card("A"), full_card("B"), full_card("C")])

        assert [r.name for r in records] == ["A", "B", "C"]
        assert all(r.keyword == 'plumber' and r.page == 1 for r in records)
        assert (stats.found, stats.extracted, stats.failed) == (3, 3, 0)

    def test_failing_card_is_skipped(self, site):
        """Test that one failing card does not affect its siblings."""
        cards = [full_card("A"), FAIL, full_card("C"), full_card("D"), full_card("E")]
        records, stats = self.extract(site, cards)

        assert [r.name for r in records] == ["A", "C", "D", "E"]
        assert (stats.found, stats.extracted, stats.failed) == (5, 4, 1)

    def test_missing_expand_target_is_skipped(self, site):
        """Test that a card without an expand target is counted as failed."""
        page = FakePage({'plumber': {1: ([full_card("A"), full_card("B")], False)}})
        asyncio.run(load(page, PageNavigator(site), 'plumber', 1))
        page._cards[0].has_expand_target = False

        records, stats = asyncio.run(CardExtractor(site, settle_seconds=0).extract(page, 'plumber', 1))

        assert [r.name for r in records] == ["B"]
        assert stats.failed == 1

    def test_missing_fields_use_sentinel(self, site):
        """Test that absent fields read as NONE."""
        records, _ = self.extract(site, [detail_html(name="Bare Business", rating="4.1")])

        record = records[0]
        assert record.name == "Bare Business"
        assert record.rating == "4.1"
        assert record.phone == NONE_VALUE
        assert record.website == NONE_VALUE
        assert record.email == NONE_VALUE
        assert record.address == NONE_VALUE
        assert record.reviews == NONE_VALUE

    def test_empty_page(self, site):
        """Test that a page with no cards yields no records."""
        records, stats = self.extract(site, [])
        assert records == []
        assert stats.found == 0


class TestKeywordCrawler:
    """Test per-keyword pagination."""

    def crawl(self, site, listings, keyword='plumber', start_page=1, max_pages=None, fail_on=None):
        factory = FakeSessionFactory(listings, fail_on=fail_on)
        session = factory()
        crawler = KeywordCrawler(
            session=session,
            navigator=PageNavigator(site),
            extractor=CardExtractor(site, settle_seconds=0),
            site=site,
            page_delay_seconds=0,
            max_pages=max_pages,
        )
        result = CrawlResult()

        async def _run():
            return await crawler.crawl(keyword, start_page, 'abc', result)

        return session, result, _run

    def test_single_page_without_next(self, site):
        """Test that a crawl stops when there is no next control."""
        session, result, run = self.crawl(site, {'plumber': {1: ([full_card("A"), full_card("B")], False)}})
        state = asyncio.run(run())

        assert [(r.name, r.keyword, r.page) for r in result] == [("A", 'plumber', 1), ("B", 'plumber', 1)]
        assert state.pages_crawled == 1
        assert state.has_more_pages is False
        assert len(session.pages[0].visited) == 1

    def test_paginates_until_next_control_disappears(self, site):
        """Test that pages are followed until the next control disappears."""
        listings = {'plumber': {
            1: ([full_card("A")], True),
            2: ([full_card("B")], True),
            3: ([full_card("C")], False),
        }}
        session, result, run = self.crawl(site, listings)
        state = asyncio.run(run())

        visited_pages = [int(url.split('page=')[1].split('&')[0]) for url in session.pages[0].visited]
        assert visited_pages == [1, 2, 3]
        assert [(r.name, r.page) for r in result] == [("A", 1), ("B", 2), ("C", 3)]
        assert state.current_page == 3

    def test_starts_at_requested_page(self, site):
        """Test that crawling starts at the requested page."""
        listings = {'plumber': {3: ([full_card("C")], True), 4: ([full_card("D")], False)}}
        session, result, run = self.crawl(site, listings, start_page=3)
        asyncio.run(run())

        assert [r.page for r in result] == [3, 4]

    def test_page_ceiling(self, site):
        """Test that the page ceiling stops the crawl early."""
        listings = {'plumber': {n: ([full_card(f"P{n}")], True) for n in range(1, 10)}}
        session, result, run = self.crawl(site, listings, max_pages=2)
        state = asyncio.run(run())

        assert [r.page for r in result] == [1, 2]
        assert state.has_more_pages is True
        assert state.pages_crawled == 2

    def test_tab_closed_when_done(self, site):
        """Test that the tab is closed after the last page."""
        session, result, run = self.crawl(site, {'plumber': {1: ([], False)}})
        asyncio.run(run())

        assert len(session.pages) == 1
        assert session.pages[0].closed is True
        assert len(result) == 0

    def test_navigation_failure_propagates_and_closes_tab(self, site):
        """Test that a navigation failure propagates and the tab is closed."""
        listings = {'plumber': {1: ([full_card("A")], True)}}
        session, result, run = self.crawl(site, listings, fail_on={('plumber', 2)})

        with pytest.raises(NavigationError):
            asyncio.run(run())

        assert [r.name for r in result] == ["A"]
        assert session.pages[0].closed is True

    def test_navigation_timeout_applied_to_tab(self, site):
        """Test that the session timeout is applied to new tabs."""
        session, _, run = self.crawl(site, {})
        asyncio.run(run())

        assert session.pages[0].navigation_timeout == 30000

    def test_settle_and_page_delays(self, site, monkeypatch):
        """Test that each card settles and only pages with a successor are followed by a delay."""
        sleeps = []

        async def record_sleep(seconds):
            sleeps.append(seconds)

        monkeypatch.setattr(asyncio, 'sleep', record_sleep)

        session = FakeSessionFactory({'plumber': {
            1: ([full_card("A")], True),
            2: ([full_card("B")], False),
        }})()
        crawler = KeywordCrawler(
            session=session,
            navigator=PageNavigator(site),
            extractor=CardExtractor(site),
            site=site,
        )
        asyncio.run(crawler.crawl('plumber', 1, 'abc', CrawlResult()))

        assert sleeps == [site.card_settle_seconds, site.page_delay_seconds, site.card_settle_seconds]
        assert sleeps == [1.0, 3.0, 1.0]
