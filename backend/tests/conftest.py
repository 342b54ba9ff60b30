"""
Pytest configuration and fixtures for the crawler tests.

The browser is replaced by small in-memory fakes that mimic the parts of
the Playwright page API the crawler uses.
"""

import pytest
from urllib.parse import urlparse, parse_qs
from fastapi.testclient import TestClient

from api.main import app, get_orchestrator, get_export_path
from scrapers.config import get_site_config
from scrapers.manager import CrawlOrchestrator


FAIL = object()  # Card whose expand interaction raises


def detail_html(name=None, address=None, phone=None, website=None,
                email=None, reviews=None, rating=None):
    """Build the expanded-card detail panel the field readers parse."""
    parts = ['<html><body><div id="detail">']
    if name is not None:
        parts.append(f'<div class="tZPcob">{name}</div>')
    if address is not None:
        parts.append(f'<div class="fccl3c">{address}</div>')
    if phone is not None:
        parts.append(
            f'<div data-phone-number="{phone}" role="button" class="VfPpkd Btn">'
            f'<div class="icon"></div><div>{phone}</div></div>'
        )
    if website is not None:
        parts.append(f'<div class="iPF7ob"><div class="icon"></div><div>{website}</div></div>')
    if email is not None:
        parts.append(f'<div class="email-class-selector">{email}</div>')
    if reviews is not None:
        parts.append(f'<div class="PN9vWe">{reviews}</div>')
    if rating is not None:
        parts.append(f'<div class="ZjTWef">{rating}</div>')
    parts.append('</div></body></html>')
    return ''.join(parts)


def full_card(name):
    """Detail panel with every field populated."""
    return detail_html(
        name=name,
        address=f"1 {name} Street, London",
        phone="020 7946 0000",
        website=f"{name.lower().replace(' ', '')}.co.uk",
        email=f"info@{name.lower().replace(' ', '')}.co.uk",
        reviews="(42)",
        rating="4.8",
    )


class FakeClickTarget:
    def __init__(self, card):
        self.card = card

    async def dispatch_event(self, event_type):
        assert event_type == 'click'
        if self.card.detail is FAIL:
            raise RuntimeError("Element is not attached to the DOM")
        self.card.page.detail = self.card.detail


class FakeCard:
    def __init__(self, page, detail, has_expand_target=True):
        self.page = page
        self.detail = detail
        self.has_expand_target = has_expand_target

    async def query_selector(self, selector):
        if not self.has_expand_target:
            return None
        return FakeClickTarget(self)


class FakeResponse:
    def __init__(self, status=200):
        self.status = status


class FakePage:
    """
    A browser tab serving canned listing pages.

    `listings` maps keyword -> {page_number: (cards, has_next)}, where cards
    is a list of detail HTML strings (or FAIL).
    """

    def __init__(self, listings, fail_on=None):
        self.listings = listings
        self.fail_on = fail_on or set()
        self.visited = []
        self.detail = '<html><body></body></html>'
        self.navigation_timeout = None
        self.closed = False
        self._cards = []
        self._has_next = False

    def set_default_navigation_timeout(self, timeout):
        self.navigation_timeout = timeout

    async def goto(self, url, wait_until=None):
        assert wait_until == 'networkidle'
        self.visited.append(url)
        query = parse_qs(urlparse(url).query)
        keyword = query['q'][0]
        page_number = int(query['page'][0])
        if (keyword, page_number) in self.fail_on:
            raise TimeoutError(f"Timeout 30000ms exceeded navigating to {url}")
        cards, has_next = self.listings.get(keyword, {}).get(page_number, ([], False))
        self._cards = [FakeCard(self, detail) for detail in cards]
        self._has_next = has_next
        self.detail = '<html><body></body></html>'
        return FakeResponse()

    async def query_selector_all(self, selector):
        return list(self._cards)

    async def query_selector(self, selector):
        return object() if self._has_next else None

    async def content(self):
        return self.detail

    async def close(self):
        self.closed = True


class FakeSession:
    def __init__(self, factory, timeout=30.0, headless=True):
        self.factory = factory
        self.timeout = timeout
        self.headless = headless
        self.pages = []
        self.open_calls = 0
        self.close_calls = 0

    async def open(self):
        self.open_calls += 1
        if self.factory.fail_launch:
            raise RuntimeError("Executable doesn't exist")
        return self

    async def new_page(self):
        page = FakePage(self.factory.listings, self.factory.fail_on)
        page.set_default_navigation_timeout(int(self.timeout * 1000))
        self.pages.append(page)
        return page

    async def close(self):
        self.close_calls += 1


class FakeSessionFactory:
    """Stands in for BrowserSession; records every session it creates."""

    def __init__(self, listings=None, fail_on=None, fail_launch=False):
        self.listings = listings or {}
        self.fail_on = set(fail_on or ())
        self.fail_launch = fail_launch
        self.sessions = []

    def __call__(self, timeout=30.0, headless=True):
        session = FakeSession(self, timeout=timeout, headless=headless)
        self.sessions.append(session)
        return session


@pytest.fixture
def site():
    """The local services site configuration."""
    return get_site_config('localservices')


@pytest.fixture
def session_factory():
    """Fake browser session factory with no listings."""
    return FakeSessionFactory()


@pytest.fixture
def make_orchestrator(site):
    """Build an orchestrator over a FakeSessionFactory with no delays."""
    def _make(factory, max_pages=None):
        return CrawlOrchestrator(
            site=site,
            session_factory=factory,
            timeout=30.0,
            headless=True,
            card_settle_seconds=0,
            page_delay_seconds=0,
            max_pages=max_pages,
        )
    return _make


@pytest.fixture
def export_path(tmp_path):
    return tmp_path / "scraped_data.csv"


@pytest.fixture(scope="function")
def client(session_factory, make_orchestrator, export_path):
    """Create a test client with the browser and export path overridden."""
    app.dependency_overrides[get_orchestrator] = lambda: make_orchestrator(session_factory)
    app.dependency_overrides[get_export_path] = lambda: export_path

    test_client = TestClient(app)
    yield test_client

    app.dependency_overrides.clear()
