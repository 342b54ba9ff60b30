"""Custom exceptions for the listing crawler."""


class ScraperError(Exception):
    """Base exception for all crawler errors."""
    pass


class CrawlRequestError(ScraperError):
    """Raised when a crawl request is missing required fields or is malformed."""
    pass


class SessionError(ScraperError):
    """Raised when the browser session cannot be launched."""
    pass


class NavigationError(ScraperError):
    """Raised when a listing page fails to load (timeout or navigation failure)."""

    def __init__(self, url: str, message: str):
        super().__init__(f"Navigation to {url} failed: {message}")
        self.url = url
