"""
Core data structures for the listing crawler.

This module defines the request, state and result types passed between
the orchestrator, the per-keyword controller and the card extractor.
"""

from typing import List, Dict, Optional, Any, Iterator, Mapping
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
import logging

from pydantic import BaseModel, ConfigDict, Field, AliasChoices, ValidationError, field_validator

from .exceptions import CrawlRequestError

logger = logging.getLogger(__name__)

# Marker stored in place of any field that could not be located on the page
NONE_VALUE = "NONE"


# ANSI color codes for terminal output
class Colors:
    """ANSI color codes for colorized logging."""
    RESET = '\033[0m'
    BOLD = '\033[1m'

    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    CYAN = '\033[96m'
    GRAY = '\033[90m'

    @staticmethod
    def green(text):
        return f"{Colors.GREEN}{text}{Colors.RESET}"

    @staticmethod
    def yellow(text):
        return f"{Colors.YELLOW}{text}{Colors.RESET}"

    @staticmethod
    def red(text):
        return f"{Colors.RED}{text}{Colors.RESET}"

    @staticmethod
    def cyan(text):
        return f"{Colors.CYAN}{text}{Colors.RESET}"

    @staticmethod
    def gray(text):
        return f"{Colors.GRAY}{text}{Colors.RESET}"

    @staticmethod
    def bold(text):
        return f"{Colors.BOLD}{text}{Colors.RESET}"


class CrawlRequest(BaseModel):
    """
    A validated crawl request.

    Accepts the location-context identifier as either `lci` or
    `locationContextId`, as a string or an integer.
    """
    model_config = ConfigDict(frozen=True)

    keywords: List[str] = Field(..., min_length=1)
    page: int = Field(1, ge=1)
    lci: str = Field(..., validation_alias=AliasChoices('lci', 'locationContextId'))

    @field_validator('keywords')
    @classmethod
    def _strip_keywords(cls, value: List[str]) -> List[str]:
        keywords = [keyword.strip() for keyword in value]
        if any(not keyword for keyword in keywords):
            raise ValueError("keywords must be non-empty strings")
        return keywords

    @field_validator('lci', mode='before')
    @classmethod
    def _coerce_lci(cls, value: Any) -> str:
        if value is None or isinstance(value, bool):
            raise ValueError("lci must be a string or integer")
        if isinstance(value, int):
            return str(value)
        if isinstance(value, str) and value.strip():
            return value.strip()
        raise ValueError("lci must be a non-empty string or integer")

    @classmethod
    def from_payload(cls, payload: Any) -> 'CrawlRequest':
        """
        Validate a raw request body.

        Args:
            payload: Decoded JSON body

        Returns:
            CrawlRequest

        Raises:
            CrawlRequestError: With a caller-facing message if validation fails
        """
        if isinstance(payload, cls):
            return payload
        if not isinstance(payload, Mapping):
            raise CrawlRequestError("Request body must be a JSON object.")

        try:
            return cls.model_validate(dict(payload))
        except ValidationError as e:
            fields = {str(err['loc'][0]) for err in e.errors() if err.get('loc')}
            if 'keywords' in fields:
                raise CrawlRequestError("Please provide a valid array of keywords.") from e
            if fields & {'lci', 'locationContextId'}:
                raise CrawlRequestError("LCI value must be provided.") from e
            if 'page' in fields:
                raise CrawlRequestError("Page must be a positive integer.") from e
            raise CrawlRequestError(str(e)) from e


@dataclass
class KeywordCrawlState:
    """Pagination state for one keyword. Owned by its KeywordCrawler."""
    keyword: str
    current_page: int
    has_more_pages: bool = True
    pages_crawled: int = 0


@dataclass(frozen=True)
class BusinessRecord:
    """One business extracted from an expanded result card."""
    name: str = NONE_VALUE
    address: str = NONE_VALUE
    phone: str = NONE_VALUE
    website: str = NONE_VALUE
    email: str = NONE_VALUE
    reviews: str = NONE_VALUE
    rating: str = NONE_VALUE

    # Traceability tags
    keyword: Optional[str] = None
    page: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PageStats:
    """Card counts for a single listing page."""
    keyword: str
    page: int
    found: int = 0
    extracted: int = 0
    failed: int = 0

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class CrawlResult:
    """Ordered accumulator for every record produced during one crawl request."""
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None
    records: List[BusinessRecord] = field(default_factory=list)
    pages: List[PageStats] = field(default_factory=list)

    def extend(self, records: List[BusinessRecord], stats: Optional[PageStats] = None):
        """Append one page's records, keeping (keyword, page, card) order."""
        self.records.extend(records)
        if stats is not None:
            self.pages.append(stats)

    def finish(self):
        self.completed_at = datetime.now(timezone.utc)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[BusinessRecord]:
        return iter(self.records)

    @property
    def failed_cards(self) -> int:
        return sum(p.failed for p in self.pages)

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.completed_at and self.started_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def summary(self) -> Dict:
        per_keyword: Dict[str, int] = {p.keyword: 0 for p in self.pages}
        for record in self.records:
            per_keyword[record.keyword] = per_keyword.get(record.keyword, 0) + 1
        return {
            'total': len(self.records),
            'per_keyword': per_keyword,
            'pages_crawled': len(self.pages),
            'failed_cards': self.failed_cards,
            'started_at': self.started_at.isoformat(),
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
            'duration_seconds': self.duration_seconds,
        }

    def to_dict(self) -> Dict:
        return {
            'records': [r.to_dict() for r in self.records],
            'pages': [p.to_dict() for p in self.pages],
            'summary': self.summary(),
        }
