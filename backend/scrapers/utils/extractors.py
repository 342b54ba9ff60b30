"""
Field readers for expanded result cards.

Each reader locates one element in the page snapshot and returns its value,
or the NONE sentinel if the element is absent. Readers never raise for a
missing element.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional
from bs4 import BeautifulSoup, Tag

from ..base import NONE_VALUE
from .normalizers import clean_text, clean_html


class FieldReader(ABC):
    """Reads one business field from a parsed page."""

    def __init__(self, selector: str):
        self.selector = selector

    def locate(self, soup: BeautifulSoup) -> Optional[Tag]:
        return soup.select_one(self.selector)

    @abstractmethod
    def value_of(self, element: Tag) -> str:
        """Return the field value for a located element."""
        pass

    def read(self, soup: BeautifulSoup) -> str:
        element = self.locate(soup)
        if element is None:
            return NONE_VALUE
        return self.value_of(element)

    def __repr__(self):
        return f"{type(self).__name__}({self.selector!r})"


class TextReader(FieldReader):
    """Rendered text of the element (innerText)."""

    def value_of(self, element: Tag) -> str:
        return clean_text(element.get_text())


class InnerHtmlReader(FieldReader):
    """Raw markup inside the element (innerHTML)."""

    def value_of(self, element: Tag) -> str:
        return clean_html(element.decode_contents())


class NestedReader(FieldReader):
    """
    Locates an outer element, then reads an inner element with another reader.

    Example:
        NestedReader('[data-phone-number]', InnerHtmlReader('div:last-of-type'))
    """

    def __init__(self, selector: str, inner: FieldReader):
        super().__init__(selector)
        self.inner = inner

    def value_of(self, element: Tag) -> str:
        inner_element = element.select_one(self.inner.selector)
        if inner_element is None:
            return NONE_VALUE
        return self.inner.value_of(inner_element)


def build_field_readers(field_selectors: Dict[str, str]) -> Dict[str, FieldReader]:
    """
    Build the default reader for every business field.

    Phone and website are read as innerHTML, everything else as text.
    """
    return {
        'name': TextReader(field_selectors['name']),
        'address': TextReader(field_selectors['address']),
        'phone': NestedReader(
            field_selectors['phone'],
            InnerHtmlReader(field_selectors.get('phone_value', 'div:last-of-type')),
        ),
        'website': InnerHtmlReader(field_selectors['website']),
        'email': TextReader(field_selectors['email']),
        'reviews': TextReader(field_selectors['reviews']),
        'rating': TextReader(field_selectors['rating']),
    }


def read_fields(soup: BeautifulSoup, readers: Dict[str, FieldReader]) -> Dict[str, str]:
    """Run every reader against a page snapshot."""
    return {name: reader.read(soup) for name, reader in readers.items()}
