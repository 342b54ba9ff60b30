"""Shared utilities for scrapers."""

from .normalizers import (
    clean_text,
    clean_html,
)
from .extractors import (
    FieldReader,
    TextReader,
    InnerHtmlReader,
    NestedReader,
    build_field_readers,
    read_fields,
)

__all__ = [
    'clean_text',
    'clean_html',
    'FieldReader',
    'TextReader',
    'InnerHtmlReader',
    'NestedReader',
    'build_field_readers',
    'read_fields',
]
