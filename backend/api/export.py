"""
CSV export of crawl results.

The header keeps the Business Hours and Services columns even though the
extractor never fills them; they are written empty.
"""

import csv
from pathlib import Path
from typing import Dict, Iterable, Union
import logging

from scrapers.base import BusinessRecord

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    'Name', 'Address', 'Phone', 'Website', 'Email',
    'Reviews', 'Rating', 'Business Hours', 'Services',
]


def record_to_row(record: BusinessRecord) -> Dict[str, str]:
    """Map a record onto the CSV header."""
    return {
        'Name': record.name,
        'Address': record.address,
        'Phone': record.phone,
        'Website': record.website,
        'Email': record.email,
        'Reviews': record.reviews,
        'Rating': record.rating,
        'Business Hours': '',
        'Services': '',
    }


def write_csv(records: Iterable[BusinessRecord], path: Union[str, Path]) -> Path:
    """
    Write records to a CSV file, replacing any previous export.

    Args:
        records: Records in output order
        path: Destination file

    Returns:
        Path of the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=CSV_HEADERS)
        writer.writeheader()
        for record in records:
            writer.writerow(record_to_row(record))
            count += 1

    logger.info(f"CSV file generated successfully: {path} ({count} rows)")
    return path
