#!/usr/bin/env python3
"""
Run a crawl from the command line, without the API server.

Usage:
    cd backend
    python -m scrapers.run_crawl KEYWORD [KEYWORD ...] --lci LCI

Examples:
    python -m scrapers.run_crawl plumber --lci 2573469                 # Crawl all pages
    python -m scrapers.run_crawl plumber electrician --lci 2573469 --max-pages 2
    python -m scrapers.run_crawl plumber --lci 2573469 --csv out.csv   # Also write a CSV
    python -m scrapers.run_crawl --list                                 # List sites
"""

import asyncio
import argparse
import logging
import json

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

from scrapers.config import get_site_config, get_site_summary
from scrapers.exceptions import CrawlRequestError
from scrapers.manager import CrawlOrchestrator


def list_sites():
    """List all configured listing sites."""
    print(f"\n{'='*60}")
    print("Available Sites")
    print(f"{'='*60}\n")

    for site in get_site_summary():
        status = "✅" if site['enabled'] else "⏳"
        print(f"{status} {site['key']:14} - {site['name']}")
        print(f"                 URL: {site['url']}")
        print()


def print_result(result, limit: int):
    """Print the first `limit` records and the crawl summary."""
    print(f"\n{'='*60}")
    print(f"Extracted {len(result)} records")
    print(f"{'='*60}\n")

    for i, record in enumerate(result.records[:limit]):
        print(f"{i+1}. {record.name}  [{record.keyword} p{record.page}]")
        print(f"   Address: {record.address}")
        print(f"   Phone:   {record.phone}")
        print(f"   Website: {record.website}")
        print(f"   Rating:  {record.rating} ({record.reviews})")
        print()

    if len(result) > limit:
        print(f"... and {len(result) - limit} more records")

    print(json.dumps(result.summary(), indent=2, default=str))


async def run(args) -> int:
    orchestrator = CrawlOrchestrator(
        site=get_site_config(args.site),
        headless=not args.headed,
        max_pages=args.max_pages,
    )
    payload = {'keywords': args.keywords, 'page': args.page, 'lci': args.lci}

    try:
        result = await orchestrator.run(payload)
    except CrawlRequestError as e:
        print(f"Invalid request: {e}")
        return 2

    print_result(result, args.show)

    if args.csv:
        from api.export import write_csv
        path = write_csv(result, args.csv)
        print(f"\n✓ CSV written to {path}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description='Crawl listing pages for keywords')
    parser.add_argument('keywords', nargs='*', help='Keywords to search')
    parser.add_argument('--lci', type=str, help='Location-context identifier')
    parser.add_argument('--page', type=int, default=1, help='Starting page number')
    parser.add_argument('--site', type=str, default='localservices', help='Site key')
    parser.add_argument('--max-pages', type=int, default=None, help='Per-keyword page ceiling')
    parser.add_argument('--csv', type=str, help='Write results to this CSV file')
    parser.add_argument('--show', type=int, default=10, help='Number of records to print')
    parser.add_argument('--headed', action='store_true', help='Show the browser window')
    parser.add_argument('--list', action='store_true', help='List configured sites')

    args = parser.parse_args()

    if args.list:
        list_sites()
        return 0

    if not args.keywords:
        parser.print_help()
        print("\nExample: python -m scrapers.run_crawl plumber --lci 2573469")
        return 1

    return asyncio.run(run(args))


if __name__ == '__main__':
    raise SystemExit(main())
