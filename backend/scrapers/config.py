"""
Listing site configurations.

Each site has a SiteConfig that defines:
- The listing URL and its fixed query parameters
- CSS selectors for cards, the expand target and the next-page control
- CSS selectors for every business field
"""

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class SiteConfig:
    """Configuration for a paginated search-results listing service."""
    name: str                           # Full display name
    listing_url: str                    # Listing endpoint (without query string)
    card_selector: str                  # One element per result card
    expand_selector: str                # Clickable region inside a card
    next_page_selector: str             # Presence means another page exists
    field_selectors: Dict[str, str] = field(default_factory=dict)
    query_params: Dict[str, str] = field(default_factory=dict)  # Fixed params (locale, region)
    card_settle_seconds: float = 1.0    # Render time after expanding a card
    page_delay_seconds: float = 3.0     # Pause between listing pages
    enabled: bool = True


# ============================================================
# SITE CONFIGURATIONS
# ============================================================

SITES = {
    'localservices': SiteConfig(
        name='GoogleLocalServices',
        listing_url='https://www.google.com/localservices/prolist',
        card_selector='div[data-test-id="organic-list-card"]',
        expand_selector='div[role="button"] > div:first-of-type',
        next_page_selector='button[jsname="LgbsSe"]',
        field_selectors={
            'name': '.tZPcob',
            'phone': '[data-phone-number][role="button"][class*=" "]',
            'phone_value': 'div:last-of-type',
            'website': '.iPF7ob > div:last-of-type',
            'address': '.fccl3c',
            'reviews': '.PN9vWe',
            'rating': '.ZjTWef',
            'email': '.email-class-selector',
        },
        query_params={
            'hl': 'en-GB',
            'gl': 'uk',
            'ssta': '1',
            'src': '2',
        },
    ),
}

DEFAULT_SITE = 'localservices'


# ============================================================
# HELPER FUNCTIONS
# ============================================================

def get_site_config(site_key: str = DEFAULT_SITE) -> SiteConfig:
    """
    Get configuration for a site by its key.

    Args:
        site_key: Site identifier (e.g., 'localservices')

    Returns:
        SiteConfig for the site

    Raises:
        ValueError: If site_key is not found
    """
    if site_key not in SITES:
        valid_keys = ', '.join(sorted(SITES.keys()))
        raise ValueError(f"Unknown site: '{site_key}'. Valid sites: {valid_keys}")
    return SITES[site_key]


def list_sites() -> list:
    """List all site keys."""
    return list(SITES.keys())


def get_site_summary() -> list:
    """Get a summary of all sites for display."""
    summary = []
    for key, config in SITES.items():
        summary.append({
            'key': key,
            'name': config.name,
            'url': config.listing_url,
            'enabled': config.enabled,
        })
    return summary
