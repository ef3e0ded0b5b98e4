# ==============================================================================
# Domain Helpers
# ==============================================================================
"""
Hostname extraction and domain categorization.

Category tables are plain data: a mapping of category name to the domain
keywords that belong to it. The first category with a keyword contained in
the hostname wins; hostnames matching nothing are "other".
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Optional
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

OTHER_CATEGORY = "other"

DEFAULT_CATEGORY_TABLE: Mapping[str, tuple[str, ...]] = {
    "work": (
        "gmail.com",
        "docs.google.com",
        "slack.com",
        "teams.microsoft.com",
        "github.com",
        "stackoverflow.com",
    ),
    "social": ("facebook.com", "twitter.com", "instagram.com", "linkedin.com", "reddit.com"),
    "entertainment": ("youtube.com", "netflix.com", "spotify.com", "twitch.tv", "tiktok.com"),
    "shopping": ("amazon.com", "ebay.com", "shopify.com", "etsy.com", "walmart.com"),
    "news": ("cnn.com", "bbc.com", "reuters.com", "news.google.com", "nytimes.com"),
    "education": ("coursera.org", "edx.org", "khanacademy.org", "udemy.com", "wikipedia.org"),
}


def extract_domain(url: str) -> Optional[str]:
    """
    Extract the hostname from a URL.

    Args:
        url: Absolute URL, e.g. "https://github.com/user/repo"

    Returns:
        Lower-cased hostname, or None if the URL has no host or cannot be parsed
    """
    try:
        hostname = urlsplit(url).hostname
    except ValueError:
        logger.debug("Could not parse URL %r", url)
        return None
    return hostname or None


def root_domain(domain: str) -> Optional[str]:
    """Second-level domain ("docs.google.com" -> "google.com"), None for single labels."""
    parts = domain.split(".")
    if len(parts) < 2:
        return None
    return ".".join(parts[-2:])


def are_related(domain: str, others: Iterable[str]) -> bool:
    """Check whether any of `others` shares the second-level domain of `domain`."""
    root = root_domain(domain)
    if root is None:
        return False
    return any(root_domain(other) == root for other in others)


def categorize_domain(domain: str, table: Mapping[str, Iterable[str]] = DEFAULT_CATEGORY_TABLE) -> str:
    """
    Assign a category to a hostname.

    Args:
        domain: Hostname to categorize
        table: Category name -> domain keywords, checked in insertion order

    Returns:
        Category name, or "other" when nothing matches
    """
    for category, keywords in table.items():
        if any(keyword in domain for keyword in keywords):
            return category
    return OTHER_CATEGORY
