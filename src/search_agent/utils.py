"""
Utility functions for the search agent.
"""


def is_valid_url(url: str) -> bool:
    """Check if URL format is valid."""
    return url.startswith(("http://", "https://"))


def is_url_blocked(url: str) -> bool:
    """
    Check if a URL should be blocked from fetching.

    Args:
        url: The URL to check

    Returns:
        True if the URL is blocked, False otherwise
    """
    blocked_domains = [
        # The page reader itself. Tool-calling models sometimes try to read
        # through it directly, which burns the key's quota twice.
        "r.jina.ai",
    ]

    return any(blocked_domain in url for blocked_domain in blocked_domains)
