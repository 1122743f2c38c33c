"""
Validation utilities for rewrite configuration.

Domain name and URL checks plus the sanitizing transforms applied to user
supplied rules and whitelist entries before they reach the rewrite engine.
"""

import re
from urllib.parse import urlsplit

from .urls import split_netloc


# A single DNS label: alphanumeric start, up to 63 characters
DOMAIN_LABEL_PATTERN = re.compile(r'^[a-z0-9][a-z0-9-]{0,62}$', re.IGNORECASE)

# Leading scheme users tend to paste in front of a host name
SCHEME_PREFIX_PATTERN = re.compile(r'^https?://', re.IGNORECASE)

# Anything that is not a word character
NON_WORD_PATTERN = re.compile(r'\W', re.ASCII)

# Characters that are not allowed anywhere in a URL
URL_DISALLOWED_PATTERN = re.compile(
    r"[^A-Za-z0-9$\-_.+!*'(),{}|\\^~\[\]`<>#%\";/?:@&=]"
)

# RFC 3986 scheme
SCHEME_PATTERN = re.compile(r'^[A-Za-z][A-Za-z0-9+.-]*$')


def validate_domain_name(domain: str) -> bool:
    """
    Check whether a string is a syntactically valid domain name.

    Every dot-separated label must start with a letter or digit, contain
    only letters, digits and hyphens, be at most 63 characters long and
    must not end with a hyphen.

    Args:
        domain: Domain name to check

    Returns:
        True if the domain name is valid
    """
    if not domain:
        return False

    for label in domain.split('.'):
        if not DOMAIN_LABEL_PATTERN.match(label) or label.endswith('-'):
            return False
    return True


def validate_absolute_url(url: str) -> bool:
    """
    Check whether a string is an absolute URL with a scheme and a host.

    Args:
        url: URL to check

    Returns:
        True if the URL is absolute and well-formed
    """
    if not url:
        return False

    try:
        parts = urlsplit(url)
        if not parts.scheme or not SCHEME_PATTERN.match(parts.scheme):
            return False
        if not parts.netloc:
            return False
        _, host, _ = split_netloc(parts.netloc)
    except ValueError:
        return False

    return bool(host)


def strip_scheme(value: str) -> str:
    """Remove a leading "http://" or "https://" from a host entry."""
    return SCHEME_PREFIX_PATTERN.sub('', value, count=1)


def sanitize_match(value: str) -> str:
    """Reduce a rule's match suffix to word characters only."""
    return NON_WORD_PATTERN.sub('', value)


def sanitize_url(value: str) -> str:
    """Remove characters that are not allowed in a URL."""
    return URL_DISALLOWED_PATTERN.sub('', value)
