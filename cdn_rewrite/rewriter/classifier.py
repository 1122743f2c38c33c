"""
URL classifier for the rewrite engine.

Decomposes attribute values into scheme, host and path, anchoring
root-relative URLs to the site's base URL first.
"""

from urllib.parse import urlsplit

from ..exceptions import MalformedUrlError
from ..utils.urls import anchor_to_base, is_root_relative, split_netloc
from .models import ParsedUrl


def has_authority(url: str, scheme: str) -> bool:
    """
    Check whether a URL carries an authority marker ("//") after its scheme.

    Args:
        url: URL string
        scheme: Scheme as returned by urlsplit (may be empty)

    Returns:
        True if "//" follows the scheme (or starts a scheme-less URL)
    """
    if scheme:
        return url[len(scheme) + 1:].startswith('//')
    return url.startswith('//')


def classify(url: str, base_url: str) -> ParsedUrl:
    """
    Decompose a URL into its components.

    Root-relative URLs ("/img/a.png") are anchored to base_url before
    decomposition. Protocol-relative URLs ("//cdn/a.png") are decomposed as
    they are and carry a host without a scheme. URLs without an authority
    ("mailto:", "#top", "page.html") classify with host None.

    Args:
        url: Attribute value to classify
        base_url: Canonical base URL of the site

    Returns:
        ParsedUrl for the (possibly anchored) URL

    Raises:
        MalformedUrlError: If the URL cannot be decomposed
    """
    resolved = anchor_to_base(url, base_url) if is_root_relative(url) else url

    try:
        parts = urlsplit(resolved)
    except ValueError as e:
        raise MalformedUrlError(url, str(e)) from e

    host = None
    userinfo = None
    port = None

    if has_authority(resolved, parts.scheme):
        try:
            userinfo, host, port = split_netloc(parts.netloc)
        except ValueError as e:
            raise MalformedUrlError(url, str(e)) from e

        if not host:
            raise MalformedUrlError(url, "empty host")

    return ParsedUrl(
        scheme=parts.scheme or None,
        host=host,
        path=parts.path,
        raw=resolved,
        netloc=parts.netloc,
        userinfo=userinfo,
        port=port,
        query=parts.query,
        fragment=parts.fragment,
    )
