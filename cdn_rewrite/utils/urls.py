"""
URL utilities for the CDN rewriter.

Provides root-relative anchoring, trailing slash handling, and authority
splitting that keeps the host exactly as it was written.
"""

import re
from typing import Optional, Tuple
from urllib.parse import urlsplit


# Characters that can never appear in a host, even an unusual one
INVALID_HOST_CHARS = re.compile(r'[\s<>"\'`{}|\\^/?#@]')


def is_root_relative(url: str) -> bool:
    """
    Check whether a URL is root-relative ("/path", not "//host/path").

    Args:
        url: URL to check

    Returns:
        True if the URL starts with exactly one slash
    """
    return url.startswith('/') and not url.startswith('//')


def ensure_trailing_slash(url: str) -> str:
    """Return the URL with a single trailing slash appended if it has none."""
    if url.endswith('/'):
        return url
    return url + '/'


def anchor_to_base(url: str, base_url: str) -> str:
    """
    Anchor a root-relative URL to the site's base URL.

    The base URL keeps its own path, so "/img/a.png" against
    "https://example.com/blog" becomes "https://example.com/blog/img/a.png".

    Args:
        url: Root-relative URL
        base_url: Canonical base URL of the site

    Returns:
        Absolute URL string
    """
    return ensure_trailing_slash(base_url) + url[1:]


def join_base(base_url: str, path: str) -> str:
    """
    Prefix a root-relative path with the base URL.

    Exactly one slash separates the two parts.

    Args:
        base_url: Canonical base URL of the site
        path: Root-relative path

    Returns:
        Absolute URL string
    """
    return base_url.rstrip('/') + '/' + path.lstrip('/')


def split_netloc(netloc: str) -> Tuple[Optional[str], str, Optional[str]]:
    """
    Split an authority into userinfo, host and port.

    Unlike SplitResult.hostname, the host is returned exactly as written
    (case preserved, IPv6 brackets kept).

    Args:
        netloc: Authority component ("user:pass@host:port")

    Returns:
        Tuple of (userinfo or None, host, port string or None)

    Raises:
        ValueError: If the port is not a number in range or the host
            contains invalid characters
    """
    userinfo: Optional[str] = None
    hostport = netloc
    if '@' in netloc:
        userinfo, _, hostport = netloc.rpartition('@')

    port: Optional[str] = None
    if hostport.startswith('['):
        end = hostport.find(']')
        if end == -1:
            raise ValueError("unterminated IPv6 address")
        host = hostport[:end + 1]
        rest = hostport[end + 1:]
        if rest:
            if not rest.startswith(':'):
                raise ValueError("unexpected characters after IPv6 address")
            port = rest[1:]
    else:
        host, sep, port_part = hostport.partition(':')
        if sep:
            port = port_part

    if port is not None:
        # An empty port ("host:") is allowed by RFC 3986
        if port and (not port.isdigit() or int(port) > 65535):
            raise ValueError(f"invalid port {port!r}")

    if INVALID_HOST_CHARS.search(host):
        raise ValueError(f"invalid characters in host {host!r}")

    return userinfo, host, port


def get_host(url: str) -> Optional[str]:
    """
    Extract the host from an absolute URL, preserving its case.

    Args:
        url: URL to extract the host from

    Returns:
        Host string, or None if the URL has no usable host
    """
    try:
        netloc = urlsplit(url).netloc
        if not netloc:
            return None
        return split_netloc(netloc)[1] or None
    except ValueError:
        return None


def get_filename(path: str) -> str:
    """
    Get the last segment of a URL path.

    Args:
        path: URL path

    Returns:
        Everything after the final slash, or an empty string if the path
        ends with a slash or is empty
    """
    return path.rsplit('/', 1)[-1]
