"""
Rewrite strategies for matched URLs.

Both strategies are pure functions of (parsed URL, rule, base URL) and
return the new URL string.
"""

from typing import Callable, Dict, Optional

from ..exceptions import MalformedUrlError, UnresolvableHostSubstitution
from ..utils.urls import ensure_trailing_slash, get_filename, is_root_relative, join_base
from .classifier import classify
from .models import ParsedUrl, RewriteRule, RewriteType


def rewrite_host_only(parsed: ParsedUrl, rule: RewriteRule, base_url: str) -> str:
    """
    Replace the host of a URL, keeping everything else verbatim.

    The host position is taken from the decomposed authority (right after
    "scheme://" or "//" and any userinfo), so a host name repeated in the
    path or query is never touched. Scheme, userinfo, port, path, query and
    fragment are preserved byte for byte.

    Args:
        parsed: Classified URL
        rule: HOST_ONLY rule; rule.rule is the replacement host
        base_url: Canonical base URL of the site (unused; kept for a
            uniform strategy signature)

    Returns:
        URL with the host replaced

    Raises:
        UnresolvableHostSubstitution: If the URL has no host or its
            authority cannot be located in the raw string
    """
    raw = parsed.raw
    if not parsed.host:
        raise UnresolvableHostSubstitution(raw)

    authority_start = len(parsed.scheme) + 3 if parsed.scheme else 2
    if raw[authority_start - 2:authority_start] != '//' or not raw.startswith(parsed.netloc, authority_start):
        raise UnresolvableHostSubstitution(raw)

    host_start = authority_start
    if parsed.userinfo is not None:
        host_start += len(parsed.userinfo) + 1
    host_end = host_start + len(parsed.host)

    if raw[host_start:host_end] != parsed.host:
        raise UnresolvableHostSubstitution(raw)

    return raw[:host_start] + rule.rule + raw[host_end:]


def rewrite_full_url(parsed: ParsedUrl, rule: RewriteRule, base_url: str) -> str:
    """
    Replace everything up to the file name of a URL.

    The new URL is the rule's base URL (with a trailing slash) followed by
    the last path segment of the original. Query and fragment are dropped.
    A root-relative rule target is made absolute with the site's base URL.

    Args:
        parsed: Classified URL
        rule: FULL_URL rule; rule.rule is the replacement base URL
        base_url: Canonical base URL of the site

    Returns:
        Rewritten absolute URL
    """
    filename = get_filename(parsed.path)
    target = ensure_trailing_slash(rule.rule) + filename

    if is_root_relative(target):
        target = join_base(base_url, target)

    return target


STRATEGIES: Dict[RewriteType, Callable[[ParsedUrl, RewriteRule, str], str]] = {
    RewriteType.HOST_ONLY: rewrite_host_only,
    RewriteType.FULL_URL: rewrite_full_url,
}


def apply_rule(parsed: ParsedUrl, rule: Optional[RewriteRule], base_url: str) -> str:
    """
    Rewrite a classified URL with the strategy selected by the rule type.

    Args:
        parsed: Classified URL
        rule: Matched rule, or None for no rewrite
        base_url: Canonical base URL of the site

    Returns:
        Rewritten URL (parsed.raw when rule is None)

    Raises:
        UnresolvableHostSubstitution: See rewrite_host_only
    """
    if rule is None:
        return parsed.raw
    return STRATEGIES[rule.type](parsed, rule, base_url)


def rewrite_url(url: str, rule: Optional[RewriteRule], base_url: str) -> str:
    """
    Rewrite a single URL string with a rule.

    Malformed URLs and URLs whose host cannot be substituted are returned
    unchanged.

    Args:
        url: URL to rewrite
        rule: Rule to apply, or None
        base_url: Canonical base URL of the site

    Returns:
        Rewritten URL, or the original URL
    """
    if rule is None:
        return url

    try:
        return apply_rule(classify(url, base_url), rule, base_url)
    except (MalformedUrlError, UnresolvableHostSubstitution):
        return url
