"""
Rewrite engine for pointing asset URLs at a CDN.

Contains the URL classifier, rule matcher, rewrite strategies, and the
document rewriter that ties them together.
"""

from .models import (
    RewriteType,
    RewriteRule,
    RewriteConfig,
    ParsedUrl,
    RewriteDiagnostic,
    RewriteResult,
)
from .classifier import classify
from .matcher import find_rule
from .strategies import apply_rule, rewrite_url, rewrite_host_only, rewrite_full_url
from .rewrite import UrlRewriter, rewrite_document, parse_document

__all__ = [
    "RewriteType",
    "RewriteRule",
    "RewriteConfig",
    "ParsedUrl",
    "RewriteDiagnostic",
    "RewriteResult",
    "classify",
    "find_rule",
    "apply_rule",
    "rewrite_url",
    "rewrite_host_only",
    "rewrite_full_url",
    "UrlRewriter",
    "rewrite_document",
    "parse_document",
]
