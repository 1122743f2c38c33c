"""
Utility modules for the CDN rewriter.

Contains logging, URL handling, validation utilities, and constants.
"""

from .log import setup_logger, get_logger, configure_logging
from .urls import (
    is_root_relative,
    ensure_trailing_slash,
    anchor_to_base,
    join_base,
    split_netloc,
    get_host,
    get_filename,
)
from .validators import validate_domain_name, validate_absolute_url
from .constants import (
    SUPPORTED_CONFIG_VERSION,
    DEFAULT_TARGETS,
    RULES_KEY,
    WHITELIST_KEY,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "configure_logging",
    "is_root_relative",
    "ensure_trailing_slash",
    "anchor_to_base",
    "join_base",
    "split_netloc",
    "get_host",
    "get_filename",
    "validate_domain_name",
    "validate_absolute_url",
    "SUPPORTED_CONFIG_VERSION",
    "DEFAULT_TARGETS",
    "RULES_KEY",
    "WHITELIST_KEY",
]
