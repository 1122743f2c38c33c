"""
Shared constants for the CDN rewriter.

Contains common configuration values used across multiple modules.
"""

# Configuration format understood by the rewrite engine; any other version
# passes documents through untouched
SUPPORTED_CONFIG_VERSION = "1.0"

# (tag, attribute) pairs rewritten by default
DEFAULT_TARGETS = (
    ("a", "href"),
    ("img", "src"),
)

# Field keys used in sanitizer diagnostics
RULES_KEY = "rules"
WHITELIST_KEY = "whitelist"

# Default web UI bind address
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5000
