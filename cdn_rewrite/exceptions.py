"""
Custom exceptions for the CDN rewrite engine
"""


class CdnRewriteError(Exception):
    """Base class for all errors raised by the package"""
    pass


class MalformedUrlError(CdnRewriteError):
    """Raised when a URL cannot be decomposed into scheme, host and path"""

    def __init__(self, url: str, reason: str = "malformed URL"):
        super().__init__(f"{reason}: {url!r}")
        self.url = url
        self.reason = reason


class UnresolvableHostSubstitution(CdnRewriteError):
    """Raised when a host-only rewrite cannot locate the host to replace"""

    def __init__(self, url: str):
        super().__init__(f"Cannot locate host to replace in {url!r}")
        self.url = url


class InvalidRuleError(CdnRewriteError):
    """Raised when a rewrite rule fails validation"""
    pass


class InvalidDomainError(CdnRewriteError):
    """Raised when a whitelist entry is not a valid domain name"""
    pass


class ConfigurationError(CdnRewriteError):
    """Raised when configuration validation fails"""
    pass


class DocumentRequiredError(CdnRewriteError, TypeError):
    """Raised when no document is handed to the rewriter"""
    pass
