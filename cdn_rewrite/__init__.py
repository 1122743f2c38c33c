"""
CDN Rewrite - rewrites asset URLs in generated HTML to point at a CDN.

This package classifies link and image URLs in an HTML document, checks them
against a whitelist of origin hosts and an ordered set of suffix rules, and
rewrites the matching ones to an alternate host.
"""

__version__ = "1.0.0"
__author__ = "CDN Rewrite Team"
