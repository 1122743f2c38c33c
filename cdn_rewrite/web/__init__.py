"""
Web module for the CDN rewriter.

Provides the Flask middleware and a Flask-based JSON API.
"""

from .app import create_app
from .middleware import RewriteMiddleware

__all__ = ["create_app", "RewriteMiddleware"]
