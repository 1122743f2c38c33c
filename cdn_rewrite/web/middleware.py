"""
Flask integration for the CDN rewriter.

Registers the rewriter as an explicit response-pipeline stage: every HTML
response leaving the application has its asset URLs rewritten with the
configuration snapshot current for that request.
"""

from typing import Callable, Optional

from flask import Flask, Response

from ..exceptions import ConfigurationError
from ..rewriter import RewriteConfig, UrlRewriter
from ..utils.log import get_logger


ConfigProvider = Callable[[], RewriteConfig]

# Responses with these status codes carry no document
NO_BODY_STATUSES = (204, 304)


class RewriteMiddleware:
    """
    Rewrites asset URLs in HTML responses of a Flask application.

    Usage:
        store = FileConfigStore("cdn.json")
        RewriteMiddleware(store.snapshot).init_app(app)
    """

    def __init__(self, config_provider: ConfigProvider, app: Optional[Flask] = None):
        """
        Initialize the middleware.

        Args:
            config_provider: Callable returning the configuration snapshot
                to use; called once per response
            app: Optional Flask application to register with right away
        """
        self.config_provider = config_provider
        self.logger = get_logger("web")

        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Register the rewrite stage on a Flask application."""
        app.extensions['cdn_rewrite'] = self
        app.after_request(self.transform)

    def transform(self, response: Response) -> Response:
        """
        Rewrite the body of an HTML response.

        Streamed, pass-through and non-HTML responses are returned as they are.

        Args:
            response: Outgoing response

        Returns:
            The same response, with its body rewritten if needed
        """
        if response.mimetype != 'text/html':
            return response
        if response.direct_passthrough or response.is_streamed:
            return response
        if response.status_code in NO_BODY_STATUSES:
            return response

        try:
            config = self.config_provider()
        except ConfigurationError as e:
            self.logger.error(f"No rewrite configuration available, serving unmodified: {e}")
            return response

        charset = response.mimetype_params.get('charset', 'utf-8')
        try:
            html = response.get_data().decode(charset)
        except (UnicodeDecodeError, LookupError) as e:
            self.logger.warning(f"Cannot decode HTML response as {charset}, serving unmodified: {e}")
            return response

        result = UrlRewriter(config).rewrite(html)
        if not result.rewritten:
            return response

        try:
            response.set_data(result.document.encode(charset))
        except UnicodeEncodeError as e:
            self.logger.warning(f"Cannot encode rewritten HTML as {charset}, serving unmodified: {e}")

        return response
