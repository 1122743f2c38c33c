"""
Flask web application for the CDN rewriter.

Provides a JSON API for rewriting documents and validating configuration,
and installs the rewrite middleware for HTML served by the application.
"""

from typing import Optional

from flask import Flask, request, jsonify

from ..config import build_config, sanitize_rules, sanitize_whitelist
from ..exceptions import ConfigurationError
from ..rewriter import UrlRewriter
from ..utils.constants import DEFAULT_HOST, DEFAULT_PORT
from .middleware import ConfigProvider, RewriteMiddleware


def _errors_to_json(errors):
    return [{'field': field_key, 'message': message} for field_key, message in errors]


def create_app(config_provider: Optional[ConfigProvider] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_provider: Callable returning the active configuration
            snapshot; without one, only requests carrying their own
            configuration can be rewritten

    Returns:
        Flask application
    """
    app = Flask(__name__)
    app.config_provider = config_provider

    # Composition root: the API itself only returns JSON, HTML pages that a
    # host application registers on this app are rewritten
    if config_provider is not None:
        RewriteMiddleware(config_provider).init_app(app)

    @app.route('/api/config')
    def get_config():
        """Return the active configuration snapshot."""
        if app.config_provider is None:
            return jsonify({'error': 'No configuration loaded'}), 404
        try:
            config = app.config_provider()
        except ConfigurationError as e:
            return jsonify({'error': str(e)}), 500
        return jsonify(config.to_dict())

    @app.route('/api/config/validate', methods=['POST'])
    def validate_config():
        """Sanitize rules and whitelist entries and report what was dropped."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({'error': 'No JSON data provided'}), 400

        raw_rules = data.get('rules') or []
        raw_whitelist = data.get('whitelist') or []
        if not isinstance(raw_rules, list) or not isinstance(raw_whitelist, list):
            return jsonify({'error': 'rules and whitelist must be lists'}), 400

        rules, errors = sanitize_rules(raw_rules)
        whitelist, whitelist_errors = sanitize_whitelist(raw_whitelist)
        errors.extend(whitelist_errors)

        return jsonify({
            'rules': [rule.to_dict() for rule in rules],
            'whitelist': whitelist,
            'errors': _errors_to_json(errors),
        })

    @app.route('/api/rewrite', methods=['POST'])
    def rewrite():
        """Rewrite an HTML document sent in the request body."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({'error': 'No JSON data provided'}), 400

        html = data.get('html')
        if not isinstance(html, str):
            return jsonify({'error': 'html is required'}), 400

        config_errors = []
        try:
            if 'config' in data:
                config, config_errors = build_config(data['config'])
            elif app.config_provider is not None:
                config = app.config_provider()
            else:
                return jsonify({'error': 'config is required'}), 400
        except ConfigurationError as e:
            return jsonify({'error': f'Invalid configuration: {e}'}), 400

        result = UrlRewriter(config).rewrite(html)

        return jsonify({
            'html': result.document,
            'stats': result.stats(),
            'diagnostics': [diagnostic.to_dict() for diagnostic in result.diagnostics],
            'configErrors': _errors_to_json(config_errors),
        })

    return app


def run_app(
    config_provider: Optional[ConfigProvider] = None,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    debug: bool = False
):
    """Run the Flask web application."""
    app = create_app(config_provider)
    app.run(host=host, port=port, debug=debug)
