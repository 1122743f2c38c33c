#!/usr/bin/env python3
"""
Entry point for running the CDN rewrite web API.

Usage:
    python -m cdn_rewrite.web.run --config cdn.json --host 0.0.0.0 --port 5000
"""

import argparse
import logging
import sys

from ..config import FileConfigStore
from ..exceptions import ConfigurationError
from ..utils.constants import DEFAULT_HOST, DEFAULT_PORT
from ..utils.log import configure_logging, print_error, print_info
from .app import run_app


def main() -> int:
    """Parse arguments and run the web application."""
    parser = argparse.ArgumentParser(
        description='Run the CDN rewrite web API'
    )
    parser.add_argument(
        '--config', '-c',
        help='JSON configuration file; HTML served by the app is rewritten with it'
    )
    parser.add_argument(
        '--host',
        default=DEFAULT_HOST,
        help=f'Host to bind to (default: {DEFAULT_HOST})'
    )
    parser.add_argument(
        '--port', '-p',
        type=int,
        default=DEFAULT_PORT,
        help=f'Port to listen on (default: {DEFAULT_PORT})'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug mode'
    )

    args = parser.parse_args()
    configure_logging(logging.DEBUG if args.debug else logging.INFO)

    config_provider = None
    if args.config:
        store = FileConfigStore(args.config)
        try:
            store.snapshot()
        except ConfigurationError as e:
            print_error(str(e))
            return 1
        config_provider = store.snapshot

    print_info(f"Starting CDN rewrite API at http://{args.host}:{args.port}")
    run_app(config_provider, host=args.host, port=args.port, debug=args.debug)
    return 0


if __name__ == '__main__':
    sys.exit(main())
