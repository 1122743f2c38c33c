#!/usr/bin/env python3
"""
CDN Rewrite - rewrite asset URLs in HTML files to point at a CDN.

Reads HTML from files or stdin, rewrites whitelisted link and image URLs
that match a rule, and writes the result to stdout, a file or a directory.

Usage:
    python -m cdn_rewrite.main --config cdn.json page.html -o out.html

Features:
    - Host-only rules swap the host of matching URLs
    - Full-URL rules move matching files under a new base URL
    - Root-relative links are anchored to the site's base URL
    - Markup outside rewritten attributes is left byte-for-byte intact
"""

import argparse
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from .config import build_config, read_config_file
from .exceptions import ConfigurationError
from .rewriter import RewriteConfig, RewriteResult, UrlRewriter
from .utils.log import (
    configure_logging,
    create_progress,
    print_error,
    print_info,
    print_status,
    print_success,
    print_warning,
)


STDIN_MARKER = '-'


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list (default: sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog='cdn-rewrite',
        description='Rewrite asset URLs in HTML to point at a CDN',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s --config cdn.json index.html -o index.cdn.html
    %(prog)s -b https://example.com -r host_only:png:cdn.example.net < page.html
    %(prog)s --config cdn.json --in-place site/*.html
    %(prog)s --config cdn.json --check-config

Rules are given as TYPE:MATCH:RULE where TYPE is host_only or full_url.
        """
    )

    parser.add_argument(
        'inputs',
        nargs='*',
        metavar='INPUT',
        help='HTML files to rewrite (default: read stdin; "-" also means stdin)'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        help='Output file, or output directory when several inputs are given (default: stdout)'
    )

    parser.add_argument(
        '--in-place', '-i',
        action='store_true',
        help='Overwrite input files with the rewritten HTML'
    )

    # Configuration
    parser.add_argument(
        '--config', '-c',
        type=str,
        help='JSON configuration file'
    )

    parser.add_argument(
        '--base-url', '-b',
        type=str,
        help='Canonical site URL (overrides the configuration file)'
    )

    parser.add_argument(
        '--whitelist', '-w',
        action='append',
        default=[],
        metavar='DOMAIN',
        help='Host eligible for rewriting; repeat or comma-separate for several'
    )

    parser.add_argument(
        '--rule', '-r',
        action='append',
        default=[],
        metavar='TYPE:MATCH:RULE',
        help='Rewrite rule appended after the configured ones'
    )

    parser.add_argument(
        '--check-config',
        action='store_true',
        help='Validate the configuration and exit'
    )

    # Output control
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress output except errors'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write logs to this file'
    )

    return parser.parse_args(argv)


def parse_rule_option(value: str) -> Dict[str, str]:
    """
    Parse a TYPE:MATCH:RULE command line rule.

    Args:
        value: Rule option value

    Returns:
        Rule mapping in the configuration file format

    Raises:
        ValueError: If the value does not have three parts
    """
    parts = value.split(':', 2)
    if len(parts) != 3:
        raise ValueError(f"Rule must look like TYPE:MATCH:RULE, got {value!r}")

    rule_type, match, rule = parts
    return {'type': rule_type, 'match': match, 'rule': rule}


def assemble_config_data(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Merge the configuration file with command line overrides.

    Args:
        args: Parsed arguments

    Returns:
        Configuration data in the configuration file format
    """
    data: Dict[str, Any] = read_config_file(args.config) if args.config else {}

    if args.base_url:
        data['base_url'] = args.base_url

    if args.whitelist:
        domains = [
            domain.strip()
            for option in args.whitelist
            for domain in option.split(',')
            if domain.strip()
        ]
        data['whitelist'] = list(data.get('whitelist') or []) + domains

    if args.rule:
        rules = [parse_rule_option(option) for option in args.rule]
        data['rules'] = list(data.get('rules') or []) + rules

    return data


def read_input(path: str) -> str:
    """Read an HTML document from a file or stdin, keeping line endings."""
    if path == STDIN_MARKER:
        return sys.stdin.buffer.read().decode('utf-8')
    with open(path, 'r', encoding='utf-8', newline='') as f:
        return f.read()


def write_output(path: Optional[str], html: str) -> None:
    """Write an HTML document to a file, or stdout when path is None."""
    if path is None:
        sys.stdout.write(html)
        sys.stdout.flush()
        return

    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, 'w', encoding='utf-8', newline='') as f:
        f.write(html)


def output_path_for(args: argparse.Namespace, source: str, several: bool) -> Optional[str]:
    """
    Decide where the rewritten version of an input goes.

    Args:
        args: Parsed arguments
        source: Input path
        several: Whether more than one input is processed

    Returns:
        Output file path, or None for stdout
    """
    if args.in_place and source != STDIN_MARKER:
        return source
    if args.output is None:
        return None
    if several:
        return os.path.join(args.output, os.path.basename(source))
    return args.output


def print_config(config: RewriteConfig) -> None:
    """Print the effective configuration."""
    print_info(f"Base URL: {config.base_url}")
    print_info(f"Whitelisted hosts: {', '.join(sorted(config.whitelist)) or '(none)'}")
    for index, rule in enumerate(config.rules, start=1):
        print_info(f"Rule {index}: {rule.type.name.lower()} *{rule.match} -> {rule.rule}")
    if not config.rules:
        print_warning("No rewrite rules configured; documents will not change")


def print_summary(results: List[RewriteResult]) -> None:
    """
    Print the rewrite summary.

    Args:
        results: One RewriteResult per processed document
    """
    print_success("REWRITE SUMMARY")
    print_status(f"  Documents:        {len(results)}", "white")
    print_status(f"  URLs examined:    {sum(r.examined for r in results)}", "white")
    print_status(f"  URLs rewritten:   {sum(r.rewritten for r in results)}", "white")
    print_status(f"  Not whitelisted:  {sum(r.skipped_not_whitelisted for r in results)}", "white")
    print_status(f"  Malformed:        {sum(r.skipped_malformed for r in results)}", "white")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CDN rewriter.

    Args:
        argv: Argument list (default: sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_arguments(argv)

    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    configure_logging(log_level, args.log_file)

    try:
        config, errors = build_config(assemble_config_data(args))

        for field_key, message in errors:
            print_warning(f"{field_key}: {message}")

        if args.check_config:
            if not args.quiet:
                print_config(config)
            if errors:
                print_error(f"Configuration has {len(errors)} invalid entries")
                return 1
            print_success("Configuration is valid")
            return 0

        inputs = args.inputs or [STDIN_MARKER]
        several = len(inputs) > 1
        if several and args.output is None and not args.in_place:
            raise ValueError("Several inputs need --output DIRECTORY or --in-place")

        rewriter = UrlRewriter(config)
        results: List[RewriteResult] = []

        with create_progress() as progress:
            task = progress.add_task("Rewriting", total=len(inputs), visible=several and not args.quiet)
            for source in inputs:
                result = rewriter.rewrite(read_input(source))
                write_output(output_path_for(args, source, several), result.document)
                results.append(result)
                progress.advance(task)

        if not args.quiet:
            print_summary(results)

        return 0

    except KeyboardInterrupt:
        print_error("Interrupted by user")
        return 1
    except (ConfigurationError, ValueError) as e:
        print_error(f"Invalid input: {e}")
        return 1
    except OSError as e:
        print_error(f"Error: {e}")
        return 1


def run() -> None:
    """Entry point wrapper for running as module."""
    sys.exit(main())


if __name__ == '__main__':
    run()
