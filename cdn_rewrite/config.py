"""
Configuration for the CDN rewriter.

Sanitizes user supplied rules and whitelist entries, builds immutable
RewriteConfig snapshots, and keeps a snapshot in sync with a JSON file.
"""

import json
import os
import threading
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .exceptions import ConfigurationError, InvalidDomainError, InvalidRuleError
from .rewriter.models import RewriteConfig, RewriteRule, RewriteType
from .utils.constants import DEFAULT_TARGETS, RULES_KEY, SUPPORTED_CONFIG_VERSION, WHITELIST_KEY
from .utils.log import get_logger
from .utils.urls import get_host
from .utils.validators import (
    sanitize_match,
    sanitize_url,
    strip_scheme,
    validate_absolute_url,
    validate_domain_name,
)


# (field key, message) pairs reported back to whoever edits the configuration
ValidationErrors = List[Tuple[str, str]]


def validate_rule(raw: Any) -> RewriteRule:
    """
    Sanitize and validate a single stored rule.

    The match suffix is reduced to word characters. HOST_ONLY targets lose
    a leading "http://" or "https://" and must be a domain name; FULL_URL
    targets lose characters not allowed in URLs and must be absolute.

    Args:
        raw: Rule mapping with "type", "match" and "rule" keys

    Returns:
        Validated RewriteRule

    Raises:
        InvalidRuleError: If the rule cannot be used
    """
    if not isinstance(raw, dict):
        raise InvalidRuleError("Rule must be an object with type, match and rule")

    try:
        rule_type = RewriteType.parse(raw.get('type'))
    except ValueError:
        raise InvalidRuleError("Invalid rule type entered") from None

    match = sanitize_match(str(raw.get('match') or ''))
    if not match:
        raise InvalidRuleError("Rule match must contain at least one word character")

    target = str(raw.get('rule') or '').strip()
    if rule_type == RewriteType.FULL_URL:
        target = sanitize_url(target)
        valid = validate_absolute_url(target)
    else:
        target = strip_scheme(target)
        valid = validate_domain_name(target)

    if not valid:
        raise InvalidRuleError(f"Invalid rewrite URL entered: {target!r}")

    return RewriteRule(type=rule_type, match=match, rule=target)


def validate_domain(raw: Any) -> str:
    """
    Sanitize and validate a single whitelist entry.

    Args:
        raw: Domain name, optionally prefixed with http:// or https://

    Returns:
        Validated domain name

    Raises:
        InvalidDomainError: If the entry is not a domain name
    """
    value = strip_scheme(str(raw).strip())
    if not validate_domain_name(value):
        raise InvalidDomainError(f'Invalid domain name "{value}" entered')
    return value


def sanitize_rules(raw_rules: Iterable[Any]) -> Tuple[List[RewriteRule], ValidationErrors]:
    """
    Validate a list of stored rules, dropping the invalid ones.

    Args:
        raw_rules: Rule mappings in configured order

    Returns:
        Tuple of (valid rules in their original order, validation errors)
    """
    rules: List[RewriteRule] = []
    errors: ValidationErrors = []

    for index, raw in enumerate(raw_rules, start=1):
        try:
            rules.append(validate_rule(raw))
        except InvalidRuleError as e:
            errors.append((RULES_KEY, f"Rule {index}: {e}"))

    return rules, errors


def sanitize_whitelist(entries: Iterable[Any]) -> Tuple[List[str], ValidationErrors]:
    """
    Validate whitelist entries, dropping blanks, duplicates and invalid ones.

    Args:
        entries: Domain names as entered

    Returns:
        Tuple of (valid domains in first-seen order, validation errors)
    """
    domains: List[str] = []
    errors: ValidationErrors = []

    for entry in entries:
        if entry is None or not str(entry).strip():
            continue
        try:
            domain = validate_domain(entry)
        except InvalidDomainError as e:
            errors.append((WHITELIST_KEY, str(e)))
            continue
        if domain not in domains:
            domains.append(domain)

    return domains, errors


def _parse_targets(raw_targets: Any) -> Tuple[Tuple[str, str], ...]:
    """Validate the (tag, attribute) pairs of a configuration."""
    if raw_targets is None:
        return DEFAULT_TARGETS

    targets = []
    try:
        for tag_name, attribute in raw_targets:
            if not isinstance(tag_name, str) or not isinstance(attribute, str) or not tag_name or not attribute:
                raise ConfigurationError(f"Invalid target: {[tag_name, attribute]!r}")
            targets.append((tag_name, attribute))
    except (TypeError, ValueError) as e:
        raise ConfigurationError("Targets must be a list of [tag, attribute] pairs") from e

    return tuple(targets)


def build_config(data: Dict[str, Any]) -> Tuple[RewriteConfig, ValidationErrors]:
    """
    Build a configuration snapshot from decoded configuration data.

    Invalid rules and whitelist entries are dropped and reported; a missing
    whitelist defaults to the host of the base URL.

    Args:
        data: Mapping in the configuration file format

    Returns:
        Tuple of (snapshot, validation errors)

    Raises:
        ConfigurationError: If the base URL is missing or the structure is wrong
    """
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration must be an object")

    base_url = str(data.get('base_url') or '').strip()
    if not validate_absolute_url(base_url):
        raise ConfigurationError(f"A valid absolute base_url is required, got {base_url!r}")

    raw_rules = data.get('rules') or []
    if not isinstance(raw_rules, list):
        raise ConfigurationError("rules must be a list")
    rules, errors = sanitize_rules(raw_rules)

    if 'whitelist' in data:
        raw_whitelist = data['whitelist'] or []
        if not isinstance(raw_whitelist, list):
            raise ConfigurationError("whitelist must be a list")
        whitelist, whitelist_errors = sanitize_whitelist(raw_whitelist)
        errors.extend(whitelist_errors)
    else:
        whitelist = [get_host(base_url)]

    config = RewriteConfig(
        version=str(data.get('version', SUPPORTED_CONFIG_VERSION)),
        base_url=base_url,
        rules=tuple(rules),
        whitelist=frozenset(whitelist),
        targets=_parse_targets(data.get('targets')),
    )
    return config, errors


def default_config(site_url: str) -> RewriteConfig:
    """
    Configuration a freshly set up site starts with.

    No rules, and only the site's own host whitelisted.

    Args:
        site_url: Canonical base URL of the site

    Returns:
        Default snapshot
    """
    config, _ = build_config({'base_url': site_url})
    return config


def read_config_file(path: str) -> Dict[str, Any]:
    """
    Read raw configuration data from a JSON file.

    Raises:
        ConfigurationError: If the file cannot be read or decoded
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in configuration file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a JSON object")
    return data


def load_config(path: str) -> Tuple[RewriteConfig, ValidationErrors]:
    """
    Load a configuration snapshot from a JSON file.

    Args:
        path: Path to the JSON configuration file

    Returns:
        Tuple of (snapshot, validation errors)

    Raises:
        ConfigurationError: If the file cannot be read or decoded
    """
    return build_config(read_config_file(path))


class FileConfigStore:
    """
    Keeps a configuration snapshot in sync with a JSON file.

    The file is re-read on the first snapshot() call after its modification
    time changes or after invalidate() is called. A broken file keeps the
    previous snapshot in service.
    """

    def __init__(self, path: str):
        """
        Initialize the store.

        Args:
            path: Path to the JSON configuration file
        """
        self.path = path
        self.logger = get_logger("config")
        self.errors: ValidationErrors = []

        self._lock = threading.Lock()
        self._snapshot: Optional[RewriteConfig] = None
        self._mtime: Optional[int] = None

    def snapshot(self) -> RewriteConfig:
        """
        Get the current configuration snapshot, reloading it if needed.

        Returns:
            Current RewriteConfig

        Raises:
            ConfigurationError: If no snapshot could ever be loaded
        """
        with self._lock:
            try:
                mtime = os.stat(self.path).st_mtime_ns
            except OSError as e:
                if self._snapshot is None:
                    raise ConfigurationError(f"Cannot read configuration file {self.path}: {e}") from e
                self.logger.warning(f"Configuration file unavailable, keeping previous snapshot: {e}")
                return self._snapshot

            if self._snapshot is not None and mtime == self._mtime:
                return self._snapshot

            try:
                config, errors = load_config(self.path)
            except ConfigurationError as e:
                if self._snapshot is None:
                    raise
                self.logger.error(f"Keeping previous configuration: {e}")
                return self._snapshot

            for field_key, message in errors:
                self.logger.warning(f"{field_key}: {message}")

            self._snapshot = config
            self._mtime = mtime
            self.errors = errors
            self.logger.info(
                f"Loaded configuration from {self.path}: "
                f"{len(config.rules)} rules, {len(config.whitelist)} whitelisted hosts"
            )
            return self._snapshot

    def invalidate(self) -> None:
        """Force the next snapshot() call to re-read the file."""
        with self._lock:
            self._mtime = None

    __call__ = snapshot
