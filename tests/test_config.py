from __future__ import annotations

import json
import os

import pytest

from cdn_rewrite.config import (
    FileConfigStore,
    build_config,
    default_config,
    load_config,
    sanitize_rules,
    sanitize_whitelist,
    validate_rule,
)
from cdn_rewrite.exceptions import ConfigurationError, InvalidRuleError
from cdn_rewrite.rewriter import RewriteRule, RewriteType
from cdn_rewrite.utils.validators import validate_absolute_url, validate_domain_name


def test_host_only_rule_is_sanitized() -> None:
    rule = validate_rule({"type": "host_only", "match": ".png", "rule": "https://cdn.example.net"})
    assert rule == RewriteRule(RewriteType.HOST_ONLY, "png", "cdn.example.net")


def test_full_url_rule_accepts_integer_type() -> None:
    rule = validate_rule({"type": 2, "match": "css", "rule": "http://cdn.example.net/assets"})
    assert rule.type is RewriteType.FULL_URL
    assert rule.rule == "http://cdn.example.net/assets"


@pytest.mark.parametrize(
    "raw",
    [
        {"type": "bogus", "match": "png", "rule": "cdn.example.net"},
        {"type": 3, "match": "png", "rule": "cdn.example.net"},
        {"type": True, "match": "png", "rule": "cdn.example.net"},
        {"type": "host_only", "match": "...", "rule": "cdn.example.net"},
        {"type": "host_only", "match": "png", "rule": "bad_host!"},
        {"type": "host_only", "match": "png", "rule": ""},
        {"type": "full_url", "match": "png", "rule": "not a url"},
        "host_only:png:cdn.example.net",
    ],
)
def test_invalid_rules_are_rejected(raw) -> None:
    with pytest.raises(InvalidRuleError):
        validate_rule(raw)


def test_sanitize_rules_keeps_order_and_reports_dropped_rules() -> None:
    rules, errors = sanitize_rules([
        {"type": "host_only", "match": "png", "rule": "one.example.net"},
        {"type": "bogus", "match": "png", "rule": "two.example.net"},
        {"type": "full_url", "match": "jpg", "rule": "http://three.example.net/img"},
    ])

    assert [rule.rule for rule in rules] == ["one.example.net", "http://three.example.net/img"]
    assert len(errors) == 1
    field_key, message = errors[0]
    assert field_key == "rules"
    assert "Rule 2" in message


def test_sanitize_whitelist() -> None:
    domains, errors = sanitize_whitelist([
        "example.com",
        "  ",
        None,
        "https://static.example.com",
        "bad domain",
        "example.com",
        "-bad.example.com",
        "trailing-.example.com",
    ])

    assert domains == ["example.com", "static.example.com"]
    assert len(errors) == 3
    assert all(field_key == "whitelist" for field_key, _ in errors)


@pytest.mark.parametrize(
    "domain, valid",
    [
        ("example.com", True),
        ("localhost", True),
        ("Sub-Domain.Example.COM", True),
        ("a" * 63 + ".com", True),
        ("a" * 64 + ".com", False),
        ("example..com", False),
        ("example.com.", False),
        ("", False),
        ("under_score.com", False),
    ],
)
def test_validate_domain_name(domain: str, valid: bool) -> None:
    assert validate_domain_name(domain) is valid


def test_validate_absolute_url() -> None:
    assert validate_absolute_url("https://cdn.example.net/assets")
    assert not validate_absolute_url("/assets")
    assert not validate_absolute_url("cdn.example.net/assets")
    assert not validate_absolute_url("http:///assets")


def test_build_config_defaults() -> None:
    config, errors = build_config({"base_url": "https://Example.com/blog"})

    assert errors == []
    assert config.version == "1.0"
    assert config.rules == ()
    assert config.whitelist == frozenset({"Example.com"})
    assert config.targets == (("a", "href"), ("img", "src"))


def test_build_config_normalizes_targets() -> None:
    config, _ = build_config({"base_url": "https://example.com", "targets": [["IMG", "SRC"], ["img", "src"]]})
    assert config.targets == (("img", "src"),)


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"base_url": "example.com"},
        {"base_url": "https://example.com", "rules": "png"},
        {"base_url": "https://example.com", "whitelist": "example.com"},
        {"base_url": "https://example.com", "targets": [["a"]]},
        {"base_url": "https://example.com", "targets": [["a", 1]]},
        ["https://example.com"],
    ],
)
def test_build_config_rejects_unusable_configuration(data) -> None:
    with pytest.raises(ConfigurationError):
        build_config(data)


def test_build_config_drops_invalid_entries() -> None:
    config, errors = build_config({
        "version": "1.0",
        "base_url": "https://example.com",
        "whitelist": ["example.com", "bad domain"],
        "rules": [{"type": "host_only", "match": "png", "rule": "cdn.example.net"}, {"type": 9}],
    })

    assert config.whitelist == frozenset({"example.com"})
    assert len(config.rules) == 1
    assert sorted(field_key for field_key, _ in errors) == ["rules", "whitelist"]


def test_default_config_whitelists_the_site_host() -> None:
    config = default_config("https://example.com")
    assert config.rules == ()
    assert config.whitelist == frozenset({"example.com"})


def test_config_round_trips_through_to_dict() -> None:
    data = {
        "version": "1.0",
        "base_url": "https://example.com",
        "whitelist": ["example.com"],
        "rules": [{"type": "full_url", "match": "png", "rule": "https://cdn.example.net/img"}],
        "targets": [["a", "href"]],
    }
    config, _ = build_config(data)
    assert config.to_dict() == data


def _write_config(path, **overrides) -> None:
    data = {
        "base_url": "https://example.com",
        "rules": [{"type": "host_only", "match": "png", "rule": "cdn.example.net"}],
    }
    data.update(overrides)
    path.write_text(json.dumps(data), encoding="utf-8")


def _bump_mtime(path, seconds: int = 5) -> None:
    stat = os.stat(path)
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + seconds * 10**9))


def test_load_config_reports_bad_json(tmp_path) -> None:
    path = tmp_path / "cdn.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(str(path))


def test_store_reloads_when_the_file_changes(tmp_path) -> None:
    path = tmp_path / "cdn.json"
    _write_config(path)
    store = FileConfigStore(str(path))

    first = store.snapshot()
    assert store.snapshot() is first

    _write_config(path, rules=[{"type": "host_only", "match": "jpg", "rule": "img.example.net"}])
    _bump_mtime(path)

    second = store.snapshot()
    assert second is not first
    assert second.rules[0].rule == "img.example.net"


def test_store_invalidate_forces_a_reload(tmp_path) -> None:
    path = tmp_path / "cdn.json"
    _write_config(path)
    store = FileConfigStore(str(path))
    first = store.snapshot()

    stat = os.stat(path)
    _write_config(path, whitelist=["static.example.com"])
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns))

    assert store.snapshot() is first
    store.invalidate()
    assert store.snapshot().whitelist == frozenset({"static.example.com"})


def test_store_keeps_previous_snapshot_when_file_breaks(tmp_path) -> None:
    path = tmp_path / "cdn.json"
    _write_config(path)
    store = FileConfigStore(str(path))
    first = store.snapshot()

    path.write_text("{broken", encoding="utf-8")
    _bump_mtime(path)

    assert store.snapshot() is first


def test_store_records_validation_errors(tmp_path) -> None:
    path = tmp_path / "cdn.json"
    _write_config(path, whitelist=["example.com", "bad domain"])
    store = FileConfigStore(str(path))
    store.snapshot()
    assert [field_key for field_key, _ in store.errors] == ["whitelist"]


def test_store_without_file_raises(tmp_path) -> None:
    store = FileConfigStore(str(tmp_path / "missing.json"))
    with pytest.raises(ConfigurationError):
        store.snapshot()
