from __future__ import annotations

from cdn_rewrite.rewriter import RewriteRule, RewriteType, find_rule


def _rule(match: str, host: str = "cdn.example.net") -> RewriteRule:
    return RewriteRule(RewriteType.HOST_ONLY, match, host)


def test_first_matching_rule_wins() -> None:
    first = _rule("g", "first.example.net")
    second = _rule("png", "second.example.net")
    assert find_rule([first, second], "/img/logo.png") is first
    assert find_rule([second, first], "/img/logo.png") is second


def test_no_rules_means_no_match() -> None:
    assert find_rule([], "/img/logo.png") is None


def test_suffix_must_end_the_path() -> None:
    assert find_rule([_rule("png")], "/img/png/logo.gif") is None


def test_match_is_case_sensitive() -> None:
    assert find_rule([_rule("png")], "/img/logo.PNG") is None


def test_later_rule_used_when_earlier_does_not_match() -> None:
    css = _rule("css", "styles.example.net")
    png = _rule("png")
    assert find_rule([css, png], "/img/logo.png") is png
