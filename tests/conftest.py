from __future__ import annotations

import pytest

from cdn_rewrite.rewriter import RewriteConfig, RewriteRule, RewriteType


BASE_URL = "http://example.com"


@pytest.fixture
def png_rule() -> RewriteRule:
    return RewriteRule(RewriteType.HOST_ONLY, "png", "cdn.example.net")


@pytest.fixture
def make_config():
    def _make(rules=(), whitelist=("example.com",), base_url=BASE_URL, **kwargs) -> RewriteConfig:
        return RewriteConfig(
            version=kwargs.pop("version", "1.0"),
            base_url=base_url,
            rules=tuple(rules),
            whitelist=frozenset(whitelist),
            **kwargs,
        )

    return _make
