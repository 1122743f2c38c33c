"""
Rule matcher for the rewrite engine.
"""

from typing import Iterable, Optional

from .models import RewriteRule


def find_rule(rules: Iterable[RewriteRule], path: str) -> Optional[RewriteRule]:
    """
    Find the first rule whose match suffix ends the given path.

    Rules are tried in their configured order, so an earlier rule wins over
    a later, more specific one. Comparison is exact and case-sensitive.

    Args:
        rules: Ordered rewrite rules
        path: Path component of the URL

    Returns:
        The matching rule, or None if no rule applies
    """
    for rule in rules:
        if rule.match and path.endswith(rule.match):
            return rule
    return None
