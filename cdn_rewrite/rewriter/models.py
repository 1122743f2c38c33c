"""
Data models for the rewrite engine.

Rules, parsed URLs, configuration snapshots, and the per-pass report
returned by the rewriter.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from ..utils.constants import DEFAULT_TARGETS


class RewriteType(IntEnum):
    """How a matching URL is rewritten."""
    # Replace only the host portion of the URL
    HOST_ONLY = 1
    # Replace everything up to the file name
    FULL_URL = 2

    @classmethod
    def parse(cls, value: Any) -> "RewriteType":
        """
        Convert a stored rule type into a RewriteType.

        Accepts the enum itself, its integer value (also as a string) or its
        name in any case ("host_only", "FULL_URL").

        Raises:
            ValueError: If the value does not name a rewrite type
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid rule type: {value!r}")
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            text = value.strip()
            if text.isdigit():
                return cls(int(text))
            try:
                return cls[text.upper()]
            except KeyError:
                pass
        raise ValueError(f"Invalid rule type: {value!r}")


@dataclass(frozen=True)
class RewriteRule:
    """A suffix-triggered rewrite rule."""
    type: RewriteType
    # Path suffix that triggers the rule
    match: str
    # Replacement host (HOST_ONLY) or replacement base URL (FULL_URL)
    rule: str

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the rule the way it is stored in configuration."""
        return {
            'type': self.type.name.lower(),
            'match': self.match,
            'rule': self.rule,
        }


@dataclass(frozen=True)
class ParsedUrl:
    """A URL decomposed for whitelist and rule matching."""
    scheme: Optional[str]
    host: Optional[str]
    path: str
    # The string that was decomposed (root-relative URLs already anchored)
    raw: str
    netloc: str = ''
    userinfo: Optional[str] = None
    port: Optional[str] = None
    query: str = ''
    fragment: str = ''


@dataclass
class RewriteDiagnostic:
    """An attribute the rewriter looked at but could not rewrite."""
    tag: str
    attribute: str
    value: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'tag': self.tag,
            'attribute': self.attribute,
            'value': self.value,
            'reason': self.reason,
        }


@dataclass
class RewriteResult:
    """Result of one rewrite pass over a document."""

    # Rewritten document (same type as the input)
    document: Any = None

    # Attribute values inspected
    examined: int = 0

    # Values that a rule matched
    matched: int = 0

    # Values actually changed in the output
    rewritten: int = 0

    skipped_malformed: int = 0
    skipped_not_whitelisted: int = 0

    # True when the config version was not understood
    passed_through: bool = False

    diagnostics: List[RewriteDiagnostic] = field(default_factory=list)

    def stats(self) -> Dict[str, Any]:
        """Counters of the pass as a plain dictionary."""
        return {
            'examined': self.examined,
            'matched': self.matched,
            'rewritten': self.rewritten,
            'skipped_malformed': self.skipped_malformed,
            'skipped_not_whitelisted': self.skipped_not_whitelisted,
            'passed_through': self.passed_through,
        }


@dataclass(frozen=True)
class RewriteConfig:
    """
    Immutable configuration snapshot used by one or more rewrite passes.

    Rules keep their configured order; targets are lowercased and
    de-duplicated on construction.
    """
    version: str
    base_url: str
    rules: Tuple[RewriteRule, ...] = ()
    whitelist: FrozenSet[str] = frozenset()
    targets: Tuple[Tuple[str, str], ...] = DEFAULT_TARGETS

    def __post_init__(self):
        targets: List[Tuple[str, str]] = []
        for tag_name, attribute in self.targets:
            target = (tag_name.lower(), attribute.lower())
            if target not in targets:
                targets.append(target)

        object.__setattr__(self, 'rules', tuple(self.rules))
        object.__setattr__(self, 'whitelist', frozenset(self.whitelist))
        object.__setattr__(self, 'targets', tuple(targets))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the snapshot in the configuration file format."""
        return {
            'version': self.version,
            'base_url': self.base_url,
            'whitelist': sorted(self.whitelist),
            'rules': [rule.to_dict() for rule in self.rules],
            'targets': [list(target) for target in self.targets],
        }
