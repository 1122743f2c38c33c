"""
URL rewriter for pointing asset references at a CDN.

Walks the configured (tag, attribute) pairs of an HTML document and rewrites
whitelisted URLs that match a rule.
"""

import copy
import re
from typing import Iterable, List, Optional, Tuple, Union

from bs4 import BeautifulSoup, FeatureNotFound, Tag

from ..exceptions import DocumentRequiredError, MalformedUrlError, UnresolvableHostSubstitution
from ..utils.constants import DEFAULT_TARGETS, SUPPORTED_CONFIG_VERSION
from ..utils.log import get_logger
from .classifier import classify
from .matcher import find_rule
from .models import RewriteConfig, RewriteDiagnostic, RewriteResult, RewriteRule
from .strategies import apply_rule


Document = Union[str, Tag]

# Start of a start tag: "<" followed by the tag name
TAG_NAME_PATTERN = re.compile(r'<[^\s/>]+')

# One attribute inside a start tag, with its optional value token; names may
# start with "=" and values may follow several "=", as html.parser allows
ATTRIBUTE_PATTERN = re.compile(
    r'''[\s/]*(?P<name>[^\s/>][^\s/>=]*)(?:\s*=+\s*(?P<value>"[^"]*"|'[^']*'|[^\s>]+))?'''
)

# Values that must be quoted when written back
NEEDS_QUOTES_PATTERN = re.compile(r'''[\s"'=<>`]''')


def parse_document(html: str) -> BeautifulSoup:
    """
    Parse HTML into a BeautifulSoup tree.

    Args:
        html: HTML content to parse

    Returns:
        Parsed document tree
    """
    try:
        return BeautifulSoup(html, 'lxml')
    except FeatureNotFound:
        # Fallback to html.parser if lxml is not available
        return BeautifulSoup(html, 'html.parser')


def _line_offsets(text: str) -> List[int]:
    """Offsets at which each line of the text starts."""
    offsets = [0]
    offsets.extend(match.end() for match in re.finditer('\n', text))
    return offsets


def _find_attribute_value(html: str, tag_start: int, attribute: str) -> Optional[Tuple[int, int]]:
    """
    Locate the value token of an attribute in a start tag.

    Args:
        html: Original HTML source
        tag_start: Offset of the "<" opening the start tag
        attribute: Lowercase attribute name

    Returns:
        (start, end) offsets of the value token including its quotes, or
        None if the attribute has no value in the source
    """
    match = TAG_NAME_PATTERN.match(html, tag_start)
    if not match:
        return None

    pos = match.end()
    while True:
        match = ATTRIBUTE_PATTERN.match(html, pos)
        if not match:
            return None
        if match.group('name').lower() == attribute:
            # The first occurrence is the one the parser kept
            if match.group('value') is None:
                return None
            return match.start('value'), match.end('value')
        pos = match.end()


def _quote_attribute(value: str, quote: str) -> str:
    """
    Build an attribute value token in the given quote style.

    Args:
        value: Unescaped attribute value
        quote: '"', "'" or '' for an unquoted original

    Returns:
        Escaped value token ready to splice into the source
    """
    escaped = value.replace('&', '&amp;')

    if not quote and (not value or NEEDS_QUOTES_PATTERN.search(value)):
        quote = '"'

    if quote == '"':
        escaped = escaped.replace('"', '&quot;')
    elif quote == "'":
        escaped = escaped.replace("'", '&#x27;')

    return f"{quote}{escaped}{quote}"


class UrlRewriter:
    """
    Rewrites whitelisted asset URLs in HTML content.

    Operates on a configuration snapshot; documents are never mutated, a
    new document is returned instead. Raw HTML strings keep every byte
    outside the rewritten attribute values.
    """

    def __init__(self, config: RewriteConfig):
        """
        Initialize the URL rewriter.

        Args:
            config: Configuration snapshot (rules, whitelist, base URL)
        """
        self.config = config
        self.logger = get_logger("rewriter")

    def rewrite_document(self, document: Document) -> Document:
        """
        Rewrite a document and return the new one.

        Args:
            document: Raw HTML string or BeautifulSoup tree

        Returns:
            Rewritten document of the same type
        """
        return self.rewrite(document).document

    def rewrite(self, document: Document) -> RewriteResult:
        """
        Rewrite all configured URL attributes in a document.

        Args:
            document: Raw HTML string or BeautifulSoup tree

        Returns:
            RewriteResult with the new document, counters and diagnostics

        Raises:
            DocumentRequiredError: If document is None
            TypeError: If the document is neither a string nor a tree
        """
        if document is None:
            raise DocumentRequiredError("No document passed to the URL rewriter")

        result = RewriteResult()

        if self.config.version != SUPPORTED_CONFIG_VERSION:
            self.logger.warning(
                f"Configuration version {self.config.version!r} is not supported "
                f"(expected {SUPPORTED_CONFIG_VERSION!r}); passing document through"
            )
            result.document = document
            result.passed_through = True
            return result

        if isinstance(document, str):
            result.document = self._rewrite_html(document, result)
        elif isinstance(document, Tag):
            result.document = self._rewrite_tree(document, result)
        else:
            raise TypeError(f"Unsupported document type: {type(document).__name__}")

        self.logger.debug(
            f"Rewrote {result.rewritten} of {result.examined} URLs "
            f"({result.skipped_malformed} malformed, "
            f"{result.skipped_not_whitelisted} not whitelisted)"
        )

        return result

    def _rewrite_html(self, html: str, result: RewriteResult) -> str:
        """
        Rewrite a raw HTML string by splicing new values into the source.

        Args:
            html: Original HTML
            result: Pass report to update

        Returns:
            New HTML string
        """
        soup = BeautifulSoup(
            html,
            'html.parser',
            multi_valued_attributes=None,
            on_duplicate_attribute='ignore'
        )
        line_offsets = _line_offsets(html)
        edits: List[Tuple[int, int, str]] = []

        for tag_name, attribute in self.config.targets:
            for element in soup.find_all(tag_name):
                if not element.has_attr(attribute):
                    continue

                value = element[attribute]
                new_value = self._rewrite_value(tag_name, attribute, value, result)
                if new_value is None:
                    continue

                span = None
                if element.sourceline is not None and element.sourcepos is not None:
                    tag_start = line_offsets[element.sourceline - 1] + element.sourcepos
                    span = _find_attribute_value(html, tag_start, attribute)

                if span is None:
                    self._diagnose(result, tag_name, attribute, value, "attribute not found in source")
                    continue

                start, end = span
                token = html[start:end]
                quote = token[0] if token[0] in '"\'' else ''
                edits.append((start, end, _quote_attribute(new_value, quote)))
                result.rewritten += 1

        # Apply from the end so earlier offsets stay valid
        for start, end, token in sorted(edits, reverse=True):
            html = html[:start] + token + html[end:]

        return html

    def _rewrite_tree(self, document: Tag, result: RewriteResult) -> Tag:
        """
        Rewrite a copy of a parsed document tree.

        Args:
            document: Parsed tree (left untouched)
            result: Pass report to update

        Returns:
            Rewritten copy of the tree
        """
        document = copy.copy(document)

        for tag_name, attribute in self.config.targets:
            for element in document.find_all(tag_name):
                if not element.has_attr(attribute):
                    continue

                value = element[attribute]
                if isinstance(value, list):
                    value = ' '.join(value)

                new_value = self._rewrite_value(tag_name, attribute, value, result)
                if new_value is not None:
                    element[attribute] = new_value
                    result.rewritten += 1

        return document

    def _rewrite_value(
        self,
        tag_name: str,
        attribute: str,
        value: str,
        result: RewriteResult
    ) -> Optional[str]:
        """
        Decide the new value of one attribute.

        Args:
            tag_name: Element tag name
            attribute: Attribute name
            value: Current attribute value
            result: Pass report to update

        Returns:
            New value, or None to leave the attribute untouched
        """
        result.examined += 1
        url = value.strip()

        try:
            parsed = classify(url, self.config.base_url)
        except MalformedUrlError as e:
            result.skipped_malformed += 1
            self._diagnose(result, tag_name, attribute, value, e.reason)
            return None

        if parsed.host not in self.config.whitelist:
            result.skipped_not_whitelisted += 1
            return None

        rule = find_rule(self.config.rules, parsed.path)
        if rule is None:
            return None

        result.matched += 1

        try:
            new_url = apply_rule(parsed, rule, self.config.base_url)
        except UnresolvableHostSubstitution:
            self._diagnose(result, tag_name, attribute, value, "host could not be substituted")
            return None

        if new_url == url:
            return None

        self.logger.debug(f"<{tag_name} {attribute}>: {value} -> {new_url}")
        return new_url

    def _diagnose(
        self,
        result: RewriteResult,
        tag_name: str,
        attribute: str,
        value: str,
        reason: str
    ) -> None:
        """Record an attribute that was left untouched because of a problem."""
        self.logger.debug(f"Skipping <{tag_name} {attribute}={value!r}>: {reason}")
        result.diagnostics.append(RewriteDiagnostic(tag_name, attribute, value, reason))


def rewrite_document(
    document: Document,
    rules: Iterable[RewriteRule],
    whitelist: Iterable[str],
    base_url: str,
    targets: Iterable[Tuple[str, str]] = DEFAULT_TARGETS,
    config_version: str = SUPPORTED_CONFIG_VERSION
) -> Document:
    """
    Rewrite a document with already validated rules and whitelist.

    Args:
        document: Raw HTML string or BeautifulSoup tree
        rules: Ordered rewrite rules
        whitelist: Hosts eligible for rewriting
        base_url: Canonical base URL of the site
        targets: (tag, attribute) pairs to rewrite
        config_version: Version tag of the configuration

    Returns:
        Rewritten document of the same type
    """
    config = RewriteConfig(
        version=config_version,
        base_url=base_url,
        rules=tuple(rules),
        whitelist=frozenset(whitelist),
        targets=tuple(targets),
    )
    return UrlRewriter(config).rewrite_document(document)
