# src/extraction/document.py

"""Queryable wrapper around raw page markup."""

import logging
import re

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

logger = logging.getLogger("buying_list.document")

# Elements whose content never holds a visible price
_STRIP_TAGS: tuple[str, ...] = ("script", "style", "noscript")

# Fallback lookups only take simple selectors; anything compound is
# answered by the CSS engine alone
_NAME_RE = re.compile(r"[\w-]+")
_TAG_RE = re.compile(r"[a-zA-Z][a-zA-Z0-9-]*")
_SIMPLE_ATTR_RE = re.compile(r"([a-zA-Z][a-zA-Z0-9-]*)?\[([^\]]+)\]")
_ATTR_RE = re.compile(
    r"\s*([^\s~|^$*!=]+)\s*(?:([~|^$*]?=)\s*['\"]?([^'\"]*)['\"]?)?\s*$"
)


def _attr_matches(
    node: Tag, attr: str, operator: str | None, expected: str,
) -> bool:
    """Evaluate a ``[attr op value]`` test against one node."""
    if operator is None:
        return True
    raw = node.get(attr)
    value = " ".join(raw) if isinstance(raw, list) else str(raw or "")
    if operator == "=":
        return value == expected
    if operator == "*=":
        return expected in value
    if operator == "^=":
        return value.startswith(expected)
    if operator == "$=":
        return value.endswith(expected)
    if operator == "~=":
        return expected in value.split()
    # "|="
    return value == expected or value.startswith(f"{expected}-")


class MarkupParseError(Exception):
    """Raised when markup cannot be turned into a node tree."""


class DocumentQueryAdapter:
    """Parse markup once and resolve selector strings to nodes.

    Script, style and noscript elements are removed before any query so
    that numbers inside embedded code or CSS never become candidates.
    """

    def __init__(self, markup: str) -> None:
        try:
            self.soup = BeautifulSoup(markup, "lxml")
        except Exception as exc:
            raise MarkupParseError(str(exc)) from exc
        for tag in self.soup(list(_STRIP_TAGS)):
            tag.decompose()

    def body_text(self) -> str:
        """Visible text of the document body (whole document if none)."""
        root = self.soup.body or self.soup
        return root.get_text(" ", strip=True)

    def resolve(self, selector: str) -> list[Tag]:
        """Return every node matching *selector*, in discovery order.

        Each lookup method is tried in turn and a method that fails is
        skipped, so an unsupported selector yields an empty list rather
        than an exception.  Descendant, child and compound selectors are
        resolved by the CSS engine only.
        """
        selector = selector.strip()
        if not selector:
            return []

        nodes: list[Tag] = []
        seen: set[int] = set()

        def add(found: list[Tag]) -> None:
            for node in found:
                if id(node) not in seen:
                    seen.add(id(node))
                    nodes.append(node)

        add(self._by_css(selector))
        if selector.startswith("#") and _NAME_RE.fullmatch(selector[1:]):
            add(self._by_id(selector[1:]))
        if selector.startswith(".") and _NAME_RE.fullmatch(selector[1:]):
            add(self._by_class(selector[1:]))
        attr_match = _SIMPLE_ATTR_RE.fullmatch(selector)
        if attr_match:
            add(self._by_attribute(attr_match.group(1), attr_match.group(2)))
        if _TAG_RE.fullmatch(selector):
            add(self._by_tag(selector))
        return nodes

    # ── Lookup methods ───────────────────────────────────

    def _by_css(self, selector: str) -> list[Tag]:
        try:
            return list(self.soup.select(selector))
        except (SelectorSyntaxError, ValueError, NotImplementedError) as exc:
            logger.debug(
                "CSS engine rejected selector %r: %s", selector, exc,
            )
            return []

    def _by_id(self, element_id: str) -> list[Tag]:
        node = self.soup.find(id=element_id)
        return [node] if isinstance(node, Tag) else []

    def _by_class(self, class_name: str) -> list[Tag]:
        return [
            n for n in self.soup.find_all(class_=class_name)
            if isinstance(n, Tag)
        ]

    def _by_attribute(self, tag: str | None, test: str) -> list[Tag]:
        """Nodes passing one ``[attr op value]`` test, optionally by tag."""
        parsed = _ATTR_RE.match(test)
        if not parsed:
            return []
        attr = parsed.group(1).lower()
        operator, expected = parsed.group(2), parsed.group(3) or ""
        candidates = self.soup.find_all(tag.lower() if tag else True)
        return [
            n for n in candidates
            if isinstance(n, Tag)
            and n.has_attr(attr)
            and _attr_matches(n, attr, operator, expected)
        ]

    def _by_tag(self, name: str) -> list[Tag]:
        return [
            n for n in self.soup.find_all(name.lower())
            if isinstance(n, Tag)
        ]
