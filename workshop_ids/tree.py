"""Immutable document trees and attribute-predicate lookups.

Detail and collection pages are parsed with BeautifulSoup and converted into
:class:`DocumentNode` trees so the rest of the package works against a small,
frozen structure instead of a mutable soup. Lookups walk the tree with an
explicit stack, so deep or malformed markup cannot exhaust the interpreter's
recursion limit.

Example
-------
>>> from workshop_ids.tree import find_first, parse_document, text_content
>>> root = parse_document(b'<div id="a"><span class="t">Hello</span></div>')
>>> text_content(find_first(root, "class", "t"))
'Hello'
"""

from __future__ import annotations

import dataclasses as dc
import html
import logging
import typing as typ

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import CData, NavigableString, PreformattedString, Tag

logger = logging.getLogger(__name__)

ELEMENT = "element"
TEXT = "text"
DOCUMENT_TAG = "#document"

_VOID_TAGS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)


class RenderError(RuntimeError):
    """Raised when a node cannot be serialised back to markup."""


@dc.dataclass(frozen=True, slots=True)
class DocumentNode:
    """A single node of a parsed page.

    Attributes
    ----------
    kind : str
        ``"element"`` or ``"text"``.
    tag : str
        Lower-case tag name for elements; empty for text nodes.
    attributes : tuple[tuple[str, str], ...]
        Attribute ``(name, value)`` pairs in source order.
    children : tuple[DocumentNode, ...]
        Child nodes in document order.
    text : str | None
        Text payload for text nodes.
    """

    kind: str
    tag: str = ""
    attributes: tuple[tuple[str, str], ...] = ()
    children: tuple[DocumentNode, ...] = ()
    text: str | None = None

    @property
    def is_element(self) -> bool:
        return self.kind == ELEMENT

    def attribute(self, name: str) -> str | None:
        """Return the first value recorded for ``name``, or ``None``."""
        for key, value in self.attributes:
            if key == name:
                return value
        return None


def element(
    tag: str,
    attributes: typ.Mapping[str, str] | None = None,
    children: typ.Iterable[DocumentNode] = (),
) -> DocumentNode:
    """Build an element node; mainly a convenience for callers and tests."""
    return DocumentNode(
        kind=ELEMENT,
        tag=tag,
        attributes=tuple((attributes or {}).items()),
        children=tuple(children),
    )


def text_node(value: str) -> DocumentNode:
    """Build a text node holding ``value``."""
    return DocumentNode(kind=TEXT, text=value)


def parse_document(content: bytes | str | None) -> DocumentNode:
    """Parse page markup into a :class:`DocumentNode` tree.

    Parsing is lenient: empty, truncated or otherwise malformed markup yields
    whatever structure the parser recovered (possibly a bare document node)
    and never raises.
    """
    if not content:
        return DocumentNode(kind=ELEMENT, tag=DOCUMENT_TAG)
    try:
        soup = BeautifulSoup(content, "html.parser", multi_valued_attributes=None)
    except ParserRejectedMarkup as exc:
        logger.warning("Parser rejected markup, using an empty document: %s", exc)
        return DocumentNode(kind=ELEMENT, tag=DOCUMENT_TAG)
    return _convert(soup)


def _convert(soup: BeautifulSoup) -> DocumentNode:
    """Convert a soup into frozen nodes without recursion."""
    root_children: list[DocumentNode] = []
    stack: list[tuple[Tag, typ.Iterator[typ.Any], list[DocumentNode]]] = [
        (soup, iter(soup.children), root_children)
    ]
    while True:
        tag, pending, children = stack[-1]
        child = next(pending, None)
        if child is None:
            stack.pop()
            if not stack:
                return DocumentNode(
                    kind=ELEMENT, tag=DOCUMENT_TAG, children=tuple(children)
                )
            stack[-1][2].append(
                DocumentNode(
                    kind=ELEMENT,
                    tag=tag.name,
                    attributes=tuple(
                        (str(name), _attribute_text(value))
                        for name, value in tag.attrs.items()
                    ),
                    children=tuple(children),
                )
            )
            continue
        if isinstance(child, Tag):
            stack.append((child, iter(child.children), []))
        elif isinstance(child, NavigableString):
            # Comments, doctypes and processing instructions carry no content.
            if isinstance(child, PreformattedString) and not isinstance(
                child, CData
            ):
                continue
            children.append(text_node(str(child)))


def _attribute_text(value: object) -> str:
    if isinstance(value, list | tuple):
        return " ".join(str(part) for part in value)
    return str(value)


def _matches(node: DocumentNode, name: str, value: str) -> bool:
    return node.is_element and node.attribute(name) == value


def iter_descendants(root: DocumentNode) -> typ.Iterator[DocumentNode]:
    """Yield every descendant of ``root`` in pre-order, root excluded."""
    stack = list(reversed(root.children))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def find_first(
    root: DocumentNode | None,
    name: str,
    value: str,
    *,
    include_self: bool = False,
) -> DocumentNode | None:
    """Return the first pre-order element whose ``name`` attribute equals ``value``.

    Parameters
    ----------
    root : DocumentNode | None
        Subtree to search. ``None`` is accepted and yields ``None``.
    name : str
        Attribute name, for example ``"class"`` or ``"id"``.
    value : str
        Exact attribute value to match.
    include_self : bool, optional
        Whether ``root`` itself is a candidate. Defaults to ``False``.

    Returns
    -------
    DocumentNode | None
        The first match, or ``None`` when nothing matches.
    """
    if root is None:
        return None
    if include_self and _matches(root, name, value):
        return root
    for node in iter_descendants(root):
        if _matches(node, name, value):
            return node
    return None


def find_all(root: DocumentNode | None, name: str, value: str) -> list[DocumentNode]:
    """Return every matching descendant of ``root`` in pre-order."""
    if root is None:
        return []
    return [node for node in iter_descendants(root) if _matches(node, name, value)]


def text_content(node: DocumentNode | None) -> str:
    """Return the stripped concatenation of all text below ``node``."""
    if node is None:
        return ""
    if node.kind == TEXT:
        return (node.text or "").strip()
    parts = [child.text or "" for child in iter_descendants(node) if child.kind == TEXT]
    return "".join(parts).strip()


def render_markup(node: DocumentNode) -> str:
    """Serialise ``node`` and its subtree back to markup.

    Raises
    ------
    RenderError
        If a node of an unknown kind is encountered.
    """
    parts: list[str] = []
    # Entries are nodes to open or pre-rendered closing tags.
    stack: list[DocumentNode | str] = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, str):
            parts.append(current)
            continue
        if current.kind == TEXT:
            parts.append(html.escape(current.text or "", quote=False))
            continue
        if current.kind != ELEMENT:
            msg = f"Cannot render node of kind {current.kind!r}"
            raise RenderError(msg)
        if current.tag == DOCUMENT_TAG:
            stack.extend(reversed(current.children))
            continue
        parts.append(_open_tag(current))
        if current.tag in _VOID_TAGS and not current.children:
            continue
        stack.append(f"</{current.tag}>")
        stack.extend(reversed(current.children))
    return "".join(parts)


def _open_tag(node: DocumentNode) -> str:
    attrs = "".join(
        f' {name}="{html.escape(value, quote=True)}"' for name, value in node.attributes
    )
    return f"<{node.tag}{attrs}>"


__all__ = [
    "DocumentNode",
    "RenderError",
    "element",
    "find_all",
    "find_first",
    "iter_descendants",
    "parse_document",
    "render_markup",
    "text_content",
    "text_node",
]
