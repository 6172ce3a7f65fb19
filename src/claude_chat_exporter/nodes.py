"""
Minimal document tree used by the extractors.

Pages are parsed with BeautifulSoup and converted once into plain
``ElementNode``/``TextNode`` objects, so extraction never issues live queries
against the parser and tests can build synthetic trees directly.
"""

import logging
import re
from typing import Callable, Dict, Iterator, List, Optional, Union

from bs4 import BeautifulSoup, Tag, NavigableString
from bs4.element import Comment, Declaration, Doctype, ProcessingInstruction

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r'\s+')

# String subclasses that never carry visible page text
_SKIPPED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace to single spaces and trim the result."""
    return _WHITESPACE_RE.sub(' ', text).strip()


class TextNode:
    """A run of character data."""

    def __init__(self, text: str, parent: Optional['ElementNode'] = None):
        self.text = text
        self.parent = parent

    def __repr__(self) -> str:
        return f"TextNode({self.text!r})"


class ElementNode:
    """An element with a tag name, string attributes and ordered children."""

    def __init__(self, tag: str, attrs: Optional[Dict[str, str]] = None,
                 children: Optional[List['Node']] = None,
                 parent: Optional['ElementNode'] = None):
        self.tag = tag.lower()
        self.attrs = dict(attrs or {})
        self.children: List[Node] = []
        self.parent = parent
        for child in children or []:
            self.append(child)

    def __repr__(self) -> str:
        return f"ElementNode({self.tag!r}, {self.attrs!r})"

    def append(self, child: 'Node') -> 'Node':
        """Attach *child* as the last child and set its parent pointer."""
        child.parent = self
        self.children.append(child)
        return child

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attrs.get(name, default)

    @property
    def classes(self) -> List[str]:
        return (self.attrs.get('class') or '').split()

    def has_class(self, *names: str) -> bool:
        """True if the element carries any of *names*."""
        classes = self.classes
        return any(name in classes for name in names)

    def has_all_classes(self, *names: str) -> bool:
        classes = self.classes
        return all(name in classes for name in names)

    @property
    def text(self) -> str:
        """Concatenated text of every descendant text node, unmodified."""
        return ''.join(node.text for node in self.iter_text_nodes())

    @property
    def element_children(self) -> List['ElementNode']:
        return [child for child in self.children if isinstance(child, ElementNode)]

    def iter_text_nodes(self) -> Iterator[TextNode]:
        for child in self.children:
            if isinstance(child, TextNode):
                yield child
            else:
                yield from child.iter_text_nodes()

    def iter_descendants(self) -> Iterator['ElementNode']:
        """Yield descendant elements in document (pre-order) order."""
        for child in self.element_children:
            yield child
            yield from child.iter_descendants()

    def find(self, predicate: Callable[['ElementNode'], bool]) -> Optional['ElementNode']:
        for element in self.iter_descendants():
            if predicate(element):
                return element
        return None

    def find_all(self, predicate: Callable[['ElementNode'], bool]) -> List['ElementNode']:
        return [element for element in self.iter_descendants() if predicate(element)]

    def iter_ancestors(self) -> Iterator['ElementNode']:
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def is_inside(self, other: 'ElementNode') -> bool:
        """True if this element is *other* or one of its descendants."""
        if self is other:
            return True
        return any(ancestor is other for ancestor in self.iter_ancestors())


Node = Union[ElementNode, TextNode]


def element(tag: str, *children: Union[Node, str], **attrs: str) -> ElementNode:
    """
    Build an element from Python values.

    Strings become text nodes. A trailing underscore on an attribute name is
    dropped and other underscores become hyphens, so ``class_='x'`` and
    ``data_testid='y'`` map to ``class`` and ``data-testid``.

    Args:
        tag: Element tag name
        *children: Child nodes or strings
        **attrs: Attribute values

    Returns:
        The new element
    """
    normalized = {}
    for name, value in attrs.items():
        if name.endswith('_'):
            name = name[:-1]
        normalized[name.replace('_', '-')] = value
    nodes = [TextNode(child) if isinstance(child, str) else child for child in children]
    return ElementNode(tag, normalized, nodes)


def from_soup(tag: Tag) -> ElementNode:
    """
    Convert a BeautifulSoup tag (and its subtree) into an ``ElementNode``.

    Args:
        tag: Parsed BeautifulSoup tag or document

    Returns:
        Root of the converted tree
    """
    attrs = {}
    for name, value in tag.attrs.items():
        # bs4 returns multi-valued attributes such as class as lists
        attrs[name] = ' '.join(value) if isinstance(value, list) else str(value)

    node = ElementNode(tag.name or '[document]', attrs)
    for child in tag.children:
        if isinstance(child, Tag):
            node.append(from_soup(child))
        elif isinstance(child, NavigableString) and not isinstance(child, _SKIPPED_STRINGS):
            node.append(TextNode(str(child)))
    return node


def parse_html(html_content: str) -> ElementNode:
    """
    Parse an HTML document into the node tree.

    Args:
        html_content: Raw HTML content

    Returns:
        Document root element (tag ``[document]``)
    """
    soup = BeautifulSoup(html_content, 'html.parser')
    root = from_soup(soup)
    logger.debug("Parsed document with %d elements", sum(1 for _ in root.iter_descendants()))
    return root
