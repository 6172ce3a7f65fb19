"""
Recursive extraction of content parts from a message subtree.
"""

import logging
from typing import List, Optional

from .mathexpr import extract_math, find_math, is_math, is_math_artifact
from .nodes import ElementNode, Node, TextNode, collapse_whitespace
from .parts import (
    Blockquote, Bold, BoldMath, CodeBlock, ContentPart, ExtractionResult, Heading,
    InlineCode, Italic, LineBreak, Link, ListItem, Math, ParagraphBreak, Text,
)
from .serializer import CLOSING_PUNCTUATION, OPENERS

logger = logging.getLogger(__name__)

SKIPPED_TAGS = ('script', 'style', 'noscript', 'template')
BOLD_TAGS = ('strong', 'b')
ITALIC_TAGS = ('em', 'i')
BLOCK_TAGS = ('p', 'div', 'section', 'article', 'main')
LIST_TAGS = ('ul', 'ol')
HEADING_TAGS = ('h1', 'h2', 'h3', 'h4', 'h5', 'h6')
LANGUAGE_PREFIXES = ('language-', 'lang-')


def detect_code_language(code: ElementNode) -> str:
    """
    Detect programming language from a code element's classes.

    Args:
        code: ``code`` element, or the ``pre`` when it has no code child

    Returns:
        Language name or empty string
    """
    candidates = [code]
    if code.parent is not None and code.parent.tag == 'pre':
        candidates.append(code.parent)

    for candidate in candidates:
        for cls in candidate.classes:
            for prefix in LANGUAGE_PREFIXES:
                if cls.startswith(prefix) and len(cls) > len(prefix):
                    return cls[len(prefix):]
    return ''


def _list_start(node: ElementNode) -> int:
    try:
        return int(node.get('start', '1'))
    except ValueError:
        return 1


def _wraps_only_math(node: ElementNode) -> bool:
    """True if *node* is math, or a wrapper whose only text is one math expression."""
    math_node = find_math(node)
    if math_node is None:
        return False
    return collapse_whitespace(node.text) == collapse_whitespace(math_node.text)


def _join_text(previous: str, text: str) -> str:
    if text[0] in CLOSING_PUNCTUATION or previous[-1] in OPENERS:
        return previous + text
    return f"{previous} {text}"


class ContentExtractor:
    """Walks a subtree and appends typed content parts in document order."""

    def __init__(self, exclusion_root: Optional[ElementNode] = None):
        """
        Initialize the extractor.

        Args:
            exclusion_root: Subtree (typically a reasoning aside) whose content
                must never reach the extracted parts
        """
        self.exclusion_root = exclusion_root
        self.parts: List[ContentPart] = []

    def extract(self, node: ElementNode) -> ExtractionResult:
        """
        Extract parts from *node* into a fresh result.

        Args:
            node: Root of the subtree to extract

        Returns:
            ExtractionResult holding the parts in document order
        """
        self.parts = []
        if self.exclusion_root is not None and node.is_inside(self.exclusion_root):
            return ExtractionResult()
        self.walk(node)
        return ExtractionResult(parts=self.parts)

    def add_text(self, raw: str) -> None:
        text = collapse_whitespace(raw)
        if not text:
            return
        if self.parts and isinstance(self.parts[-1], Text):
            self.parts[-1] = Text(_join_text(self.parts[-1].content, text))
        else:
            self.parts.append(Text(text))

    def paragraph_break(self) -> None:
        if not self.parts or not isinstance(self.parts[-1], ParagraphBreak):
            self.parts.append(ParagraphBreak())

    def walk(self, node: Node, list_depth: int = 0) -> None:
        """Classify *node* and append its parts."""
        if isinstance(node, TextNode):
            self.add_text(node.text)
            return

        # Stop at the exclusion zone instead of checking ancestors per node
        if node is self.exclusion_root or node.tag in SKIPPED_TAGS:
            return

        tag = node.tag

        if is_math(node):
            self._append_math(node, list_depth)
            return

        if is_math_artifact(node):
            return

        if tag in BOLD_TAGS or tag in ITALIC_TAGS:
            self._walk_emphasis(node, list_depth)
            return

        if tag == 'br':
            self.parts.append(LineBreak())
            return

        if tag == 'a':
            self._walk_link(node, list_depth)
            return

        if tag == 'blockquote':
            self._walk_blockquote(node, list_depth)
            return

        if tag in BLOCK_TAGS and list_depth == 0:
            self.paragraph_break()
            self._walk_children(node, list_depth)
            self.paragraph_break()
            return

        if tag in LIST_TAGS:
            self._walk_list(node, list_depth)
            return

        if tag == 'code' and (node.parent is None or node.parent.tag != 'pre'):
            if node.text:
                self.parts.append(InlineCode(node.text))
            return

        if tag == 'pre':
            code = node.find(lambda el: el.tag == 'code')
            content = (code or node).text
            self.parts.append(CodeBlock(content, detect_code_language(code or node), list_depth))
            return

        if tag in HEADING_TAGS:
            content = collapse_whitespace(node.text)
            if content:
                self.parts.append(Heading(int(tag[1]), content, list_depth))
            return

        self._walk_children(node, list_depth)

    def _walk_children(self, node: ElementNode, list_depth: int) -> None:
        for child in node.children:
            self.walk(child, list_depth)

    def _append_math(self, node: ElementNode, list_depth: int, bold: bool = False) -> None:
        expression = extract_math(node)
        if expression is None:
            return
        if bold:
            self.parts.append(BoldMath(expression.source))
        elif expression.display:
            self.parts.append(Math(expression.source, True, list_depth))
        else:
            self.parts.append(Math(expression.source))

    def _walk_emphasis(self, node: ElementNode, list_depth: int) -> None:
        bold = node.tag in BOLD_TAGS

        if node.find(is_math) is None:
            content = collapse_whitespace(node.text)
            if content:
                self.parts.append(Bold(content) if bold else Italic(content))
            return

        self._split_emphasis(node, bold, list_depth)

    def _split_emphasis(self, node: ElementNode, bold: bool, list_depth: int) -> None:
        """Split a partially mathematical span into text and math pieces."""
        wrap = Bold if bold else Italic
        for child in node.children:
            if isinstance(child, TextNode):
                content = collapse_whitespace(child.text)
                if content:
                    self.parts.append(wrap(content))
            elif _wraps_only_math(child):
                self._append_math(find_math(child), list_depth, bold=bold)
            elif child.find(is_math) is not None and child.tag not in BOLD_TAGS + ITALIC_TAGS:
                self._split_emphasis(child, bold, list_depth)
            else:
                self.walk(child, list_depth)

    def _walk_link(self, node: ElementNode, list_depth: int) -> None:
        href = (node.get('href') or '').strip()
        if not href or node.find(is_math) is not None:
            self._walk_children(node, list_depth)
            return
        content = collapse_whitespace(node.text) or href
        self.parts.append(Link(content, href))

    def _walk_blockquote(self, node: ElementNode, list_depth: int) -> None:
        quoted = ContentExtractor(self.exclusion_root)
        for child in node.children:
            quoted.walk(child)
        result = ExtractionResult(parts=quoted.parts)
        if not result:
            return
        if list_depth == 0:
            self.paragraph_break()
        self.parts.append(Blockquote(tuple(result.parts), list_depth))
        if list_depth == 0:
            self.paragraph_break()

    def _walk_list(self, node: ElementNode, list_depth: int) -> None:
        ordered = node.tag == 'ol'
        index = _list_start(node) if ordered else 1
        for item in node.element_children:
            if item.tag != 'li' or item is self.exclusion_root:
                continue
            self.parts.append(ListItem(ordered=ordered, depth=list_depth, index=index))
            self._walk_children(item, list_depth + 1)
            self.parts.append(LineBreak())
            index += 1


def extract_content(node: ElementNode,
                    exclusion_root: Optional[ElementNode] = None) -> ExtractionResult:
    """
    Extract the content parts of a message subtree.

    Args:
        node: Message container or content area
        exclusion_root: Optional subtree to leave out (reasoning aside)

    Returns:
        ExtractionResult in document order
    """
    result = ContentExtractor(exclusion_root).extract(node)
    logger.debug("Extracted %d parts from <%s>", len(result), node.tag)
    return result
