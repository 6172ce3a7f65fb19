"""
Markdown serialization of content parts.
"""

import re
from typing import Dict, Iterable, Optional

from .parts import (
    Blockquote, Bold, BoldMath, CodeBlock, ContentPart, Heading, InlineCode, Italic,
    LineBreak, Link, ListItem, Math, ParagraphBreak, Text, INLINE_PARTS,
)

_EXCESSIVE_BLANK_LINES_RE = re.compile(r'\n{3,}')
_BACKTICK_RUN_RE = re.compile(r'`+')
_FENCE_LINE_RE = re.compile(r'^\s*(`{3,})', re.MULTILINE)

# No space is inserted before these or after OPENERS
CLOSING_PUNCTUATION = ',.;:!?)]}%'
OPENERS = '([{'


def collapse_blank_lines(text: str) -> str:
    """Collapse runs of three or more newlines into one blank line."""
    return _EXCESSIVE_BLANK_LINES_RE.sub('\n\n', text)


def _is_inline(part: Optional[ContentPart]) -> bool:
    if isinstance(part, Math):
        return not part.display
    return isinstance(part, INLINE_PARTS)


def _inline_code(content: str) -> str:
    longest = max((len(run) for run in _BACKTICK_RUN_RE.findall(content)), default=0)
    if not longest:
        return f"`{content}`"
    fence = '`' * (longest + 1)
    return f"{fence} {content} {fence}"


def _code_fence(content: str) -> str:
    longest = max((len(run) for run in _FENCE_LINE_RE.findall(content)), default=0)
    return '`' * max(3, longest + 1)


def _indent_lines(text: str, indent: str) -> str:
    if not indent:
        return text
    return '\n'.join(indent + line if line else line for line in text.split('\n'))


def _quote_lines(text: str) -> str:
    return '\n'.join(f"> {line}" if line.strip() else '>' for line in text.split('\n'))


class MarkdownWriter:
    """Accumulates Markdown output with the lookback the spacing rules need."""

    def __init__(self):
        self.output = ''
        self.previous: Optional[ContentPart] = None
        # Content column of the most recent list item at each depth
        self.item_columns: Dict[int, int] = {}

    def ensure_newline(self) -> None:
        if self.output and not self.output.endswith('\n'):
            self.output += '\n'

    def ensure_blank_line(self) -> None:
        if not self.output or self.output.endswith('\n\n'):
            return
        self.output += '\n' if self.output.endswith('\n') else '\n\n'

    def write_inline(self, rendered: str) -> None:
        if _is_inline(self.previous) and self._needs_space(rendered):
            self.output += ' '
        self.output += rendered

    def _needs_space(self, rendered: str) -> bool:
        if not self.output or not rendered:
            return False
        last = self.output[-1]
        first = rendered[0]
        if last.isspace() or last in OPENERS:
            return False
        if first.isspace() or first in CLOSING_PUNCTUATION:
            return False
        return True

    def item_indent(self, depth: int) -> str:
        """Indentation that keeps a block at list *depth* inside its item."""
        if depth <= 0:
            return ''
        return ' ' * self.item_columns.get(depth - 1, 2 * depth)

    def write_block(self, rendered: str, depth: int) -> None:
        """Write a block part, nested under the open list item when *depth* > 0."""
        if depth:
            self.ensure_newline()
            self.output += _indent_lines(rendered, self.item_indent(depth)) + '\n'
        else:
            self.ensure_blank_line()
            self.output += rendered + '\n\n'

    def write(self, part: ContentPart) -> None:
        if isinstance(part, Text):
            self.write_inline(part.content)
        elif isinstance(part, Bold):
            self.write_inline(f"**{part.content}**")
        elif isinstance(part, Italic):
            self.write_inline(f"*{part.content}*")
        elif isinstance(part, BoldMath):
            self.write_inline(f"**${part.content}$**")
        elif isinstance(part, InlineCode):
            self.write_inline(_inline_code(part.content))
        elif isinstance(part, Link):
            self.write_inline(f"[{part.content}]({part.href})")
        elif isinstance(part, Math):
            if part.display:
                self.write_block(f"$${part.content}$$", part.depth)
            else:
                self.write_inline(f"${part.content}$")
        elif isinstance(part, ListItem):
            self.ensure_newline()
            marker = f"{part.index}. " if part.ordered else '- '
            indent = '  ' * part.depth
            self.item_columns[part.depth] = len(indent) + len(marker)
            self.output += indent + marker
        elif isinstance(part, ParagraphBreak):
            self.ensure_blank_line()
        elif isinstance(part, LineBreak):
            self.ensure_newline()
        elif isinstance(part, CodeBlock):
            fence = _code_fence(part.content)
            body = part.content.rstrip('\n')
            rendered = f"{fence}{part.language}\n{body}\n{fence}"
            if part.depth:
                self.write_block(rendered, part.depth)
            else:
                # Code blocks start on their own line, not after a blank line
                self.ensure_newline()
                self.output += rendered + '\n'
        elif isinstance(part, Heading):
            self.write_block(f"{'#' * part.level} {part.content}", part.depth)
        elif isinstance(part, Blockquote):
            quoted = serialize(part.parts)
            if quoted:
                self.write_block(_quote_lines(quoted), part.depth)
        self.previous = part

    def getvalue(self) -> str:
        return collapse_blank_lines(self.output).strip()


def serialize(parts: Iterable[ContentPart]) -> str:
    """
    Serialize content parts into Markdown.

    Args:
        parts: Content parts in document order

    Returns:
        Markdown text with normalized blank lines and no surrounding whitespace
    """
    writer = MarkdownWriter()
    for part in parts:
        writer.write(part)
    return writer.getvalue()
