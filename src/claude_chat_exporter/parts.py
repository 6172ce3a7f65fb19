"""
Content parts: the typed sequence handed from extraction to serialization.

Block parts that can appear inside a list item carry the list ``depth`` they
were found at, so the serializer can indent them under the item's marker.
"""

from dataclasses import dataclass, field
from typing import List, Tuple, Union


@dataclass(frozen=True)
class Text:
    content: str


@dataclass(frozen=True)
class Bold:
    content: str


@dataclass(frozen=True)
class Italic:
    content: str


@dataclass(frozen=True)
class BoldMath:
    """Math that appeared inside bold formatting."""
    content: str


@dataclass(frozen=True)
class InlineCode:
    content: str


@dataclass(frozen=True)
class Link:
    content: str
    href: str


@dataclass(frozen=True)
class CodeBlock:
    content: str
    language: str = ''
    depth: int = 0


@dataclass(frozen=True)
class Heading:
    level: int
    content: str
    depth: int = 0


@dataclass(frozen=True)
class Math:
    content: str
    display: bool = False
    depth: int = 0


@dataclass(frozen=True)
class Blockquote:
    """Quoted content, extracted as its own part sequence."""
    parts: Tuple['ContentPart', ...]
    depth: int = 0


@dataclass(frozen=True)
class ListItem:
    """Marker opening a list item; the item's content follows as separate parts."""
    ordered: bool
    depth: int
    index: int


@dataclass(frozen=True)
class ParagraphBreak:
    pass


@dataclass(frozen=True)
class LineBreak:
    pass


ContentPart = Union[
    Text, Bold, Italic, BoldMath, InlineCode, Link, CodeBlock,
    Heading, Math, Blockquote, ListItem, ParagraphBreak, LineBreak,
]

# Parts that flow inside a line of prose
INLINE_PARTS = (Text, Bold, Italic, BoldMath, InlineCode, Link)


@dataclass
class ExtractionResult:
    """Ordered parts extracted from one subtree."""
    parts: List[ContentPart] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.parts)

    def __bool__(self) -> bool:
        return any(not isinstance(part, (ParagraphBreak, LineBreak)) for part in self.parts)
