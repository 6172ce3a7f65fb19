"""
Extraction of Claude's collapsible reasoning ("thinking") blocks.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from .nodes import ElementNode, collapse_whitespace

logger = logging.getLogger(__name__)

CONTAINER_CLASSES = ('transition-all', 'duration-400', 'ease-out', 'rounded-lg')
REASONING_KEYWORDS = ('Thinking', 'Thought', 'Reasoning', 'Processing', 'Processo di ragionamento')

# height: 0px / opacity: 0, but not opacity: 0.5
_COLLAPSED_STYLE_RE = re.compile(r'\b(?:height|opacity)\s*:\s*0(?:px)?(?![.\d])', re.IGNORECASE)
_ELAPSED_TIME_RE = re.compile(
    r'\b(\d+(?:\.\d+)?\s?(?:ms|s|secs?|seconds?|m|mins?|minutes?|h|hours?))\b',
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ReasoningResult:
    content: str
    time: str = ''


def is_reasoning_container(node: ElementNode) -> bool:
    """Check if element is the collapsible container of a reasoning block."""
    if not node.has_all_classes(*CONTAINER_CLASSES):
        return False
    button = node.find(lambda el: el.tag == 'button')
    if button is None:
        return False
    label = button.text
    return any(keyword in label for keyword in REASONING_KEYWORDS)


def _expandable_region(aside: ElementNode) -> Optional[ElementNode]:
    return aside.find(
        lambda el: el.tag == 'div' and el.has_class('overflow-hidden') and 'style' in el.attrs
    )


def _is_collapsed(region: ElementNode) -> bool:
    return _COLLAPSED_STYLE_RE.search(region.get('style') or '') is not None


def _content_area(region: ElementNode) -> ElementNode:
    return (
        region.find(lambda el: el.has_class('font-claude-response'))
        or region.find(lambda el: el.tag == 'div' and 'text-text-300' in (el.get('class') or ''))
        or region
    )


def _list_block(node: ElementNode) -> str:
    lines = []
    number = 0
    for item in node.element_children:
        if item.tag != 'li':
            continue
        number += 1
        text = collapse_whitespace(item.text)
        if not text:
            continue
        marker = f"{number}." if node.tag == 'ol' else '-'
        lines.append(f"{marker} {text}")
    return '\n'.join(lines)


def _gather_blocks(node: ElementNode, blocks: List[str]) -> None:
    for child in node.element_children:
        if child.tag == 'p':
            text = collapse_whitespace(child.text)
            if text:
                blocks.append(text)
        elif child.tag in ('ul', 'ol'):
            block = _list_block(child)
            if block:
                blocks.append(block)
        else:
            _gather_blocks(child, blocks)


def _find_elapsed_time(aside: ElementNode, region: ElementNode) -> str:
    for text_node in aside.iter_text_nodes():
        parent = text_node.parent
        if parent is not None and parent.is_inside(region):
            continue
        match = _ELAPSED_TIME_RE.search(text_node.text)
        if match:
            return match.group(1)
    return ''


def extract_reasoning(aside: ElementNode) -> Optional[ReasoningResult]:
    """
    Extract the visible text of a reasoning block.

    Only expanded blocks are exported: when the expandable region is
    missing or collapsed, its DOM text was never shown and may be stale.

    Args:
        aside: Reasoning container (see ``is_reasoning_container``)

    Returns:
        ReasoningResult, or None when the block is collapsed or empty
    """
    region = _expandable_region(aside)
    if region is None:
        logger.debug("Reasoning block has no expandable region")
        return None
    if _is_collapsed(region):
        logger.debug("Skipping collapsed reasoning block")
        return None

    blocks: List[str] = []
    _gather_blocks(_content_area(region), blocks)
    if not blocks:
        return None

    return ReasoningResult(
        content='\n\n'.join(blocks),
        time=_find_elapsed_time(aside, region),
    )
