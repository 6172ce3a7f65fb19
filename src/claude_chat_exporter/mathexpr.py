"""
Recover TeX source from rendered math (KaTeX, MathJax, MathML).
"""

from dataclasses import dataclass
from typing import Optional

from .nodes import ElementNode, collapse_whitespace

MATH_CLASSES = ('katex', 'MathJax')
MATH_TAGS = ('math', 'mjx-container')

DISPLAY_CLASSES = ('katex-display', 'math-display', 'MathJax_Display')
DISPLAY_ATTR_VALUES = ('block', 'true')

# Secondary renderings emitted alongside an expression
ARTIFACT_CLASSES = ('katex-mathml', 'katex-html', 'MathJax_Preview', 'MJX_Assistive_MathML')
ARTIFACT_TAGS = ('mjx-assistive-mml',)


@dataclass(frozen=True)
class MathExpression:
    source: str
    display: bool = False


def is_math(node: ElementNode) -> bool:
    """Check if element is the root of a rendered math expression."""
    return node.tag in MATH_TAGS or node.has_class(*MATH_CLASSES)


def is_math_artifact(node: ElementNode) -> bool:
    """Check if element is an auxiliary (visual or accessibility) math rendering."""
    return node.tag in ARTIFACT_TAGS or node.has_class(*ARTIFACT_CLASSES)


def find_math(node: ElementNode) -> Optional[ElementNode]:
    """Return *node* if it is math, else its first math descendant."""
    if is_math(node):
        return node
    return node.find(is_math)


def _is_display(node: ElementNode) -> bool:
    for candidate in (node, node.parent):
        if candidate is None:
            continue
        if candidate.has_class(*DISPLAY_CLASSES):
            return True
        if (candidate.get('display') or '').lower() in DISPLAY_ATTR_VALUES:
            return True
    return False


def _annotation_source(node: ElementNode) -> Optional[str]:
    annotations = node.find_all(lambda el: el.tag == 'annotation')
    for annotation in annotations:
        # application/x-tex, TeX
        if (annotation.get('encoding') or '').lower().endswith('tex'):
            return annotation.text
    if annotations:
        return annotations[0].text
    return None


def extract_math(node: ElementNode) -> Optional[MathExpression]:
    """
    Extract the source notation of a math element.

    Args:
        node: Element recognised by ``is_math``

    Returns:
        MathExpression, or None when no notation can be recovered
    """
    source = _annotation_source(node)
    if source is None:
        source = node.get('data-latex') or node.get('alttext')
    if source is None:
        mathml = node.find(lambda el: el.has_class('katex-mathml'))
        source = collapse_whitespace((mathml or node).text)

    source = source.strip()
    if not source:
        return None
    return MathExpression(source=source, display=_is_display(node))
