"""Tests for claude_chat_exporter.serializer."""

import pytest

from claude_chat_exporter.parts import (
    Blockquote,
    Bold,
    BoldMath,
    CodeBlock,
    Heading,
    InlineCode,
    Italic,
    LineBreak,
    Link,
    ListItem,
    Math,
    ParagraphBreak,
    Text,
)
from claude_chat_exporter.serializer import collapse_blank_lines, serialize


def test_empty_sequence():
    assert serialize([]) == ""
    assert serialize([ParagraphBreak(), LineBreak()]) == ""


# ---------------------------------------------------------------------------
# Inline spacing
# ---------------------------------------------------------------------------

def test_space_between_abutting_inline_parts():
    assert serialize([Text("word"), Bold("bold"), Text("next")]) == "word **bold** next"


def test_no_space_before_punctuation():
    assert serialize([Bold("x"), Text(", then"), Italic("y"), Text(".")]) == "**x**, then *y*."


def test_no_duplicate_space():
    assert serialize([Bold("x"), Text(" y")]) == "**x** y"


def test_no_space_inside_brackets():
    assert serialize([Text("("), Bold("x"), Text(")")]) == "(**x**)"


def test_inline_code_and_math():
    parts = [Text("Set"), InlineCode("n"), Text("to"), Math("n^2"), BoldMath("\\pi")]
    assert serialize(parts) == "Set `n` to $n^2$ **$\\pi$**"


def test_inline_code_containing_backticks():
    assert serialize([InlineCode("a`b")]) == "`` a`b ``"


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------

def test_link():
    parts = [Text("See"), Link("the docs", "https://docs.python.org"), Text(".")]
    assert serialize(parts) == "See [the docs](https://docs.python.org)."


def test_blockquote_prefixes_every_line():
    quoted = (Text("first"), ParagraphBreak(), Text("second"))
    parts = [Text("Intro"), ParagraphBreak(), Blockquote(quoted), ParagraphBreak(), Text("After")]
    assert serialize(parts) == "Intro\n\n> first\n>\n> second\n\nAfter"


def test_paragraph_breaks_collapse():
    parts = [ParagraphBreak(), ParagraphBreak(), Text("a"), ParagraphBreak(), ParagraphBreak(), Text("b")]
    assert serialize(parts) == "a\n\nb"


def test_line_breaks_do_not_stack():
    assert serialize([Text("a"), LineBreak(), LineBreak(), Text("b")]) == "a\nb"


def test_heading_surrounded_by_blank_lines():
    parts = [Text("intro"), Heading(2, "Title"), Text("body")]
    assert serialize(parts) == "intro\n\n## Title\n\nbody"


def test_display_math_has_blank_lines():
    parts = [Text("Before"), Math("x^2+y^2=z^2", display=True), Text("After")]
    result = serialize(parts)
    assert "\n\n$$x^2+y^2=z^2$$\n\n" in result
    assert result == "Before\n\n$$x^2+y^2=z^2$$\n\nAfter"


def test_display_math_next_to_paragraph_breaks_collapses():
    parts = [Text("a"), ParagraphBreak(), Math("m", display=True), ParagraphBreak(), Text("b")]
    assert serialize(parts) == "a\n\n$$m$$\n\nb"


def test_code_block_fidelity():
    result = serialize([Text("Example:"), CodeBlock("print(1)\n", "python")])
    assert result == "Example:\n```python\nprint(1)\n```"


def test_code_block_preserves_internal_blank_line():
    result = serialize([CodeBlock("def f():\n\n    return 1\n", "")])
    assert result == "```\ndef f():\n\n    return 1\n```"


def test_code_block_fence_outgrows_content_fences():
    result = serialize([CodeBlock("```\nx\n```", "markdown")])
    assert result.startswith("````markdown\n")
    assert result.endswith("\n````")


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------

def test_flat_list():
    parts = [
        ListItem(False, 0, 1), Text("a"), LineBreak(),
        ListItem(False, 0, 2), Text("b"), LineBreak(),
    ]
    assert serialize(parts) == "- a\n- b"


def test_nested_ordered_list_is_indented_one_level():
    parts = [
        ListItem(False, 0, 1), Text("Parent"),
        ListItem(True, 1, 1), Text("x"), LineBreak(),
        ListItem(True, 1, 2), Text("y"), LineBreak(),
        LineBreak(),
    ]
    assert serialize(parts) == "- Parent\n  1. x\n  2. y"


def test_list_after_paragraph():
    parts = [ParagraphBreak(), Text("Steps:"), ParagraphBreak(), ListItem(True, 0, 1), Bold("go"), LineBreak()]
    assert serialize(parts) == "Steps:\n\n1. **go**"


def test_display_math_stays_inside_list_item():
    parts = [ListItem(False, 0, 1), Text("Formula:"), Math("x^2", display=True, depth=1), LineBreak(),
             ListItem(False, 0, 2), Text("next"), LineBreak()]
    assert serialize(parts) == "- Formula:\n  $$x^2$$\n- next"


def test_code_block_is_indented_to_ordered_item_content():
    parts = [
        ListItem(True, 0, 1), Text("Run:"), CodeBlock("pip install x\n\nls\n", "bash", depth=1), LineBreak(),
        ListItem(True, 0, 2), Text("Done"), LineBreak(),
    ]
    assert serialize(parts) == "1. Run:\n   ```bash\n   pip install x\n\n   ls\n   ```\n2. Done"


def test_heading_inside_nested_item():
    parts = [
        ListItem(False, 0, 1), Text("Parent"),
        ListItem(False, 1, 1), Heading(3, "Child", depth=2), LineBreak(),
        LineBreak(),
    ]
    assert serialize(parts) == "- Parent\n  - \n    ### Child"


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("parts", [
    [Text("a"), ParagraphBreak(), Heading(1, "h"), ParagraphBreak(), Text("b")],
    [Math("x", display=True), Math("y", display=True)],
    [CodeBlock("a\n\n\n\nb", "txt"), ParagraphBreak(), Text("tail")],
    [ListItem(False, 0, 1), Text("a"), LineBreak(), ParagraphBreak(), Text("b")],
])
def test_blank_line_normalization_is_idempotent(parts):
    result = serialize(parts)
    assert "\n\n\n" not in result
    assert collapse_blank_lines(result) == result


def test_collapse_blank_lines():
    assert collapse_blank_lines("a\n\n\n\nb\n\n\nc") == "a\n\nb\n\nc"
