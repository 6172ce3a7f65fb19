"""Tests for claude_chat_exporter.parser (page heuristics and end-to-end export)."""

from datetime import datetime

import pytest

from claude_chat_exporter.assembler import MessageKind
from claude_chat_exporter.exceptions import InvalidDocumentError, NoMessagesFoundError
from claude_chat_exporter.nodes import parse_html
from claude_chat_exporter.parser import (
    DEFAULT_TITLE,
    ConversationParser,
    export_conversation,
    find_content_area,
)

EXPORTED_AT = datetime(2024, 5, 17, 9, 30, 0)

EXPECTED_ASSISTANT = (
    "## The theorem\n\n"
    "For a right triangle with legs $a$ and **hypotenuse** c:\n\n"
    "$$x^2+y^2=z^2$$\n\n"
    "- Works for *every* right triangle\n"
    "- Fails otherwise\n"
    "```python\n"
    "print(1)\n"
    "```"
)


def test_parse_fixture(conversation_html):
    parsed = ConversationParser().parse_html(conversation_html)

    assert parsed.title == "Pythagoras explained"
    assert [message.kind for message in parsed.messages] == [MessageKind.USER, MessageKind.ASSISTANT]

    user, assistant = parsed.messages
    assert user.content == "What is the Pythagorean theorem?"
    assert assistant.content == EXPECTED_ASSISTANT
    assert assistant.reasoning.time == "12s"
    assert assistant.reasoning.content == (
        "The user asks about right triangles.\n\n1. Recall the theorem\n2. Give an example"
    )


def test_reasoning_never_reaches_response(conversation_html):
    parsed = ConversationParser().parse_html(conversation_html)
    assistant = parsed.messages[1]
    assert "right triangles" not in assistant.content
    assert "Thought process" not in assistant.content


def test_generate_markdown(conversation_html):
    markdown = export_conversation(conversation_html, exported_at=EXPORTED_AT)

    assert markdown.startswith("# Pythagoras explained\n\n*Exported on 2024-05-17 09:30:00*\n\n*2 messages*\n\n---\n\n")
    assert "## User\n\nWhat is the Pythagorean theorem?\n\n---\n\n## Assistant\n\n<details>" in markdown
    assert "<summary>Reasoning (12s)</summary>" in markdown
    assert markdown.count("The user asks about right triangles.") == 1
    assert markdown.endswith(EXPECTED_ASSISTANT + "\n")


def test_title_override(conversation_html):
    parsed = ConversationParser().parse_html(conversation_html, title="Custom")
    assert parsed.title == "Custom"


def test_page_without_messages(empty_page_html):
    with pytest.raises(NoMessagesFoundError):
        ConversationParser().parse_html(empty_page_html)


def test_empty_input():
    with pytest.raises(InvalidDocumentError):
        ConversationParser().parse_html("   ")


def test_containers_are_in_document_order_and_not_nested():
    root = parse_html(
        "<main>"
        '<div data-is-streaming="false"><div class="font-claude-message"><p>one</p></div></div>'
        '<div class="group relative inline-flex bg-bg-300"><p>two</p></div>'
        '<div class="font-claude-message"><p>three</p></div>'
        "</main>"
    )
    containers = ConversationParser().find_message_containers(root)

    assert [container.kind for container in containers] == [
        MessageKind.ASSISTANT, MessageKind.USER, MessageKind.ASSISTANT,
    ]
    positions = [container.position for container in containers]
    assert positions == sorted(positions)
    assert len(set(positions)) == 3


def test_duplicate_renderings_are_exported_once():
    html = (
        '<div data-testid="user-message"><p>Same question</p></div>'
        '<div data-testid="user-message"><p>Same   question</p></div>'
        '<div class="font-claude-message"><p>Answer</p></div>'
    )
    parsed = ConversationParser().parse_html(html)
    assert [message.content for message in parsed.messages] == ["Same question", "Answer"]


AVATAR_USER_HTML = (
    '<div class="group relative inline-flex bg-bg-300">'
    '<div class="avatar">JD</div>'
    '<div data-testid="user-message"><p>How do I sort a list?</p></div>'
    "</div>"
)


def test_avatar_and_toolbar_stay_out_of_messages(avatar_conversation_html):
    parsed = ConversationParser().parse_html(avatar_conversation_html)

    assert parsed.title == "Sorting lists"
    user, assistant = parsed.messages
    assert user.content == "How do I sort a list?"
    assert assistant.content == (
        "Call `sorted(items)` for a new list, or `items.sort()` in place.\n\n"
        "> Both are stable.\n\n"
        "See [the sorting HOWTO](https://docs.python.org/3/howto/sorting.html)."
    )


def test_user_wrapper_uses_inner_message_node():
    container = ConversationParser().find_message_containers(parse_html(AVATAR_USER_HTML))[0]
    assert container.kind is MessageKind.USER
    assert container.content_root.get("data-testid") == "user-message"

    parsed = ConversationParser().parse_html(AVATAR_USER_HTML)
    assert parsed.messages[0].content == "How do I sort a list?"


def test_assistant_content_area_is_the_response_div():
    root = parse_html(
        '<div data-is-streaming="false"><span>Claude</span>'
        '<div class="font-claude-message"><p>Answer</p></div></div>'
    )
    container = root.find(lambda el: "data-is-streaming" in el.attrs)
    area = find_content_area(container, MessageKind.ASSISTANT)
    assert area.has_class("font-claude-message")
    assert find_content_area(area, MessageKind.ASSISTANT) is area


def test_content_area_falls_back_to_container():
    root = parse_html('<div class="group relative inline-flex bg-bg-300"><p>Plain</p></div>')
    container = root.find(lambda el: el.tag == "div")
    assert find_content_area(container, MessageKind.USER) is container


@pytest.mark.parametrize("html,expected", [
    ('<title>Chat about sorting - Claude</title>', "Chat about sorting"),
    ('<title>Claude</title><h1>Fallback heading</h1>', "Fallback heading"),
    ('<div data-testid="chat-title">  Spaced\n title </div><title>Other</title>', "Spaced title"),
    ('<p>nothing</p>', DEFAULT_TITLE),
])
def test_extract_title(html, expected):
    assert ConversationParser().extract_title(parse_html(html)) == expected
