"""
HTML parser for Claude.ai chat pages: locates messages and the title.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from .assembler import Message, MessageContainer, MessageKind, collect_messages, render_document
from .exceptions import InvalidDocumentError, NoMessagesFoundError
from .nodes import ElementNode, collapse_whitespace, parse_html
from .reasoning import is_reasoning_container

logger = logging.getLogger(__name__)

DEFAULT_TITLE = 'Claude Conversation'

USER_CLASSES = ('group', 'relative', 'inline-flex', 'bg-bg-300')
ASSISTANT_CLASSES = ('group', 'relative', '-tracking-[0.015em]')
USER_ROW_CLASSES = ('flex', 'flex-row', 'gap-2')
USER_TEXT_TAGS = ('div', 'p', 'span')


def _by_testid(value: str) -> Callable[[ElementNode], bool]:
    return lambda el: el.get('data-testid') == value


# Title candidates, most specific first
TITLE_SELECTORS = [
    _by_testid('chat-title'),
    lambda el: el.has_class('chat-title'),
    lambda el: el.has_class('conversation-title'),
    lambda el: el.tag == 'title',
    lambda el: el.tag == 'h1',
]


@dataclass
class ParsedConversation:
    title: str
    messages: List[Message] = field(default_factory=list)
    parsed_at: datetime = field(default_factory=datetime.now)


def is_user_message(element: ElementNode) -> bool:
    return (element.get('data-testid') == 'user-message'
            or element.has_all_classes(*USER_CLASSES))


def is_assistant_message(element: ElementNode) -> bool:
    return ('data-is-streaming' in element.attrs
            or element.has_class('font-claude-message')
            or element.has_all_classes(*ASSISTANT_CLASSES))


def _user_content_area(element: ElementNode) -> ElementNode:
    if element.get('data-testid') == 'user-message':
        return element
    message = element.find(_by_testid('user-message'))
    if message is not None:
        return message

    row = element.find(lambda el: el.tag == 'div' and el.has_all_classes(*USER_ROW_CLASSES))
    if row is None:
        return element

    # Avatar initials are at most three characters; the message is the longest text
    best, best_length = row, 0
    for candidate in row.find_all(lambda el: el.tag in USER_TEXT_TAGS):
        text = collapse_whitespace(candidate.text)
        if len(text) > max(3, best_length):
            best, best_length = candidate, len(text)
    return best


def find_content_area(element: ElementNode, kind: MessageKind) -> ElementNode:
    """
    Locate the part of a message container that holds the message itself.

    Avatars, names and toolbars around the message are left out. The
    container itself is returned when no narrower area is recognised.

    Args:
        element: Matched message container
        kind: Message kind the container was classified as

    Returns:
        Content area element
    """
    if kind is MessageKind.USER:
        return _user_content_area(element)
    if element.has_class('font-claude-message'):
        return element
    content = element.find(lambda el: el.tag == 'div' and el.has_class('font-claude-message'))
    return content or element


class ConversationParser:
    """Parser for Claude.ai chat page HTML to extract conversation data."""

    def __init__(self, guess_languages: bool = False):
        """
        Initialize the parser.

        Args:
            guess_languages: Guess the language of code blocks that carry no
                language class
        """
        self.guess_languages = guess_languages

    def parse_html(self, html_content: str, title: Optional[str] = None) -> ParsedConversation:
        """
        Parse HTML content from a Claude chat page.

        Args:
            html_content: Raw HTML content
            title: Title override; detected from the page when omitted

        Returns:
            ParsedConversation with deduplicated messages in document order

        Raises:
            InvalidDocumentError: If the HTML is empty
            NoMessagesFoundError: If no message could be extracted
        """
        if not html_content or not html_content.strip():
            raise InvalidDocumentError("Empty HTML document")

        root = parse_html(html_content)
        containers = self.find_message_containers(root)
        logger.info("Found %d message containers", len(containers))

        messages = collect_messages(containers, guess_languages=self.guess_languages)
        if not messages:
            raise NoMessagesFoundError()

        return ParsedConversation(
            title=title or self.extract_title(root),
            messages=messages,
        )

    def find_message_containers(self, root: ElementNode) -> List[MessageContainer]:
        """
        Find user and assistant message containers in document order.

        Args:
            root: Document root

        Returns:
            Containers with strictly increasing positions
        """
        containers: List[MessageContainer] = []
        position = 0
        stack = [root]

        while stack:
            element = stack.pop()
            position += 1

            kind = None
            if is_user_message(element):
                kind = MessageKind.USER
            elif is_assistant_message(element):
                kind = MessageKind.ASSISTANT

            if kind is None:
                # Reverse so children are popped in document order
                stack.extend(reversed(element.element_children))
                continue

            reasoning_node = None
            if kind is MessageKind.ASSISTANT:
                reasoning_node = element.find(is_reasoning_container)
            containers.append(MessageContainer(
                kind, element, position, reasoning_node,
                content_node=find_content_area(element, kind),
            ))

        return containers

    def extract_title(self, root: ElementNode) -> str:
        """Extract conversation title from the page."""
        for selector in TITLE_SELECTORS:
            element = root.find(selector)
            if element is None:
                continue
            title = collapse_whitespace(element.text)
            # Remove "| Claude" / "- Claude" suffix
            title = re.sub(r'\s*[|\-]\s*Claude\s*$', '', title)
            if title and title != 'Claude':
                return title

        return DEFAULT_TITLE

    def generate_markdown(self, parsed: ParsedConversation,
                          exported_at: Optional[datetime] = None) -> str:
        """
        Generate markdown content from a parsed conversation.

        Args:
            parsed: Result of ``parse_html``
            exported_at: Export timestamp (defaults to now)

        Returns:
            Formatted markdown string
        """
        return render_document(parsed.messages, parsed.title, exported_at=exported_at)


def export_conversation(html_content: str, title: Optional[str] = None,
                        guess_languages: bool = False,
                        exported_at: Optional[datetime] = None) -> str:
    """Convert a Claude chat page to a Markdown document in one call."""
    parser = ConversationParser(guess_languages=guess_languages)
    return parser.generate_markdown(parser.parse_html(html_content, title=title),
                                    exported_at=exported_at)
