"""
Assembly of extracted messages into the final Markdown document.
"""

import dataclasses
import enum
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from .exceptions import NoMessagesFoundError
from .extractor import extract_content
from .nodes import ElementNode
from .parts import CodeBlock, ExtractionResult
from .reasoning import ReasoningResult, extract_reasoning
from .serializer import serialize
from .utils import guess_code_language, hash_content

logger = logging.getLogger(__name__)

# Profile initials and speaker labels that leak in front of user text
LEADING_INITIALS_RE = re.compile(r'\A[A-Z]{1,3}[ \t]*\n\s*')
SPEAKER_PREFIX_RE = re.compile(r'\A(?:User|Claude):\s*', re.IGNORECASE)


class MessageKind(enum.Enum):
    USER = 'user'
    ASSISTANT = 'assistant'

    @property
    def heading(self) -> str:
        return 'User' if self is MessageKind.USER else 'Assistant'


@dataclass(frozen=True)
class MessageContainer:
    """A classified message subtree and its place in the document."""
    kind: MessageKind
    node: ElementNode
    position: int
    reasoning_node: Optional[ElementNode] = None
    content_node: Optional[ElementNode] = None

    @property
    def content_root(self) -> ElementNode:
        return self.content_node if self.content_node is not None else self.node


@dataclass(frozen=True)
class Message:
    kind: MessageKind
    content: str
    position: int
    fingerprint: str
    reasoning: Optional[ReasoningResult] = None


def _fill_code_languages(result: ExtractionResult) -> ExtractionResult:
    parts = []
    for part in result.parts:
        if isinstance(part, CodeBlock) and not part.language:
            part = dataclasses.replace(part, language=guess_code_language(part.content))
        parts.append(part)
    return ExtractionResult(parts=parts)


def clean_user_text(content: str) -> str:
    """Strip avatar initials and a speaker label from the start of user text."""
    content = LEADING_INITIALS_RE.sub('', content, count=1)
    content = SPEAKER_PREFIX_RE.sub('', content, count=1)
    return content.strip()


def build_message(container: MessageContainer, guess_languages: bool = False) -> Optional[Message]:
    """
    Extract and serialize a single message container.

    Args:
        container: Classified container
        guess_languages: Fill in missing code block languages with Pygments

    Returns:
        Message, or None when the container holds no content
    """
    reasoning = None
    exclusion_root = None
    if container.kind is MessageKind.ASSISTANT and container.reasoning_node is not None:
        exclusion_root = container.reasoning_node
        reasoning = extract_reasoning(container.reasoning_node)

    result = extract_content(container.content_root, exclusion_root=exclusion_root)
    if guess_languages:
        result = _fill_code_languages(result)
    content = serialize(result.parts) if result else ''
    if container.kind is MessageKind.USER:
        content = clean_user_text(content)

    if not content and reasoning is None:
        return None

    combined = (reasoning.content if reasoning else '') + content
    return Message(
        kind=container.kind,
        content=content,
        position=container.position,
        fingerprint=hash_content(combined),
        reasoning=reasoning,
    )


def collect_messages(containers: Iterable[MessageContainer],
                     guess_languages: bool = False) -> List[Message]:
    """
    Build messages in document order, dropping duplicates.

    A failure inside one container is logged and that container is skipped;
    it never aborts the others.

    Args:
        containers: Containers from the classifier
        guess_languages: Passed through to ``build_message``

    Returns:
        Deduplicated messages sorted by document position
    """
    messages = []
    for container in containers:
        try:
            message = build_message(container, guess_languages=guess_languages)
        except Exception:
            logger.warning("Failed to extract %s message at position %d",
                           container.kind.value, container.position, exc_info=True)
            continue
        if message is not None:
            messages.append(message)

    messages.sort(key=lambda message: message.position)

    seen = set()
    unique = []
    for message in messages:
        if message.fingerprint in seen:
            logger.debug("Dropping duplicate message at position %d", message.position)
            continue
        seen.add(message.fingerprint)
        unique.append(message)
    return unique


def format_reasoning(reasoning: ReasoningResult) -> str:
    summary = f"Reasoning ({reasoning.time})" if reasoning.time else "Reasoning"
    return f"<details>\n<summary>{summary}</summary>\n\n{reasoning.content}\n\n</details>"


def render_message(message: Message) -> str:
    sections = [f"## {message.kind.heading}"]
    if message.reasoning is not None:
        sections.append(format_reasoning(message.reasoning))
    if message.content:
        sections.append(message.content)
    return '\n\n'.join(sections)


def render_document(messages: List[Message], title: str,
                    exported_at: Optional[datetime] = None) -> str:
    """
    Render the complete conversation document.

    Args:
        messages: Messages in output order
        title: Conversation title
        exported_at: Export time (defaults to now)

    Returns:
        Markdown document

    Raises:
        NoMessagesFoundError: If there are no messages
    """
    if not messages:
        raise NoMessagesFoundError()
    if exported_at is None:
        exported_at = datetime.now()

    count = len(messages)
    header = '\n\n'.join([
        f"# {title}",
        f"*Exported on {exported_at.strftime('%Y-%m-%d %H:%M:%S')}*",
        f"*{count} message{'s' if count != 1 else ''}*",
    ])
    body = '\n\n---\n\n'.join(render_message(message) for message in messages)
    return f"{header}\n\n---\n\n{body}\n"
