"""
Utility functions for the Claude chat exporter.
"""

import re
import hashlib
import logging
from datetime import datetime
from typing import Optional

from pygments.lexers import guess_lexer
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)


def sanitize_filename(text: str, max_length: int = 50) -> str:
    """
    Sanitize text for use as filename.

    Args:
        text: Text to sanitize
        max_length: Maximum length for the result

    Returns:
        Sanitized filename-safe string
    """
    # Remove or replace invalid filename characters
    text = re.sub(r'[<>:"/\\|?*]', '', text)
    # Replace whitespace runs with hyphens
    text = re.sub(r'\s+', '-', text.strip())
    # Remove non-alphanumeric except hyphens and underscores
    text = re.sub(r'[^a-zA-Z0-9\-_]', '', text)
    text = re.sub(r'-+', '-', text)
    text = text.strip('-')

    if len(text) > max_length:
        text = text[:max_length].rstrip('-')

    return text or 'untitled'


def generate_export_filename(title: str, when: Optional[datetime] = None) -> str:
    """
    Generate the file name for an exported conversation.

    Format: claude-chat-sanitized-title-YYYY-MM-DDTHH-MM-SS.md

    Args:
        title: Conversation title
        when: Export time (defaults to now)

    Returns:
        File name string
    """
    if when is None:
        when = datetime.now()

    timestamp = when.strftime('%Y-%m-%dT%H-%M-%S')
    return f"claude-chat-{sanitize_filename(title, max_length=40)}-{timestamp}.md"


def hash_content(content: str) -> str:
    """
    Generate SHA-256 hash of content for duplicate detection.

    Args:
        content: Content to hash

    Returns:
        Hex digest of SHA-256 hash
    """
    return hashlib.sha256(content.encode('utf-8')).hexdigest()


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate text to specified length with optional suffix.

    Args:
        text: Text to truncate
        max_length: Maximum length including suffix
        suffix: Suffix to append when truncating

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text

    truncate_length = max_length - len(suffix)
    return text[:truncate_length] + suffix


def guess_code_language(code: str) -> str:
    """
    Guess the language of a code snippet with Pygments.

    Args:
        code: Source code

    Returns:
        Primary Pygments alias of the guessed lexer, or empty string
    """
    if not code.strip():
        return ''
    try:
        lexer = guess_lexer(code)
    except ClassNotFound:
        return ''

    if not lexer.aliases or lexer.aliases[0] == 'text':
        return ''
    logger.debug("Guessed code language %s", lexer.aliases[0])
    return lexer.aliases[0]
