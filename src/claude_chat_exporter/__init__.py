"""
Claude chat page to Markdown exporter package.
"""

__version__ = "0.1.0"

from .main import cli
from .parser import ConversationParser, export_conversation
from .extractor import ContentExtractor, extract_content
from .serializer import serialize
from .reasoning import ReasoningResult, extract_reasoning
from .exceptions import ExportError, InvalidDocumentError, NoMessagesFoundError

__all__ = [
    "cli", "ConversationParser", "export_conversation",
    "ContentExtractor", "extract_content", "serialize",
    "ReasoningResult", "extract_reasoning",
    "ExportError", "InvalidDocumentError", "NoMessagesFoundError",
]


def main() -> None:
    """Entry point for CLI."""
    cli()
