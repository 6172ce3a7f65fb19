"""
Exceptions raised by the exporter.
"""


class ExportError(Exception):
    """Base class for export failures."""


class InvalidDocumentError(ExportError):
    """The input is empty or could not be read as HTML."""


class NoMessagesFoundError(ExportError):
    """The document was processed but contains no exportable messages."""

    def __init__(self, message: str = "No conversation messages found"):
        super().__init__(message)
