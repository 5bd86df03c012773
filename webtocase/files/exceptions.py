class FileGateError(Exception):
    """Base exception for attachments rejected before any upload."""


class FileTooLargeError(FileGateError):
    """Raised when an attachment exceeds the ceiling for its class."""


class UnsupportedFileTypeError(FileGateError):
    """Raised when an attachment type is never accepted (e.g. video)."""


class FileReadError(FileGateError):
    """Raised when an attachment cannot be read from disk."""
