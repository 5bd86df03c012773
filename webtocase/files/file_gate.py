from pathlib import PurePath

from webtocase.files.exceptions import FileTooLargeError, UnsupportedFileTypeError
from webtocase.files.models import Attachment, FileClass

MAX_IMAGE_BYTES = 25 * 1024 * 1024
# Asynchronous server-side assembly handles documents up to about 4MB.
MAX_DOCUMENT_BYTES = 4 * 1024 * 1024

SUPPORTED_IMAGE_TYPES = frozenset({
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/bmp",
    "image/heic",
    "image/heif",
})
IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".webp", ".bmp", ".heic", ".heif"})
VIDEO_EXTENSIONS = frozenset({
    ".mp4", ".mov", ".avi", ".mkv", ".webm", ".m4v", ".wmv", ".flv", ".3gp", ".mpeg", ".mpg",
})
GENERIC_MIME_TYPES = frozenset({"", "application/octet-stream", "binary/octet-stream"})


class FileGate:
    """Classifies attachments and enforces per-class size ceilings."""

    def __init__(
        self,
        max_image_bytes: int = MAX_IMAGE_BYTES,
        max_document_bytes: int = MAX_DOCUMENT_BYTES,
    ) -> None:
        self._max_image_bytes = max_image_bytes
        self._max_document_bytes = max_document_bytes

    def classify(self, attachment: Attachment) -> FileClass:
        mime_type = (attachment.mime_type or "").lower().strip()
        extension = PurePath(attachment.file_name).suffix.lower()
        if mime_type.startswith("video/"):
            return FileClass.UNSUPPORTED
        if mime_type in SUPPORTED_IMAGE_TYPES:
            return FileClass.IMAGE
        if mime_type not in GENERIC_MIME_TYPES:
            return FileClass.DOCUMENT
        if extension in VIDEO_EXTENSIONS:
            return FileClass.UNSUPPORTED
        if extension in IMAGE_EXTENSIONS:
            return FileClass.IMAGE
        return FileClass.DOCUMENT

    def check_size(self, attachment: Attachment, file_class: FileClass) -> None:
        """Reject attachments that must never be uploaded.

        Raises:
            UnsupportedFileTypeError: for video files, regardless of size.
            FileTooLargeError: when the ceiling for the class is exceeded.
        """
        if file_class == FileClass.UNSUPPORTED:
            raise UnsupportedFileTypeError("Video files are not supported.")
        if file_class == FileClass.IMAGE and attachment.size > self._max_image_bytes:
            raise FileTooLargeError(
                f"Image too large. Max {self._max_image_bytes // (1024 * 1024)}MB."
            )
        if file_class == FileClass.DOCUMENT and attachment.size > self._max_document_bytes:
            raise FileTooLargeError(
                f"File too large. Documents max {self._max_document_bytes // (1024 * 1024)}MB."
            )

    def inspect(self, attachment: Attachment) -> FileClass:
        file_class = self.classify(attachment)
        self.check_size(attachment, file_class)
        return file_class
