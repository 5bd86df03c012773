from dataclasses import dataclass
from enum import Enum


class FileClass(str, Enum):
    IMAGE = "image"
    DOCUMENT = "document"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class Attachment:
    """A file selected for upload, held in memory."""

    file_name: str
    content: bytes
    mime_type: str = ""

    @property
    def size(self) -> int:
        return len(self.content)
