import mimetypes
from pathlib import Path

from webtocase.files.exceptions import FileReadError
from webtocase.files.models import Attachment


class FileLoader:
    """Reads a local file into an Attachment, guessing its MIME type."""

    def load(self, path: Path, mime_type: str | None = None) -> Attachment:
        """Read file bytes from disk.

        Raises:
            FileReadError: if the path is missing or unreadable.
        """
        if not path.is_file():
            raise FileReadError(f"File not found: {path}")
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise FileReadError(f"Failed to read {path}: {exc}") from exc
        if mime_type is None:
            mime_type, _ = mimetypes.guess_type(path.name)
        return Attachment(file_name=path.name, content=content, mime_type=mime_type or "")
