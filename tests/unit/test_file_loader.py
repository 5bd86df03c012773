from pathlib import Path

import pytest

from webtocase.files.exceptions import FileReadError
from webtocase.files.file_loader import FileLoader


class TestFileLoader:
    def test_reads_bytes_and_guesses_mime(self, tmp_path: Path) -> None:
        path = tmp_path / "report.pdf"
        path.write_bytes(b"%PDF-1.7")

        attachment = FileLoader().load(path)

        assert attachment.file_name == "report.pdf"
        assert attachment.content == b"%PDF-1.7"
        assert attachment.mime_type == "application/pdf"

    def test_explicit_mime_wins(self, tmp_path: Path) -> None:
        path = tmp_path / "photo.bin"
        path.write_bytes(b"\xff\xd8")

        attachment = FileLoader().load(path, mime_type="image/jpeg")

        assert attachment.mime_type == "image/jpeg"

    def test_unknown_extension_has_empty_mime(self, tmp_path: Path) -> None:
        path = tmp_path / "blob.zzunknown"
        path.write_bytes(b"x")

        assert FileLoader().load(path).mime_type == ""

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileReadError, match="File not found"):
            FileLoader().load(tmp_path / "nope.txt")
