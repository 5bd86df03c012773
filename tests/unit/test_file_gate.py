import pytest

from webtocase.files.exceptions import FileTooLargeError, UnsupportedFileTypeError
from webtocase.files.file_gate import MAX_DOCUMENT_BYTES, MAX_IMAGE_BYTES, FileGate
from webtocase.files.models import Attachment, FileClass


def _attachment(name: str, mime_type: str = "", size: int = 10) -> Attachment:
    return Attachment(file_name=name, content=b"\0" * size, mime_type=mime_type)


class TestClassify:
    @pytest.mark.parametrize(
        "mime_type", ["image/jpeg", "image/png", "image/webp", "image/bmp", "image/heic", "image/heif"]
    )
    def test_supported_image_types(self, mime_type: str) -> None:
        assert FileGate().classify(_attachment("photo", mime_type)) == FileClass.IMAGE

    def test_video_mime_is_unsupported(self) -> None:
        assert FileGate().classify(_attachment("clip.bin", "video/mp4")) == FileClass.UNSUPPORTED

    def test_video_extension_without_mime_is_unsupported(self) -> None:
        assert FileGate().classify(_attachment("clip.MOV")) == FileClass.UNSUPPORTED

    def test_heic_extension_without_mime_is_image(self) -> None:
        assert FileGate().classify(_attachment("IMG_0001.HEIC")) == FileClass.IMAGE

    def test_generic_mime_falls_back_to_extension(self) -> None:
        attachment = _attachment("scan.png", "application/octet-stream")

        assert FileGate().classify(attachment) == FileClass.IMAGE

    def test_pdf_is_document(self) -> None:
        assert FileGate().classify(_attachment("report.pdf", "application/pdf")) == FileClass.DOCUMENT

    def test_unsupported_image_mime_is_document(self) -> None:
        assert FileGate().classify(_attachment("anim.gif", "image/gif")) == FileClass.DOCUMENT


class TestCheckSize:
    def test_video_rejected_regardless_of_size(self) -> None:
        with pytest.raises(UnsupportedFileTypeError, match="Video files are not supported."):
            FileGate().inspect(_attachment("tiny.mp4", "video/mp4", size=1))

    def test_image_at_ceiling_accepted(self) -> None:
        gate = FileGate(max_image_bytes=100)

        assert gate.inspect(_attachment("a.jpg", "image/jpeg", size=100)) == FileClass.IMAGE

    def test_image_over_ceiling_rejected(self) -> None:
        gate = FileGate(max_image_bytes=100)

        with pytest.raises(FileTooLargeError):
            gate.inspect(_attachment("a.jpg", "image/jpeg", size=101))

    def test_document_over_ceiling_rejected(self) -> None:
        gate = FileGate(max_document_bytes=100)

        with pytest.raises(FileTooLargeError, match="Documents max"):
            gate.inspect(_attachment("a.pdf", "application/pdf", size=101))

    def test_default_ceilings(self) -> None:
        assert MAX_IMAGE_BYTES == 25 * 1024 * 1024
        assert MAX_DOCUMENT_BYTES == 4 * 1024 * 1024

    def test_default_messages(self) -> None:
        gate = FileGate()
        too_big_image = Attachment("a.jpg", b"\0" * (MAX_IMAGE_BYTES + 1), "image/jpeg")

        with pytest.raises(FileTooLargeError, match="Image too large. Max 25MB."):
            gate.inspect(too_big_image)
