import re

from webtocase.files.file_gate import FileGate
from webtocase.files.models import Attachment, FileClass
from webtocase.imaging.base import BaseImageCompressor
from webtocase.imaging.exceptions import ImageCompressionError
from webtocase.imaging.models import CompressionOptions, ProgressCallback
from webtocase.logging.logger import Log

_CONVERTED_EXTENSIONS = re.compile(r"\.(heic|heif|png|webp|bmp)$", re.IGNORECASE)


class ImageOptimizer:
    """Shrinks oversized images before transfer.

    Never fails a submission: without a compressor, or when compression
    fails, the original attachment is returned unchanged.
    """

    def __init__(
        self,
        compressor: BaseImageCompressor | None,
        options: CompressionOptions | None = None,
        file_gate: FileGate | None = None,
    ) -> None:
        self._compressor = compressor
        self._options = options or CompressionOptions()
        self._file_gate = file_gate or FileGate()

    def optimize(
        self,
        attachment: Attachment,
        on_progress: ProgressCallback | None = None,
    ) -> Attachment:
        if self._file_gate.classify(attachment) != FileClass.IMAGE:
            return attachment
        if attachment.size <= self._options.max_size_bytes:
            return attachment
        if self._compressor is None:
            Log.debug(f"No image compressor configured, sending {attachment.file_name} as is")
            return attachment

        try:
            compressed = self._compressor.compress(attachment, self._options, on_progress)
        except ImageCompressionError as exc:
            Log.warning(f"Image compression failed, sending original: {exc}")
            return attachment
        except Exception as exc:
            Log.warning(f"Unexpected image compression error, sending original: {exc}")
            return attachment

        file_name = attachment.file_name
        if compressed.mime_type == "image/jpeg":
            file_name = _CONVERTED_EXTENSIONS.sub(".jpg", file_name)
        Log.info(
            f"Optimized {attachment.file_name}: {attachment.size} -> {compressed.size} bytes"
        )
        return Attachment(
            file_name=file_name,
            content=compressed.content,
            mime_type=compressed.mime_type,
        )
