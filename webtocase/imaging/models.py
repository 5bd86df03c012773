from collections.abc import Callable
from dataclasses import dataclass

ProgressCallback = Callable[[int], None]


@dataclass(frozen=True)
class CompressionOptions:
    """Parameters handed to an image compressor."""

    max_size_mb: float = 0.7
    max_dimension: int = 2560
    initial_quality: float = 0.85
    preserve_exif: bool = False
    output_mime_type: str = "image/jpeg"

    @property
    def max_size_bytes(self) -> int:
        return int(self.max_size_mb * 1024 * 1024)
