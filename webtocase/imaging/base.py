from abc import ABC, abstractmethod

from webtocase.files.models import Attachment
from webtocase.imaging.models import CompressionOptions, ProgressCallback


class BaseImageCompressor(ABC):
    """Contract for all image compression adapters."""

    @abstractmethod
    def compress(
        self,
        attachment: Attachment,
        options: CompressionOptions,
        on_progress: ProgressCallback | None = None,
    ) -> Attachment:
        """Re-encode an image so that it fits the target size.

        Args:
            attachment: The original image.
            options: Target size, dimension bound, quality and output format.
            on_progress: Optional callback receiving a 0-100 percentage.

        Returns:
            A new Attachment in the requested output format.

        Raises:
            ImageCompressionError: if the image cannot be decoded or encoded.
        """
