import io
from typing import ClassVar

from PIL import Image, ImageOps, UnidentifiedImageError

from webtocase.files.models import Attachment
from webtocase.imaging.base import BaseImageCompressor
from webtocase.imaging.exceptions import ImageCompressionError
from webtocase.imaging.models import CompressionOptions, ProgressCallback


class PillowCompressor(BaseImageCompressor):
    """Recompresses images with Pillow.

    Quality is stepped down first; once it reaches the floor the image is
    scaled down and the quality search starts again, until the output fits the
    target size or the iteration cap is hit. The last encoding is returned
    even if it is still above the target.
    """

    MAX_ITERATIONS: ClassVar[int] = 10
    QUALITY_STEP: ClassVar[float] = 0.1
    MIN_QUALITY: ClassVar[float] = 0.4
    SCALE_STEP: ClassVar[float] = 0.8
    FORMATS: ClassVar[dict[str, str]] = {
        "image/jpeg": "JPEG",
        "image/png": "PNG",
        "image/webp": "WEBP",
    }

    def compress(
        self,
        attachment: Attachment,
        options: CompressionOptions,
        on_progress: ProgressCallback | None = None,
    ) -> Attachment:
        output_format = self.FORMATS.get(options.output_mime_type)
        if output_format is None:
            raise ImageCompressionError(
                f"Unsupported output type '{options.output_mime_type}'"
            )
        try:
            with Image.open(io.BytesIO(attachment.content)) as source:
                exif = source.info.get("exif") if options.preserve_exif else None
                image = ImageOps.exif_transpose(source)
                image.load()
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise ImageCompressionError(f"Cannot decode image: {exc}") from exc

        if output_format == "JPEG":
            image = self._flatten(image)
        image.thumbnail((options.max_dimension, options.max_dimension))

        quality = options.initial_quality
        encoded = b""
        for iteration in range(1, self.MAX_ITERATIONS + 1):
            encoded = self._encode(image, output_format, quality, exif)
            if on_progress is not None:
                on_progress(round(iteration / self.MAX_ITERATIONS * 100))
            if len(encoded) <= options.max_size_bytes:
                break
            if quality - self.QUALITY_STEP >= self.MIN_QUALITY:
                quality -= self.QUALITY_STEP
            else:
                width, height = image.size
                image = image.resize(
                    (max(1, int(width * self.SCALE_STEP)), max(1, int(height * self.SCALE_STEP)))
                )
                quality = options.initial_quality
        if on_progress is not None:
            on_progress(100)
        return Attachment(
            file_name=attachment.file_name,
            content=encoded,
            mime_type=options.output_mime_type,
        )

    @staticmethod
    def _flatten(image: Image.Image) -> Image.Image:
        if image.mode in ("RGBA", "LA", "P"):
            rgba = image.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.getchannel("A"))
            return background
        if image.mode != "RGB":
            return image.convert("RGB")
        return image

    @staticmethod
    def _encode(
        image: Image.Image,
        output_format: str,
        quality: float,
        exif: bytes | None,
    ) -> bytes:
        buf = io.BytesIO()
        params: dict[str, object] = {"format": output_format, "optimize": True}
        if output_format in ("JPEG", "WEBP"):
            params["quality"] = int(round(quality * 100))
        if exif:
            params["exif"] = exif
        try:
            image.save(buf, **params)
        except (OSError, ValueError) as exc:
            raise ImageCompressionError(f"Cannot encode image: {exc}") from exc
        return buf.getvalue()
