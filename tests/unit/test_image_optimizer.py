from unittest.mock import MagicMock

import pytest

from webtocase.config.settings import Settings
from webtocase.files.models import Attachment
from webtocase.imaging.exceptions import ImageCompressionError
from webtocase.imaging.factory import ImageCompressorFactory
from webtocase.imaging.models import CompressionOptions
from webtocase.imaging.optimizer import ImageOptimizer
from webtocase.imaging.pillow_adapter import PillowCompressor

SMALL_TARGET = CompressionOptions(max_size_mb=0.001)


def _big(name: str = "photo.heic", mime_type: str = "image/heic") -> Attachment:
    return Attachment(name, b"\0" * 5000, mime_type)


def _make_optimizer(result: Attachment | None = None) -> tuple[ImageOptimizer, MagicMock]:
    compressor = MagicMock()
    compressor.compress.return_value = result or Attachment("x", b"\1" * 100, "image/jpeg")
    return ImageOptimizer(compressor, SMALL_TARGET), compressor


class TestImageOptimizer:
    def test_documents_pass_through(self) -> None:
        optimizer, compressor = _make_optimizer()
        document = Attachment("report.pdf", b"\0" * 5000, "application/pdf")

        assert optimizer.optimize(document) is document
        compressor.compress.assert_not_called()

    def test_small_images_pass_through(self) -> None:
        optimizer, compressor = _make_optimizer()
        small = Attachment("a.jpg", b"\0" * 10, "image/jpeg")

        assert optimizer.optimize(small) is small
        compressor.compress.assert_not_called()

    def test_compresses_and_renames_to_jpg(self) -> None:
        optimizer, compressor = _make_optimizer()

        result = optimizer.optimize(_big())

        compressor.compress.assert_called_once()
        assert result.file_name == "photo.jpg"
        assert result.mime_type == "image/jpeg"
        assert result.size == 100

    @pytest.mark.parametrize("name", ["shot.PNG", "pic.webp", "old.bmp", "img.heif"])
    def test_converted_extensions(self, name: str) -> None:
        optimizer, _compressor = _make_optimizer()

        result = optimizer.optimize(_big(name, "image/png"))

        assert result.file_name.endswith(".jpg")

    def test_compression_error_returns_original(self) -> None:
        optimizer, compressor = _make_optimizer()
        compressor.compress.side_effect = ImageCompressionError("bad pixels")
        original = _big()

        assert optimizer.optimize(original) is original

    def test_unexpected_error_returns_original(self) -> None:
        optimizer, compressor = _make_optimizer()
        compressor.compress.side_effect = MemoryError("too big")
        original = _big()

        assert optimizer.optimize(original) is original

    def test_without_compressor_returns_original(self) -> None:
        original = _big()

        assert ImageOptimizer(None, SMALL_TARGET).optimize(original) is original

    def test_forwards_progress_callback(self) -> None:
        optimizer, compressor = _make_optimizer()
        callback = MagicMock()

        optimizer.optimize(_big(), callback)

        assert compressor.compress.call_args.args[2] is callback


class TestImageCompressorFactory:
    def test_creates_pillow(self) -> None:
        compressor = ImageCompressorFactory.create(Settings(_env_file=None))

        assert isinstance(compressor, PillowCompressor)

    def test_none_disables_compression(self) -> None:
        settings = Settings(_env_file=None, image_compressor="none")

        assert ImageCompressorFactory.create(settings) is None

    def test_unknown_compressor_raises(self) -> None:
        settings = Settings(_env_file=None, image_compressor="imagemagick")

        with pytest.raises(ValueError, match="Unknown image compressor"):
            ImageCompressorFactory.create(settings)

    def test_options_follow_settings(self) -> None:
        settings = Settings(_env_file=None, image_target_size_mb=1.5, image_max_dimension=1024)

        options = ImageCompressorFactory.options(settings)

        assert options.max_size_mb == 1.5
        assert options.max_dimension == 1024
        assert options.initial_quality == 0.85
