from webtocase.config.settings import Settings
from webtocase.imaging.base import BaseImageCompressor
from webtocase.imaging.models import CompressionOptions
from webtocase.imaging.pillow_adapter import PillowCompressor


class ImageCompressorFactory:
    """Creates the configured image compressor; "none" disables compression."""

    ADAPTERS: dict[str, type[BaseImageCompressor]] = {
        "pillow": PillowCompressor,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseImageCompressor | None:
        name = settings.image_compressor.lower()
        if name == "none":
            return None
        adapter_cls = cls.ADAPTERS.get(name)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown image compressor '{name}'. Choose from: {[*cls.ADAPTERS, 'none']}"
            )
        return adapter_cls()

    @classmethod
    def options(cls, settings: Settings) -> CompressionOptions:
        return CompressionOptions(
            max_size_mb=settings.image_target_size_mb,
            max_dimension=settings.image_max_dimension,
            initial_quality=settings.image_initial_quality,
        )
