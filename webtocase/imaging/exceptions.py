class ImageCompressionError(Exception):
    """Raised when an image cannot be recompressed."""
