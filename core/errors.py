class SquareCropError(Exception):
    """Base class for all crop tool failures."""


class InvalidImageFile(SquareCropError):
    """The selected file is not an acceptable JPEG/PNG upload."""


class ImageDecodeFailed(SquareCropError):
    """Source image could not be decoded (corrupt data, unsupported format, bad URL)."""


class RasterizationUnavailable(SquareCropError):
    """The output surface could not be created or encoded. Retryable."""


class InvalidCropState(SquareCropError):
    """Operation not allowed in the current selection state."""
