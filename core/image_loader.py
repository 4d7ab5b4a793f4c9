import base64
import binascii
import io
import logging
import os
import threading
from dataclasses import dataclass

from PIL import Image, ImageOps, UnidentifiedImageError

from core.errors import ImageDecodeFailed, InvalidImageFile

logger = logging.getLogger(__name__)

VALID_EXTENSIONS = ('.jpg', '.jpeg', '.png')
VALID_FORMATS = ('JPEG', 'PNG')
MAX_FILE_SIZE = 1024 * 1024  # 1 MB

DATA_URL_PREFIX = 'data:image/'


@dataclass(frozen=True)
class DecodedImage:
    width: int
    height: int
    handle: Image.Image


def validate_image_file(path: str, max_file_size: int = MAX_FILE_SIZE):
    """Reject anything that is not a JPEG/PNG under the upload size limit."""
    if not os.path.isfile(path):
        raise InvalidImageFile(f"File not found: {path}")
    if not path.lower().endswith(VALID_EXTENSIONS):
        raise InvalidImageFile("Please select a JPEG or PNG image")
    size = os.path.getsize(path)
    if size > max_file_size:
        raise InvalidImageFile(
            f"File size must be less than {max_file_size // 1024} KB (got {size // 1024} KB)"
        )


def _read_source(source) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)

    if isinstance(source, str) and source.startswith('data:'):
        if not source.startswith(DATA_URL_PREFIX):
            raise ImageDecodeFailed("Data URL does not contain an image")
        header, sep, payload = source.partition(',')
        if not sep or not header.endswith(';base64'):
            raise ImageDecodeFailed("Only base64 image data URLs are supported")
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageDecodeFailed(f"Invalid image data: {e}") from e

    if isinstance(source, str) and source.startswith(('http://', 'https://')):
        raise ImageDecodeFailed("Remote images are not supported. Please download and open the file.")

    try:
        with open(os.fspath(source), 'rb') as f:
            return f.read()
    except (OSError, TypeError) as e:
        raise ImageDecodeFailed(f"Cannot read {source}: {e}") from e


def decode_image(source) -> DecodedImage:
    """
    Decode `source` (bytes, file path or data:image/ URL) into an upright Pillow image.

    EXIF orientation is applied so the reported width/height are the ones the
    user sees. Raises ImageDecodeFailed for anything that is not a readable
    JPEG/PNG.
    """
    data = _read_source(source)
    try:
        image = Image.open(io.BytesIO(data))
        fmt = image.format
        if fmt not in VALID_FORMATS:
            raise ImageDecodeFailed(f"Unsupported image format: {fmt}")
        image = ImageOps.exif_transpose(image)
        # Force pixel decode now so corrupt bodies fail here, not at crop time
        image.load()
    except ImageDecodeFailed:
        raise
    except (UnidentifiedImageError, Image.DecompressionBombError, MemoryError,
            OSError, SyntaxError, ValueError) as e:
        raise ImageDecodeFailed(f"Could not decode image: {e}") from e

    width, height = image.size
    if width <= 0 or height <= 0:
        raise ImageDecodeFailed(f"Image has no pixels: {width}x{height}")
    logger.debug("Decoded %s image %dx%d", fmt, width, height)
    return DecodedImage(width, height, image)


class DecodeTracker:
    """
    Hands out increasing tokens for decode requests so a completion that was
    superseded by a newer load can be recognised and dropped.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._latest = 0

    def next_token(self) -> int:
        with self._lock:
            self._latest += 1
            return self._latest

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._latest

    def invalidate(self):
        """Makes every outstanding token stale."""
        self.next_token()
