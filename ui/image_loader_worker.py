import logging

from PySide6.QtCore import QRunnable, Signal, QObject

from core.errors import ImageDecodeFailed, InvalidImageFile
from core.image_loader import decode_image, validate_image_file

logger = logging.getLogger(__name__)


class LoaderSignals(QObject):
    finished = Signal(int, object)  # token, DecodedImage
    error = Signal(int, str)        # token, message


class ImageLoaderWorker(QRunnable):
    def __init__(self, token, source, max_file_size=None):
        super().__init__()
        self.token = token
        self.source = source
        self.max_file_size = max_file_size
        self.signals = LoaderSignals()

    def run(self):
        try:
            # Only files picked from disk go through the upload checks
            if self.max_file_size and isinstance(self.source, str) and not self.source.startswith("data:"):
                validate_image_file(self.source, self.max_file_size)
            decoded = decode_image(self.source)
        except (ImageDecodeFailed, InvalidImageFile) as e:
            self.signals.error.emit(self.token, str(e))
            return
        except Exception as e:
            logger.exception("Unexpected failure decoding image %d", self.token)
            self.signals.error.emit(self.token, f"Could not load image: {e}")
            return
        self.signals.finished.emit(self.token, decoded)
