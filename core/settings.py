from dataclasses import dataclass

from PySide6.QtCore import QSettings

from core.crop_region import MIN_SIZE
from core.image_loader import MAX_FILE_SIZE
from core.processor import JPEG_QUALITY

ORGANIZATION = "SquareCrop"
APPLICATION = "SquareCrop"


@dataclass
class CropSettings:
    min_size: float = MIN_SIZE
    jpeg_quality: int = JPEG_QUALITY
    max_file_size: int = MAX_FILE_SIZE
    output_size: int = 0  # 0 keeps the crop 1:1 with source pixels
    last_dir: str = ""

    @classmethod
    def load(cls, settings=None):
        settings = settings or QSettings(ORGANIZATION, APPLICATION)
        defaults = cls()
        min_size = float(settings.value("min_size", defaults.min_size))
        if min_size <= 0:
            min_size = defaults.min_size
        return cls(
            min_size=min_size,
            jpeg_quality=int(settings.value("jpeg_quality", defaults.jpeg_quality)),
            max_file_size=int(settings.value("max_file_size", defaults.max_file_size)),
            output_size=int(settings.value("output_size", defaults.output_size)),
            last_dir=settings.value("last_dir", defaults.last_dir) or "",
        )

    def save(self, settings=None):
        settings = settings or QSettings(ORGANIZATION, APPLICATION)
        settings.setValue("min_size", self.min_size)
        settings.setValue("jpeg_quality", self.jpeg_quality)
        settings.setValue("max_file_size", self.max_file_size)
        settings.setValue("output_size", self.output_size)
        settings.setValue("last_dir", self.last_dir)
        settings.sync()
