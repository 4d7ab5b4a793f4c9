import io
import os

import pytest
from PIL import Image

# Widget tests run without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


def make_image_bytes(width, height, fmt="JPEG", color=(200, 120, 40), mode="RGB", exif=None):
    image = Image.new(mode, (width, height), color)
    # Left half darker so crops at different offsets differ
    image.paste((20, 20, 20) if mode == "RGB" else (20, 20, 20, 255), (0, 0, width // 2, height))
    buffer = io.BytesIO()
    save_kwargs = {}
    if exif is not None:
        save_kwargs["exif"] = exif
    image.save(buffer, format=fmt, **save_kwargs)
    return buffer.getvalue()


@pytest.fixture
def landscape_jpeg():
    return make_image_bytes(1000, 600)


@pytest.fixture
def landscape_image():
    image = Image.new("RGB", (1000, 600), (200, 120, 40))
    image.paste((20, 20, 20), (0, 0, 500, 600))
    return image
