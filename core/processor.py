import base64
import io
import logging
import os
from dataclasses import dataclass
from typing import Optional

from PIL import Image

from core.crop_region import CropRegion
from core.errors import RasterizationUnavailable

logger = logging.getLogger(__name__)

JPEG_QUALITY = 85  # 0.85 on the 0-1 scale
OUTPUT_FILENAME = "cropped-image.jpg"


@dataclass(frozen=True)
class CropResult:
    blob: bytes     # JPEG bytes, ready for upload
    preview: str    # data:image/jpeg;base64,... of the same bytes
    size: int       # side length of the square output in pixels


def rasterize_crop(image: Image.Image, region: CropRegion, output_size: Optional[int] = None,
                   quality: int = JPEG_QUALITY) -> CropResult:
    """
    Copy the square `region` of `image` into a new surface and encode it as JPEG.

    The region is copied pixel for pixel unless `output_size` asks for a fixed
    canonical side. Identical input always yields identical bytes.
    """
    left, top, right, bottom = region.to_box()
    # Rounding can push the box one pixel past the edge; shift it back in
    side = min(right - left, image.width, image.height)
    left = max(0, min(left, image.width - side))
    top = max(0, min(top, image.height - side))
    box = (left, top, left + side, top + side)

    try:
        cropped = image.crop(box)
        if cropped.mode != "RGB":
            # JPEG has no alpha; flatten onto white like a browser canvas export
            if "A" in cropped.getbands() or cropped.mode == "P":
                rgba = cropped.convert("RGBA")
                flattened = Image.new("RGB", rgba.size, (255, 255, 255))
                flattened.paste(rgba, mask=rgba.getchannel("A"))
                cropped = flattened
            else:
                cropped = cropped.convert("RGB")

        if output_size and output_size != side:
            cropped = cropped.resize((int(output_size), int(output_size)), Image.Resampling.LANCZOS)

        buffer = io.BytesIO()
        cropped.save(buffer, format="JPEG", quality=int(quality))
        blob = buffer.getvalue()
    except (MemoryError, OSError) as e:
        logger.error("Could not rasterize crop %s: %s", box, e)
        raise RasterizationUnavailable(f"Could not create the cropped image: {e}") from e

    preview = "data:image/jpeg;base64," + base64.b64encode(blob).decode("ascii")
    logger.info("Rasterized %dx%d crop at %s (%d bytes)", cropped.width, cropped.height, box, len(blob))
    return CropResult(blob=blob, preview=preview, size=cropped.width)


def save_result(result: CropResult, output_path: str) -> str:
    out_dir = os.path.dirname(output_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)

    with open(output_path, "wb") as f:
        f.write(result.blob)
    logger.info("Saved cropped image to %s", output_path)
    return output_path
