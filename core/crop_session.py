"""
Selection lifecycle for one crop component instance.

    NO_IMAGE -> IMAGE_LOADED -> CROPPED
    any state -> NO_IMAGE (cancel / change image)

Decode requests are tagged with tokens from a DecodeTracker; a completion for
a token that is no longer current is dropped without touching the state.
"""
import logging
from enum import Enum

from core.crop_region import MIN_SIZE, ImageFrame
from core.errors import InvalidCropState
from core.image_loader import DecodeTracker
from core.interaction import CropController
from core.processor import JPEG_QUALITY, rasterize_crop

logger = logging.getLogger(__name__)


class CropState(Enum):
    NO_IMAGE = "no_image"
    IMAGE_LOADED = "image_loaded"
    CROPPED = "cropped"


class CropSession:
    def __init__(self, min_size=MIN_SIZE, output_size=None, quality=JPEG_QUALITY):
        self.controller = CropController(min_size=min_size)
        self.tracker = DecodeTracker()
        self.output_size = output_size
        self.quality = quality
        self.state = CropState.NO_IMAGE
        self.image = None
        self.result = None
        self.last_error = None
        self.pending_token = None

    @property
    def is_loading(self):
        return self.pending_token is not None

    @property
    def frame(self):
        return self.controller.frame

    @property
    def region(self):
        return self.controller.region

    # ---- Loading ----
    def begin_load(self) -> int:
        """Token for a new decode request. Any earlier request becomes stale."""
        token = self.tracker.next_token()
        self.pending_token = token
        logger.debug("Decode request %d started", token)
        return token

    def finish_load(self, token, decoded) -> bool:
        if not self.tracker.is_current(token):
            logger.info("Dropping stale decode result %d", token)
            return False

        self.pending_token = None
        self.image = decoded.handle
        self.result = None
        self.last_error = None
        self.controller.set_frame(ImageFrame(decoded.width, decoded.height))
        self.state = CropState.IMAGE_LOADED
        logger.info("Image loaded %dx%d, initial crop %s", decoded.width, decoded.height, self.region)
        return True

    def fail_load(self, token, error) -> bool:
        if not self.tracker.is_current(token):
            return False
        self.pending_token = None
        logger.warning("Image decode %d failed: %s", token, error)
        self._reset()
        self.last_error = error
        return True

    # ---- Commit ----
    def apply_crop(self, rasterizer=rasterize_crop):
        """
        Rasterize the current region. On RasterizationUnavailable the image and
        region are left untouched so the user can retry.
        """
        if self.state is not CropState.IMAGE_LOADED:
            raise InvalidCropState(f"Cannot apply crop in state {self.state.value}")

        self.controller.end()
        try:
            result = rasterizer(self.image, self.region, output_size=self.output_size,
                                quality=self.quality)
        except Exception as e:
            self.last_error = e
            raise

        self.result = result
        self.last_error = None
        self.state = CropState.CROPPED
        return result

    # ---- Discard ----
    def change_image(self):
        self._discard()

    def cancel(self):
        self._discard()

    def _discard(self):
        # A decode still in flight must not bring the discarded image back
        self.tracker.invalidate()
        self.pending_token = None
        self._reset()

    def _reset(self):
        self.controller.clear()
        self.image = None
        self.result = None
        self.last_error = None
        self.state = CropState.NO_IMAGE
