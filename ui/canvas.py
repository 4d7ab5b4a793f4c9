from PySide6.QtCore import Qt, QRectF, QPointF, Signal
from PySide6.QtGui import QPainter, QColor, QPen, QBrush, QImage, QPixmap
from PySide6.QtWidgets import QWidget, QSizePolicy

from core.crop_region import Corner
from core.interaction import CropController


def pil_to_qimage(image):
    """Copy a Pillow image into a QImage that owns its pixels."""
    rgba = image.convert("RGBA")
    data = rgba.tobytes("raw", "RGBA")
    qimage = QImage(data, rgba.width, rgba.height, rgba.width * 4, QImage.Format.Format_RGBA8888)
    return qimage.copy()


class CropCanvas(QWidget):
    crop_changed = Signal()

    def __init__(self, controller=None, parent=None):
        super().__init__(parent)
        self.controller = controller or CropController()
        self.pixmap = None

        self.setMouseTracking(True)
        self.setMinimumSize(320, 320)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)

        self.overlay_color = QColor(0, 0, 0, 150)
        self.handle_size = 12
        self.padding = 10

    # ---- Loading ----
    def load_image(self, image):
        """Show `image` (QImage, QPixmap or Pillow image). The controller must already hold its frame."""
        if isinstance(image, QPixmap):
            self.pixmap = image
        elif isinstance(image, QImage):
            self.pixmap = QPixmap.fromImage(image)
        else:
            self.pixmap = QPixmap.fromImage(pil_to_qimage(image))
        self.unsetCursor()
        self.crop_changed.emit()
        self.update()

    def clear(self):
        self.pixmap = None
        self.controller.end()
        self.unsetCursor()
        self.update()

    # ---- Layout: image box in widget coordinates ----
    def image_rect(self):
        """Letterboxed rect the image is drawn into. Recomputed from the live widget size."""
        frame = self.controller.frame
        if not frame:
            return QRectF()
        avail_w = max(1.0, self.width() - 2 * self.padding)
        avail_h = max(1.0, self.height() - 2 * self.padding)
        scale = min(avail_w / frame.width, avail_h / frame.height)
        w = frame.width * scale
        h = frame.height * scale
        return QRectF((self.width() - w) / 2, (self.height() - h) / 2, w, h)

    def crop_rect(self):
        """Current region mapped to widget coordinates."""
        frame = self.controller.frame
        region = self.controller.region
        img = self.image_rect()
        if not frame or region is None or img.isEmpty():
            return QRectF()
        sx = img.width() / frame.width
        sy = img.height() / frame.height
        return QRectF(img.x() + region.x * sx, img.y() + region.y * sy,
                      region.size * sx, region.size * sy)

    def _local(self, pos):
        img = self.image_rect()
        return (pos.x() - img.x(), pos.y() - img.y()), img

    def handle_rects(self):
        r = self.crop_rect()
        if r.isNull():
            return {}
        hs = self.handle_size
        return {
            Corner.TOP_LEFT: QRectF(r.left() - hs/2, r.top() - hs/2, hs, hs),
            Corner.TOP_RIGHT: QRectF(r.right() - hs/2, r.top() - hs/2, hs, hs),
            Corner.BOTTOM_LEFT: QRectF(r.left() - hs/2, r.bottom() - hs/2, hs, hs),
            Corner.BOTTOM_RIGHT: QRectF(r.right() - hs/2, r.bottom() - hs/2, hs, hs),
        }

    # ---- Drawing ----
    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.fillRect(self.rect(), Qt.GlobalColor.white)

        if not self.pixmap or not self.controller.frame:
            painter.setPen(QColor(120, 120, 120))
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "Load an image to start cropping")
            painter.end()
            return

        img = self.image_rect()
        painter.drawPixmap(img, self.pixmap, QRectF(self.pixmap.rect()))

        # Dark overlay around the crop, four rects to avoid subpixel gaps
        cr = self.crop_rect()
        painter.setBrush(self.overlay_color)
        painter.setPen(Qt.PenStyle.NoPen)
        painter.drawRect(QRectF(img.left(), img.top(), img.width(), cr.top() - img.top()))
        painter.drawRect(QRectF(img.left(), cr.bottom(), img.width(), img.bottom() - cr.bottom()))
        painter.drawRect(QRectF(img.left(), cr.top(), cr.left() - img.left(), cr.height()))
        painter.drawRect(QRectF(cr.right(), cr.top(), img.right() - cr.right(), cr.height()))

        # Crop border
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.setPen(QPen(Qt.GlobalColor.white, 1, Qt.PenStyle.SolidLine))
        painter.drawRect(cr)

        # Handles
        painter.setBrush(QBrush(QColor(255, 255, 255, 200)))
        painter.setPen(QPen(QColor(0, 0, 0, 100), 1))
        for h_rect in self.handle_rects().values():
            painter.drawRect(h_rect)

        painter.end()

    # ---- Mouse interaction ----
    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton or not self.controller.frame:
            super().mousePressEvent(event)
            return

        point, img = self._local(event.position())
        if self.controller.begin_at(point, img.width(), img.height(), self.handle_size / 2 + 2):
            if self.controller.session.corner:
                self.setCursor(self._get_cursor_for_corner(self.controller.session.corner))
            else:
                self.setCursor(Qt.CursorShape.ClosedHandCursor)
        event.accept()

    def mouseMoveEvent(self, event):
        point, img = self._local(event.position())

        if self.controller.is_dragging:
            if self.controller.pointer_move(point, img.width(), img.height()) is not None:
                self.crop_changed.emit()
                self.update()
            return

        # Hover cursor
        hit = self.controller.hit_test(point, img.width(), img.height(), self.handle_size / 2 + 2)
        if hit is None:
            self.setCursor(Qt.CursorShape.ArrowCursor)
        elif hit[0] == "resize":
            self.setCursor(self._get_cursor_for_corner(hit[1]))
        else:
            self.setCursor(Qt.CursorShape.OpenHandCursor)

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            self.controller.end()
            self.setCursor(Qt.CursorShape.ArrowCursor)
        super().mouseReleaseEvent(event)

    def leaveEvent(self, event):
        self.controller.end()
        self.unsetCursor()
        super().leaveEvent(event)

    def _get_cursor_for_corner(self, corner):
        if corner in (Corner.TOP_LEFT, Corner.BOTTOM_RIGHT):
            return Qt.CursorShape.SizeFDiagCursor
        return Qt.CursorShape.SizeBDiagCursor

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.update()
