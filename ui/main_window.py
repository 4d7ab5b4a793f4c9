import logging
import os

from PySide6.QtWidgets import (QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QPushButton,
                               QFileDialog, QLabel, QFrame, QStackedWidget)
from PySide6.QtCore import Qt, QByteArray, QThreadPool, Signal
from PySide6.QtGui import QPixmap

from core.crop_session import CropSession, CropState
from core.errors import RasterizationUnavailable
from core.image_loader import VALID_EXTENSIONS
from core.paths import default_output_path
from core.processor import save_result
from core.settings import CropSettings
from ui.canvas import CropCanvas
from ui.image_loader_worker import ImageLoaderWorker

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    cropped = Signal(bytes, str)  # JPEG blob, data-URL preview
    cancelled = Signal()

    def __init__(self, settings=None):
        super().__init__()
        self.setWindowTitle("SquareCrop")
        self.resize(900, 700)

        self.settings = settings or CropSettings.load()
        self.session = CropSession(min_size=self.settings.min_size,
                                   output_size=self.settings.output_size or None,
                                   quality=self.settings.jpeg_quality)
        self.thread_pool = QThreadPool.globalInstance()
        self.active_workers = {}  # token -> worker
        self.current_source = None

        self.central_widget = QWidget()
        self.central_widget.setStyleSheet("background-color: white;")
        self.setCentralWidget(self.central_widget)

        self.main_layout = QVBoxLayout(self.central_widget)
        self.main_layout.setContentsMargins(20, 20, 20, 0)
        self.main_layout.setSpacing(15)

        self.create_toolbar()

        # Crop canvas (page 0) / result preview (page 1)
        self.view_stack = QStackedWidget()
        self.main_layout.addWidget(self.view_stack, stretch=1)

        self.canvas = CropCanvas(self.session.controller)
        self.view_stack.addWidget(self.canvas)

        self.preview_label = QLabel()
        self.preview_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.view_stack.addWidget(self.preview_label)

        self.hint_label = QLabel("Drag to move • Drag corners to resize")
        self.hint_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.main_layout.addWidget(self.hint_label)

        self.canvas.crop_changed.connect(self._on_crop_changed)
        self._update_controls()

    def create_toolbar(self):
        container = QWidget()
        layout = QHBoxLayout(container)
        layout.setContentsMargins(0, 0, 0, 0)

        self.load_btn = QPushButton("Load Image")
        self.load_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.load_btn.clicked.connect(self.load_image_dialog)
        layout.addWidget(self.load_btn)

        line = QFrame()
        line.setFrameShape(QFrame.Shape.VLine)
        line.setFrameShadow(QFrame.Shadow.Sunken)
        layout.addWidget(line)

        self.apply_btn = QPushButton("Apply Crop")
        self.apply_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.apply_btn.clicked.connect(self.apply_crop)
        layout.addWidget(self.apply_btn)

        self.cancel_btn = QPushButton("Cancel")
        self.cancel_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.cancel_btn.clicked.connect(self.cancel_crop)
        layout.addWidget(self.cancel_btn)

        self.change_btn = QPushButton("Change Image")
        self.change_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.change_btn.clicked.connect(self.change_image)
        layout.addWidget(self.change_btn)

        layout.addStretch()

        self.save_btn = QPushButton("Save Cropped Image")
        self.save_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.save_btn.clicked.connect(self.save_result_dialog)
        layout.addWidget(self.save_btn)

        self.main_layout.addWidget(container)

    # ---- Loading ----
    def load_image_dialog(self):
        patterns = " ".join(f"*{ext}" for ext in VALID_EXTENSIONS)
        path, _ = QFileDialog.getOpenFileName(self, "Open Image", self.settings.last_dir,
                                              f"Images ({patterns})")
        if path:
            self.settings.last_dir = os.path.dirname(path)
            self.settings.save()
            self.load_source(path)

    def load_source(self, source):
        """Start decoding `source` (path, bytes or data URL). Supersedes any load in flight."""
        token = self.session.begin_load()
        self.current_source = source
        worker = ImageLoaderWorker(token, source, max_file_size=self.settings.max_file_size)
        # Keep reference to prevent GC in PySide6
        self.active_workers[token] = worker
        worker.signals.finished.connect(self._on_image_decoded)
        worker.signals.error.connect(self._on_image_error)
        self.statusBar().showMessage("Loading image...")
        self.thread_pool.start(worker)
        self._update_controls()
        return token

    def _on_image_decoded(self, token, decoded):
        self.active_workers.pop(token, None)
        if not self.session.finish_load(token, decoded):
            self._update_controls()
            return
        self.canvas.load_image(decoded.handle)
        self.view_stack.setCurrentIndex(0)
        self.statusBar().showMessage(f"Loaded {decoded.width}x{decoded.height} image")
        self._update_controls()

    def _on_image_error(self, token, message):
        self.active_workers.pop(token, None)
        if not self.session.fail_load(token, message):
            self._update_controls()
            return
        self.canvas.clear()
        self.statusBar().showMessage(f"{message}. Please choose another image.")
        self._update_controls()

    # ---- Commit / discard ----
    def apply_crop(self):
        if self.session.state is not CropState.IMAGE_LOADED:
            return None
        try:
            result = self.session.apply_crop()
        except RasterizationUnavailable as e:
            # Selection is preserved; the user can simply press Apply again
            self.statusBar().showMessage(f"{e}. Your selection was kept, please try again.")
            return None

        preview = QPixmap()
        preview.loadFromData(QByteArray(result.blob), "JPEG")
        self.preview_label.setPixmap(preview.scaled(
            320, 320, Qt.AspectRatioMode.KeepAspectRatio, Qt.TransformationMode.SmoothTransformation))
        self.view_stack.setCurrentIndex(1)
        self.statusBar().showMessage(f"Cropped to {result.size}x{result.size}")
        self._update_controls()
        self.cropped.emit(result.blob, result.preview)
        return result

    def cancel_crop(self):
        self.session.cancel()
        self.current_source = None
        self.canvas.clear()
        self.preview_label.clear()
        self.view_stack.setCurrentIndex(0)
        self.statusBar().clearMessage()
        self._update_controls()
        self.cancelled.emit()

    def change_image(self):
        self.session.change_image()
        self.current_source = None
        self.canvas.clear()
        self.preview_label.clear()
        self.view_stack.setCurrentIndex(0)
        self._update_controls()
        self.load_image_dialog()

    def save_result_dialog(self):
        if self.session.state is not CropState.CROPPED:
            return
        source = self.current_source if isinstance(self.current_source, str) else None
        suggested = default_output_path(source)
        path, _ = QFileDialog.getSaveFileName(self, "Save Cropped Image", suggested, "JPEG (*.jpg *.jpeg)")
        if not path:
            return
        try:
            save_result(self.session.result, path)
        except OSError as e:
            logger.error("Saving %s failed: %s", path, e)
            self.statusBar().showMessage(f"Could not save image: {e}")
            return
        self.statusBar().showMessage(f"Saved {path}")

    # ---- State ----
    def _on_crop_changed(self):
        region = self.session.region
        if region is not None:
            self.statusBar().showMessage(
                f"x={region.x:.0f}  y={region.y:.0f}  size={region.size:.0f}")

    def _update_controls(self):
        state = self.session.state
        self.apply_btn.setEnabled(state is CropState.IMAGE_LOADED)
        # A pending load can be abandoned before any image is shown
        self.cancel_btn.setEnabled(state is not CropState.NO_IMAGE or self.session.is_loading)
        self.change_btn.setEnabled(state is not CropState.NO_IMAGE)
        self.save_btn.setEnabled(state is CropState.CROPPED)
        self.hint_label.setVisible(state is CropState.IMAGE_LOADED)
