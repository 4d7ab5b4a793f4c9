import os
import sys

from core.processor import OUTPUT_FILENAME

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))


def get_resource_path(relative_path):
    """Absolute path to a bundled resource, frozen (PyInstaller) or from source."""
    base_path = getattr(sys, "_MEIPASS", PROJECT_ROOT)
    return os.path.join(base_path, relative_path)


def default_output_path(source_path=None, directory=None):
    """Where "Save" proposes to write: next to the source file unless a directory is given."""
    if directory:
        return os.path.join(directory, OUTPUT_FILENAME)
    if source_path and not str(source_path).startswith("data:"):
        stem = os.path.splitext(os.path.basename(source_path))[0]
        return os.path.join(os.path.dirname(os.path.abspath(source_path)), f"{stem}-cropped.jpg")
    return os.path.join(os.path.expanduser("~"), OUTPUT_FILENAME)
