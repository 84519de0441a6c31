"""Utility functions for response parsing."""

from .code_cleaner import clean_generated_code, remove_marker_artifacts
from .file_paths import get_file_extension, is_ignored_path, is_js_path, normalize_path

__all__ = [
    "clean_generated_code",
    "remove_marker_artifacts",
    "get_file_extension",
    "is_ignored_path",
    "is_js_path",
    "normalize_path",
]
