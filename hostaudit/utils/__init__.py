"""Utility helpers for the audit core."""

from .fileio import read_yaml_file, load_document_data
from .locator import FileLocator
from .matcher import ContentMatch, MatchLine, file_content_check

__all__ = [
    "read_yaml_file",
    "load_document_data",
    "FileLocator",
    "ContentMatch",
    "MatchLine",
    "file_content_check",
]
