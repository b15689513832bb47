"""Basic file IO helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

from hostaudit.errors import DocumentError


def read_yaml_file(path: Path) -> Any:
    """Return the parsed YAML (or JSON) if the file exists, otherwise ``None``."""

    if not path.exists():
        return None
    with path.open("r", encoding="utf-8") as handle:
        try:
            return yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise DocumentError(f"unable to parse {path}: {exc}") from exc


def load_document_data(path: Path) -> Dict[str, Any]:
    """Load a test document into a dictionary."""

    data = read_yaml_file(path)
    if data is None:
        raise DocumentError(f"document {path} is missing or empty")
    if not isinstance(data, dict):
        raise DocumentError(f"document at {path} is not a mapping")
    return data
