"""Depth-bounded recursive file locator."""

from __future__ import annotations

import logging
import os
import re
from typing import List, Tuple, Union

from hostaudit.errors import ExecutionError, LocatorExecutedError

logger = logging.getLogger(__name__)

DEFAULT_ROOT = os.sep
DEFAULT_MAX_DEPTH = 10


class FileLocator:
    """Walk a directory tree once, collecting files whose name matches a target.

    The root directory counts as depth 1; directories deeper than
    ``max_depth`` are not read at all. Symbolic links are neither followed
    nor reported. With ``best_effort`` enabled, directories that cannot be
    listed contribute no entries and are recorded in ``skipped`` instead of
    failing the traversal.
    """

    def __init__(
        self,
        root: str = DEFAULT_ROOT,
        max_depth: int = DEFAULT_MAX_DEPTH,
        best_effort: bool = True,
    ) -> None:
        self.root = root
        self.max_depth = max_depth
        self.best_effort = best_effort
        self.matches: List[str] = []
        self.skipped: List[Tuple[str, OSError]] = []
        self._executed = False

    @property
    def executed(self) -> bool:
        return self._executed

    def locate(self, target: Union[str, re.Pattern[str]], use_regexp: bool = False) -> List[str]:
        """Traverse from ``root`` and return the absolute paths that matched."""

        if self._executed:
            raise LocatorExecutedError()
        self._executed = True

        pattern = re.compile(target) if use_regexp else None
        self._walk(os.path.abspath(self.root), 1, target, pattern)
        return self.matches

    def _walk(self, path: str, depth: int, target: Union[str, re.Pattern[str]], pattern: re.Pattern[str] | None) -> None:
        if depth > self.max_depth:
            return

        try:
            with os.scandir(path) as iterator:
                entries = sorted(iterator, key=lambda entry: entry.name)
        except OSError as exc:
            self._skip(path, exc)
            return

        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                self._walk(entry.path, depth + 1, target, pattern)
            elif entry.is_file(follow_symlinks=False):
                if pattern is not None:
                    matched = pattern.search(entry.name) is not None
                else:
                    matched = entry.name == target
                if matched:
                    self.matches.append(entry.path)

    def _skip(self, path: str, exc: OSError) -> None:
        if not self.best_effort:
            raise ExecutionError(f"unable to read directory {path}: {exc}") from exc
        self.skipped.append((path, exc))
        if isinstance(exc, PermissionError):
            logger.debug("locate(): permission denied reading %s", path)
        else:
            logger.warning("locate(): skipping unreadable directory %s: %s", path, exc)
