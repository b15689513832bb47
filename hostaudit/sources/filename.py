"""Report files whose names match a pattern."""

from __future__ import annotations

import logging
import os
import re
from typing import Any, Dict, List, Mapping, Tuple

from hostaudit.errors import ConfigurationError, ExecutionError
from hostaudit.result import EvaluationCriteria
from hostaudit.utils.locator import DEFAULT_MAX_DEPTH, FileLocator

from . import ChainlessSource, expand_variables, reject_nul

logger = logging.getLogger(__name__)


class FileNameSource(ChainlessSource):
    """Locate files by name; evidence is the name's capture groups."""

    def __init__(
        self,
        path: str = "",
        file: str = "",
        max_depth: int = DEFAULT_MAX_DEPTH,
        best_effort: bool = True,
    ) -> None:
        super().__init__()
        self.path = path
        self.file = file
        self.max_depth = max_depth
        self.best_effort = best_effort
        self.matches: List[Tuple[str, List[str]]] = []
        self.skipped: List[Tuple[str, OSError]] = []

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None, best_effort: bool = True) -> "FileNameSource":
        data = data or {}
        return cls(
            path=str(data.get("path") or ""),
            file=str(data.get("file") or ""),
            best_effort=best_effort,
        )

    def is_populated(self) -> bool:
        return self.path != ""

    def validate(self) -> None:
        if not self.path:
            raise ConfigurationError("filename path must be set")
        reject_nul(self.path, "filename path must not contain NUL bytes")
        if not self.file:
            raise ConfigurationError("filename file must be set")
        reject_nul(self.file, "filename file must not contain NUL bytes")
        try:
            re.compile(self.file)
        except re.error as exc:
            raise ConfigurationError(f"filename file is not a valid expression: {exc}") from exc

    def expand_variables(self, variables: Mapping[str, str]) -> None:
        self.path = expand_variables(variables, self.path)
        self.file = expand_variables(variables, self.file)

    def prepare(self) -> None:
        logger.debug('prepare(): locating files, path %s, file "%s"', self.path, self.file)
        reject_nul(self.path, "filename path must not contain NUL bytes", ExecutionError)
        reject_nul(self.file, "filename file must not contain NUL bytes", ExecutionError)
        try:
            pattern = re.compile(self.file)
        except re.error as exc:
            raise ExecutionError(f"filename pattern does not compile: {exc}") from exc

        locator = FileLocator(self.path, max_depth=self.max_depth, best_effort=self.best_effort)
        located = locator.locate(pattern, use_regexp=True)
        self.skipped.extend(locator.skipped)
        for found in located:
            name = os.path.basename(found)
            match = pattern.search(name)
            groups = [group if group is not None else "" for group in match.groups()] if match else []
            self.matches.append((found, groups or [name]))

    def get_criteria(self) -> List[EvaluationCriteria]:
        criteria = [
            EvaluationCriteria(identifier=path, test_value=value)
            for path, values in self.matches
            for value in values
        ]
        return self._with_merged(criteria)
