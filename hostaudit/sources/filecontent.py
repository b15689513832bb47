"""Scan file content under a directory tree with a regular expression."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Mapping, Tuple

from hostaudit.errors import ConfigurationError, ExecutionError
from hostaudit.result import EvaluationCriteria
from hostaudit.utils.locator import DEFAULT_MAX_DEPTH, FileLocator
from hostaudit.utils.matcher import ContentMatch, file_content_check

from . import ChainlessSource, expand_variables, reject_nul

logger = logging.getLogger(__name__)


class FileContentSource(ChainlessSource):
    """Locate files by name pattern and extract regex capture groups from their lines."""

    def __init__(
        self,
        path: str = "",
        file: str = "",
        expression: str = "",
        max_depth: int = DEFAULT_MAX_DEPTH,
        best_effort: bool = True,
    ) -> None:
        super().__init__()
        self.path = path
        self.file = file
        self.expression = expression
        self.max_depth = max_depth
        self.best_effort = best_effort
        self.matches: List[ContentMatch] = []
        self.skipped: List[Tuple[str, OSError]] = []

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None, best_effort: bool = True) -> "FileContentSource":
        data = data or {}
        return cls(
            path=str(data.get("path") or ""),
            file=str(data.get("file") or ""),
            expression=str(data.get("expression") or ""),
            best_effort=best_effort,
        )

    def is_populated(self) -> bool:
        return self.path != ""

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def validate(self) -> None:
        if not self.path:
            raise ConfigurationError("filecontent path must be set")
        reject_nul(self.path, "filecontent path must not contain NUL bytes")
        if not self.file:
            raise ConfigurationError("filecontent file must be set")
        reject_nul(self.file, "filecontent file must not contain NUL bytes")
        _compile(self.file, "file")
        if not self.expression:
            raise ConfigurationError("filecontent expression must be set")
        _compile(self.expression, "expression")

    def expand_variables(self, variables: Mapping[str, str]) -> None:
        self.path = expand_variables(variables, self.path)
        self.file = expand_variables(variables, self.file)

    # ------------------------------------------------------------------
    # Preparation
    # ------------------------------------------------------------------
    def prepare(self) -> None:
        logger.debug('prepare(): analyzing file system, path %s, file "%s"', self.path, self.file)
        reject_nul(self.path, "filecontent path must not contain NUL bytes", ExecutionError)
        reject_nul(self.file, "filecontent file must not contain NUL bytes", ExecutionError)
        try:
            file_pattern = re.compile(self.file)
            expression = re.compile(self.expression)
        except re.error as exc:
            raise ExecutionError(f"filecontent pattern does not compile: {exc}") from exc

        locator = FileLocator(self.path, max_depth=self.max_depth, best_effort=self.best_effort)
        candidates = locator.locate(file_pattern, use_regexp=True)
        self.skipped.extend(locator.skipped)
        for candidate in candidates:
            try:
                lines = file_content_check(candidate, expression)
            except OSError as exc:
                logger.warning("prepare(): skipping unreadable file %s: %s", candidate, exc)
                self.skipped.append((candidate, exc))
                continue
            if not lines:
                continue

            match = ContentMatch(path=candidate, matches=lines)
            self.matches.append(match)
            logger.debug("prepare(): content matches in %s", match.path)
            for line in match.matches:
                logger.debug('prepare(): full match: "%s"', line.fullmatch)
                for index, group in enumerate(line.groups):
                    logger.debug('prepare(): group %d: "%s"', index, group)

    def get_criteria(self) -> List[EvaluationCriteria]:
        criteria = [
            EvaluationCriteria(identifier=match.path, test_value=group)
            for match in self.matches
            for line in match.matches
            for group in line.groups
        ]
        return self._with_merged(criteria)


def _compile(value: str, field_name: str) -> re.Pattern[str]:
    try:
        return re.compile(value)
    except re.error as exc:
        raise ConfigurationError(f"filecontent {field_name} is not a valid expression: {exc}") from exc
