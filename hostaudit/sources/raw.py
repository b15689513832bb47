"""Evidence supplied verbatim by the test definition."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from hostaudit.errors import ConfigurationError
from hostaudit.result import EvaluationCriteria

from . import ChainlessSource, expand_variables


@dataclass
class RawIdentifier:
    identifier: str
    value: str = ""


class RawSource(ChainlessSource):
    """A fixed list of identifier/value pairs; nothing is read from the host."""

    def __init__(self, identifiers: List[RawIdentifier] | None = None) -> None:
        super().__init__()
        self.identifiers: List[RawIdentifier] = list(identifiers or [])

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "RawSource":
        data = data or {}
        entries = data.get("identifiers") or []
        if not isinstance(entries, list):
            raise ConfigurationError("raw identifiers must be a list")
        identifiers = []
        for entry in entries:
            if not isinstance(entry, dict):
                raise ConfigurationError("raw identifier entries must be mappings")
            identifiers.append(
                RawIdentifier(
                    identifier=str(entry.get("identifier") or ""),
                    value=str(entry.get("value") if entry.get("value") is not None else ""),
                )
            )
        return cls(identifiers)

    def is_populated(self) -> bool:
        return len(self.identifiers) > 0

    def validate(self) -> None:
        for entry in self.identifiers:
            if not entry.identifier:
                raise ConfigurationError("raw identifier must be set")

    def expand_variables(self, variables: Mapping[str, str]) -> None:
        for entry in self.identifiers:
            entry.value = expand_variables(variables, entry.value)

    def prepare(self) -> None:
        return None

    def get_criteria(self) -> List[EvaluationCriteria]:
        criteria = [
            EvaluationCriteria(identifier=entry.identifier, test_value=entry.value)
            for entry in self.identifiers
        ]
        return self._with_merged(criteria)
