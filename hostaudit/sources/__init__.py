"""Generic source contract shared by every kind of check."""

from __future__ import annotations

from string import Template
from typing import TYPE_CHECKING, List, Mapping, Protocol

from hostaudit.errors import ConfigurationError
from hostaudit.result import EvaluationCriteria

if TYPE_CHECKING:  # pragma: no cover
    from hostaudit.document import Document


class GenericSource(Protocol):
    """Protocol implemented by all source checks."""

    def is_populated(self) -> bool:
        """Report whether the definition configured this source at all."""

    def validate(self) -> None:
        """Raise ``ConfigurationError`` if the configuration is incomplete.

        Must not touch the filesystem or the network.
        """

    def prepare(self) -> None:
        """Run the check and collect evidence."""

    def is_chain(self) -> bool:
        """Report whether this source only exists to feed another object."""

    def expand_variables(self, variables: Mapping[str, str]) -> None:
        """Substitute document variables into configuration strings."""

    def get_criteria(self) -> List[EvaluationCriteria]:
        """Return the evidence collected so far."""

    def merge_criteria(self, criteria: List[EvaluationCriteria]) -> None:
        """Fold criteria contributed by chained objects into this source."""

    def fire_chains(self, document: "Document") -> List[EvaluationCriteria]:
        """Resolve dependent objects and return their evidence."""


class ChainlessSource:
    """Chain behaviour for sources that declare no dependencies."""

    def __init__(self) -> None:
        self._merged: List[EvaluationCriteria] = []

    def is_chain(self) -> bool:
        return False

    def fire_chains(self, document: "Document") -> List[EvaluationCriteria]:
        return []

    def merge_criteria(self, criteria: List[EvaluationCriteria]) -> None:
        self._merged.extend(criteria)

    def _with_merged(self, criteria: List[EvaluationCriteria]) -> List[EvaluationCriteria]:
        return criteria + self._merged


def expand_variables(variables: Mapping[str, str], value: str) -> str:
    """Replace ``$name`` and ``${name}`` placeholders with variable values.

    Unknown placeholders and lone ``$`` characters are left untouched so
    regular expression anchors survive; ``$$`` collapses to ``$``.
    """

    if not variables or "$" not in value:
        return value
    return Template(value).safe_substitute(variables)


def reject_nul(value: str, message: str, error: type = ConfigurationError) -> None:
    """Raise ``error`` when a path-like value embeds a NUL byte."""

    if "\0" in value:
        raise error(message)
