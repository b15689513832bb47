"""Test objects: one declarative check delegating to exactly one source."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from hostaudit.errors import (
    ConfigurationError,
    DocumentError,
    ExecutionError,
    HostAuditError,
    NoValidSourceError,
)
from hostaudit.result import EvaluationCriteria
from hostaudit.sources import GenericSource
from hostaudit.sources.filecontent import FileContentSource
from hostaudit.sources.filename import FileNameSource
from hostaudit.sources.package import PackageSource
from hostaudit.sources.raw import RawSource

if TYPE_CHECKING:  # pragma: no cover
    from hostaudit.document import Document

logger = logging.getLogger(__name__)

# Resolution precedence when a definition populates more than one source.
SOURCE_ORDER = ("package", "filecontent", "filename", "raw")


class TestObject:
    """A named check holding one configured source of each kind.

    Exactly one source may be populated. The lifecycle driven by the owning
    document is ``validate`` -> ``mark_chain`` -> ``fire_chains`` ->
    ``prepare`` -> ``get_criteria``.

    ``prepare`` runs the source at most once. ``prepared`` is set before the
    source runs, so a failing preparation raises once, leaves its error in
    ``error``, and every later call returns without doing anything. Callers
    that need the outcome after the first call must read ``error``.
    """

    __test__ = False  # keep pytest from collecting this class

    def __init__(
        self,
        identifier: str,
        package: Optional[PackageSource] = None,
        filecontent: Optional[FileContentSource] = None,
        filename: Optional[FileNameSource] = None,
        raw: Optional[RawSource] = None,
    ) -> None:
        self.identifier = identifier
        self.package = package if package is not None else PackageSource()
        self.filecontent = filecontent if filecontent is not None else FileContentSource()
        self.filename = filename if filename is not None else FileNameSource()
        self.raw = raw if raw is not None else RawSource()

        self.is_chain = False
        self.prepared = False
        self.error: Optional[HostAuditError] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], best_effort: bool = True) -> "TestObject":
        if not isinstance(data, dict):
            raise DocumentError("object definitions must be mappings")
        for key in SOURCE_ORDER:
            if data.get(key) is not None and not isinstance(data[key], dict):
                raise DocumentError(f"{data.get('object', '')}: {key} must be a mapping")
        return cls(
            identifier=str(data.get("object") or ""),
            package=PackageSource.from_dict(data.get("package")),
            filecontent=FileContentSource.from_dict(data.get("filecontent"), best_effort=best_effort),
            filename=FileNameSource.from_dict(data.get("filename"), best_effort=best_effort),
            raw=RawSource.from_dict(data.get("raw")),
        )

    def __repr__(self) -> str:
        return f"TestObject({self.identifier!r})"

    def _sources(self) -> List[GenericSource]:
        return [getattr(self, key) for key in SOURCE_ORDER]

    def get_source_interface(self) -> Optional[GenericSource]:
        """Return the first populated source in precedence order, if any."""

        for source in self._sources():
            if source.is_populated():
                return source
        return None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def validate(self, document: "Document") -> None:
        if not self.identifier:
            raise ConfigurationError("an object in document has no identifier")
        populated = [source for source in self._sources() if source.is_populated()]
        if len(populated) != 1:
            raise NoValidSourceError(self.identifier)
        try:
            populated[0].validate()
        except ConfigurationError as exc:
            raise ConfigurationError(f"{self.identifier}: {exc}") from exc

    def mark_chain(self) -> None:
        source = self.get_source_interface()
        self.is_chain = source.is_chain() if source is not None else False

    def fire_chains(self, document: "Document") -> None:
        source = self.get_source_interface()
        if source is None:
            return
        source.merge_criteria(source.fire_chains(document))

    def prepare(self, document: "Document") -> None:
        if self.is_chain:
            logger.debug('prepare(): skipping chain object "%s"', self.identifier)
            return
        if self.prepared:
            return
        self.prepared = True

        source = self.get_source_interface()
        if source is None:
            self.error = ExecutionError(f"{self.identifier}: object has no valid interface")
            raise self.error
        source.expand_variables(document.variables)
        try:
            source.prepare()
        except (HostAuditError, OSError, ValueError) as exc:
            self.error = ExecutionError(f"{self.identifier}: {exc}")
            raise self.error from exc

    def get_criteria(self) -> List[EvaluationCriteria]:
        source = self.get_source_interface()
        if source is None:
            return []
        return source.get_criteria()
