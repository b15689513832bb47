"""Minimal document: the objects under test and the variables they share."""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from hostaudit.errors import ConfigurationError, DocumentError, HostAuditError
from hostaudit.objects import TestObject
from hostaudit.result import AuditResult, ObjectReport
from hostaudit.utils.fileio import load_document_data

logger = logging.getLogger(__name__)


def _parse_variables(entries: Any) -> Dict[str, str]:
    if entries is None:
        return {}
    if isinstance(entries, dict):
        return {str(key): str(value) for key, value in entries.items()}
    if not isinstance(entries, list):
        raise DocumentError("variables must be a list of key/value mappings")
    variables: Dict[str, str] = {}
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("key"):
            raise DocumentError("each variable needs a key")
        value = entry.get("value")
        variables[str(entry["key"])] = "" if value is None else str(value)
    return variables


class Document:
    """Own a set of test objects and drive them through preparation.

    ``variables`` is read-only once the document is built; every object
    expands its configuration against the same mapping.
    """

    def __init__(self, objects: Iterable[TestObject] = (), variables: Optional[Mapping[str, str]] = None) -> None:
        self.objects: List[TestObject] = list(objects)
        self.variables: Mapping[str, str] = MappingProxyType(dict(variables or {}))

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        overrides: Optional[Mapping[str, str]] = None,
        strict: bool = False,
    ) -> "Document":
        objects = data.get("objects") or []
        if not isinstance(objects, list):
            raise DocumentError("objects must be a list")
        variables = _parse_variables(data.get("variables"))
        variables.update(overrides or {})
        return cls(
            objects=[TestObject.from_dict(entry, best_effort=not strict) for entry in objects],
            variables=variables,
        )

    def get_object(self, identifier: str) -> Optional[TestObject]:
        for obj in self.objects:
            if obj.identifier == identifier:
                return obj
        return None

    def _validate_object(self, obj: TestObject, seen: Set[str]) -> None:
        obj.validate(self)
        if obj.identifier in seen:
            raise ConfigurationError(f"{obj.identifier}: duplicate object identifier")
        seen.add(obj.identifier)

    def validate(self) -> None:
        seen: Set[str] = set()
        for obj in self.objects:
            self._validate_object(obj, seen)

    def prepare(self) -> AuditResult:
        """Run every object through its lifecycle and collect the outcome.

        A failing object is reported and does not stop the others.
        """

        result = AuditResult()
        reports: Dict[int, ObjectReport] = {}
        ready: List[TestObject] = []
        seen: Set[str] = set()
        for obj in self.objects:
            report = ObjectReport(object=obj.identifier)
            reports[id(obj)] = report
            result.add_report(report)
            try:
                self._validate_object(obj, seen)
            except ConfigurationError as exc:
                logger.warning("validate(): %s", exc)
                report.error = str(exc)
                continue
            ready.append(obj)

        for obj in ready:
            obj.mark_chain()
            reports[id(obj)].chain = obj.is_chain
        for obj in ready:
            obj.fire_chains(self)

        for obj in ready:
            report = reports[id(obj)]
            try:
                obj.prepare(self)
            except HostAuditError as exc:
                logger.warning("prepare(): %s", exc)
            if obj.error is not None:
                report.error = str(obj.error)
            elif not obj.is_chain:
                report.criteria = obj.get_criteria()
        return result


def load_document(
    path: Path,
    overrides: Optional[Mapping[str, str]] = None,
    strict: bool = False,
) -> Document:
    """Read a YAML or JSON document from ``path``."""

    return Document.from_dict(load_document_data(Path(path)), overrides=overrides, strict=strict)
