"""Evidence records and aggregate audit results."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional


@dataclass(frozen=True)
class EvaluationCriteria:
    """One piece of evidence: where it came from and the captured value."""

    identifier: str
    test_value: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass
class ObjectReport:
    """Outcome of preparing a single test object."""

    object: str
    criteria: List[EvaluationCriteria] = field(default_factory=list)
    error: Optional[str] = None
    chain: bool = False

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, object]:
        return {
            "object": self.object,
            "chain": self.chain,
            "error": self.error,
            "criteria": [criteria.to_dict() for criteria in self.criteria],
        }


@dataclass
class AuditResult:
    """Bundle the reports of every object in a document."""

    reports: List[ObjectReport] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not any(report.failed for report in self.reports)

    @property
    def criteria_count(self) -> int:
        return sum(len(report.criteria) for report in self.reports)

    def add_report(self, report: ObjectReport) -> None:
        self.reports.append(report)

    def get(self, identifier: str) -> Optional[ObjectReport]:
        for report in self.reports:
            if report.object == identifier:
                return report
        return None

    def to_dict(self) -> Dict[str, object]:
        return {
            "summary": {
                "objects": len(self.reports),
                "failed": sum(1 for report in self.reports if report.failed),
                "criteria": self.criteria_count,
            },
            "objects": [report.to_dict() for report in self.reports],
            "passed": self.passed,
        }

    def exit_code(self) -> int:
        return 0 if self.passed else 1


def printable_text(text: str) -> str:
    """Render filesystem-derived text for display, replacing bytes that are not valid UTF-8."""

    return os.fsencode(text).decode("utf-8", "replace")


def format_summary_table(result: AuditResult, max_values: int = 3) -> str:
    """Create a human-readable summary table for console output."""

    lines: List[str] = []
    lines.append("Audit Summary")
    lines.append("=" * 40)
    header = f"{'Object':<24} | {'Criteria':>8}"
    lines.append(header)
    lines.append("-" * len(header))
    for report in result.reports:
        if report.failed:
            count = "ERROR"
        elif report.chain:
            count = "chain"
        else:
            count = str(len(report.criteria))
        lines.append(f"{report.object:<24} | {count:>8}")
    lines.append("-" * len(header))
    status = "OK" if result.passed else "ERRORS"
    lines.append(f"Status    : {status}")
    lines.append(f"Criteria  : {result.criteria_count}")

    failed = [report for report in result.reports if report.failed]
    if failed:
        lines.append("")
        lines.append("Errors")
        lines.append("-" * 40)
        for report in failed:
            lines.append(f"  {printable_text(report.error)}")

    evidence = [report for report in result.reports if report.criteria]
    if evidence:
        lines.append("")
        lines.append("Evidence")
        lines.append("-" * 40)
        for report in evidence:
            lines.append(f"[{report.object}]")
            for criteria in report.criteria[:max_values]:
                lines.append(f"  {printable_text(criteria.identifier)} -> {criteria.test_value!r}")
            remaining = len(report.criteria) - max_values
            if remaining > 0:
                lines.append(f"  ... {remaining} more")
    return "\n".join(lines)
