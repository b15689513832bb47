"""Report installed versions of a package from the host package manager."""

from __future__ import annotations

import logging
import shutil
import subprocess
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from hostaudit.errors import ConfigurationError, ExecutionError
from hostaudit.result import EvaluationCriteria

from . import ChainlessSource, expand_variables

logger = logging.getLogger(__name__)

QUERY_TIMEOUT = 120

DPKG_QUERY = ("dpkg-query", "-W", "-f=${db:Status-Abbrev}\t${Package}\t${Version}\n")
RPM_QUERY = ("rpm", "-qa", "--queryformat", "%{NAME}\t%{VERSION}-%{RELEASE}\n")


def _parse_dpkg(output: str) -> List[Tuple[str, str]]:
    packages = []
    for line in output.splitlines():
        fields = line.split("\t")
        if len(fields) != 3 or not fields[0].startswith("ii"):
            continue
        packages.append((fields[1], fields[2]))
    return packages


def _parse_rpm(output: str) -> List[Tuple[str, str]]:
    packages = []
    for line in output.splitlines():
        fields = line.split("\t")
        if len(fields) != 2:
            continue
        packages.append((fields[0], fields[1]))
    return packages


PACKAGE_MANAGERS: Sequence[Tuple[Sequence[str], Callable[[str], List[Tuple[str, str]]]]] = (
    (DPKG_QUERY, _parse_dpkg),
    (RPM_QUERY, _parse_rpm),
)


def installed_packages() -> Optional[List[Tuple[str, str]]]:
    """Return ``(name, version)`` pairs, or ``None`` without a known package manager."""

    for command, parser in PACKAGE_MANAGERS:
        if shutil.which(command[0]) is None:
            continue
        try:
            completed = subprocess.run(
                list(command),
                capture_output=True,
                text=True,
                check=False,
                timeout=QUERY_TIMEOUT,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise ExecutionError(f"{command[0]} failed: {exc}") from exc
        if completed.returncode != 0:
            raise ExecutionError(f"{command[0]} exited with status {completed.returncode}: {completed.stderr.strip()}")
        return parser(completed.stdout)
    return None


class PackageSource(ChainlessSource):
    """Installed package versions matching an exact package name."""

    def __init__(self, name: str = "") -> None:
        super().__init__()
        self.name = name
        self.versions: List[str] = []

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "PackageSource":
        data = data or {}
        return cls(name=str(data.get("name") or ""))

    def is_populated(self) -> bool:
        return self.name != ""

    def validate(self) -> None:
        if not self.name:
            raise ConfigurationError("package name must be set")

    def expand_variables(self, variables: Mapping[str, str]) -> None:
        self.name = expand_variables(variables, self.name)

    def prepare(self) -> None:
        packages = installed_packages()
        if packages is None:
            logger.debug("prepare(): no supported package manager found for %s", self.name)
            return
        self.versions = [version for name, version in packages if name == self.name]
        logger.debug("prepare(): package %s versions %s", self.name, self.versions)

    def get_criteria(self) -> List[EvaluationCriteria]:
        criteria = [EvaluationCriteria(identifier=self.name, test_value=version) for version in self.versions]
        return self._with_merged(criteria)
