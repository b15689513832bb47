"""Exception hierarchy raised by the audit core."""

from __future__ import annotations


class HostAuditError(Exception):
    """Base class for all audit errors."""


class ConfigurationError(HostAuditError):
    """A test definition is incomplete or malformed."""


class NoValidSourceError(ConfigurationError):
    """An object has zero or several populated source checks."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"{identifier}: no valid source interface")
        self.identifier = identifier


class DocumentError(ConfigurationError):
    """The document itself could not be interpreted."""


class ExecutionError(HostAuditError):
    """A source check failed while preparing its evidence."""


class LocatorExecutedError(HostAuditError):
    """A file locator instance was asked to run a second traversal."""

    def __init__(self) -> None:
        super().__init__("locator has already been executed")
