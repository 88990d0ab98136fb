"""Exception hierarchy shared across PluginGuard."""

from __future__ import annotations


class PluginGuardError(Exception):
    """Base class for all PluginGuard errors."""


class RuleLoadError(PluginGuardError):
    """A rule table or rule file could not be turned into a catalog."""

    def __init__(self, message: str, rule_id: str | None = None) -> None:
        self.rule_id = rule_id
        super().__init__(message)


class AcquisitionError(PluginGuardError):
    """The scan subject could not be extracted or cloned."""


class ResultExistsError(PluginGuardError):
    """A result was already stored for this job id."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Result already stored for job {job_id}")


class JobStateError(PluginGuardError):
    """An illegal stage transition was requested."""
