"""Exception taxonomy for the link verification and remediation engine.

Validation-level problems (manifest unavailable, failed probes) are absorbed
and turned into data.  Everything defined here that reaches a caller is
fatal for the current scan or remediation run.
"""

from __future__ import annotations


class LinkFixerError(Exception):
    """Base class for all linkfixer errors."""


class SourceUnavailableError(LinkFixerError):
    """The authoritative manifest could not be fetched or parsed."""


class RepositoryConfigError(LinkFixerError):
    """The repository collaborator is missing credentials or a usable URL."""


class DocumentFetchError(LinkFixerError):
    """Reading a document body failed mid-scan."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Failed to read {path!r}: {detail}")


class PathNotFoundError(LinkFixerError):
    """The requested scope path does not exist on the target branch."""

    def __init__(self, path: str, branch: str) -> None:
        self.path = path
        self.branch = branch
        super().__init__(f"Path {path!r} not found on branch {branch!r}")


class RemediationWriteError(LinkFixerError):
    """A branch, file-write, or pull-request step failed.

    Files already written to the new branch are listed in ``written``; they
    are not rolled back.
    """

    def __init__(self, step: str, detail: str, written: list[str] | None = None) -> None:
        self.step = step
        self.detail = detail
        self.written = list(written or [])
        msg = f"Remediation failed at step {step!r}: {detail}"
        if self.written:
            msg += f" (already written: {', '.join(self.written)})"
        super().__init__(msg)

    def to_dict(self) -> dict:
        return {"step": self.step, "message": self.detail, "written": self.written}


class NothingToFixError(LinkFixerError):
    """No broken link in the report carries a suggested replacement."""
