"""Turn a broken-link report into per-file patches and a draft pull request.

Records are grouped by file.  Each file body is fetched once, then every
record for that file is applied in report order as a literal, global
substitution; later substitutions see the result of earlier ones.
"""

from __future__ import annotations

import re
import time
from typing import Callable, Dict, List, Optional, Sequence

from linkfixer.config import settings
from linkfixer.errors import NothingToFixError
from linkfixer.models import BrokenLinkRecord, FilePatch, RemediationOutcome
from linkfixer.repository.base import DocumentRepository

DocumentReader = Callable[[str], str]

# A match is rejected when the text continues with more URL path, so that
# ".../old/page" never rewrites ".../old/page-two".
_URL_CONTINUES = r"(?![A-Za-z0-9\-_/]|\.[A-Za-z0-9\-_/])"

_DESCRIPTION_INTRO = (
    "This PR automatically fixes broken documentation links discovered by the "
    "link fixer."
)


def replace_url(body: str, find: str, replace: str) -> str:
    """Replace every occurrence of the literal URL *find* in *body*.

    *find* is escaped, so regex metacharacters in URLs match themselves, and
    *replace* is inserted verbatim.
    """
    if not find:
        return body
    pattern = re.compile(re.escape(find) + _URL_CONTINUES)
    return pattern.sub(lambda _match: replace, body)


def fixable(records: Sequence[BrokenLinkRecord]) -> List[BrokenLinkRecord]:
    """Return the records that carry a suggested replacement."""
    return [r for r in records if r.suggested_url]


def build_patches(
    records: Sequence[BrokenLinkRecord],
    read_document: DocumentReader,
) -> List[FilePatch]:
    """Apply every fixable record and return one patch per changed file.

    Files appear in the order their first fixable record appears.  A file
    whose body ends up unchanged produces no patch.
    """
    originals: Dict[str, str] = {}
    bodies: Dict[str, str] = {}

    for record in fixable(records):
        path = record.file_path
        if path not in bodies:
            originals[path] = bodies[path] = read_document(path)
        bodies[path] = replace_url(bodies[path], record.broken_url, record.suggested_url)

    return [
        FilePatch(path=path, content=body)
        for path, body in bodies.items()
        if body != originals[path]
    ]


def build_manifest(records: Sequence[BrokenLinkRecord]) -> List[str]:
    """One human-readable line per fixed link."""
    return [
        f"{r.file_path}: {r.broken_url} -> {r.suggested_url}" for r in fixable(records)
    ]


def build_description(records: Sequence[BrokenLinkRecord]) -> str:
    """Pull request body: an introduction followed by a checklist of fixes."""
    checklist = "\n".join(f"- [ ] {line}" for line in build_manifest(records))
    return f"{_DESCRIPTION_INTRO}\n\n{checklist}"


def make_branch_name(prefix: Optional[str] = None) -> str:
    return f"{prefix or settings.branch_prefix}-{int(time.time() * 1000)}"


def remediate(
    records: Sequence[BrokenLinkRecord],
    repository: DocumentRepository,
    title: Optional[str] = None,
    branch_name: Optional[str] = None,
) -> RemediationOutcome:
    """Build patches from *records* and open a draft pull request.

    Raises:
        NothingToFixError: If no record has a suggestion, or no file changes.
        DocumentFetchError: If a file body cannot be re-read.
        RemediationWriteError: If a branch, write, or PR step fails.
    """
    if not fixable(records):
        raise NothingToFixError("No broken link in the report has a suggested replacement.")

    patches = build_patches(records, repository.read_document)
    if not patches:
        raise NothingToFixError("Suggested replacements leave every file unchanged.")

    branch = branch_name or make_branch_name()
    manifest = build_manifest(records)
    print(f"[PR] {len(patches)} file(s) to patch, {len(manifest)} link(s) to fix.")

    pr_url = repository.write_documents(
        branch,
        title or settings.pr_title,
        build_description(records),
        patches,
    )
    return RemediationOutcome(pr_url=pr_url, branch=branch, patches=patches, manifest=manifest)
