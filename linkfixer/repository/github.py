"""GitHub REST implementation of the repository collaborator.

All calls go through one ``httpx.Client`` bound to the API base URL.  HTTP
failures are translated into the linkfixer error taxonomy at this boundary so
the scan and remediation pipelines never see transport exceptions.
"""

from __future__ import annotations

import base64
import re
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence
from urllib.parse import quote

import httpx

from linkfixer.config import settings
from linkfixer.errors import (
    DocumentFetchError,
    LinkFixerError,
    PathNotFoundError,
    RemediationWriteError,
    RepositoryConfigError,
)
from linkfixer.models import Document, FilePatch
from linkfixer.repository.base import DocumentRepository

_GITHUB_URL = re.compile(
    r"^(?:https?://)?(?:www\.)?github\.com/"
    r"(?P<owner>[^/\s]+)/(?P<repo>[^/\s?#]+?)(?:\.git)?"
    r"(?:/(?:tree|blob)/(?P<branch>[^/\s?#]+)(?:/(?P<path>[^?#\s]*))?)?"
    r"/?(?:[?#].*)?$"
)


@dataclass(frozen=True)
class GitHubLocation:
    """Repository coordinates parsed from a github.com URL."""

    owner: str
    repo: str
    branch: Optional[str] = None
    path: str = ""

    @property
    def repo_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}"


def parse_github_url(url: str) -> GitHubLocation:
    """Split a github.com URL into owner, repo, and optional branch/path.

    Accepts ``https://github.com/<owner>/<repo>[.git]`` as well as the
    ``/tree/<branch>/<path>`` and ``/blob/<branch>/<path>`` browser forms.

    Raises:
        RepositoryConfigError: If *url* is not a GitHub repository URL.
    """
    match = _GITHUB_URL.match(url.strip())
    if not match:
        raise RepositoryConfigError(f"Not a GitHub repository URL: {url!r}")
    return GitHubLocation(
        owner=match.group("owner"),
        repo=match.group("repo"),
        branch=match.group("branch"),
        path=(match.group("path") or "").strip("/"),
    )


def _describe(exc: httpx.HTTPError) -> str:
    """Return a short, operator-readable description of *exc*."""
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        message = ""
        try:
            message = response.json().get("message", "")
        except ValueError:
            message = response.text[:200]
        return f"HTTP {response.status_code}" + (f": {message}" if message else "")
    if isinstance(exc, httpx.TimeoutException):
        return "request timed out"
    return f"network error: {exc}"


class GitHubRepository(DocumentRepository):
    """Documents stored in a GitHub repository, read from one branch."""

    def __init__(
        self,
        token: str,
        repo_url: str,
        branch: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        extensions: Optional[Sequence[str]] = None,
    ) -> None:
        if not token:
            raise RepositoryConfigError(
                "A GitHub token is required. Set GITHUB_TOKEN or pass --token."
            )
        location = parse_github_url(repo_url)
        self.owner = location.owner
        self.repo = location.repo
        self._branch = branch or location.branch
        self._extensions = tuple(e.lower() for e in (extensions or settings.document_extensions))
        self._client = client or httpx.Client(
            base_url=settings.github_api_url,
            timeout=settings.request_timeout,
        )
        self._client.headers.update(
            {
                "Authorization": f"token {token}",
                "Accept": "application/vnd.github.v3+json",
            }
        )

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def __enter__(self) -> GitHubRepository:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    def _contents_path(self, path: str) -> str:
        return f"{self._repo_path}/contents/{quote(path.strip('/'))}"

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        response = self._client.request(method, url, **kwargs)
        response.raise_for_status()
        return response

    def default_branch(self) -> str:
        """Return the repository's default branch name."""
        return self._request("GET", self._repo_path).json()["default_branch"]

    @property
    def branch(self) -> str:
        if self._branch is None:
            try:
                self._branch = self.default_branch()
            except httpx.HTTPError as exc:
                raise LinkFixerError(
                    f"Could not resolve default branch of {self.owner}/{self.repo}: "
                    f"{_describe(exc)}"
                ) from exc
        return self._branch

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def _is_document(self, name: str) -> bool:
        return name.lower().endswith(self._extensions)

    def _walk(self, items: list, out: List[Document]) -> None:
        for item in items:
            if item["type"] == "dir":
                children = self._request(
                    "GET", self._contents_path(item["path"]), params={"ref": self.branch}
                ).json()
                self._walk(children, out)
            elif item["type"] == "file" and self._is_document(item["name"]):
                out.append(Document(path=item["path"], identifier=item.get("sha", "")))

    def list_documents(self, path_filter: Optional[str] = None) -> List[Document]:
        scope = (path_filter or "").strip().strip("/")
        branch = self.branch
        try:
            response = self._request(
                "GET", self._contents_path(scope), params={"ref": branch}
            )
            data = response.json()
            if isinstance(data, dict):
                # A single file was requested.
                return [Document(path=data["path"], identifier=data.get("sha", ""))]
            documents: List[Document] = []
            self._walk(data, documents)
            return documents
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                raise PathNotFoundError(scope or "/", branch) from exc
            raise LinkFixerError(f"Listing {scope or '/'!r} failed: {_describe(exc)}") from exc
        except httpx.HTTPError as exc:
            raise LinkFixerError(f"Listing {scope or '/'!r} failed: {_describe(exc)}") from exc

    def read_document(self, path: str) -> str:
        try:
            ref = self.branch
        except LinkFixerError as exc:
            raise DocumentFetchError(path, str(exc)) from exc

        try:
            data = self._request(
                "GET", self._contents_path(path), params={"ref": ref}
            ).json()
            if not isinstance(data, dict):
                raise DocumentFetchError(path, "path is a directory, not a file")
            if data.get("encoding") == "base64":
                raw = base64.b64decode(data.get("content", "").replace("\n", ""))
            else:
                # Files over 1 MB come back without inline content.
                raw = self._request("GET", data["download_url"]).content
            return raw.decode("utf-8")
        except httpx.HTTPError as exc:
            raise DocumentFetchError(path, _describe(exc)) from exc
        except (UnicodeDecodeError, ValueError, KeyError) as exc:
            raise DocumentFetchError(path, f"undecodable content: {exc}") from exc

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    @contextmanager
    def _step(self, name: str, written: List[str]) -> Iterator[None]:
        try:
            yield
        except httpx.HTTPError as exc:
            raise RemediationWriteError(name, _describe(exc), written) from exc

    def _current_sha(self, path: str, ref: str) -> Optional[str]:
        response = self._client.get(self._contents_path(path), params={"ref": ref})
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json().get("sha")

    def write_documents(
        self,
        branch_name: str,
        title: str,
        description: str,
        patches: Sequence[FilePatch],
    ) -> str:
        written: List[str] = []

        with self._step("resolve-base", written):
            base = self.default_branch()
            base_sha = self._request(
                "GET", f"{self._repo_path}/git/ref/heads/{quote(base)}"
            ).json()["object"]["sha"]

        with self._step("create-branch", written):
            self._request(
                "POST",
                f"{self._repo_path}/git/refs",
                json={"ref": f"refs/heads/{branch_name}", "sha": base_sha},
            )
        print(f"[PR] Created branch {branch_name} from {base}.")

        for patch in patches:
            with self._step(f"write:{patch.path}", written):
                payload = {
                    "message": f"chore: fix documentation link in {patch.path}",
                    "content": base64.b64encode(patch.content.encode("utf-8")).decode("ascii"),
                    "branch": branch_name,
                }
                sha = self._current_sha(patch.path, branch_name)
                if sha:
                    payload["sha"] = sha
                self._request("PUT", self._contents_path(patch.path), json=payload)
            written.append(patch.path)
            print(f"[PR] Wrote {patch.path}.")

        with self._step("open-pull-request", written):
            pr = self._request(
                "POST",
                f"{self._repo_path}/pulls",
                json={
                    "title": title,
                    "body": description,
                    "head": branch_name,
                    "base": base,
                    "draft": True,
                },
            ).json()
        print(f"[PR] Opened draft pull request {pr['html_url']}.")
        return pr["html_url"]
