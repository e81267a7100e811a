"""Interface of the repository collaborator the engine reads from and writes to."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from linkfixer.models import Document, FilePatch


class DocumentRepository(ABC):
    """A source-controlled collection of text documents."""

    @property
    @abstractmethod
    def branch(self) -> str:
        """Branch (or ref) that documents are read from."""

    @abstractmethod
    def list_documents(self, path_filter: Optional[str] = None) -> List[Document]:
        """Enumerate documents under *path_filter* (the whole tree if ``None``).

        Raises:
            PathNotFoundError: If *path_filter* does not exist on the branch.
        """

    @abstractmethod
    def read_document(self, path: str) -> str:
        """Return the UTF-8 decoded body of *path*.

        Raises:
            DocumentFetchError: If the document cannot be read.
        """

    @abstractmethod
    def write_documents(
        self,
        branch_name: str,
        title: str,
        description: str,
        patches: Sequence[FilePatch],
    ) -> str:
        """Create *branch_name*, write every patch, open a draft PR, return its URL.

        The new branch and the pull request are based on the repository's
        default branch, whichever branch documents were read from.

        Raises:
            RemediationWriteError: Naming the step that failed.  Earlier
                writes are left in place.
        """
