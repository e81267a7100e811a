"""Repository collaborators — where documents are listed, read, and patched."""

from linkfixer.repository.base import DocumentRepository
from linkfixer.repository.github import GitHubLocation, GitHubRepository, parse_github_url

__all__ = ["DocumentRepository", "GitHubRepository", "GitHubLocation", "parse_github_url"]
