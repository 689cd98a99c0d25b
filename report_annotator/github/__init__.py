"""GitHub REST client module."""

from report_annotator.github.client import GitHubApiError, GitHubClient
from report_annotator.github.config import GitHubConfig
from report_annotator.github.models import RepoContext

__all__ = ["GitHubApiError", "GitHubClient", "GitHubConfig", "RepoContext"]
