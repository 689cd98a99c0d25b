"""Configuration for the GitHub REST client."""

from pydantic import BaseModel, SecretStr

from report_annotator.github.models import RepoContext


class GitHubConfig(BaseModel):
    """Connection settings for the GitHub API."""

    token: SecretStr
    owner: str
    repo: str
    api_base_url: str = "https://api.github.com"

    @property
    def repo_context(self) -> RepoContext:
        """Repository every request of this run targets."""
        return RepoContext(owner=self.owner, repo=self.repo)
