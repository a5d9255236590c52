"""GitHub API access and repository URL helpers."""

from .client import GitHubClient
from .urls import parse_github_url

__all__ = ["GitHubClient", "parse_github_url"]
