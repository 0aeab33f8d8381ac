from .api import GitHubAPIError, GitHubClient, RepoInfo, RepoListing, fetch_org_repos
from .clone import CloneOptions, clone_repo, remote_url

__all__ = [
    "GitHubAPIError",
    "GitHubClient",
    "RepoInfo",
    "RepoListing",
    "fetch_org_repos",
    "CloneOptions",
    "clone_repo",
    "remote_url",
]
