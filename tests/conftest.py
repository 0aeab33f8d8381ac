from pathlib import Path

import pytest

from github_selector.core.paths import AppPaths
from github_selector.github.api import RepoInfo


def repo_payload(full_name: str, **extra):
    org, name = full_name.split("/", 1)
    data = {
        "id": abs(hash(full_name)) % 100000,
        "name": name,
        "full_name": full_name,
        "default_branch": "main",
        "ssh_url": f"git@github.com:{full_name}.git",
        "clone_url": f"https://github.com/{full_name}.git",
        "html_url": f"https://github.com/{full_name}",
        "private": False,
        "fork": False,
        "archived": False,
        "owner": {"login": org},
    }
    data.update(extra)
    return data


def make_repo(full_name: str, **extra) -> RepoInfo:
    return RepoInfo.from_dict(repo_payload(full_name, **extra))


@pytest.fixture
def app_paths(tmp_path: Path) -> AppPaths:
    return AppPaths.from_home(tmp_path / "home")


@pytest.fixture
def sample_repos():
    return [make_repo("a/x"), make_repo("a/y"), make_repo("a/z")]
