"""
Tests for github_selector.core.cache.
"""

import json

import pytest

from github_selector.core.cache import RepoCache
from github_selector.core.errors import CacheError
from github_selector.github.api import RepoInfo

from conftest import make_repo


class TestRepoCache:
    def test_round_trip_preserves_order(self, app_paths):
        repos = [make_repo(f"acme/r{i}") for i in range(25)]
        cache = RepoCache(app_paths.cache_file)
        cache.write(repos)

        loaded = cache.read()
        assert loaded == repos
        assert [r.full_name for r in loaded] == [f"acme/r{i}" for i in range(25)]

    def test_unmodelled_fields_pass_through(self, app_paths):
        repo = make_repo("acme/tool", topics=["cli", "git"], stargazers_count=7)
        cache = RepoCache(app_paths.cache_file)
        cache.write([repo])

        raw = cache.read()[0].to_dict()
        assert raw["topics"] == ["cli", "git"]
        assert raw["stargazers_count"] == 7

    def test_records_built_without_payload(self, app_paths):
        repo = RepoInfo(name="y", full_name="a/y", default_branch="develop")
        cache = RepoCache(app_paths.cache_file)
        cache.write([repo])
        assert cache.read() == [repo]

    def test_write_replaces_previous_contents(self, app_paths):
        cache = RepoCache(app_paths.cache_file)
        cache.write([make_repo("a/x"), make_repo("a/y")])
        cache.write([make_repo("a/z")])
        assert [r.full_name for r in cache.read()] == ["a/z"]

    def test_write_leaves_no_temp_files(self, app_paths):
        cache = RepoCache(app_paths.cache_file)
        cache.write([make_repo("a/x")])
        assert [p.name for p in app_paths.cache_file.parent.iterdir()] == ["repos.json"]

    def test_exists(self, app_paths):
        cache = RepoCache(app_paths.cache_file)
        assert not cache.exists()
        cache.write([])
        assert cache.exists()

    def test_missing_file_is_fatal(self, app_paths):
        with pytest.raises(CacheError):
            RepoCache(app_paths.cache_file).read()

    def test_malformed_json_is_fatal(self, app_paths):
        app_paths.ensure_dir()
        app_paths.cache_file.write_text("[{not json")
        with pytest.raises(CacheError, match="corrupt"):
            RepoCache(app_paths.cache_file).read()

    def test_non_list_is_fatal(self, app_paths):
        app_paths.ensure_dir()
        app_paths.cache_file.write_text(json.dumps({"full_name": "a/x"}))
        with pytest.raises(CacheError):
            RepoCache(app_paths.cache_file).read()
