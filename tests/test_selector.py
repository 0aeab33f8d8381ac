"""
Tests for github_selector.selector, driving real `sh -c` commands.
"""

import os
import shutil

import pytest

from github_selector.selector import select

pytestmark = pytest.mark.skipif(shutil.which("sh") is None, reason="needs a POSIX shell")

CANDIDATES = ["a/x", "a/y", "a/z"]


@pytest.fixture
def env():
    return {"SHELL": shutil.which("sh"), "PATH": os.environ.get("PATH", "")}


class TestSelect:
    def test_single_match(self, env):
        assert select(CANDIDATES, "grep a/y", env) == ["a/y"]

    def test_multiple_lines(self, env):
        assert select(CANDIDATES, "cat", env) == CANDIDATES

    def test_candidates_are_newline_delimited(self, env):
        assert select(CANDIDATES, "wc -l | tr -d ' '", env) == ["3"]

    def test_filter_closing_early(self, env):
        many = [f"org/repo{i}" for i in range(20000)]
        assert select(many, "head -n 1", env) == ["org/repo0"]

    def test_cancel_is_empty_selection(self, env):
        assert select(CANDIDATES, "cat >/dev/null; exit 130", env) == []

    def test_no_match_is_empty_selection(self, env):
        assert select(CANDIDATES, "grep nomatch", env) == []

    def test_missing_filter_command(self, env):
        assert select(CANDIDATES, "definitely-not-a-real-filter-xyz", env) == []

    def test_missing_shell(self, env):
        env["SHELL"] = "/nonexistent/bin/shell"
        assert select(CANDIDATES, "cat", env) == []

    def test_falls_back_to_sh(self, env):
        del env["SHELL"]
        assert select(CANDIDATES, "tail -n 1", env) == ["a/z"]
