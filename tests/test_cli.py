"""
Tests for the github-selector command line.
"""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from github_selector.cli.app import app
from github_selector.core.config import Configuration
from github_selector.core.errors import CloneError, ConfigError
from github_selector.github.api import PageError, RepoListing

runner = CliRunner()

LOAD = "github_selector.cli.app.load_or_create"
RUN = "github_selector.cli.app.run_workflow"

CONFIG = Configuration(github_token="tok", clone_dir="/srv/src", org_name="a")


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestFunctionFlag:
    def test_prints_shell_function_and_exits(self):
        with patch(RUN) as run, patch(LOAD) as load:
            result = runner.invoke(app, ["--function"])
        assert result.exit_code == 0
        assert result.output.startswith("ghs() {")
        run.assert_not_called()
        load.assert_not_called()

    def test_custom_function_name(self):
        result = runner.invoke(app, ["--function", "--function-name", "repo"])
        assert result.exit_code == 0
        assert result.output.startswith("repo() {")

    def test_invalid_function_name(self):
        result = runner.invoke(app, ["--function", "--function-name", "bad name"])
        assert result.exit_code == 2


class TestWorkflow:
    def test_prints_only_the_clone_path(self, tmp_path):
        with patch(LOAD, return_value=CONFIG), patch(RUN, return_value=Path("/srv/src/y")):
            result = runner.invoke(app, ["--home", str(tmp_path)])
        assert result.exit_code == 0
        assert result.output == "/srv/src/y\n"

    def test_empty_selection_exits_cleanly(self, tmp_path):
        with patch(LOAD, return_value=CONFIG), patch(RUN, return_value=None):
            result = runner.invoke(app, ["--home", str(tmp_path)])
        assert result.exit_code == 0
        assert result.output == ""

    def test_paths_come_from_home(self, tmp_path):
        with patch(LOAD, return_value=CONFIG) as load, patch(RUN, return_value=None) as run:
            runner.invoke(app, ["--home", str(tmp_path)])
        paths = load.call_args.args[0]
        assert paths.config_file == tmp_path / ".config" / "github_selector" / "config.yaml"
        cache = run.call_args.args[1]
        assert cache.path == tmp_path / ".config" / "github_selector" / "repos.json"

    def test_options_are_forwarded(self, tmp_path):
        with patch(LOAD, return_value=CONFIG) as load, patch(RUN, return_value=None) as run:
            result = runner.invoke(
                app,
                [
                    "--home",
                    str(tmp_path),
                    "--refresh",
                    "--strict",
                    "--no-track",
                    "--reconfigure",
                    "--filter-command",
                    "sk -m",
                ],
            )
        assert result.exit_code == 0
        assert load.call_args.kwargs["reconfigure"] is True
        opts = run.call_args.args[2]
        assert opts.refresh is True
        assert opts.strict is True
        assert opts.filter_command == "sk -m"
        assert opts.clone.track_default_branch is False

    def test_defaults(self, tmp_path):
        with patch(LOAD, return_value=CONFIG), patch(RUN, return_value=None) as run:
            runner.invoke(app, ["--home", str(tmp_path)], env={"GITHUB_SELECTOR_FILTER": None})
        opts = run.call_args.args[2]
        assert opts.refresh is False
        assert opts.strict is False
        assert opts.filter_command == "fzf -m"
        assert opts.clone.track_default_branch is True

    def test_filter_command_from_env(self, tmp_path):
        with patch(LOAD, return_value=CONFIG), patch(RUN, return_value=None) as run:
            runner.invoke(app, ["--home", str(tmp_path)], env={"GITHUB_SELECTOR_FILTER": "peco"})
        assert run.call_args.args[2].filter_command == "peco"


class TestErrors:
    def test_clone_failure_is_fatal(self, tmp_path):
        with patch(LOAD, return_value=CONFIG), patch(RUN, side_effect=CloneError("git clone failed")):
            result = runner.invoke(app, ["--home", str(tmp_path)])
        assert result.exit_code == 2
        assert "git clone failed" in result.output

    def test_config_failure_is_fatal(self, tmp_path):
        with patch(LOAD, side_effect=ConfigError("Unable to parse config.", detail="x")), patch(RUN) as run:
            result = runner.invoke(app, ["--home", str(tmp_path), "-v"])
        assert result.exit_code == 2
        assert "Unable to parse config." in result.output
        run.assert_not_called()

    def test_corrupt_config_on_disk(self, tmp_path):
        cfg_dir = tmp_path / ".config" / "github_selector"
        cfg_dir.mkdir(parents=True)
        (cfg_dir / "config.yaml").write_text("githubtoken: [unclosed\n")
        with patch(RUN) as run:
            result = runner.invoke(app, ["--home", str(tmp_path)])
        assert result.exit_code == 2
        run.assert_not_called()

    def test_markup_in_error_text_is_printed_verbatim(self, tmp_path):
        err = CloneError("git clone failed [/bold]", detail="fatal: could not read [/tmp/x]")
        with patch(LOAD, return_value=CONFIG), patch(RUN, side_effect=err):
            result = runner.invoke(app, ["--home", str(tmp_path), "-v"])
        assert result.exit_code == 2
        assert "git clone failed [/bold]" in result.output
        assert "could not read [/tmp/x]" in result.output

    def test_failed_listing_with_no_repos_is_fatal(self, tmp_path):
        failed = RepoListing(errors=[PageError(url="https://api.github.com/orgs/a/repos", message="401", status=401)])
        with patch(LOAD, return_value=CONFIG), patch("github_selector.cli.app.fetch_org_repos", return_value=failed):
            result = runner.invoke(app, ["--home", str(tmp_path), "--filter-command", "cat"])
        assert result.exit_code == 2
        assert "incomplete" in result.output
