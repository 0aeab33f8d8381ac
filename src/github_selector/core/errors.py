from __future__ import annotations

from enum import IntEnum
from typing import Optional


class ExitCode(IntEnum):
    OK = 0
    ERROR = 2


class GitHubSelectorError(Exception):
    """
    Fatal error of a selection run. `exit_code` is what the CLI exits with;
    `detail` holds paths or git output shown under --verbose.
    """

    def __init__(
        self,
        message: str,
        *,
        exit_code: ExitCode = ExitCode.ERROR,
        detail: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.detail = detail


class ConfigError(GitHubSelectorError):
    pass


class CacheError(GitHubSelectorError):
    pass


class ListingError(GitHubSelectorError):
    pass


class CloneError(GitHubSelectorError):
    pass


def exit_code_for(exc: BaseException) -> int:
    if isinstance(exc, GitHubSelectorError):
        return int(exc.exit_code)
    return int(ExitCode.ERROR)
