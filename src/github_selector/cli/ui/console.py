from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from rich.console import Console
from rich.theme import Theme


DEFAULT_THEME = Theme(
    {
        "ok": "green",
        "warn": "yellow",
        "err": "red",
        "muted": "dim",
        "repo": "bold cyan",
        "path": "white",
    }
)

LOG_FORMAT = "%(levelname)s: %(message)s"


@dataclass(frozen=True)
class UIContext:
    """
    Shared UI context. Everything goes to stderr; stdout is reserved
    for the cloned path.
    """
    console: Console
    verbose: bool = False

    def prompt(self, message: str, secret: bool = False) -> str:
        return self.console.input(message, password=secret)


_default_ctx: Optional[UIContext] = None


def get_ui(verbose: bool = False, *, force_new: bool = False) -> UIContext:
    """
    Get a shared stderr Rich Console configured with a theme.
    """
    global _default_ctx
    if _default_ctx is None or force_new:
        _default_ctx = UIContext(console=Console(theme=DEFAULT_THEME, stderr=True), verbose=verbose)
    else:
        _default_ctx = UIContext(console=_default_ctx.console, verbose=verbose)
    return _default_ctx


def configure_logging(verbose: bool = False) -> None:
    """
    Root logging on stderr; DEBUG when verbose.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(get_ui(verbose).console.file)],
        force=True,
    )
