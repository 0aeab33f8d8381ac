from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

APP_DIR_NAME = "github_selector"
CONFIG_FILE_NAME = "config.yaml"
CACHE_FILE_NAME = "repos.json"

HOME_ENV_VAR = "GITHUB_SELECTOR_HOME"


@dataclass(frozen=True)
class AppPaths:
    """
    Per-user locations, resolved once at startup and handed to the
    config store and the repository cache.
    """
    home: Path
    config_dir: Path
    config_file: Path
    cache_file: Path

    @classmethod
    def from_home(cls, home: Path) -> "AppPaths":
        home = Path(home).expanduser()
        config_dir = home / ".config" / APP_DIR_NAME
        return cls(
            home=home,
            config_dir=config_dir,
            config_file=config_dir / CONFIG_FILE_NAME,
            cache_file=config_dir / CACHE_FILE_NAME,
        )

    @classmethod
    def default(cls, home: Optional[Path] = None) -> "AppPaths":
        if home is None:
            override = os.environ.get(HOME_ENV_VAR)
            home = Path(override) if override else Path.home()
        return cls.from_home(home)

    def ensure_dir(self) -> Path:
        self.config_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
        return self.config_dir
