from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml

from github_selector.core.errors import ConfigError
from github_selector.core.paths import AppPaths

logger = logging.getLogger(__name__)

# (message, secret) -> answer
Prompt = Callable[[str, bool], str]

# Keys written by earlier releases; kept so existing config files load unchanged.
TOKEN_KEY = "githubtoken"
CLONE_DIR_KEY = "clonedir"
ORG_KEY = "orgname"

TOKEN_PROMPT = "Whats your github access token? : "
CLONE_DIR_PROMPT = "Whats your git clone directory? : "
ORG_PROMPT = "What organization do you want to search? : "


@dataclass(frozen=True)
class Configuration:
    github_token: str
    clone_dir: str
    org_name: str

    def to_dict(self) -> Dict[str, str]:
        return {
            TOKEN_KEY: self.github_token,
            CLONE_DIR_KEY: self.clone_dir,
            ORG_KEY: self.org_name,
        }


def expand_clone_dir(raw: str, home: Path) -> str:
    """
    Expand a leading "~" to the given home directory. Other paths are returned as-is.
    """
    value = raw.strip()
    if value == "~":
        return str(home)
    if value.startswith("~/"):
        return str(home / value[2:])
    return value


def _validated(data: Dict[str, Any], home: Path, source: str) -> Configuration:
    values: Dict[str, str] = {}
    for key in (TOKEN_KEY, CLONE_DIR_KEY, ORG_KEY):
        raw = data.get(key)
        if raw is None or not str(raw).strip():
            raise ConfigError(f"Config is missing '{key}'.", detail=source)
        values[key] = str(raw).strip()

    return Configuration(
        github_token=values[TOKEN_KEY],
        clone_dir=expand_clone_dir(values[CLONE_DIR_KEY], home),
        org_name=values[ORG_KEY],
    )


def load_config(path: Path, home: Path) -> Configuration:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError("Unable to load config.", detail=f"{path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError("Unable to parse config.", detail=f"{path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("Config must be a mapping.", detail=str(path))
    return _validated(data, home, str(path))


def save_config(config: Configuration, path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            yaml.safe_dump(config.to_dict(), default_flow_style=False, sort_keys=False),
            encoding="utf-8",
        )
    except OSError as e:
        raise ConfigError("Unable to write config.", detail=f"{path}: {e}") from e


def prompt_for_config(prompt: Prompt, home: Path) -> Configuration:
    """
    Ask for token, clone directory and organization, in that order.
    """
    token = prompt(TOKEN_PROMPT, True)
    clone_dir = prompt(CLONE_DIR_PROMPT, False)
    org_name = prompt(ORG_PROMPT, False)

    data = {TOKEN_KEY: token, CLONE_DIR_KEY: clone_dir, ORG_KEY: org_name}
    return _validated(data, home, "interactive prompt")


def load_or_create(
    paths: AppPaths,
    prompt: Optional[Prompt] = None,
    *,
    reconfigure: bool = False,
) -> Configuration:
    """
    Load the config file, or run the first-run prompts and persist the answers.
    `reconfigure` forces the prompts and overwrites the whole record.
    """
    paths.ensure_dir()

    if paths.config_file.exists() and not reconfigure:
        return load_config(paths.config_file, paths.home)

    if prompt is None:
        raise ConfigError(
            "No config found and no way to prompt for one.",
            detail=str(paths.config_file),
        )

    config = prompt_for_config(prompt, paths.home)
    save_config(config, paths.config_file)
    logger.info("Wrote config to %s", paths.config_file)
    return config
