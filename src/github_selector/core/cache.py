from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, List

from github_selector.core.errors import CacheError
from github_selector.github.api import RepoInfo

logger = logging.getLogger(__name__)


class RepoCache:
    """
    Last fetched org listing, stored as one JSON array.

    No TTL: the snapshot is used until it is missing or a refresh is asked for.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> List[RepoInfo]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise CacheError("Unable to read repository cache.", detail=f"{self.path}: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CacheError("Repository cache is corrupt.", detail=f"{self.path}: {e}") from e

        if not isinstance(data, list) or not all(isinstance(x, dict) for x in data):
            raise CacheError("Repository cache is corrupt (expected a list of objects).", detail=str(self.path))

        repos = [RepoInfo.from_dict(x) for x in data]
        logger.debug("Loaded %d repos from %s", len(repos), self.path)
        return repos

    def write(self, repos: Iterable[RepoInfo]) -> None:
        payload = [r.to_dict() for r in repos]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".repos-", suffix=".json", dir=str(self.path.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, indent=2)
                os.replace(tmp, self.path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise CacheError("Unable to write repository cache.", detail=f"{self.path}: {e}") from e
        logger.debug("Wrote %d repos to %s", len(payload), self.path)
