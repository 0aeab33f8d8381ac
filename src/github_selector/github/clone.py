from __future__ import annotations

import logging
import os
import subprocess
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import IO, List, Optional, TextIO

from github_selector.core.errors import CloneError
from github_selector.github.api import RepoInfo

logger = logging.getLogger(__name__)

ALREADY_EXISTS_MARKER = "already exists and is not an empty directory"


@dataclass(frozen=True)
class CloneOptions:
    host: str = "github.com"
    track_default_branch: bool = True


def remote_url(repo: RepoInfo, host: str = "github.com") -> str:
    return f"git@{host}:{repo.full_name}.git"


def _run_git(args: List[str], *, cwd: Optional[Path] = None) -> None:
    proc = subprocess.run(
        ["git", *args],
        cwd=str(cwd) if cwd else None,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        check=False,
    )
    if proc.returncode != 0:
        err = proc.stderr.decode("utf-8", errors="replace").strip()
        raise CloneError(f"git {' '.join(args)} failed", detail=err)


def _has_commits(repo_dir: Path) -> bool:
    proc = subprocess.run(
        ["git", "rev-parse", "--verify", "--quiet", "HEAD"],
        cwd=str(repo_dir),
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        check=False,
    )
    return proc.returncode == 0


def _copy_stream(src: IO[bytes], dst: TextIO, sink: List[str]) -> None:
    for line in iter(src.readline, b""):
        text = line.decode("utf-8", errors="replace")
        sink.append(text)
        dst.write(text)
        dst.flush()
    src.close()


def _stream_git(args: List[str], out: TextIO) -> tuple[int, str]:
    """
    Run git, copying stdout and stderr to `out` while it runs.
    Returns (returncode, captured stderr).
    """
    env = os.environ.copy()
    env["GIT_TERMINAL_PROMPT"] = "0"
    try:
        proc = subprocess.Popen(
            ["git", *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=env,
        )
    except OSError as e:
        raise CloneError("Unable to start git.", detail=str(e)) from e

    stdout_lines: List[str] = []
    stderr_lines: List[str] = []
    readers = [
        threading.Thread(target=_copy_stream, args=(proc.stdout, out, stdout_lines), daemon=True),
        threading.Thread(target=_copy_stream, args=(proc.stderr, out, stderr_lines), daemon=True),
    ]
    for t in readers:
        t.start()
    code = proc.wait()
    for t in readers:
        t.join()
    return code, "".join(stderr_lines)


def _is_populated(path: Path) -> bool:
    if not path.exists():
        return False
    if not path.is_dir():
        return True
    return any(path.iterdir())


def clone_repo(
    repo: RepoInfo,
    base_dir: Path,
    opts: CloneOptions = CloneOptions(),
    *,
    out: Optional[TextIO] = None,
) -> Path:
    """
    Clone repo into base_dir/<name> over SSH and return the checkout path.
    An existing destination counts as already cloned.
    """
    out = out if out is not None else sys.stderr
    dest = Path(base_dir) / repo.name

    if _is_populated(dest):
        logger.info("%s already exists, skipping clone", dest)
        return dest

    dest.parent.mkdir(parents=True, exist_ok=True)
    url = remote_url(repo, opts.host)
    logger.debug("git clone %s %s", url, dest)

    code, err = _stream_git(["clone", url, str(dest)], out)
    if code != 0:
        if ALREADY_EXISTS_MARKER in err:
            logger.info("%s already exists, skipping clone", dest)
            return dest
        raise CloneError(f"git clone failed with exit status {code}", detail=err.strip())

    if opts.track_default_branch and repo.default_branch:
        branch = repo.default_branch
        if not _has_commits(dest):
            # empty remote: no origin/<branch> to track yet
            logger.info("%s has no commits yet, not tracking origin/%s", dest, branch)
            return dest
        _run_git(["branch", f"--set-upstream-to=origin/{branch}", branch], cwd=dest)

    return dest
