from __future__ import annotations

import logging
import os
import subprocess
import threading
from typing import IO, Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_FILTER_COMMAND = "fzf -m"
DEFAULT_SHELL = "sh"


def _shell(env: Mapping[str, str]) -> str:
    return env.get("SHELL") or DEFAULT_SHELL


def _feed(stdin: IO[bytes], candidates: Iterable[str]) -> None:
    try:
        for c in candidates:
            stdin.write(f"{c}\n".encode("utf-8"))
    except BrokenPipeError:
        # the filter exited before reading everything
        pass
    finally:
        try:
            stdin.close()
        except BrokenPipeError:
            pass


def select(
    candidates: Iterable[str],
    command: str = DEFAULT_FILTER_COMMAND,
    env: Optional[Mapping[str, str]] = None,
) -> List[str]:
    """
    Pipe candidates through an interactive filter command and return the
    chosen lines. An empty list means nothing was selected.

    The command runs under $SHELL -c; stderr stays attached to the terminal
    so the filter can draw its UI.
    """
    env = os.environ if env is None else env
    shell = _shell(env)

    try:
        proc = subprocess.Popen(
            [shell, "-c", command],
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            env=dict(env),
        )
    except OSError as e:
        logger.warning("Unable to start %s -c %r: %s", shell, command, e)
        return []

    writer = threading.Thread(target=_feed, args=(proc.stdin, list(candidates)), daemon=True)
    writer.start()

    assert proc.stdout is not None
    output = proc.stdout.read()
    proc.stdout.close()
    code = proc.wait()
    writer.join()

    if code != 0:
        logger.debug("filter command %r exited with status %d", command, code)

    text = output.decode("utf-8", errors="replace")
    return [line.strip() for line in text.split("\n") if line.strip()]
