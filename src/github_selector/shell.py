from __future__ import annotations

import re

DEFAULT_COMMAND_NAME = "github-selector"
DEFAULT_FUNCTION_NAME = "ghs"

_FUNCTION_TEMPLATE = """\
{function_name}() {{
  local dir
  dir="$({command_name} "$@")" || return $?
  if [ -n "$dir" ]; then
    cd "$dir" || return $?
  fi
}}
"""

_VALID_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


def shell_function(
    command_name: str = DEFAULT_COMMAND_NAME,
    function_name: str = DEFAULT_FUNCTION_NAME,
) -> str:
    """
    Shell snippet that runs the selector and cds into the printed path.
    Install with: eval "$(github-selector --function)"
    """
    if not _VALID_NAME.match(function_name):
        raise ValueError(f"Invalid shell function name: {function_name!r}")
    return _FUNCTION_TEMPLATE.format(function_name=function_name, command_name=command_name)
