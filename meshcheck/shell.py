"""Running shell commands and checking their combined output."""

from __future__ import annotations

import subprocess
import tempfile
from collections.abc import Iterable, Mapping
from typing import Any, Callable, Optional, Union

__all__ = ["CommandError", "execute", "executef", "create_temp_dir"]

OutputCheck = Callable[[str], Any]
Environment = Union[Mapping[str, str], Iterable[str], None]


class CommandError(RuntimeError):
    """A shell command could not be run or exited with a non-zero status."""

    def __init__(self, cmd: str, output: str, reason: str, returncode: Optional[int] = None):
        self.cmd = cmd
        self.output = output
        self.returncode = returncode
        super().__init__(f"Command failed: {cmd}\n{_append_newline(output)}error: {reason}")


def _append_newline(text: str) -> str:
    if not text or text.endswith("\n"):
        return text
    return text + "\n"


def _environment(env: Environment) -> Optional[dict[str, str]]:
    """Turn a mapping or ``KEY=VALUE`` strings into a dict; None keeps the current one."""
    if env is None:
        return None
    if isinstance(env, Mapping):
        return {str(key): str(value) for key, value in env.items()}
    result: dict[str, str] = {}
    for entry in env:
        key, _, value = entry.partition("=")
        result[key] = value
    return result


def execute(
    cmd: str,
    *args: OutputCheck,
    env: Environment = None,
    input_text: str = "",
) -> str:
    """Run ``cmd`` with ``sh -c`` and return stdout and stderr combined.

    Each check in ``args`` is called with the output afterwards. Raises
    CommandError when the command cannot start or exits with a non-zero status.
    """
    stdin_kwargs: dict[str, Any]
    if input_text:
        stdin_kwargs = {"input": input_text.encode()}
    else:
        stdin_kwargs = {"stdin": subprocess.DEVNULL}
    try:
        completed = subprocess.run(
            ["sh", "-c", cmd],
            env=_environment(env),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            check=False,
            **stdin_kwargs,
        )
    except OSError as exc:
        raise CommandError(cmd, "", str(exc)) from exc

    output = completed.stdout.decode(errors="replace")
    if completed.returncode != 0:
        raise CommandError(
            cmd, output, f"exit status {completed.returncode}", completed.returncode
        )
    for check in args:
        check(output)
    return output


def executef(fmt: str, *args: Any) -> str:
    """Format the command with ``%`` and run it."""
    return execute(fmt % args if args else fmt)


def create_temp_dir(name_prefix: str) -> str:
    """Create a new directory under /tmp whose name starts with ``name_prefix``."""
    return tempfile.mkdtemp(prefix=name_prefix, dir="/tmp")