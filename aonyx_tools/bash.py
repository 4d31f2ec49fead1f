"""Shell command execution with a timeout.

Runs ``sh -c <command>`` on POSIX hosts and ``cmd /C <command>`` on Windows.
Always classified as destructive: the approval gate inspects the command
string before invocation.
"""

from __future__ import annotations

import subprocess
import sys
from typing import Any

from .core import SafetyClass, ToolCall, ToolError, ToolHandler, ToolResult

DEFAULT_TIMEOUT_SECS = 60


def _parse_args(args: Any) -> tuple[str, int, str | None]:
    if not isinstance(args, dict):
        raise ToolError("bash args: expected an object")
    command = args.get("command")
    if not isinstance(command, str):
        raise ToolError("bash args: `command` must be a string")
    timeout = args.get("timeout_secs")
    if timeout is None:
        timeout = DEFAULT_TIMEOUT_SECS
    elif not isinstance(timeout, int) or isinstance(timeout, bool) or timeout < 0:
        raise ToolError("bash args: `timeout_secs` must be a non-negative integer")
    cwd = args.get("cwd")
    if cwd is not None and not isinstance(cwd, str):
        raise ToolError("bash args: `cwd` must be a string")
    return command, timeout, cwd


class Bash(ToolHandler):
    """``bash`` — run a shell command and capture stdout, stderr and exit code."""

    name = "bash"

    def classify(self) -> SafetyClass:
        return SafetyClass.DESTRUCTIVE

    def schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "command": {"type": "string", "description": "Shell command to execute."},
                "timeout_secs": {
                    "type": "integer",
                    "minimum": 1,
                    "default": DEFAULT_TIMEOUT_SECS,
                },
                "cwd": {
                    "type": "string",
                    "description": "Working directory; defaults to current.",
                },
            },
            "required": ["command"],
        }

    def invoke(self, call: ToolCall) -> ToolResult:
        command, timeout, cwd = _parse_args(call.args)
        if sys.platform == "win32":
            argv = ["cmd", "/C", command]
        else:
            argv = ["sh", "-c", command]
        try:
            completed = subprocess.run(
                argv,
                cwd=cwd,
                capture_output=True,
                stdin=subprocess.DEVNULL,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            raise ToolError(f"bash timed out after {timeout}s") from None
        except OSError as exc:
            raise ToolError(f"bash spawn: {exc}") from exc

        code = completed.returncode
        return ToolResult(
            call_id=call.id,
            output={
                "command": command,
                "exit_code": code if code >= 0 else None,
                "stdout": completed.stdout.decode("utf-8", errors="replace"),
                "stderr": completed.stderr.decode("utf-8", errors="replace"),
            },
        )