"""Read-only git tools: status, diff, log and show.

Mutating operations (commit, push, rebase, ...) deliberately go through the
``bash`` tool so the approval gate sees a single auditable command rather
than a parameterised git wrapper.
"""

from __future__ import annotations

import subprocess
from typing import Any, Sequence

from .core import SafetyClass, ToolCall, ToolError, ToolHandler, ToolResult

TIMEOUT_SECS = 30
DEFAULT_LOG_LIMIT = 20
_U32_MAX = 2**32 - 1


def run_git(args: Sequence[str], cwd: str | None = None) -> tuple[int, str, str]:
    """Run ``git`` with ``args`` and return ``(exit_code, stdout, stderr)``.

    The exit code is ``-1`` when git was terminated by a signal.
    """
    argv = ["git", *args]
    try:
        completed = subprocess.run(
            argv,
            cwd=cwd,
            capture_output=True,
            stdin=subprocess.DEVNULL,
            timeout=TIMEOUT_SECS,
        )
    except subprocess.TimeoutExpired:
        raise ToolError(f"git {list(args)!r} timed out") from None
    except OSError as exc:
        raise ToolError(f"git spawn: {exc}") from exc
    code = completed.returncode
    return (
        code if code >= 0 else -1,
        completed.stdout.decode("utf-8", errors="replace"),
        completed.stderr.decode("utf-8", errors="replace"),
    )


def _cwd_schema_field() -> dict[str, Any]:
    return {"type": "string", "description": "Repository root (default: cwd)."}


def _object(args: Any) -> dict[str, Any]:
    if not isinstance(args, dict):
        raise ValueError("expected an object")
    return args


def _opt_str(args: dict[str, Any], key: str) -> str | None:
    value = args.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"`{key}` must be a string")
    return value


def _str_list(args: dict[str, Any], key: str) -> list[str]:
    if key not in args:
        return []
    value = args[key]
    if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
        raise ValueError(f"`{key}` must be an array of strings")
    return list(value)


def _with_paths(cli: list[str], paths: list[str]) -> list[str]:
    if paths:
        cli.append("--")
        cli.extend(paths)
    return cli


def _output(code: int, stdout: str, stderr: str, **extra: Any) -> dict[str, Any]:
    return {"exit_code": code, **extra, "stdout": stdout, "stderr": stderr}


class GitStatus(ToolHandler):
    """``git_status`` — porcelain status with branch information."""

    name = "git_status"

    def classify(self) -> SafetyClass:
        return SafetyClass.SAFE

    def schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {"cwd": _cwd_schema_field()}}

    def invoke(self, call: ToolCall) -> ToolResult:
        try:
            cwd = _opt_str(_object(call.args), "cwd")
        except ValueError:
            cwd = None
        code, stdout, stderr = run_git(["status", "--porcelain=v1", "--branch"], cwd)
        return ToolResult(call_id=call.id, output=_output(code, stdout, stderr))


class GitDiff(ToolHandler):
    """``git_diff`` — unified diff between refs (default: working tree vs HEAD)."""

    name = "git_diff"

    def classify(self) -> SafetyClass:
        return SafetyClass.SAFE

    def schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "cwd": _cwd_schema_field(),
                "base": {"type": "string", "description": "Base ref (default: HEAD)."},
                "head": {"type": "string", "description": "Head ref (default: working tree)."},
                "paths": {"type": "array", "items": {"type": "string"}},
            },
        }

    def invoke(self, call: ToolCall) -> ToolResult:
        try:
            args = _object(call.args)
            cwd = _opt_str(args, "cwd")
            base = _opt_str(args, "base")
            head = _opt_str(args, "head")
            paths = _str_list(args, "paths")
        except ValueError as exc:
            raise ToolError(f"git_diff args: {exc}") from None
        cli = ["diff", "--no-color"]
        cli.extend(ref for ref in (base, head) if ref is not None)
        code, stdout, stderr = run_git(_with_paths(cli, paths), cwd)
        return ToolResult(call_id=call.id, output=_output(code, stdout, stderr))


class GitLog(ToolHandler):
    """``git_log`` — one-line log, limited to ``limit`` commits."""

    name = "git_log"

    def classify(self) -> SafetyClass:
        return SafetyClass.SAFE

    def schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "cwd": _cwd_schema_field(),
                "limit": {"type": "integer", "minimum": 1, "default": DEFAULT_LOG_LIMIT},
                "paths": {"type": "array", "items": {"type": "string"}},
            },
        }

    @staticmethod
    def _parse(raw: Any) -> tuple[str | None, int, list[str]]:
        args = _object(raw)
        cwd = _opt_str(args, "cwd")
        limit = args.get("limit", DEFAULT_LOG_LIMIT)
        if (
            not isinstance(limit, int)
            or isinstance(limit, bool)
            or not 0 <= limit <= _U32_MAX
        ):
            raise ValueError("`limit` must be a non-negative integer")
        return cwd, limit, _str_list(args, "paths")

    def invoke(self, call: ToolCall) -> ToolResult:
        try:
            cwd, limit, paths = self._parse(call.args)
        except ValueError:
            cwd, limit, paths = None, DEFAULT_LOG_LIMIT, []
        cli = ["log", "--oneline", "--no-color", f"-{limit}"]
        code, stdout, stderr = run_git(_with_paths(cli, paths), cwd)
        return ToolResult(call_id=call.id, output=_output(code, stdout, stderr))


class GitShow(ToolHandler):
    """``git_show`` — show a commit (default: HEAD)."""

    name = "git_show"

    def classify(self) -> SafetyClass:
        return SafetyClass.SAFE

    def schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "cwd": _cwd_schema_field(),
                "rev": {"type": "string", "default": "HEAD"},
            },
        }

    def invoke(self, call: ToolCall) -> ToolResult:
        try:
            args = _object(call.args)
            cwd, rev = _opt_str(args, "cwd"), _opt_str(args, "rev")
        except ValueError:
            cwd, rev = None, None
        rev = rev if rev is not None else "HEAD"
        code, stdout, stderr = run_git(["show", "--no-color", rev], cwd)
        return ToolResult(call_id=call.id, output=_output(code, stdout, stderr, rev=rev))