"""Filesystem tools: read, write, edit, glob and grep.

``fs_read``, ``fs_glob`` and ``fs_grep`` are safe; ``fs_write`` and
``fs_edit`` are destructive and journal the prior file state for undo.
"""

from __future__ import annotations

import glob as _glob
import os
import re
from pathlib import Path
from typing import Any, Iterator

from . import undo
from .core import SafetyClass, ToolCall, ToolError, ToolHandler, ToolResult

DEFAULT_GREP_CAP = 200

_MISSING = object()


def _args(tool: str, args: Any) -> dict[str, Any]:
    if not isinstance(args, dict):
        raise ToolError(f"{tool} args: expected an object")
    return args


def _string(tool: str, args: dict[str, Any], key: str, *, required: bool = True) -> str | None:
    value = args.get(key, _MISSING)
    if value is _MISSING or value is None:
        if required:
            raise ToolError(f"{tool} args: missing field `{key}`")
        return None
    if not isinstance(value, str):
        raise ToolError(f"{tool} args: `{key}` must be a string")
    return value


def _read_text(path: str) -> str:
    """Read a file as UTF-8 without newline translation."""
    with open(path, "rb") as fh:
        return fh.read().decode("utf-8")


def _write_text(path: str, content: str) -> None:
    with open(path, "wb") as fh:
        fh.write(content.encode("utf-8"))


def _lines(text: str) -> Iterator[str]:
    """Split on ``\\n``, dropping a trailing carriage return from each line."""
    parts = text.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    for part in parts:
        yield part[:-1] if part.endswith("\r") else part


def _journal(path: str, prior: str | None, tool: str) -> None:
    """Record the prior state for undo; failures never block the mutation."""
    try:
        undo.append_snapshot(undo.snapshot(path, prior, tool))
    except (OSError, ValueError):
        pass


class FsRead(ToolHandler):
    """``fs_read`` — read a UTF-8 text file in full."""

    name = "fs_read"

    def classify(self) -> SafetyClass:
        return SafetyClass.SAFE

    def schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Absolute or workspace-relative path to a UTF-8 text file.",
                }
            },
            "required": ["path"],
        }

    def invoke(self, call: ToolCall) -> ToolResult:
        args = _args("fs_read", call.args)
        path = _string("fs_read", args, "path")
        try:
            content = _read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise ToolError(f"fs_read {path}: {exc}") from exc
        return ToolResult(call_id=call.id, output={"path": path, "content": content})


class FsWrite(ToolHandler):
    """``fs_write`` — overwrite or create a file, creating parent directories."""

    name = "fs_write"

    def classify(self) -> SafetyClass:
        return SafetyClass.DESTRUCTIVE

    def schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {"type": "string"},
                "content": {"type": "string"},
            },
            "required": ["path", "content"],
        }

    def invoke(self, call: ToolCall) -> ToolResult:
        args = _args("fs_write", call.args)
        path = _string("fs_write", args, "path")
        content = _string("fs_write", args, "content")
        parent = os.path.dirname(path)
        if parent:
            try:
                os.makedirs(parent, exist_ok=True)
            except OSError as exc:
                raise ToolError(f"fs_write mkdir {parent!r}: {exc}") from exc

        prior: str | None = None
        if os.path.exists(path):
            try:
                prior = _read_text(path)
            except (OSError, UnicodeDecodeError):
                prior = None
        _journal(path, prior, "fs_write")

        data = content.encode("utf-8")
        try:
            with open(path, "wb") as fh:
                fh.write(data)
        except OSError as exc:
            raise ToolError(f"fs_write {path}: {exc}") from exc
        return ToolResult(call_id=call.id, output={"path": path, "bytes_written": len(data)})


class FsEdit(ToolHandler):
    """``fs_edit`` — exact-string replacement inside a file.

    ``old_string`` must occur exactly once unless ``replace_all`` is set.
    """

    name = "fs_edit"

    def classify(self) -> SafetyClass:
        return SafetyClass.DESTRUCTIVE

    def schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {"type": "string"},
                "old_string": {
                    "type": "string",
                    "description": "Exact substring to find. Must be unique unless replace_all=true.",
                },
                "new_string": {"type": "string"},
                "replace_all": {"type": "boolean", "default": False},
            },
            "required": ["path", "old_string", "new_string"],
        }

    def invoke(self, call: ToolCall) -> ToolResult:
        args = _args("fs_edit", call.args)
        path = _string("fs_edit", args, "path")
        old = _string("fs_edit", args, "old_string")
        new = _string("fs_edit", args, "new_string")
        replace_all = args.get("replace_all", False)
        if replace_all is None:
            replace_all = False
        if not isinstance(replace_all, bool):
            raise ToolError("fs_edit args: `replace_all` must be a boolean")

        try:
            original = _read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise ToolError(f"fs_edit read {path}: {exc}") from exc

        occurrences = original.count(old)
        if replace_all:
            new_text = original.replace(old, new)
        else:
            if occurrences == 0:
                raise ToolError(f"fs_edit {path}: old_string not found")
            if occurrences > 1:
                raise ToolError(
                    f"fs_edit {path}: old_string is ambiguous ({occurrences} occurrences); "
                    "pass replace_all or widen context"
                )
            new_text = original.replace(old, new, 1)

        _journal(path, original, "fs_edit")
        try:
            _write_text(path, new_text)
        except OSError as exc:
            raise ToolError(f"fs_edit write {path}: {exc}") from exc
        return ToolResult(
            call_id=call.id,
            output={"path": path, "replacements": occurrences if replace_all else 1},
        )


class FsGlob(ToolHandler):
    """``fs_glob`` — list paths matching a glob pattern."""

    name = "fs_glob"

    def classify(self) -> SafetyClass:
        return SafetyClass.SAFE

    def schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "pattern": {"type": "string", "description": "Glob pattern, e.g. 'src/**/*.rs'."},
                "path": {"type": "string", "description": "Base directory (default: cwd)."},
            },
            "required": ["pattern"],
        }

    def invoke(self, call: ToolCall) -> ToolResult:
        args = _args("fs_glob", call.args)
        pattern = _string("fs_glob", args, "pattern")
        base = _string("fs_glob", args, "path", required=False)
        combined = f"{base.rstrip('/')}/{pattern}" if base is not None else pattern
        try:
            hits = sorted(_glob.glob(combined, recursive=True))
        except (OSError, ValueError, re.error) as exc:
            raise ToolError(f"fs_glob pattern: {exc}") from exc
        return ToolResult(call_id=call.id, output={"pattern": combined, "matches": hits})


def _walk_files(base: Path) -> Iterator[Path]:
    """Yield regular files under ``base`` without following symlinks."""
    if base.is_symlink():
        return
    if base.is_file():
        yield base
        return
    for root, dirs, files in os.walk(base, followlinks=False):
        dirs.sort()
        for name in sorted(files):
            path = Path(root) / name
            if not path.is_symlink() and path.is_file():
                yield path


class FsGrep(ToolHandler):
    """``fs_grep`` — search file contents line by line for a regex."""

    name = "fs_grep"

    def classify(self) -> SafetyClass:
        return SafetyClass.SAFE

    def schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "pattern": {"type": "string", "description": "Regex applied per line."},
                "path": {"type": "string", "description": "Directory to walk (default: cwd)."},
                "file_pattern": {
                    "type": "string",
                    "description": "Optional regex on filenames to keep.",
                },
                "max_results": {"type": "integer", "minimum": 1},
            },
            "required": ["pattern"],
        }

    def invoke(self, call: ToolCall) -> ToolResult:
        args = _args("fs_grep", call.args)
        pattern = _string("fs_grep", args, "pattern")
        file_pattern = _string("fs_grep", args, "file_pattern", required=False)
        base = _string("fs_grep", args, "path", required=False) or "."
        cap = args.get("max_results")
        if cap is None:
            cap = DEFAULT_GREP_CAP
        elif not isinstance(cap, int) or isinstance(cap, bool) or cap < 0:
            raise ToolError("fs_grep args: `max_results` must be a non-negative integer")

        try:
            line_re = re.compile(pattern)
        except re.error as exc:
            raise ToolError(f"fs_grep regex: {exc}") from exc
        try:
            file_re = re.compile(file_pattern) if file_pattern is not None else None
        except re.error as exc:
            raise ToolError(f"fs_grep file_pattern: {exc}") from exc

        matches = list(self._search(Path(base), line_re, file_re, cap))
        return ToolResult(call_id=call.id, output={"pattern": pattern, "matches": matches})

    @staticmethod
    def _search(
        base: Path, line_re: re.Pattern[str], file_re: re.Pattern[str] | None, cap: int
    ) -> Iterator[dict[str, Any]]:
        found = 0
        for path in _walk_files(base):
            if file_re is not None and not file_re.search(path.name):
                continue
            try:
                text = _read_text(str(path))
            except (OSError, UnicodeDecodeError):
                continue  # binary or unreadable
            for number, line in enumerate(_lines(text), start=1):
                if line_re.search(line):
                    yield {"path": str(path), "line_number": number, "line": line}
                    found += 1
                    if found >= cap:
                        return