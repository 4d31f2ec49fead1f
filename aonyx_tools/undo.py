"""Append-only journal of file snapshots taken before destructive edits.

One JSON object per line in ``<cwd>/.aonyx/undo.jsonl``. Each entry records
the path about to be mutated and its contents beforehand (``None`` when the
file did not exist yet).
"""

from __future__ import annotations

import json
import os
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterator, Union

PathLike = Union[str, "os.PathLike[str]"]


@dataclass
class UndoSnapshot:
    """One reversible mutation of a file on disk."""

    path: str
    prior: str | None
    tool: str
    ts: int

    def to_json(self) -> str:
        """Serialise to a single compact JSON line."""
        return json.dumps(asdict(self), separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_json(cls, line: str) -> "UndoSnapshot":
        """Parse a journal line; raise ``ValueError`` when malformed."""
        data = json.loads(line)
        if not isinstance(data, dict):
            raise ValueError("undo snapshot: expected a JSON object")
        try:
            path, prior, tool, ts = data["path"], data["prior"], data["tool"], data["ts"]
        except KeyError as exc:
            raise ValueError(f"undo snapshot: missing field {exc}") from None
        if not isinstance(path, str) or not isinstance(tool, str):
            raise ValueError("undo snapshot: path and tool must be strings")
        if prior is not None and not isinstance(prior, str):
            raise ValueError("undo snapshot: prior must be a string or null")
        if not isinstance(ts, int) or isinstance(ts, bool):
            raise ValueError("undo snapshot: ts must be an integer")
        return cls(path=path, prior=prior, tool=tool, ts=ts)


def _lines(content: str) -> Iterator[str]:
    """Split on newlines only, dropping a trailing carriage return."""
    parts = content.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    for part in parts:
        yield part[:-1] if part.endswith("\r") else part


def journal_path() -> Path:
    """Default journal location: ``<cwd>/.aonyx/undo.jsonl``."""
    try:
        cwd = Path.cwd()
    except OSError:
        cwd = Path(".")
    return cwd / ".aonyx" / "undo.jsonl"


def append_snapshot(snap: UndoSnapshot) -> None:
    """Append ``snap`` to the default journal."""
    append_snapshot_to(journal_path(), snap)


def append_snapshot_to(journal: PathLike, snap: UndoSnapshot) -> None:
    """Append ``snap`` to a specific journal file."""
    journal = Path(journal)
    journal.parent.mkdir(parents=True, exist_ok=True)
    with journal.open("a", encoding="utf-8", newline="") as fh:
        fh.write(snap.to_json() + "\n")


def pop_last_snapshot() -> UndoSnapshot | None:
    """Pop the most recent snapshot off the default journal."""
    return pop_last_snapshot_from(journal_path())


def pop_last_snapshot_from(journal: PathLike) -> UndoSnapshot | None:
    """Pop the most recent snapshot off ``journal``.

    Returns ``None`` when the journal is missing or empty and removes the
    file once its last entry is drained.
    """
    journal = Path(journal)
    if not journal.exists():
        return None
    content = journal.read_text(encoding="utf-8")
    lines = [line for line in _lines(content) if line]
    if not lines:
        return None
    snap = UndoSnapshot.from_json(lines.pop())
    if lines:
        with journal.open("w", encoding="utf-8", newline="") as fh:
            fh.write("\n".join(lines) + "\n")
    else:
        try:
            journal.unlink()
        except OSError:
            pass
    return snap


def list_snapshots(limit: int) -> list[UndoSnapshot]:
    """Snapshots in the default journal, newest first, at most ``limit``."""
    return list_snapshots_from(journal_path(), limit)


def list_snapshots_from(journal: PathLike, limit: int) -> list[UndoSnapshot]:
    """Snapshots in ``journal``, newest first, at most ``limit``.

    Malformed lines are skipped.
    """
    journal = Path(journal)
    if not journal.exists():
        return []
    content = journal.read_text(encoding="utf-8")
    out: list[UndoSnapshot] = []
    for line in reversed(list(_lines(content))):
        if not line.strip():
            continue
        if len(out) >= limit:
            break
        try:
            out.append(UndoSnapshot.from_json(line))
        except ValueError:
            continue
    return out


def restore(snap: UndoSnapshot) -> None:
    """Write ``snap.prior`` back to its path, or delete the file if it had none."""
    if snap.prior is not None:
        parent = os.path.dirname(snap.path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(snap.path, "w", encoding="utf-8", newline="") as fh:
            fh.write(snap.prior)
    elif os.path.exists(snap.path):
        os.remove(snap.path)


def snapshot(path: PathLike, prior: str | None, tool: str) -> UndoSnapshot:
    """Build a snapshot stamped with the current Unix time."""
    return UndoSnapshot(path=os.fspath(path), prior=prior, tool=tool, ts=int(time.time()))