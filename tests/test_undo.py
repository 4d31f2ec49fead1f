import json

import pytest

from aonyx_tools.undo import (
    UndoSnapshot,
    append_snapshot,
    append_snapshot_to,
    journal_path,
    list_snapshots,
    list_snapshots_from,
    pop_last_snapshot,
    pop_last_snapshot_from,
    restore,
    snapshot,
)


def test_pop_returns_none_when_no_journal(tmp_path):
    assert pop_last_snapshot_from(tmp_path / "undo.jsonl") is None


def test_append_then_pop_round_trips_snapshot(tmp_path):
    j = tmp_path / "undo.jsonl"
    append_snapshot_to(j, snapshot("foo.rs", "before", "fs_edit"))
    popped = pop_last_snapshot_from(j)
    assert popped is not None
    assert popped.path == "foo.rs"
    assert popped.prior == "before"
    assert popped.tool == "fs_edit"
    assert pop_last_snapshot_from(j) is None
    assert not j.exists()


def test_pop_returns_lifo_order(tmp_path):
    j = tmp_path / "undo.jsonl"
    append_snapshot_to(j, snapshot("a", "a0", "fs_edit"))
    append_snapshot_to(j, snapshot("b", "b0", "fs_edit"))
    append_snapshot_to(j, snapshot("c", "c0", "fs_edit"))
    assert pop_last_snapshot_from(j).path == "c"
    assert pop_last_snapshot_from(j).path == "b"
    assert pop_last_snapshot_from(j).path == "a"
    assert pop_last_snapshot_from(j) is None


def test_restore_writes_prior_back_to_disk(tmp_path):
    target = tmp_path / "hello.txt"
    target.write_text("after")
    restore(snapshot(str(target), "before", "fs_edit"))
    assert target.read_text() == "before"


def test_restore_creates_missing_parent_dirs(tmp_path):
    target = tmp_path / "x" / "y" / "z.txt"
    restore(snapshot(str(target), "content", "fs_write"))
    assert target.read_text() == "content"


def test_list_snapshots_returns_empty_when_no_journal(tmp_path):
    assert list_snapshots_from(tmp_path / "undo.jsonl", 10) == []


def test_list_snapshots_returns_newest_first_capped_to_limit(tmp_path):
    j = tmp_path / "undo.jsonl"
    append_snapshot_to(j, snapshot("a", "a0", "fs_edit"))
    append_snapshot_to(j, snapshot("b", "b0", "fs_edit"))
    append_snapshot_to(j, snapshot("c", "c0", "fs_edit"))
    everything = list_snapshots_from(j, 10)
    assert [s.path for s in everything] == ["c", "b", "a"]
    capped = list_snapshots_from(j, 2)
    assert [s.path for s in capped] == ["c", "b"]


def test_list_snapshots_skips_malformed_lines(tmp_path):
    j = tmp_path / "undo.jsonl"
    j.write_text(
        '{ not valid json }\n{"path":"good","prior":null,"tool":"fs_write","ts":1}\n'
    )
    snaps = list_snapshots_from(j, 10)
    assert len(snaps) == 1
    assert snaps[0].path == "good"
    assert snaps[0].prior is None
    assert snaps[0].ts == 1


def test_restore_deletes_file_when_prior_is_none(tmp_path):
    target = tmp_path / "new.txt"
    target.write_text("newly created")
    restore(snapshot(str(target), None, "fs_write"))
    assert not target.exists()


def test_restore_with_no_prior_and_no_file_leaves_nothing(tmp_path):
    target = tmp_path / "never.txt"
    restore(snapshot(str(target), None, "fs_write"))
    assert not target.exists()


def test_journal_line_is_compact_json(tmp_path):
    j = tmp_path / "undo.jsonl"
    append_snapshot_to(j, UndoSnapshot(path="good", prior=None, tool="fs_write", ts=1))
    assert j.read_text() == '{"path":"good","prior":null,"tool":"fs_write","ts":1}\n'


def test_snapshot_json_round_trip():
    snap = snapshot("p", "prior text\nwith lines", "fs_edit")
    assert UndoSnapshot.from_json(snap.to_json()) == snap


def test_pop_raises_on_malformed_last_line(tmp_path):
    j = tmp_path / "undo.jsonl"
    j.write_text("{ not valid json }\n")
    with pytest.raises(ValueError):
        pop_last_snapshot_from(j)


def test_default_journal_lives_under_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert journal_path() == tmp_path / ".aonyx" / "undo.jsonl"
    append_snapshot(snapshot("a", "a0", "fs_edit"))
    append_snapshot(snapshot("b", None, "fs_write"))
    assert [s.path for s in list_snapshots(10)] == ["b", "a"]
    assert pop_last_snapshot().path == "b"
    lines = (tmp_path / ".aonyx" / "undo.jsonl").read_text().splitlines()
    assert [json.loads(line)["path"] for line in lines] == ["a"]