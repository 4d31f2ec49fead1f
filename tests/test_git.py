import uuid
from pathlib import Path

import pytest

from aonyx_tools.bash import Bash
from aonyx_tools.core import SafetyClass, ToolCall, ToolError
from aonyx_tools.git import GitDiff, GitLog, GitShow, GitStatus, run_git


def call(name, args):
    return ToolCall(id=str(uuid.uuid4()), name=name, args=args)


def sh(command, cwd):
    res = Bash().invoke(call("bash", {"command": command, "cwd": str(cwd)}))
    assert res.output["exit_code"] == 0, res.output["stderr"]
    return res


@pytest.fixture
def repo(tmp_path):
    sh(
        "git init -q -b main && git config user.name t && "
        "git config user.email t@example.com && git config commit.gpgsign false",
        tmp_path,
    )
    return tmp_path


def commit(repo, message):
    sh(f"git add -A && git commit -q --allow-empty -m {message}", repo)


def test_git_status_runs_on_fresh_repo(repo):
    res = GitStatus().invoke(call("git_status", {"cwd": str(repo)}))
    assert res.output["exit_code"] == 0
    assert "main" in res.output["stdout"]


def test_git_log_returns_nonzero_on_empty_repo(repo):
    res = GitLog().invoke(call("git_log", {"cwd": str(repo), "limit": 5}))
    assert res.output["exit_code"] != 0
    assert res.output["stderr"]


def test_git_log_respects_limit(repo):
    commit(repo, "first")
    commit(repo, "second")
    res = GitLog().invoke(call("git_log", {"cwd": str(repo), "limit": 1}))
    assert res.output["exit_code"] == 0
    lines = res.output["stdout"].strip().splitlines()
    assert len(lines) == 1
    assert lines[0].endswith("second")


def test_git_log_invalid_args_fall_back_to_defaults(repo, monkeypatch):
    commit(repo, "only")
    monkeypatch.chdir(repo)
    res = GitLog().invoke(call("git_log", {"limit": "many"}))
    assert res.output["exit_code"] == 0
    assert "only" in res.output["stdout"]


def test_git_diff_shows_working_tree_changes(repo):
    (repo / "a.txt").write_text("old\n")
    (repo / "b.txt").write_text("keep\n")
    commit(repo, "base")
    (repo / "a.txt").write_text("new\n")
    (repo / "b.txt").write_text("changed\n")
    res = GitDiff().invoke(call("git_diff", {"cwd": str(repo)}))
    assert res.output["exit_code"] == 0
    assert "-old" in res.output["stdout"]
    assert "+new" in res.output["stdout"]
    assert "+changed" in res.output["stdout"]

    limited = GitDiff().invoke(call("git_diff", {"cwd": str(repo), "paths": ["a.txt"]}))
    assert "+new" in limited.output["stdout"]
    assert "+changed" not in limited.output["stdout"]


def test_git_diff_rejects_bad_args():
    with pytest.raises(ToolError, match="git_diff args"):
        GitDiff().invoke(call("git_diff", {"paths": "not-a-list"}))


def test_git_show_defaults_to_head(repo):
    commit(repo, "hello-show")
    res = GitShow().invoke(call("git_show", {"cwd": str(repo)}))
    assert res.output["rev"] == "HEAD"
    assert res.output["exit_code"] == 0
    assert "hello-show" in res.output["stdout"]


def test_git_show_unknown_rev_reports_failure(repo):
    res = GitShow().invoke(call("git_show", {"cwd": str(repo), "rev": "nope"}))
    assert res.output["rev"] == "nope"
    assert res.output["exit_code"] != 0


def test_run_git_in_missing_directory_raises(tmp_path):
    with pytest.raises(ToolError, match="git spawn"):
        run_git(["status"], str(Path(tmp_path) / "missing"))


def test_git_tools_are_safe_and_named():
    tools = [GitStatus(), GitDiff(), GitLog(), GitShow()]
    assert [t.name for t in tools] == ["git_status", "git_diff", "git_log", "git_show"]
    assert all(t.classify() is SafetyClass.SAFE for t in tools)


def test_git_schemas():
    assert GitLog().schema()["properties"]["limit"]["default"] == 20
    assert GitShow().schema()["properties"]["rev"]["default"] == "HEAD"
    assert set(GitDiff().schema()["properties"]) == {"cwd", "base", "head", "paths"}
    assert GitStatus().schema()["properties"]["cwd"]["type"] == "string"