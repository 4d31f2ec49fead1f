# aonyx-tools

This package holds the built-in tools for an LLM agent. Every tool subclasses
`aonyx_tools.core.ToolHandler`. A tool has:

- a `name`
- a safety class, returned by `classify()` as a `SafetyClass` (`SAFE`, `CAUTION` or `DESTRUCTIVE`)
- a JSON schema for its arguments, returned by `schema()`
- an `invoke(call)` method that takes a `ToolCall(id, name, args)` and returns a `ToolResult(call_id, output, error)`

When a tool cannot carry out a call, `invoke` raises `ToolError`.

## Tools

| Module | Tool (name) | Safety |
| --- | --- | --- |
| `aonyx_tools.fs` | `FsRead` (`fs_read`), `FsGlob` (`fs_glob`), `FsGrep` (`fs_grep`) | safe |
| `aonyx_tools.fs` | `FsWrite` (`fs_write`), `FsEdit` (`fs_edit`) | destructive |
| `aonyx_tools.bash` | `Bash` (`bash`) | destructive |
| `aonyx_tools.git` | `GitStatus`, `GitDiff`, `GitLog`, `GitShow` (`git_status`, `git_diff`, `git_log`, `git_show`) | safe |
| `aonyx_tools.web` | `WebFetch` (`web_fetch`), `WebSearch` (`web_search`) | safe |

### Filesystem tools

- `fs_edit` replaces `old_string` with `new_string`. The text must occur exactly once, unless `replace_all` is true. If it is missing, or if it occurs more than once, the tool raises `ToolError`.
- `fs_write` creates any missing parent directories.
- `fs_glob` matches patterns recursively, so `**` works. The matches come back sorted.
- `fs_grep` walks a directory without following symlinks. It applies the regex to each line and skips files that are not valid UTF-8. It returns at most `max_results` matches, 200 by default. The optional `file_pattern` regex filters files by name.

### Shell and git tools

- `bash` runs `sh -c <command>`, or `cmd /C <command>` on Windows. The default timeout is 60 seconds. It returns `exit_code`, `stdout` and `stderr`. `exit_code` is `None` when the process was killed by a signal.
- The git tools call the `git` executable found on `PATH`. The timeout is 30 seconds.
  - They return git's exit code and output even when git fails.
  - `aonyx_tools.git.run_git(args, cwd)` is the helper they share. It returns `(exit_code, stdout, stderr)`.
  - Tools that change a repository are left to `bash`.

### Web tools

- `web_fetch` accepts only `http(s)` URLs. It strips HTML to readable text and caps the result at 20,000 characters.
  - It prefers an `<article>` or `<main>` body when that holds enough text.
  - It drops scripts, styles, navigation, headers, footers and asides.
- `web_search` uses the Brave Search API when `BRAVE_API_KEY` is set. Otherwise it uses Tavily when `TAVILY_API_KEY` is set. With neither set, it raises `ToolError`.
- The HTML helpers in `aonyx_tools.web` can also be called directly:
  - `html_to_text`
  - `looks_like_html`
  - `isolate_main`
  - `strip_blocks`
  - `decode_entities`
  - `collapse_whitespace`
  - `truncate_chars`
  - `parse_brave_results`
  - `parse_tavily_results`

## Registry

```python
from aonyx_tools.core import ToolCall
from aonyx_tools.registry import ToolRegistry

registry = ToolRegistry.default_set()
print(sorted(registry.names()))

tool = registry.get("fs_read")
result = tool.invoke(ToolCall(id="1", name="fs_read", args={"path": "README.md"}))
print(result.output["content"])
```

You can switch tools off and on. A registry and every clone made with `registry.clone()` share the same on/off state:

```python
registry.disable("bash")
assert registry.get("bash") is None
assert registry.get_raw("bash") is not None
registry.toggle("bash")   # returns False: enabled again
```

## Undo journal

Before `fs_write` and `fs_edit` change a file, they record its prior contents in `.aonyx/undo.jsonl` under the current directory. A failure to write the journal never blocks the change itself.

```python
from aonyx_tools import undo

for snap in undo.list_snapshots(10):
    print(snap.ts, snap.tool, snap.path)

last = undo.pop_last_snapshot()
if last is not None:
    undo.restore(last)   # writes the old text back, or deletes a new file
```

Functions ending in `_to` or `_from`, such as `append_snapshot_to` and `pop_last_snapshot_from`, work on a journal file you name.

## What this package does not do

- It has no command-line program, interactive screen or agent loop. It only provides the tools and the registry.
- A tool's safety class is only a label. Nothing in the package asks for approval before a destructive tool runs.
- It has no memory or knowledge-graph tools.
- It does not store anything besides the undo journal.

## Running the tests

```
pip install -e .[test]
pytest
```