"""Tool registry: name-keyed dispatch with a shared on/off switch per tool."""

from __future__ import annotations

import threading
from typing import Iterator

from .bash import Bash
from .core import ToolHandler
from .fs import FsEdit, FsGlob, FsGrep, FsRead, FsWrite
from .git import GitDiff, GitLog, GitShow, GitStatus
from .web import WebFetch, WebSearch


class ToolRegistry:
    """Registered tool handlers keyed by name.

    The set of disabled tools is shared between a registry and every clone
    of it, so flipping a tool off in one place is seen everywhere.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, ToolHandler] = {}
        self._disabled: set[str] = set()
        self._lock = threading.Lock()

    def register(self, handler: ToolHandler) -> None:
        """Register ``handler``, replacing any entry with the same name."""
        self._handlers[handler.name] = handler

    def get(self, name: str) -> ToolHandler | None:
        """Look up an enabled tool; ``None`` for unknown and disabled tools."""
        if self.is_disabled(name):
            return None
        return self._handlers.get(name)

    def get_raw(self, name: str) -> ToolHandler | None:
        """Look up a tool regardless of whether it is disabled."""
        return self._handlers.get(name)

    def names(self) -> Iterator[str]:
        """Iterate over registered tool names, disabled ones included."""
        return iter(list(self._handlers))

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def is_empty(self) -> bool:
        """``True`` when no handler is registered."""
        return not self._handlers

    def is_disabled(self, name: str) -> bool:
        """``True`` when ``name`` is currently disabled."""
        with self._lock:
            return name in self._disabled

    def disable(self, name: str) -> None:
        """Disable ``name`` for this registry and all its clones."""
        with self._lock:
            self._disabled.add(name)

    def enable(self, name: str) -> None:
        """Enable ``name``; a no-op when it was not disabled."""
        with self._lock:
            self._disabled.discard(name)

    def toggle(self, name: str) -> bool:
        """Flip the disabled state of ``name`` and return it (``True`` = disabled)."""
        with self._lock:
            if name in self._disabled:
                self._disabled.remove(name)
                return False
            self._disabled.add(name)
            return True

    def clone(self) -> "ToolRegistry":
        """Copy the handler table while sharing the disabled state."""
        other = ToolRegistry.__new__(ToolRegistry)
        other._handlers = dict(self._handlers)
        other._disabled = self._disabled
        other._lock = self._lock
        return other

    __copy__ = clone

    @classmethod
    def default_set(cls) -> "ToolRegistry":
        """A registry holding every built-in fs, bash, git and web tool."""
        registry = cls()
        for handler in (
            FsRead(),
            FsWrite(),
            FsEdit(),
            FsGlob(),
            FsGrep(),
            Bash(),
            GitStatus(),
            GitDiff(),
            GitLog(),
            GitShow(),
            WebFetch(),
            WebSearch(),
        ):
            registry.register(handler)
        return registry