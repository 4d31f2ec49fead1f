"""Core tool types: safety classes, calls, results and the handler interface."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


class SafetyClass(enum.Enum):
    """How much scrutiny a tool invocation needs before it runs."""

    SAFE = "safe"
    CAUTION = "caution"
    DESTRUCTIVE = "destructive"


@dataclass
class ToolCall:
    """A request from the model to run the tool called ``name``."""

    id: str
    name: str
    args: Any = field(default_factory=dict)


@dataclass
class ToolResult:
    """The structured outcome of a tool invocation."""

    call_id: str
    output: Any
    error: str | None = None


class ToolError(Exception):
    """Raised when a tool cannot carry out a call."""


class ToolHandler(ABC):
    """Interface every tool implements."""

    name: str = ""

    @abstractmethod
    def classify(self) -> SafetyClass:
        """Return the safety class of this tool."""

    @abstractmethod
    def schema(self) -> dict[str, Any]:
        """Return the JSON schema describing the tool's arguments."""

    @abstractmethod
    def invoke(self, call: ToolCall) -> ToolResult:
        """Run the tool for ``call``; raise :class:`ToolError` on failure."""