"""Built-in agent tools: filesystem, shell, git and web, with a registry and an undo journal."""

__version__ = "0.2.0"