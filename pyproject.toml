[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "aonyx-tools"
version = "0.2.0"
description = "Built-in tool catalogue for an LLM agent: filesystem, shell, git and web tools with an undo journal"
requires-python = ">=3.10"
dependencies = []
keywords = ["ai", "agent", "llm", "tools", "undo"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["aonyx_tools"]

[tool.pytest.ini_options]
addopts = "-ra"
