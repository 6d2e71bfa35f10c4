[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "stashkit"
version = "0.1.0"
description = "Single-file disk containers, a red-black tree, file watching and telemetry state building blocks."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "diskmap",
    "key-value",
    "disk",
    "stack",
    "red-black tree",
    "file watcher",
    "telemetry",
]
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
    "Topic :: Software Development :: Libraries",
    "Topic :: Database",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["stashkit"]

[tool.hatch.build.targets.sdist]
include = ["stashkit", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
