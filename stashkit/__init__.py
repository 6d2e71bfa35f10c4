"""Disk-backed containers, a red-black tree, file watching and telemetry state types."""

__version__ = "0.1.0"