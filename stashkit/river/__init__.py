"""State data, actions, the state reducer and transport messages for telemetry variables."""

__version__ = "0.1.0"