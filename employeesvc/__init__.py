"""Employee records over HTTP with SQLite storage and optional JWT bearer-token protection."""

__version__ = "1.0.0"