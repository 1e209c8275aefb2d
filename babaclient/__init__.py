"""Desktop client for the Baba Is You game server."""

__version__ = "0.1.0"
