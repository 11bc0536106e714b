from __future__ import annotations


class ConfigError(Exception):
    """Directory settings file is missing, unreadable or invalid."""


class DirectoryError(Exception):
    """Base class for failures talking to the directory."""


class DirectoryConnectError(DirectoryError):
    """Connect, StartTLS or bind failed."""


class DirectorySearchError(DirectoryError):
    """A search failed in transport or was rejected by the server."""
