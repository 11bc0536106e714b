"""Directory (LDAP / Active Directory) access package.

Public API:
    - DirectoryConfig
    - DirectorySession, open_session
    - error types
"""

from .models import DirectoryConfig
from .client import DirectorySession, open_session
from .errors import ConfigError, DirectoryError, DirectoryConnectError, DirectorySearchError

__all__ = [
    "DirectoryConfig",
    "DirectorySession",
    "open_session",
    "ConfigError",
    "DirectoryError",
    "DirectoryConnectError",
    "DirectorySearchError",
]
