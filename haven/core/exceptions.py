"""
Unified exception definitions
"""
from typing import Iterable, Optional


class HavenError(Exception):
    """
    Base exception class.

    Carries optional remediation hints (usually commands to run) that the
    CLI prints below the message.
    """

    def __init__(self, message: str, hints: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.hints = list(hints or [])


class InputError(HavenError):
    """Malformed user input (host spec, path, duration)"""
    pass


class ConfigError(HavenError):
    """Configuration error"""
    pass


class IdentityError(HavenError):
    """SSH key discovery or generation error"""
    pass


class AuthError(HavenError):
    """SSH authentication failed"""
    pass


class HostKeyError(HavenError):
    """Cached host key no longer matches the remote host"""
    pass


class SyncError(HavenError):
    """Sync engine error"""
    pass


class SyncInstallError(SyncError):
    """Sync engine download or extraction error"""
    pass
