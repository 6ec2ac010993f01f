"""
Core layer: constants, errors, logging, settings and interfaces
"""
from .exceptions import (
    HavenError,
    InputError,
    ConfigError,
    IdentityError,
    AuthError,
    HostKeyError,
    SyncError,
    SyncInstallError,
)
from .logging import setup_logging, get_logger, get_stdout_console, get_stderr_console
from .interfaces import KeyValueStore, SshClient, SyncEngine, PromptProvider
from .settings import Settings

__all__ = [
    "HavenError",
    "InputError",
    "ConfigError",
    "IdentityError",
    "AuthError",
    "HostKeyError",
    "SyncError",
    "SyncInstallError",
    "setup_logging",
    "get_logger",
    "get_stdout_console",
    "get_stderr_console",
    "KeyValueStore",
    "SshClient",
    "SyncEngine",
    "PromptProvider",
    "Settings",
]
