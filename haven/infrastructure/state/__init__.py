"""
File-backed state storage
"""
from .file_store import JsonFileStore, JsonDirectoryStore
from .connection_store import ConnectionStore
from .session_store import SessionStore

__all__ = ["JsonFileStore", "JsonDirectoryStore", "ConnectionStore", "SessionStore"]
