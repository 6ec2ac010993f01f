"""
Session storage keyed by canonical local path
"""
from pathlib import Path
from typing import Optional

from ...core.constants import SESSIONS_DIR
from ...core.interfaces import KeyValueStore
from ...core.logging import get_logger
from ...core.paths import canonical_path
from ...domain.models import SessionState
from .file_store import JsonDirectoryStore

logger = get_logger(__name__)


class SessionStore:
    """
    Per-directory SessionState records.

    A record can outlive a crashed process, so callers treat absence as
    "not connected" and never rely on connected=False being written.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    @classmethod
    def at(cls, config_dir: Path) -> "SessionStore":
        """Store backed by <config_dir>/sessions/<sha256>.json"""
        return cls(JsonDirectoryStore(Path(config_dir) / SESSIONS_DIR))

    def get(self, path: str) -> Optional[SessionState]:
        key = canonical_path(path)
        data = self.store.get(key)
        if data is None:
            return None
        try:
            return SessionState.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.debug("Ignoring malformed session record for %s: %s", key, e)
            return None

    def save(self, path: str, state: SessionState) -> None:
        self.store.put(canonical_path(path), state.to_dict())

    def delete(self, path: str) -> bool:
        return self.store.delete(canonical_path(path))
