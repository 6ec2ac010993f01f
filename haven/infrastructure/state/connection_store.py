"""
Connection storage keyed by canonical local path
"""
from pathlib import Path
from typing import List, Optional, Tuple

from ...core.constants import CONNECTIONS_FILE
from ...core.interfaces import KeyValueStore
from ...core.logging import get_logger
from ...core.paths import canonical_path, find_upward
from ...domain.models import ConnectionConfig
from .file_store import JsonFileStore

logger = get_logger(__name__)


class ConnectionStore:
    """
    Persistent mapping of canonical local directory -> ConnectionConfig.

    Every public method canonicalizes its path argument first, so
    "~/work/app", "/home/me/work/./app" and a symlink to it all address the
    same record.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    @classmethod
    def at(cls, config_dir: Path) -> "ConnectionStore":
        """Store backed by <config_dir>/connections.json"""
        return cls(JsonFileStore(Path(config_dir) / CONNECTIONS_FILE))

    def _decode(self, key: str, data) -> Optional[ConnectionConfig]:
        if data is None:
            return None
        try:
            return ConnectionConfig.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.debug("Ignoring malformed connection record for %s: %s", key, e)
            return None

    def get(self, path: str) -> Optional[ConnectionConfig]:
        key = canonical_path(path)
        return self._decode(key, self.store.get(key))

    def save(self, path: str, config: ConnectionConfig) -> None:
        self.store.put(canonical_path(path), config.to_dict())

    def delete(self, path: str) -> bool:
        return self.store.delete(canonical_path(path))

    def list(self) -> List[Tuple[str, ConnectionConfig]]:
        """All stored (canonical path, config) pairs"""
        result = []
        for key in self.store.list():
            config = self._decode(key, self.store.get(key))
            if config is not None:
                result.append((key, config))
        return result

    def find_ancestor(self, path: str) -> Optional[Tuple[str, ConnectionConfig]]:
        """
        Nearest enclosing directory (path itself included, filesystem root
        included) that has a stored connection.

        Returns:
            (canonical directory, config) or None
        """
        found: List[Tuple[str, ConnectionConfig]] = []

        def has_connection(directory: str) -> bool:
            config = self._decode(directory, self.store.get(directory))
            if config is None:
                return False
            found.append((directory, config))
            return True

        if find_upward(path, has_connection) is None:
            return None
        return found[-1]
