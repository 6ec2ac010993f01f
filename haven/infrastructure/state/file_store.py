"""
File-based key-value storage implementations

Neither store locks: writes are whole-file rewrites and the last writer
wins. Read failures (missing or corrupt files) are reported as absence.
"""
import hashlib
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from ...core.interfaces import KeyValueStore
from ...core.logging import get_logger

logger = get_logger(__name__)

_KEY_FIELD = "_key"


def _read_json(path: Path) -> Optional[Any]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as e:
        logger.debug("Ignoring unreadable state file %s: %s", path, e)
        return None


class JsonFileStore(KeyValueStore):
    """
    All records in one pretty-printed JSON object file.

    {
      "<key>": {...record...},
      ...
    }
    """

    def __init__(self, path: Path):
        """
        Initialize JSON file store.

        Args:
            path: JSON file holding every record
        """
        self.path = Path(path).expanduser()

    def load_all(self) -> Dict[str, Dict[str, Any]]:
        """Load every record; an unreadable file yields an empty mapping"""
        data = _read_json(self.path)
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, dict)}

    def save_all(self, records: Dict[str, Dict[str, Any]]) -> None:
        """Rewrite the whole file"""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(records, indent=2), encoding="utf-8")

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        return self.load_all().get(key)

    def put(self, key: str, value: Dict[str, Any]) -> None:
        records = self.load_all()
        records[key] = value
        self.save_all(records)

    def delete(self, key: str) -> bool:
        records = self.load_all()
        if key not in records:
            return False
        del records[key]
        self.save_all(records)
        return True

    def list(self) -> List[str]:
        return sorted(self.load_all())


class JsonDirectoryStore(KeyValueStore):
    """
    One JSON file per record in a directory.

    File names are SHA256 hashes of the key, so arbitrary keys (such as
    filesystem paths) map to safe, fixed-length names. The key itself is
    kept inside the record under "_key" so that list() can recover it.
    """

    def __init__(self, state_dir: Path):
        """
        Initialize directory store.

        Args:
            state_dir: Directory for storing record files
        """
        self.state_dir = Path(state_dir).expanduser()

    @staticmethod
    def key_hash(key: str) -> str:
        return hashlib.sha256(key.encode("utf-8")).hexdigest()

    def path_for(self, key: str) -> Path:
        """Record file path for key"""
        return self.state_dir / f"{self.key_hash(key)}.json"

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        data = _read_json(self.path_for(key))
        if not isinstance(data, dict):
            return None
        data.pop(_KEY_FIELD, None)
        return data

    def put(self, key: str, value: Dict[str, Any]) -> None:
        self.state_dir.mkdir(parents=True, exist_ok=True)
        record = dict(value)
        record[_KEY_FIELD] = key
        self.path_for(key).write_text(json.dumps(record, indent=2), encoding="utf-8")

    def delete(self, key: str) -> bool:
        try:
            self.path_for(key).unlink()
        except FileNotFoundError:
            return False
        return True

    def list(self) -> List[str]:
        if not self.state_dir.is_dir():
            return []
        keys = []
        for record_file in self.state_dir.glob("*.json"):
            data = _read_json(record_file)
            if isinstance(data, dict) and isinstance(data.get(_KEY_FIELD), str):
                keys.append(data[_KEY_FIELD])
        return sorted(keys)
