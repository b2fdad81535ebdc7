import os
import json
import threading

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

DEFAULT_STORE_PATH = os.path.join(BASE_DIR, "data", "mindspark.json")


class StorageError(Exception):
    """Raised when the storage bucket cannot be written."""
    pass


class LocalStore:
    """String key/value bucket. Values are JSON text owned by the caller."""

    def get_item(self, key: str):
        raise NotImplementedError

    def set_item(self, key: str, value: str):
        raise NotImplementedError

    def remove_item(self, key: str):
        raise NotImplementedError


class MemoryStore(LocalStore):
    """In-process bucket, used by tests and throwaway sessions."""

    def __init__(self, initial: dict = None):
        self._items = dict(initial or {})

    def get_item(self, key: str):
        return self._items.get(key)

    def set_item(self, key: str, value: str):
        self._items[key] = value

    def remove_item(self, key: str):
        self._items.pop(key, None)


class JsonFileStore(LocalStore):
    """The whole bucket lives in one JSON object on disk.

    Every call re-reads the file and every write rewrites it in full. The lock
    only keeps two writes in this process from interleaving on the file.
    """

    def __init__(self, path: str = DEFAULT_STORE_PATH):
        self.path = path
        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)
        self._lock = threading.Lock()

    def _load(self) -> dict:
        """Load the bucket from disk. Returns empty dict on corruption."""
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, ValueError) as e:
            print(f"  Warning: Corrupted store file '{self.path}': {e}. Resetting.")
            return {}
        except OSError as e:
            print(f"  Warning: Could not load store '{self.path}': {e}")
            return {}
        if not isinstance(data, dict):
            print(f"  Warning: Store file '{self.path}' is not an object. Resetting.")
            return {}
        return data

    def _save_file(self, data: dict):
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise StorageError(f"Could not write store '{self.path}': {e}") from e

    def get_item(self, key: str):
        with self._lock:
            value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str):
        with self._lock:
            data = self._load()
            data[key] = value
            self._save_file(data)

    def remove_item(self, key: str):
        with self._lock:
            data = self._load()
            if key not in data:
                return
            del data[key]
            self._save_file(data)
