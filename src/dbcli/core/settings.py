"""Persistent key-value settings document for dbcli.

The settings document is a single JSON file holding every client setting
(auth tokens, defaults, cached API data, ...). Keys are dotted paths into
nested tables, so ``"cache.locations"`` addresses ``{"cache": {"locations": ...}}``.

Only whole-document writes exist: ``write()`` always serializes the full
mapping back to disk.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from filelock import FileLock

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "settings.json"


class SettingsError(Exception):
    """Raised when the settings document cannot be parsed or persisted."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


@runtime_checkable
class ConfigDocument(Protocol):
    """Minimal store interface the cache layer is written against."""

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def all_settings(self) -> Dict[str, Any]: ...

    def read_config(self, serialized: str) -> None: ...


@runtime_checkable
class SupportsDelete(Protocol):
    """Optional targeted delete-by-key capability of a store."""

    def delete(self, key: str) -> bool: ...


def split_key(key: str) -> List[str]:
    """Split a dotted key into lowercased path segments."""
    return [part for part in key.lower().split(".") if part]


def _match_key(node: Any, part: str) -> Optional[str]:
    """Find the table key matching a lowercased path segment."""
    if not isinstance(node, dict):
        return None
    if part in node:
        return part
    for existing in node:
        if isinstance(existing, str) and existing.lower() == part:
            return existing
    return None


def pop_path(mapping: Dict[str, Any], key: str) -> bool:
    """Remove a dotted key from a nested mapping in place.

    Path segments match table keys case-insensitively.

    Returns:
        True if a value was removed, False if the path did not exist.
    """
    parts = split_key(key)
    if not parts:
        return False

    node: Any = mapping
    for part in parts[:-1]:
        match = _match_key(node, part)
        if match is None:
            return False
        node = node[match]

    match = _match_key(node, parts[-1])
    if match is None:
        return False
    del node[match]
    return True


class SettingsDocument:
    """In-memory settings document with optional JSON file persistence.

    Dotted keys are case-insensitive; stored values keep their own keys
    exactly as given. Values returned by ``get`` and
    ``all_settings`` are deep copies, so callers cannot mutate the
    document behind its back.

    Example:
        >>> doc = SettingsDocument()
        >>> doc.set("cache.database_names", {"expiration": 0, "data": ["a"]})
        >>> doc.get("cache.database_names")["data"]
        ['a']
    """

    def __init__(self, path: Optional[Path] = None):
        """Initialize the document.

        Args:
            path: Settings file backing this document. If the file exists it
                is loaded immediately; None keeps the document in memory only.
        """
        self.path = path
        self._data: Dict[str, Any] = {}
        self._dirty = False
        if path is not None and path.exists():
            self._load(path)

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> "SettingsDocument":
        """Create a document backed by ``<config_dir>/settings.json``."""
        return cls(Path(config_dir).expanduser() / SETTINGS_FILENAME)

    @property
    def dirty(self) -> bool:
        """Whether the document changed since it was last loaded or written."""
        return self._dirty

    def _load(self, path: Path) -> None:
        try:
            text = path.read_text()
        except OSError as e:
            raise SettingsError(f"Failed to read settings file {path}: {e}", path) from e

        if not text.strip():
            logger.debug("Settings file %s is empty", path)
            return

        self._data = self._parse(text, path)
        logger.debug("Loaded settings from %s", path)

    @staticmethod
    def _parse(serialized: str, path: Optional[Path] = None) -> Dict[str, Any]:
        try:
            data = json.loads(serialized)
        except json.JSONDecodeError as e:
            raise SettingsError(f"Invalid settings document: {e}", path) from e

        if not isinstance(data, dict):
            raise SettingsError(
                f"Settings document must be a JSON object, got {type(data).__name__}",
                path,
            )
        return data

    def get(self, key: str) -> Any:
        """Return the value at a dotted key, or None if absent."""
        node: Any = self._data
        for part in split_key(key):
            match = _match_key(node, part)
            if match is None:
                return None
            node = node[match]
        return copy.deepcopy(node)

    def set(self, key: str, value: Any) -> None:
        """Set the value at a dotted key, creating intermediate tables.

        A non-table value sitting on the path is replaced by a table. The
        value itself is stored as given, including the case of its keys.
        """
        parts = split_key(key)
        if not parts:
            raise ValueError("Settings key must not be empty")

        node = self._data
        for part in parts[:-1]:
            match = _match_key(node, part)
            child = node.get(match) if match is not None else None
            if not isinstance(child, dict):
                if match is not None:
                    del node[match]
                child = {}
                node[part] = child
            node = child

        match = _match_key(node, parts[-1])
        if match is not None:
            del node[match]
        node[parts[-1]] = copy.deepcopy(value)
        self._dirty = True

    def delete(self, key: str) -> bool:
        """Remove a single dotted key.

        Returns:
            True if the key existed and was removed.
        """
        removed = pop_path(self._data, key)
        if removed:
            self._dirty = True
        return removed

    def all_settings(self) -> Dict[str, Any]:
        """Return a deep snapshot of the whole document."""
        return copy.deepcopy(self._data)

    def read_config(self, serialized: str) -> None:
        """Replace the entire document with a serialized JSON mapping.

        Raises:
            SettingsError: If ``serialized`` is not a JSON object.
        """
        self._data = self._parse(serialized, self.path)
        self._dirty = True

    def write(self) -> Path:
        """Persist the whole document to its settings file.

        The file is written to a temporary sibling and renamed into place
        while holding a lock file next to it.

        Returns:
            Path of the written settings file.

        Raises:
            SettingsError: If no file backs the document or the write fails.
        """
        if self.path is None:
            raise SettingsError("Settings document has no backing file")

        path = self.path
        lock_path = path.with_suffix(".lock")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with FileLock(str(lock_path), timeout=10):
                temp_path = path.with_suffix(".tmp")
                temp_path.write_text(json.dumps(self._data, indent=2, sort_keys=True))
                temp_path.replace(path)
        except (OSError, TypeError, ValueError) as e:
            raise SettingsError(f"Failed to write settings file {path}: {e}", path) from e

        self._dirty = False
        logger.debug("Wrote settings to %s", path)
        return path

    def flush(self) -> bool:
        """Write the document if it changed and has a backing file.

        Returns:
            True if the document was written.
        """
        if not self._dirty or self.path is None:
            return False
        self.write()
        return True
