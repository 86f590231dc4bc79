"""
Key/value persistence for rules, analysis results and the document text.

The review layer only ever talks to a ``KeyValueStore``. Two backends are
provided: ``MemoryStore`` for tests and embedding, and ``JsonFileStore``
which keeps every key in a single JSON document on disk. ``ValidatedStore``
wraps either one so that reads are always schema-checked and corrupt
entries are removed on sight.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Protocol, runtime_checkable

from ..validation import Schema, safe_parse

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal persistence capability; values are JSON-compatible."""

    def get(self, key: str) -> Any | None:  # pragma: no cover - protocol definition
        ...

    def set(self, key: str, value: Any) -> None:  # pragma: no cover - protocol definition
        ...

    def delete(self, key: str) -> None:  # pragma: no cover - protocol definition
        ...

    def keys(self) -> list[str]:  # pragma: no cover - protocol definition
        ...


class MemoryStore:
    """In-process store that keeps values as serialized JSON text."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value, ensure_ascii=False)

    def set_raw(self, key: str, raw: str) -> None:
        """Store text as-is, bypassing serialization."""
        self._data[key] = raw

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class JsonFileStore:
    """Store backed by one JSON object on disk, rewritten on every change."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()
        self._data: Optional[dict[str, Any]] = None

    def _load(self) -> dict[str, Any]:
        if self._data is not None:
            return self._data

        data: dict[str, Any] = {}
        if self.path.exists():
            try:
                loaded = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.error(f"Failed to read state file {self.path}, starting empty: {e}")
            else:
                if isinstance(loaded, dict):
                    data = loaded
                else:
                    logger.error(f"State file {self.path} is not a JSON object, starting empty")
        self._data = data
        return data

    def _flush(self) -> None:
        data = self._load()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".state-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> Any | None:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        # Round-trip through JSON so callers can't keep references into the store
        self._load()[key] = json.loads(json.dumps(value, ensure_ascii=False))
        self._flush()

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._flush()

    def keys(self) -> list[str]:
        return list(self._load())


class ValidatedStore:
    """Wraps a ``KeyValueStore`` so that reads are validated and writes never raise.

    Storage problems are logged and contained: losing a cached value only
    costs a re-analysis, so none of them reach the author.
    """

    def __init__(self, backend: KeyValueStore) -> None:
        self.backend = backend

    def validated_get(self, key: str, schema: Schema) -> Any | None:
        """Return the value under ``key`` validated by ``schema``.

        Missing keys yield ``None``. Unreadable or invalid values are deleted
        and also yield ``None``.
        """
        try:
            raw = self.backend.get(key)
        except ValueError as e:
            logger.warning(f"Unreadable value under {key}, removing: {e}", extra={"storage_key": key})
            self.delete(key)
            return None
        except OSError as e:
            logger.error(f"Failed to read {key}: {e}", extra={"storage_key": key})
            return None

        if raw is None:
            return None

        result = safe_parse(schema, raw)
        if result.success:
            return result.output

        logger.warning(f"Invalid data under {key}, removing: {result.issues}", extra={"storage_key": key})
        self.delete(key)
        return None

    def get_raw(self, key: str) -> Any | None:
        try:
            return self.backend.get(key)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read {key}: {e}", extra={"storage_key": key})
            return None

    def set(self, key: str, value: Any) -> bool:
        try:
            self.backend.set(key, value)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save {key}: {e}", extra={"storage_key": key})
            return False
        return True

    def delete(self, key: str) -> None:
        try:
            self.backend.delete(key)
        except OSError as e:
            logger.error(f"Failed to delete {key}: {e}", extra={"storage_key": key})

    def delete_prefix(self, prefix: str) -> int:
        try:
            keys = [key for key in self.backend.keys() if key.startswith(prefix)]
        except OSError as e:
            logger.error(f"Failed to list keys for prefix {prefix}: {e}")
            return 0
        for key in keys:
            self.delete(key)
        return len(keys)
