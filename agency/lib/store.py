"""Document store: keyed JSON documents, each read whole and replaced whole.

There is no locking and no compare-and-swap. `write` replaces the file
atomically (temp file + os.replace) so a reader never sees half a document,
but two processes doing read-modify-write on the same key can still lose an
update. Callers guard the fields they care about with queue.transition.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from agency import paths
from agency.errors import CorruptionError, StoreIOError

logger = logging.getLogger(__name__)


class DocumentStore:
    def __init__(self, root: Path | None = None):
        self._root = Path(root) if root is not None else None

    @property
    def root(self) -> Path:
        return self._root if self._root is not None else paths.agency_root()

    def path_for(self, key: str, suffix: str = ".json") -> Path:
        return paths.document_path(key, suffix, root=self.root)

    def exists(self, key: str) -> bool:
        return self.path_for(key).exists()

    def read(self, key: str) -> Any | None:
        """Return the parsed document, or None when it does not exist.

        Raises:
            StoreIOError: file exists but cannot be read
            CorruptionError: content is not valid JSON
        """
        path = self.path_for(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreIOError(f"Cannot read '{key}': {e}") from e

        if not raw.strip():
            raise CorruptionError(key, "empty file")
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptionError(key, str(e)) from e

    def load(self, key: str, default: Any) -> Any:
        """Read a document, degrading to `default` when missing or corrupt.

        The default's type is the expected top-level shape: a stored dict where
        a list is expected counts as corruption.
        """
        try:
            doc = self.read(key)
            if doc is None:
                return _fresh(default)
            if default is not None and not isinstance(doc, type(default)):
                raise CorruptionError(
                    key, f"expected {type(default).__name__}, got {type(doc).__name__}"
                )
            return doc
        except CorruptionError as e:
            logger.warning(f"{e}; using empty default")
            return _fresh(default)

    def write(self, key: str, doc: Any) -> None:
        path = self.path_for(key)
        text = json.dumps(doc, indent=2, ensure_ascii=False) + "\n"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(text)
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(tmp, path)
            finally:
                if os.path.exists(tmp):
                    os.unlink(tmp)
        except OSError as e:
            raise StoreIOError(f"Cannot write '{key}': {e}") from e

    def append(self, key: str, record: dict[str, Any]) -> None:
        """Append one JSON line to the `<key>.jsonl` log."""
        path = self.path_for(key, ".jsonl")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "a", encoding="utf-8") as f:
                f.write(json.dumps(record, ensure_ascii=False) + "\n")
        except OSError as e:
            raise StoreIOError(f"Cannot append to '{key}': {e}") from e

    def read_lines(self, key: str) -> list[dict[str, Any]]:
        path = self.path_for(key, ".jsonl")
        if not path.exists():
            return []
        records = []
        try:
            with open(path, encoding="utf-8") as f:
                for lineno, line in enumerate(f, 1):
                    if not line.strip():
                        continue
                    try:
                        records.append(json.loads(line))
                    except json.JSONDecodeError:
                        logger.warning(f"Skipping malformed line {lineno} in '{key}'")
        except OSError as e:
            raise StoreIOError(f"Cannot read '{key}': {e}") from e
        return records

    def keys(self, prefix: str) -> list[str]:
        """List document keys directly under a directory prefix, sorted."""
        directory = self.path_for(prefix, "")
        if not directory.is_dir():
            return []
        base = prefix.strip("/")
        return sorted(f"{base}/{p.stem}" for p in directory.glob("*.json") if p.is_file())


def _fresh(default: Any) -> Any:
    if isinstance(default, (list, dict)):
        return type(default)(default)
    return default
