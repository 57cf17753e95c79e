"""
JSON File Document Store.

Implements DocumentStorePort over a single pretty-printed JSON file.
Used for the analytics document and the admin credential document.

Invariants:
- Writes go to a temp file in the same directory, then os.replace()
  swaps it in, so readers never observe a torn document
- Missing or undecodable files read back as the empty document
- write() reports failure as False; other read failures raise StoreIOError
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

from src.components.analytics.models import StoreDocument
from src.core.ports.storage import DocumentNotFoundError, StoreIOError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

ANALYTICS_FILENAME = "analytics-data.json"
ADMIN_FILENAME = "admin-data.json"


class JsonDocumentStore(Generic[ModelT]):
    """
    Whole-document JSON store backed by one file.

    Example: JsonDocumentStore(Path("data/analytics-data.json"), StoreDocument)
    """

    def __init__(
        self,
        path: str | Path,
        model: type[ModelT],
        empty: Callable[[], ModelT] | None = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            path: Location of the JSON document
            model: Pydantic model the document validates against
            empty: Factory for the empty document (default: model())
        """
        self.path = Path(path)
        self._model = model
        self._empty = empty or model

    def initialize(self) -> None:
        """Create the directory and an empty document if none exists yet."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            if self.write(self._empty()):
                logger.info("Initialized empty document at %s", self.path)
            else:
                raise StoreIOError(f"Cannot initialize document at {self.path}")

    def _load(self) -> ModelT:
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError as e:
            raise DocumentNotFoundError(str(self.path)) from e
        return self._model.model_validate_json(raw)

    def read(self) -> ModelT:
        """
        Load the document.

        Raises:
            StoreIOError: If the file exists but cannot be read
        """
        try:
            return self._load()
        except DocumentNotFoundError:
            logger.warning("Document %s not found; using empty document", self.path)
            return self._empty()
        except ValidationError as e:
            logger.warning(
                "Document %s is corrupt (%d errors); using empty document",
                self.path,
                e.error_count(),
            )
            return self._empty()
        except (OSError, UnicodeDecodeError) as e:
            raise StoreIOError(f"Failed to read {self.path}: {e}") from e

    def write(self, doc: ModelT) -> bool:
        """Persist the whole document atomically. Returns False on failure."""
        payload = json.dumps(doc.model_dump(by_alias=True, mode="json"), indent=2)
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
            return True
        except OSError:
            logger.exception("Failed to write document %s", self.path)
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            return False

    def stamp(self) -> tuple[int, int, int] | None:
        """
        Change token for the file: (inode, mtime_ns, size), None if missing.

        os.replace() gives every write a fresh inode, so writes from other
        processes change the stamp even within one mtime tick.

        Raises:
            StoreIOError: If the file cannot be stat'ed
        """
        try:
            st = self.path.stat()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreIOError(f"Failed to stat {self.path}: {e}") from e
        return st.st_ino, st.st_mtime_ns, st.st_size

    def check(self) -> tuple[bool, str]:
        """Readiness probe: the document can be read."""
        try:
            self.read()
        except StoreIOError as e:
            return False, e.message
        return True, f"{self.path.name} readable"


def create_analytics_store(data_dir: str | Path) -> JsonDocumentStore:
    """Analytics event store at ``<data_dir>/analytics-data.json``."""
    return JsonDocumentStore(Path(data_dir) / ANALYTICS_FILENAME, StoreDocument, StoreDocument.empty)
