"""Persistent cart storage keyed by identity"""

import os
import json
import logging
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ..errors import CartStoreError
from ..models.cart import CartLine

logger = logging.getLogger(__name__)


class CartStore(ABC):
    """
    Passive key/value persistence of cart snapshots.

    Each identity key maps to a list of serialized cart lines. The store
    never mutates data on its own.
    """

    @abstractmethod
    def load(self, key: str) -> Optional[list[CartLine]]:
        """Get the snapshot stored under key, or None if there is none"""

    @abstractmethod
    def save(self, key: str, lines: list[CartLine]) -> None:
        """Replace the snapshot stored under key"""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove the snapshot under key"""

    @abstractmethod
    def keys(self) -> list[str]:
        """List the identity keys that have a stored snapshot"""


def _dump_lines(lines: list[CartLine]) -> list[dict]:
    return [line.model_dump(by_alias=True) for line in lines]


def _load_lines(records: list[dict]) -> list[CartLine]:
    return [CartLine.model_validate(record) for record in records]


class InMemoryCartStore(CartStore):
    """Cart store that lives for the duration of the process"""

    def __init__(self):
        self.records: dict[str, list[dict]] = {}

    def load(self, key: str) -> Optional[list[CartLine]]:
        records = self.records.get(key)
        if records is None:
            return None
        return _load_lines(records)

    def save(self, key: str, lines: list[CartLine]) -> None:
        self.records[key] = _dump_lines(lines)

    def delete(self, key: str) -> bool:
        if key in self.records:
            del self.records[key]
            return True
        return False

    def keys(self) -> list[str]:
        return list(self.records)


class JsonFileCartStore(CartStore):
    """
    Cart store backed by a single JSON document.

    Layout: {"<identity key>": [{productId, displayName, unitPriceCents,
    imageRef, quantity, knownStock}, ...], ...}

    Writes go to a temp file that is renamed over the document, so a save
    either lands completely or not at all.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> dict[str, list[dict]]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CartStoreError(str(self.path), str(e)) from e

        if not isinstance(data, dict):
            raise CartStoreError(str(self.path), "expected a JSON object")
        return data

    def _write(self, data: dict[str, list[dict]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent, prefix=".carts_", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.write("\n")
            os.replace(temp_path, self.path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def load(self, key: str) -> Optional[list[CartLine]]:
        records = self._read().get(key)
        if records is None:
            return None

        if not isinstance(records, list):
            raise CartStoreError(str(self.path), f"invalid cart for {key}: expected a list")

        try:
            return _load_lines(records)
        except (TypeError, ValidationError) as e:
            raise CartStoreError(str(self.path), f"invalid cart for {key}: {e}") from e

    def save(self, key: str, lines: list[CartLine]) -> None:
        data = self._read()
        data[key] = _dump_lines(lines)
        self._write(data)
        logger.debug(f"Persisted {len(lines)} cart line(s) under {key}")

    def delete(self, key: str) -> bool:
        data = self._read()
        if key not in data:
            return False
        del data[key]
        self._write(data)
        return True

    def keys(self) -> list[str]:
        return list(self._read())
