"""
State Store module for the original proxy settings of toggled domains.

The store is a single JSON document mapping each domain to the record id and
proxied flag observed the first time the domain was toggled. Every save is a
whole-document read-modify-write, replaced atomically on disk. Two processes
saving to the same file at once can still lose an update; run at most one
instance per state file.
"""

import json
import os
import tempfile
import time
from pathlib import Path
from typing import Optional

from .exceptions import PersistenceError
from .models import SavedState


class StateStore:
    """
    Persistent store of pre-automation proxy settings.

    The store does not enforce write-once semantics itself: save() always
    overwrites. The toggle engine only saves a domain it has never seen.
    """

    def __init__(self, file_path: Path) -> None:
        """
        Initialize the state store.

        Args:
            file_path: Path to the state file (JSON format)
        """
        self._file_path = file_path

    def _read(self) -> dict:
        """Read the raw document; a missing file is an empty store."""
        if not self._file_path.exists():
            return {}

        try:
            with open(self._file_path, "r", encoding="utf-8") as f:
                raw_data = json.load(f)
        except json.JSONDecodeError as e:
            raise PersistenceError(
                code="parse_error",
                message=f"Failed to parse state file: {e}",
                details={"file_path": str(self._file_path)},
            )
        except OSError as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to read state file: {e}",
                details={"file_path": str(self._file_path)},
            )

        if not isinstance(raw_data, dict):
            raise PersistenceError(
                code="parse_error",
                message="State file does not contain a JSON object",
                details={"file_path": str(self._file_path)},
            )
        return raw_data

    def _write(self, raw_data: dict) -> None:
        """Write the document to a temp file and rename it over the store."""
        self._file_path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{self._file_path.name}.",
            suffix=".tmp",
            dir=str(self._file_path.parent),
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(raw_data, f, indent=2, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self._file_path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PersistenceError(
                code="io_error",
                message=f"Failed to write state file: {e}",
                details={"file_path": str(self._file_path)},
            )

    @staticmethod
    def _entry_to_state(domain: str, entry: dict) -> SavedState:
        try:
            return SavedState(
                domain=domain,
                record_id=str(entry["record_id"]),
                original_proxied=bool(entry["original_proxied"]),
                timestamp=int(entry.get("timestamp", 0)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(
                code="parse_error",
                message=f"Malformed state entry for {domain}: {e}",
                details={"domain": domain},
            )

    def get(self, domain: str) -> Optional[SavedState]:
        """
        Get the saved state for a domain.

        Returns:
            SavedState if the domain was ever toggled, None otherwise
        """
        entry = self._read().get(domain)
        if entry is None:
            return None
        return self._entry_to_state(domain, entry)

    def save(
        self,
        domain: str,
        record_id: str,
        original_proxied: bool,
        timestamp: Optional[int] = None,
    ) -> SavedState:
        """
        Store the original proxied flag of a domain, overwriting any entry.

        Args:
            domain: Canonical domain name
            record_id: DNS record identifier
            original_proxied: Proxied flag before any automated change
            timestamp: Epoch seconds (defaults to now)

        Returns:
            The saved state
        """
        state = SavedState(
            domain=domain,
            record_id=record_id,
            original_proxied=original_proxied,
            timestamp=int(time.time()) if timestamp is None else timestamp,
        )

        raw_data = self._read()
        raw_data[domain] = {
            "record_id": state.record_id,
            "original_proxied": state.original_proxied,
            "timestamp": state.timestamp,
        }
        self._write(raw_data)
        return state

    def all(self) -> dict[str, SavedState]:
        """Every saved entry, keyed by domain."""
        return {
            domain: self._entry_to_state(domain, entry)
            for domain, entry in self._read().items()
        }

    @property
    def file_path(self) -> Path:
        """Get the state file path."""
        return self._file_path
