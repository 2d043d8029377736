"""
In-memory table store.

TableEntry holds a single named table as a pandas DataFrame.
TableStore is a singleton dict-like container keyed by label strings; unknown
labels that name a built-in dataset are loaded on first use.
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pandas as pd

from chart_logging import LOGGER_NAME, tagged

from .datasets import DATASETS, load_dataset, load_table

logger = logging.getLogger(LOGGER_NAME)


@dataclass
class TableEntry:
    """A single table stored in memory.

    Attributes:
        label: Unique identifier (e.g., "mpg" or "gwas").
        data: The table.
        description: Human-readable description.
        source: Origin: "builtin" for bundled datasets, a file path for
            tables read from disk, "computed" for derived tables.
    """

    label: str
    data: pd.DataFrame
    description: str = ""
    source: str = "computed"

    def summary(self) -> dict:
        """Return a compact summary dict (for the CLI's ``datasets`` listing)."""
        return {
            "label": self.label,
            "num_rows": len(self.data),
            "num_columns": len(self.data.columns),
            "columns": {col: str(dtype) for col, dtype in self.data.dtypes.items()},
            "source": self.source,
            "description": self.description,
        }


class TableStore:
    """Singleton in-memory store mapping labels to TableEntry objects."""

    def __init__(self):
        self._entries: dict[str, TableEntry] = {}
        self._lock = threading.RLock()

    def put(self, entry: TableEntry) -> None:
        """Store a TableEntry, overwriting any existing entry with the same label."""
        with self._lock:
            self._entries[entry.label] = entry

    def get(self, label: str) -> Optional[TableEntry]:
        """Retrieve a TableEntry by label, or None if not found."""
        with self._lock:
            return self._entries.get(label)

    def has(self, label: str) -> bool:
        with self._lock:
            return label in self._entries

    def remove(self, label: str) -> bool:
        """Remove an entry by label. Returns True if it existed."""
        with self._lock:
            if label in self._entries:
                del self._entries[label]
                return True
            return False

    def list_entries(self) -> list[dict]:
        """Return summary dicts for all stored entries."""
        with self._lock:
            return [entry.summary() for entry in self._entries.values()]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def get_or_load(self, label: str) -> TableEntry:
        """Return the entry for *label*, loading the built-in dataset if absent.

        Raises:
            KeyError: If *label* is neither stored nor a built-in dataset.
        """
        with self._lock:
            entry = self._entries.get(label)
            if entry is not None:
                return entry
            data = load_dataset(label)
            entry = TableEntry(
                label=label,
                data=data,
                description=DATASETS[label][1],
                source="builtin",
            )
            self._entries[label] = entry
            logger.debug(f"Loaded built-in table '{label}' ({len(data)} rows)", extra=tagged("data"))
            return entry

    def table(self, label: str) -> pd.DataFrame:
        """Shortcut for ``get_or_load(label).data``."""
        return self.get_or_load(label).data

    def load_file(self, label: str, path: str | Path) -> TableEntry:
        """Read a table from disk and store it under *label*."""
        data = load_table(path)
        entry = TableEntry(
            label=label,
            data=data,
            description=f"Loaded from {Path(path).name}",
            source=str(path),
        )
        self.put(entry)
        logger.debug(f"Loaded '{label}' from {path} ({len(data)} rows)", extra=tagged("data"))
        return entry

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# Module-level singleton
_store: Optional[TableStore] = None


def get_store() -> TableStore:
    """Return the global TableStore singleton."""
    global _store
    if _store is None:
        _store = TableStore()
    return _store


def reset_store() -> None:
    """Reset the global TableStore (mainly for testing)."""
    global _store
    _store = None
