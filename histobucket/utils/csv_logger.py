from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Iterable


class CSVLogger:
    """Append-only CSV writer for sample classification rows."""

    def __init__(self, path: str | Path, fieldnames: list[str] | None = None) -> None:
        """Initialize CSV logger path and header state.

        Args:
            path: Destination CSV file path.
            fieldnames: Column order. Inferred from the first row when omitted,
                or taken from the header of an existing file.
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fieldnames: list[str] = list(fieldnames or [])
        self._initialized = False
        if self.path.exists() and self.path.stat().st_size > 0:
            with self.path.open("r", newline="", encoding="utf-8") as f:
                header = next(csv.reader(f), [])
            if self._fieldnames and header != self._fieldnames:
                raise ValueError(f"existing CSV header {header} does not match {self._fieldnames}: {self.path}")
            self._fieldnames = header
            self._initialized = True

    def _ensure_header(self, row: dict[str, Any]) -> None:
        if self._initialized:
            return
        if not self._fieldnames:
            self._fieldnames = list(row.keys())
        with self.path.open("w", newline="", encoding="utf-8") as f:
            csv.DictWriter(f, fieldnames=self._fieldnames).writeheader()
        self._initialized = True

    def log(self, row: dict[str, Any]) -> None:
        """Append one row."""
        self.log_rows([row])

    def log_rows(self, rows: Iterable[dict[str, Any]]) -> int:
        """Append rows in a single file open.

        Returns:
            Number of rows written.
        """
        rows = list(rows)
        if not rows:
            return 0
        self._ensure_header(rows[0])
        with self.path.open("a", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=self._fieldnames)
            writer.writerows(rows)
        return len(rows)
