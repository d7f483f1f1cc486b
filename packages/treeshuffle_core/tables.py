"""Tab-delimited game tables and the header-indexed schema accessor.

Every rewrite step goes through ``TableSchema`` instead of looking columns up
by hand, so missing-column fallbacks behave the same everywhere.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from pathlib import Path
from typing import Iterable, Optional

logger = getLogger("treeshuffle_core.tables")


@dataclass
class TabularTable:
    """Ordered header names plus rows of string cells, all rows header-width."""

    name: str
    headers: list[str]
    rows: list[list[str]] = field(default_factory=list)

    def copy(self) -> "TabularTable":
        return TabularTable(self.name, list(self.headers), [list(row) for row in self.rows])

    def schema(self, fallbacks: Optional[dict[str, int]] = None) -> "TableSchema":
        return TableSchema(self.headers, fallbacks=fallbacks, table_name=self.name)

    def new_row(self) -> list[str]:
        return [""] * len(self.headers)


class TableSchema:
    """Column lookup built once from a header row.

    ``fallbacks`` maps column names to documented default positions used when
    the header is missing that name. A column with neither resolves to
    ``None`` and reads/writes on it become no-ops.
    """

    def __init__(
        self,
        headers: Iterable[str],
        *,
        fallbacks: Optional[dict[str, int]] = None,
        table_name: str = "",
    ) -> None:
        self.headers = list(headers)
        self.table_name = table_name
        self._index: dict[str, int] = {}
        for idx, name in enumerate(self.headers):
            self._index.setdefault(name, idx)
        self._fallbacks = dict(fallbacks or {})
        self._warned: set[str] = set()

    def has(self, name: str) -> bool:
        return name in self._index

    def index(self, name: str) -> Optional[int]:
        idx = self._index.get(name)
        if idx is not None:
            return idx
        fallback = self._fallbacks.get(name)
        if fallback is not None and 0 <= fallback < len(self.headers):
            self._warn_once(name, f"using default position {fallback}")
            return fallback
        self._warn_once(name, "skipping field")
        return None

    def columns_matching(self, predicate) -> list[str]:
        return [name for name in self.headers if predicate(name)]

    def get(self, row: list[str], name: str, default: str = "") -> str:
        idx = self.index(name)
        if idx is None or idx >= len(row):
            return default
        return row[idx]

    def set(self, row: list[str], name: str, value: str) -> bool:
        idx = self.index(name)
        if idx is None or idx >= len(row):
            return False
        row[idx] = value
        return True

    def _warn_once(self, name: str, action: str) -> None:
        if name in self._warned:
            return
        self._warned.add(name)
        logger.warning("[TABLES] %s: column '%s' not found, %s", self.table_name or "<table>", name, action)


def parse_table(text: str, *, name: str = "") -> TabularTable:
    content = text.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n")
    lines = content.split("\n")
    if not lines or not lines[0]:
        return TabularTable(name, [], [])

    headers = lines[0].split("\t")
    width = len(headers)
    rows: list[list[str]] = []
    for line in lines[1:]:
        if not line.strip():
            continue
        cells = line.split("\t")
        if len(cells) > width:
            cells = cells[:width]
        elif len(cells) < width:
            cells = cells + [""] * (width - len(cells))
        rows.append(cells)
    return TabularTable(name, headers, rows)


def serialize_table(table: TabularTable) -> str:
    width = len(table.headers)
    lines = ["\t".join(table.headers)]
    for row in table.rows:
        cells = row[:width] if len(row) >= width else row + [""] * (width - len(row))
        lines.append("\t".join(cells))
    return "\r\n".join(lines) + "\r\n"


def load_table(path: Path) -> TabularTable:
    return parse_table(path.read_text(encoding="utf-8"), name=path.name)


def parse_int(raw: str) -> Optional[int]:
    """Strict integer parse; anything but an optional sign and digits is None."""
    text = str(raw).strip()
    if not text:
        return None
    body = text[1:] if text[0] in "+-" else text
    if not (body.isascii() and body.isdigit()):
        return None
    return int(text)
