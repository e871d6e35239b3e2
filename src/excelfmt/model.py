from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pandas as pd

ROW_INDEX_COLUMN = "rowIndex"


@dataclass(slots=True)
class ExtractOptions:
    sheet: str | None = None
    column: int | str = 1
    include_hidden_sheets: bool = True


@dataclass(slots=True)
class RangeRef:
    ref: str
    start_row: int
    start_col: int
    end_row: int
    end_col: int


@dataclass(slots=True)
class SheetRef:
    index: int
    name: str
    state: str
    path: str


@dataclass(slots=True, frozen=True)
class NumberFormatEntry:
    format_id: int
    format_code: str


@dataclass(slots=True, frozen=True)
class CellStyleEntry:
    style_index: int
    format_id: int


@dataclass(slots=True)
class CellRecord:
    reference: str
    row: int
    column: int
    style_index: int | None = None


@dataclass(slots=True, frozen=True)
class CellFormat:
    row_index: int
    format_code: str


@dataclass(slots=True)
class StyleTables:
    formats: dict[int, str] = field(default_factory=dict)
    styles: dict[int, str] = field(default_factory=dict)


@dataclass(slots=True)
class ColumnFormats:
    """Number formats of one worksheet column, keyed by row offset.

    Row indices are relative to the top-left corner of the sheet's used range,
    and ``column_offset`` is the 1-based distance of the requested column from
    that corner's column.
    """

    sheet: str
    column: int
    origin: RangeRef
    rows: list[CellFormat] = field(default_factory=list)

    @property
    def column_offset(self) -> int:
        return self.column - self.origin.start_col + 1

    @property
    def label(self) -> str:
        return f"Column{self.column_offset}.NumberFormat"

    def to_records(self) -> list[dict[str, Any]]:
        label = self.label
        return [{ROW_INDEX_COLUMN: row.row_index, label: row.format_code} for row in self.rows]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                ROW_INDEX_COLUMN: pd.Series([row.row_index for row in self.rows], dtype="int64"),
                self.label: pd.Series([row.format_code for row in self.rows], dtype="string"),
            }
        )
