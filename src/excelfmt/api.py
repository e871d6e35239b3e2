from __future__ import annotations

from pathlib import Path

import pandas as pd

from .model import ROW_INDEX_COLUMN, ColumnFormats, ExtractOptions, SheetRef
from .parser.ooxml import NumberFormatParser


def _parse_xlsx(source: str | Path | bytes, *, options: ExtractOptions | None = None) -> ColumnFormats:
    opts = options or ExtractOptions()
    parser = NumberFormatParser(source, opts)
    return parser.parse()


def extract_number_formats(
    source: str | Path | bytes,
    *,
    options: ExtractOptions | None = None,
) -> ColumnFormats:
    return _parse_xlsx(source, options=options)


def list_sheets(source: str | Path | bytes) -> list[SheetRef]:
    return NumberFormatParser(source, ExtractOptions()).sheets()


def join_number_formats(table: pd.DataFrame, formats: ColumnFormats) -> pd.DataFrame:
    """Join ``formats`` onto ``table`` by row position.

    Row ``i`` of ``table`` pairs with ``rowIndex == i``. Every format row is
    kept; table rows without a format are dropped.
    """
    clashes = [name for name in (ROW_INDEX_COLUMN, formats.label) if name in table.columns]
    if clashes:
        raise ValueError(f"Table already has columns named {', '.join(clashes)}")
    indexed = table.reset_index(drop=True)
    indexed[ROW_INDEX_COLUMN] = pd.Series(range(len(indexed)), dtype="int64")
    merged = indexed.merge(formats.to_frame(), on=ROW_INDEX_COLUMN, how="right")
    return merged.sort_values(ROW_INDEX_COLUMN, kind="stable").reset_index(drop=True)


def number_formats_frame(
    source: str | Path | bytes,
    *,
    options: ExtractOptions | None = None,
    table: pd.DataFrame | None = None,
) -> pd.DataFrame:
    formats = _parse_xlsx(source, options=options)
    if table is None:
        return formats.to_frame()
    return join_number_formats(table, formats)
