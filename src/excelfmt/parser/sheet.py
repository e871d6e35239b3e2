from __future__ import annotations

import logging
from typing import Iterator, Mapping
from xml.etree import ElementTree as ET

from ..errors import MalformedSheetPart
from ..model import CellFormat, CellRecord, ColumnFormats, RangeRef
from .utils import coord_to_rowcol, iter_path, parse_range_ref, parse_xml, rowcol_to_coord

logger = logging.getLogger(__name__)


def read_used_range(root: ET.Element) -> RangeRef:
    for dimension in iter_path(root, "dimension"):
        ref = dimension.attrib.get("ref")
        if ref:
            return parse_range_ref(ref)
    return parse_range_ref("A1")


def iter_cell_records(root: ET.Element, *, part: str = "") -> Iterator[CellRecord]:
    """Yield every cell of ``sheetData`` with its position and style index.

    Rows and cells may omit ``r``; their positions then follow the previous
    row or cell.
    """
    row_idx = 0
    for row_elem in iter_path(root, "sheetData", "row"):
        raw_row = row_elem.attrib.get("r")
        if raw_row is None:
            row_idx += 1
        else:
            try:
                row_idx = int(raw_row)
            except ValueError:
                raise MalformedSheetPart(part, f"invalid row number {raw_row!r}") from None

        col = 0
        for cell_elem in iter_path(row_elem, "c"):
            coord = cell_elem.attrib.get("r")
            if coord:
                row, col = coord_to_rowcol(coord)
                row_idx = row
            else:
                row, col = row_idx, col + 1
                coord = rowcol_to_coord(row, col)

            raw_style = cell_elem.attrib.get("s")
            style_index = None
            if raw_style is not None:
                try:
                    style_index = int(raw_style)
                except ValueError:
                    raise MalformedSheetPart(part, f"invalid style index {raw_style!r} at {coord}") from None

            yield CellRecord(reference=coord, row=row, column=col, style_index=style_index)


def extract_column_formats(
    payload: bytes | None,
    column: int,
    style_table: Mapping[int, str],
    *,
    sheet: str = "",
    part: str = "",
) -> ColumnFormats:
    root = parse_xml(payload, part=part, error=MalformedSheetPart)
    origin = read_used_range(root)

    rows: list[CellFormat] = []
    for cell in iter_cell_records(root, part=part):
        if cell.column != column or cell.style_index is None:
            continue
        code = style_table.get(cell.style_index)
        if code is None:
            logger.debug("Cell %s uses unknown style index %d", cell.reference, cell.style_index)
            continue
        rows.append(CellFormat(row_index=cell.row - origin.start_row, format_code=code))

    rows.sort(key=lambda item: item.row_index)
    logger.debug("Column %d of %s yielded %d formatted cells", column, sheet or part, len(rows))
    return ColumnFormats(sheet=sheet, column=column, origin=origin, rows=rows)
