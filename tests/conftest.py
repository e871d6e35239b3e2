from __future__ import annotations

import html
import io
from pathlib import Path
from typing import Callable, Iterable
from zipfile import ZIP_DEFLATED, ZIP_STORED, ZipFile

import pytest

from excelfmt.parser.namespaces import DOCUMENT_REL_NS, PACKAGE_REL_NS, SPREADSHEET_NS

STYLES_REL_TYPE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/styles"
WORKSHEET_REL_TYPE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/worksheet"

Cell = tuple[str | None, int | None]
Row = tuple[int | None, list[Cell]]


def styles_xml(numfmts: Iterable[tuple[int, str]] = (), xf_numfmt_ids: Iterable[int | None] = (0,)) -> str:
    numfmt_items = "".join(
        f'<numFmt numFmtId="{fmt_id}" formatCode="{html.escape(code, quote=True)}"/>'
        for fmt_id, code in numfmts
    )
    numfmt_block = f"<numFmts>{numfmt_items}</numFmts>" if numfmt_items else ""
    xf_items = "".join(
        "<xf/>" if fmt_id is None else f'<xf numFmtId="{fmt_id}" fontId="0" fillId="0" borderId="0"/>'
        for fmt_id in xf_numfmt_ids
    )
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<styleSheet xmlns="{SPREADSHEET_NS}">{numfmt_block}'
        f"<cellXfs>{xf_items}</cellXfs></styleSheet>"
    )


def sheet_xml(rows: Iterable[Row], dimension: str | None = "A1") -> str:
    row_parts: list[str] = []
    for row_num, cells in rows:
        cell_parts: list[str] = []
        for ref, style in cells:
            attrs = ""
            if ref is not None:
                attrs += f' r="{ref}"'
            if style is not None:
                attrs += f' s="{style}"'
            cell_parts.append(f"<c{attrs}><v>1</v></c>")
        row_attr = f' r="{row_num}"' if row_num is not None else ""
        row_parts.append(f"<row{row_attr}>{''.join(cell_parts)}</row>")
    dimension_block = f'<dimension ref="{dimension}"/>' if dimension else ""
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<worksheet xmlns="{SPREADSHEET_NS}">{dimension_block}'
        f"<sheetData>{''.join(row_parts)}</sheetData></worksheet>"
    )


def build_xlsx(
    sheets: list[tuple[str, str]] | list[tuple[str, str, str]],
    styles: str | None = None,
    *,
    compression: int = ZIP_DEFLATED,
    with_rels: bool = True,
) -> bytes:
    """Assemble a minimal workbook package in memory.

    ``sheets`` holds ``(name, worksheet_xml)`` or ``(name, worksheet_xml, state)``.
    """
    sheet_entries: list[str] = []
    rel_entries: list[str] = []
    parts: dict[str, str] = {}
    for idx, entry in enumerate(sheets, start=1):
        name, xml = entry[0], entry[1]
        state = f' state="{entry[2]}"' if len(entry) > 2 else ""
        sheet_entries.append(f'<sheet name="{name}" sheetId="{idx}"{state} r:id="rId{idx}"/>')
        rel_entries.append(
            f'<Relationship Id="rId{idx}" Type="{WORKSHEET_REL_TYPE}" Target="worksheets/sheet{idx}.xml"/>'
        )
        parts[f"xl/worksheets/sheet{idx}.xml"] = xml

    if styles is not None:
        rel_entries.append(
            f'<Relationship Id="rId{len(sheets) + 1}" Type="{STYLES_REL_TYPE}" Target="styles.xml"/>'
        )
        parts["xl/styles.xml"] = styles

    parts["xl/workbook.xml"] = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<workbook xmlns="{SPREADSHEET_NS}" xmlns:r="{DOCUMENT_REL_NS}">'
        f"<sheets>{''.join(sheet_entries)}</sheets></workbook>"
    )
    if with_rels:
        parts["xl/_rels/workbook.xml.rels"] = (
            '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
            f'<Relationships xmlns="{PACKAGE_REL_NS}">{"".join(rel_entries)}</Relationships>'
        )

    buffer = io.BytesIO()
    with ZipFile(buffer, "w", compression=compression) as zf:
        for name, xml in parts.items():
            zf.writestr(name, xml)
    return buffer.getvalue()


def zip_bytes(entries: dict[str, bytes], *, compression: int = ZIP_STORED) -> bytes:
    buffer = io.BytesIO()
    with ZipFile(buffer, "w", compression=compression) as zf:
        for name, payload in entries.items():
            zf.writestr(name, payload)
    return buffer.getvalue()


@pytest.fixture
def make_workbook() -> Callable[..., bytes]:
    return build_xlsx


@pytest.fixture
def make_sheet() -> Callable[..., str]:
    return sheet_xml


@pytest.fixture
def make_styles() -> Callable[..., str]:
    return styles_xml


@pytest.fixture
def make_zip() -> Callable[..., bytes]:
    return zip_bytes


@pytest.fixture
def sample_workbook() -> bytes:
    """One sheet, used range A1:B3, column A styled at rows 1 and 3."""
    sheet = sheet_xml(
        [
            (3, [("A3", 0), ("B3", 0)]),
            (1, [("A1", 0), ("B1", None)]),
            (2, [("A2", None), ("B2", 0)]),
        ],
        dimension="A1:B3",
    )
    return build_xlsx([("Sheet1", sheet)], styles_xml())


@pytest.fixture
def sample_path(tmp_path: Path, sample_workbook: bytes) -> Path:
    path = tmp_path / "sample.xlsx"
    path.write_bytes(sample_workbook)
    return path
