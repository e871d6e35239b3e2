from __future__ import annotations

import logging
from pathlib import Path

from ..errors import MalformedReference
from ..model import ColumnFormats, ExtractOptions, SheetRef
from .archive import ZipStreamReader
from .namespaces import (
    DEFAULT_STYLES_PATH,
    SHEET_PATH_TEMPLATE,
    STYLES_REL_SUFFIX,
    WORKBOOK_PATH,
    WORKBOOK_RELS_PATH,
)
from .sheet import extract_column_formats
from .styles import load_style_tables
from .utils import col_to_index, parse_range_ref, parse_xml, resolve_target, select_rows

logger = logging.getLogger(__name__)


def resolve_column(column: int | str) -> int:
    if isinstance(column, str):
        text = column.strip()
        if text.isascii() and text.isdigit():
            column = int(text)
        else:
            return col_to_index(text)
    if column < 1:
        raise MalformedReference(column)
    return column


class NumberFormatParser:
    def __init__(self, source: str | Path | bytes, options: ExtractOptions) -> None:
        if isinstance(source, (bytes, bytearray)):
            self.archive = ZipStreamReader(source)
        else:
            self.archive = ZipStreamReader.from_path(source)
        self.options = options

    def parse(self) -> ColumnFormats:
        column = resolve_column(self.options.column)
        sheet_ref = self._select_sheet(self.sheets())
        if sheet_ref is None:
            logger.debug("No sheet matches %r; returning an empty result", self.options.sheet)
            return ColumnFormats(
                sheet=self.options.sheet or "",
                column=column,
                origin=parse_range_ref("A1"),
            )

        tables = load_style_tables(self.archive, self._styles_path())
        return extract_column_formats(
            self.archive.read(sheet_ref.path),
            column,
            tables.styles,
            sheet=sheet_ref.name,
            part=sheet_ref.path,
        )

    def sheets(self) -> list[SheetRef]:
        wb_root = parse_xml(self.archive.read(WORKBOOK_PATH), part=WORKBOOK_PATH)
        rels = self._load_relationships(WORKBOOK_RELS_PATH)
        return self._parse_sheet_refs(select_rows(wb_root, "sheets", "sheet"), rels)

    def _select_sheet(self, sheet_refs: list[SheetRef]) -> SheetRef | None:
        for sheet_ref in sheet_refs:
            if sheet_ref.state != "visible" and not self.options.include_hidden_sheets:
                continue
            if self.options.sheet is None or sheet_ref.name == self.options.sheet:
                logger.debug("Selected sheet %r at %s", sheet_ref.name, sheet_ref.path)
                return sheet_ref
        return None

    def _load_relationships(self, path: str) -> dict[str, tuple[str, str]]:
        if path not in self.archive:
            return {}
        root = parse_xml(self.archive.read(path), part=path)
        rels: dict[str, tuple[str, str]] = {}
        for rel in select_rows(root, "Relationship"):
            rel_id = rel.get("Id")
            target = rel.get("Target")
            if rel_id and target:
                rels[rel_id] = (rel.get("Type", ""), target)
        return rels

    def _parse_sheet_refs(
        self,
        sheets: list[dict[str, str]],
        rels: dict[str, tuple[str, str]],
    ) -> list[SheetRef]:
        sheet_refs: list[SheetRef] = []
        for idx, sheet in enumerate(sheets):
            rel = rels.get(sheet.get("id", ""))
            if rel is not None:
                path = resolve_target(WORKBOOK_PATH, rel[1])
            else:
                path = SHEET_PATH_TEMPLATE.format(index=idx + 1)
            sheet_refs.append(
                SheetRef(
                    index=idx,
                    name=sheet.get("name", f"Sheet{idx+1}"),
                    state=sheet.get("state", "visible"),
                    path=path,
                )
            )
        return sheet_refs

    def _styles_path(self) -> str:
        for rel_type, target in self._load_relationships(WORKBOOK_RELS_PATH).values():
            if rel_type.endswith(STYLES_REL_SUFFIX):
                return resolve_target(WORKBOOK_PATH, target)
        return DEFAULT_STYLES_PATH
