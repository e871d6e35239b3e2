from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping
from xml.etree import ElementTree as ET

from ..errors import ArchiveEntryNotFound, MalformedStylePart, StylePartMissing
from ..model import CellStyleEntry, NumberFormatEntry, StyleTables
from .archive import ZipStreamReader
from .namespaces import DEFAULT_STYLES_PATH
from .utils import parse_xml, select_rows

logger = logging.getLogger(__name__)

BUILTIN_NUMBER_FORMATS: Mapping[int, str] = MappingProxyType(
    {
        0: "General",
        1: "0",
        2: "0.00",
        3: "#,##0",
        4: "#,##0.00",
        5: '"$"#,##0_);("$"#,##0)',
        6: '"$"#,##0_);[Red]("$"#,##0)',
        7: '"$"#,##0.00_);("$"#,##0.00)',
        8: '"$"#,##0.00_);[Red]("$"#,##0.00)',
        9: "0%",
        10: "0.00%",
        11: "0.00E+00",
        12: "# ?/?",
        13: "# ??/??",
        14: "m/d/yyyy",
        15: "d-mmm-yy",
        16: "d-mmm",
        17: "mmm-yy",
        18: "h:mm AM/PM",
        19: "h:mm:ss AM/PM",
        20: "h:mm",
        21: "h:mm:ss",
        22: "m/d/yyyy h:mm",
        37: "#,##0 ;(#,##0)",
        38: "#,##0 ;[Red](#,##0)",
        39: "#,##0.00;(#,##0.00)",
        40: "#,##0.00;[Red](#,##0.00)",
        41: '_(* #,##0_);_(* \\(#,##0\\);_(* "-"_);_(@_)',
        42: '_("$"* #,##0_);_("$"* \\(#,##0\\);_("$"* "-"_);_(@_)',
        43: '_(* #,##0.00_);_(* \\(#,##0.00\\);_(* "-"??_);_(@_)',
        44: '_("$"* #,##0.00_);_("$"* \\(#,##0.00\\);_("$"* "-"??_);_(@_)',
        45: "mm:ss",
        46: "[h]:mm:ss",
        47: "mmss.0",
        48: "##0.0E+0",
        49: "@",
    }
)


def _parse_int(value: str | None, *, part: str, field: str) -> int:
    if value is None:
        raise MalformedStylePart(part, f"missing {field}")
    try:
        return int(value)
    except ValueError:
        raise MalformedStylePart(part, f"invalid {field}: {value!r}") from None


def parse_custom_numfmts(styles_root: ET.Element, *, part: str = DEFAULT_STYLES_PATH) -> list[NumberFormatEntry]:
    entries: list[NumberFormatEntry] = []
    for attrs in select_rows(styles_root, "numFmts", "numFmt"):
        fmt_id = _parse_int(attrs.get("numFmtId"), part=part, field="numFmtId")
        code = attrs.get("formatCode")
        if code is None:
            raise MalformedStylePart(part, f"numFmt {fmt_id} has no formatCode")
        entries.append(NumberFormatEntry(format_id=fmt_id, format_code=code))
    return entries


def parse_cell_styles(styles_root: ET.Element, *, part: str = DEFAULT_STYLES_PATH) -> list[CellStyleEntry]:
    entries: list[CellStyleEntry] = []
    for idx, attrs in enumerate(select_rows(styles_root, "cellXfs", "xf")):
        fmt_id = _parse_int(attrs.get("numFmtId", "0"), part=part, field="numFmtId")
        entries.append(CellStyleEntry(style_index=idx, format_id=fmt_id))
    return entries


def build_format_table(styles_root: ET.Element, *, part: str = DEFAULT_STYLES_PATH) -> dict[int, str]:
    formats = dict(BUILTIN_NUMBER_FORMATS)
    for entry in parse_custom_numfmts(styles_root, part=part):
        formats[entry.format_id] = entry.format_code
    return formats


def build_style_table(
    styles_root: ET.Element,
    formats: Mapping[int, str],
    *,
    part: str = DEFAULT_STYLES_PATH,
) -> dict[int, str]:
    styles: dict[int, str] = {}
    for entry in parse_cell_styles(styles_root, part=part):
        code = formats.get(entry.format_id)
        if code is None:
            logger.debug("Style %d references unknown numFmtId %d", entry.style_index, entry.format_id)
            continue
        styles[entry.style_index] = code
    return styles


def resolve_styles(payload: bytes | None, *, part: str = DEFAULT_STYLES_PATH) -> StyleTables:
    root = parse_xml(payload, part=part, error=MalformedStylePart)
    formats = build_format_table(root, part=part)
    styles = build_style_table(root, formats, part=part)
    logger.debug("Resolved %d number formats and %d cell styles from %s", len(formats), len(styles), part)
    return StyleTables(formats=formats, styles=styles)


def load_style_tables(archive: ZipStreamReader, path: str = DEFAULT_STYLES_PATH) -> StyleTables:
    try:
        payload = archive.read(path)
    except ArchiveEntryNotFound:
        raise StylePartMissing(path) from None
    return resolve_styles(payload, part=path)
