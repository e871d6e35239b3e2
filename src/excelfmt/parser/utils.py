from __future__ import annotations

import posixpath
import re
from xml.etree import ElementTree as ET

from ..errors import MalformedPartError, MalformedReference
from ..model import RangeRef

CELL_RE = re.compile(r"([A-Z]+)([0-9]+)")
COL_RE = re.compile(r"[A-Z]+")


def local_name(tag: str) -> str:
    if "}" in tag:
        return tag.rsplit("}", 1)[1]
    return tag


def col_to_index(col: str) -> int:
    letters = col.upper()
    if not col.isascii() or not COL_RE.fullmatch(letters):
        raise MalformedReference(col)
    value = 0
    for char in letters:
        value = value * 26 + (ord(char) - 64)
    return value


def index_to_col(index: int) -> str:
    if index < 1:
        raise MalformedReference(index)
    result: list[str] = []
    value = index
    while value > 0:
        value, rem = divmod(value - 1, 26)
        result.append(chr(65 + rem))
    return "".join(reversed(result))


def coord_to_rowcol(coord: str) -> tuple[int, int]:
    match = CELL_RE.fullmatch(coord.replace("$", "").upper()) if coord.isascii() else None
    if not match:
        raise MalformedReference(coord)
    row = int(match.group(2))
    if row < 1:
        raise MalformedReference(coord)
    return row, col_to_index(match.group(1))


def rowcol_to_coord(row: int, col: int) -> str:
    if row < 1:
        raise MalformedReference((row, col))
    return f"{index_to_col(col)}{row}"


def parse_range_ref(ref: str) -> RangeRef:
    normalized = ref.replace("$", "").upper()
    start, sep, end = normalized.partition(":")
    sr, sc = coord_to_rowcol(start)
    if not sep:
        return RangeRef(ref=normalized, start_row=sr, start_col=sc, end_row=sr, end_col=sc)

    er, ec = coord_to_rowcol(end)
    return RangeRef(
        ref=normalized,
        start_row=min(sr, er),
        start_col=min(sc, ec),
        end_row=max(sr, er),
        end_col=max(sc, ec),
    )


def resolve_target(base_path: str, target: str) -> str:
    if target.startswith("/"):
        return target[1:]
    return posixpath.normpath(posixpath.join(posixpath.dirname(base_path), target))


def parse_xml(payload: bytes | None, *, part: str, error: type[MalformedPartError] = MalformedPartError) -> ET.Element:
    if payload is None:
        raise error(part, "no content")
    try:
        return ET.fromstring(payload)
    except ET.ParseError as exc:
        raise error(part, str(exc)) from exc


def iter_path(root: ET.Element, *path: str):
    """Yield the elements reached from ``root`` by a chain of local names."""
    level = [root]
    for name in path:
        level = [child for elem in level for child in elem if local_name(child.tag) == name]
    yield from level


def select_rows(root: ET.Element, *path: str) -> list[dict[str, str]]:
    """Return one attribute dict per element at ``path``, namespace prefixes dropped."""
    return [
        {local_name(key): value for key, value in elem.attrib.items()}
        for elem in iter_path(root, *path)
    ]
