from __future__ import annotations

import pytest

from excelfmt.errors import DecompressionFailed, MalformedStylePart, StylePartMissing
from excelfmt.parser.archive import ZipStreamReader
from excelfmt.parser.styles import BUILTIN_NUMBER_FORMATS, load_style_tables, resolve_styles


def test_builtin_general_fallback(make_styles) -> None:
    tables = resolve_styles(make_styles(xf_numfmt_ids=[0]).encode())

    assert tables.styles == {0: "General"}
    assert tables.formats[0] == "General"


def test_custom_format_overrides_builtin(make_styles) -> None:
    payload = make_styles(numfmts=[(0, "0.000")], xf_numfmt_ids=[0]).encode()

    tables = resolve_styles(payload)

    assert tables.styles == {0: "0.000"}
    assert BUILTIN_NUMBER_FORMATS[0] == "General"


def test_style_index_follows_disk_order(make_styles) -> None:
    payload = make_styles(
        numfmts=[(164, "yyyy-mm-dd"), (165, '"USD" #,##0.00')],
        xf_numfmt_ids=[0, 165, 9, 164, None],
    ).encode()

    tables = resolve_styles(payload)

    assert tables.styles == {
        0: "General",
        1: '"USD" #,##0.00',
        2: "0%",
        3: "yyyy-mm-dd",
        4: "General",
    }


def test_unknown_format_id_is_dropped(make_styles) -> None:
    tables = resolve_styles(make_styles(xf_numfmt_ids=[0, 200, 14]).encode())

    assert tables.styles == {0: "General", 2: "m/d/yyyy"}


def test_builtin_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        BUILTIN_NUMBER_FORMATS[0] = "changed"  # type: ignore[index]


@pytest.mark.parametrize(
    "payload",
    [
        b"<styleSheet><cellXfs><xf numFmtId='abc'/></cellXfs></styleSheet>",
        b"<styleSheet><numFmts><numFmt formatCode='0.0'/></numFmts></styleSheet>",
        b"<styleSheet><numFmts><numFmt numFmtId='164'/></numFmts></styleSheet>",
        b"<styleSheet><cellXfs>",
    ],
)
def test_malformed_style_part(payload: bytes) -> None:
    with pytest.raises(MalformedStylePart):
        resolve_styles(payload)


def test_missing_style_part(make_zip) -> None:
    archive = ZipStreamReader(make_zip({"xl/workbook.xml": b"<workbook/>"}))

    with pytest.raises(StylePartMissing):
        load_style_tables(archive)


def test_corrupt_style_part_propagates_decompression_failure(make_zip) -> None:
    data = bytearray(make_zip({"xl/styles.xml": b"<styleSheet/>"}))
    # Flip the stored payload so its CRC no longer matches.
    offset = data.index(b"<styleSheet/>")
    data[offset] = ord("[")

    with pytest.raises(DecompressionFailed):
        load_style_tables(ZipStreamReader(bytes(data)))
