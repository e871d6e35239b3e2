"""Exception hierarchy for number-format extraction.

Every error raised by the extraction pipeline derives from ``ExcelFmtError``
and is fatal for the call that raised it. Empty results (no matching sheet,
no rows, no styled cells) are never reported through exceptions.
"""

from __future__ import annotations


class ExcelFmtError(Exception):
    """Base class for all extraction errors."""


class ArchiveError(ExcelFmtError):
    """Raised when the ZIP container cannot provide a part."""


class ArchiveEntryNotFound(ArchiveError, KeyError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Archive entry not found: {name}")

    def __str__(self) -> str:
        return self.args[0]


class DecompressionFailed(ArchiveError):
    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Failed to decompress archive entry {name}: {reason}")


class MalformedReference(ExcelFmtError, ValueError):
    def __init__(self, reference: object) -> None:
        self.reference = reference
        super().__init__(f"Invalid cell reference: {reference!r}")


class MalformedPartError(ExcelFmtError):
    """Raised when an XML part cannot be read into the expected sections."""

    def __init__(self, part: str, detail: str) -> None:
        self.part = part
        self.detail = detail
        super().__init__(f"Malformed part {part}: {detail}")


class MalformedStylePart(MalformedPartError):
    pass


class MalformedSheetPart(MalformedPartError):
    pass


class StylePartMissing(ExcelFmtError):
    def __init__(self, part: str) -> None:
        self.part = part
        super().__init__(f"Workbook has no style part: {part}")
