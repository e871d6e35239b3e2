from .api import extract_number_formats, join_number_formats, list_sheets, number_formats_frame
from .errors import ExcelFmtError
from .model import ColumnFormats, ExtractOptions

__all__ = [
    "ColumnFormats",
    "ExcelFmtError",
    "ExtractOptions",
    "extract_number_formats",
    "join_number_formats",
    "list_sheets",
    "number_formats_frame",
]
