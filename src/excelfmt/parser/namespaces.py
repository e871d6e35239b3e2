SPREADSHEET_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
DOCUMENT_REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PACKAGE_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"

WORKBOOK_PATH = "xl/workbook.xml"
WORKBOOK_RELS_PATH = "xl/_rels/workbook.xml.rels"
DEFAULT_STYLES_PATH = "xl/styles.xml"
SHEET_PATH_TEMPLATE = "xl/worksheets/sheet{index}.xml"

STYLES_REL_SUFFIX = "/styles"
