import zlib
from io import BytesIO
from typing import Any, Dict, List, NamedTuple
from xml.etree.ElementTree import ParseError as XMLParseError
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from app.features.leads.exceptions import ParseError
from app.platform.logger import get_logger

logger = get_logger("lead_upload")

# Raised by openpyxl (or the zip/xml layers under it) for bytes that are not a usable workbook
DECODE_ERRORS = (
    InvalidFileException,
    BadZipFile,
    XMLParseError,
    zlib.error,
    KeyError,
    ValueError,
    OSError,
)


class SheetRow(NamedTuple):
    """A data row and the 1-based row number it has in the sheet."""
    row_number: int
    values: Dict[str, Any]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def read_sheet_rows(content: bytes) -> List[SheetRow]:
    """
    Read the first worksheet of an .xlsx workbook into numbered row mappings.

    The first occupied row holds the headers; blank rows above it are
    ignored. Every following row becomes a dict of header -> raw cell value,
    in sheet order, paired with its row number in the sheet. Columns with a
    blank header are dropped, and rows with nothing in any header-backed cell
    are omitted without shifting the numbers of the rows after them.

    Raises:
        ParseError: if the bytes are not a readable workbook
    """
    try:
        workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except DECODE_ERRORS as e:
        raise ParseError(f"Could not read workbook: {e}") from e

    try:
        if not workbook.worksheets:
            return []
        sheet = workbook.worksheets[0]

        # Read-only sheets are parsed lazily, so a corrupt sheet only fails here
        rows: List[SheetRow] = []
        headers = None
        for row_number, values in enumerate(sheet.iter_rows(min_row=1, values_only=True), start=1):
            if headers is None:
                if all(_is_empty(cell) for cell in values):
                    continue
                headers = [
                    (col, str(cell).strip())
                    for col, cell in enumerate(values)
                    if not _is_empty(cell)
                ]
                continue

            row = {}
            for col, header in headers:
                value = values[col] if col < len(values) else None
                row[header] = "" if value is None else value

            if any(not _is_empty(v) for v in row.values()):
                rows.append(SheetRow(row_number, row))
    except DECODE_ERRORS as e:
        raise ParseError(f"Could not read workbook: {e}") from e
    finally:
        workbook.close()

    logger.info(f"Parsed {len(rows)} data rows from sheet '{sheet.title}'")
    return rows


def parse_workbook(content: bytes) -> List[Dict[str, Any]]:
    """Row mappings of the first sheet, without their row numbers."""
    return [row.values for row in read_sheet_rows(content)]
