from datetime import datetime
from io import BytesIO

import pytest
from openpyxl import Workbook

from app.features.leads.exceptions import ParseError
from app.features.leads.services.spreadsheet_parser import SheetRow, parse_workbook, read_sheet_rows


def test_parse_preserves_row_order_and_maps_headers(make_workbook):
    content = make_workbook(
        ["id", "Name", "Email"],
        [
            [3, "Carol", "carol@x.com"],
            [1, "Alice", "alice@x.com"],
            [2, "Bob", "bob@x.com"],
        ],
    )

    rows = parse_workbook(content)

    assert [row["Name"] for row in rows] == ["Carol", "Alice", "Bob"]
    assert rows[0] == {"id": 3, "Name": "Carol", "Email": "carol@x.com"}


def test_parse_omits_rows_without_values(make_workbook):
    content = make_workbook(
        ["id", "name", "email"],
        [
            [1, "Alice", "alice@x.com"],
            [None, None, None],
            ["", "   ", None],
            [2, "Bob", "bob@x.com"],
        ],
    )

    rows = parse_workbook(content)

    assert len(rows) == 2
    assert rows[1]["name"] == "Bob"


def test_parse_fills_missing_cells_with_empty_string(make_workbook):
    content = make_workbook(["id", "name", "email", "city"], [[1, "Alice", None, None]])

    rows = parse_workbook(content)

    assert rows == [{"id": 1, "name": "Alice", "email": "", "city": ""}]


def test_parse_ignores_columns_without_header(make_workbook):
    content = make_workbook(["id", None, "email"], [[1, "ignored", "a@x.com"]])

    rows = parse_workbook(content)

    assert rows == [{"id": 1, "email": "a@x.com"}]


def test_parse_keeps_date_cells_as_datetimes(make_workbook):
    verified = datetime(2024, 5, 17, 10, 30)
    content = make_workbook(["id", "last verified at"], [[1, verified]])

    rows = parse_workbook(content)

    assert rows[0]["last verified at"] == verified


def test_parse_reads_only_the_first_sheet():
    workbook = Workbook()
    first = workbook.active
    first.append(["id", "name"])
    first.append([1, "First sheet"])
    second = workbook.create_sheet("Other")
    second.append(["id", "name"])
    second.append([2, "Second sheet"])
    buffer = BytesIO()
    workbook.save(buffer)

    rows = parse_workbook(buffer.getvalue())

    assert rows == [{"id": 1, "name": "First sheet"}]


def test_parse_header_only_workbook_returns_no_rows(make_workbook):
    assert parse_workbook(make_workbook(["id", "name", "email"], [])) == []


@pytest.mark.parametrize(
    "content",
    [b"", b"id,name,email\n1,Alice,alice@x.com\n", b"PK\x03\x04 not really a zip"],
)
def test_parse_rejects_non_workbook_bytes(content):
    with pytest.raises(ParseError):
        parse_workbook(content)


def test_header_is_first_occupied_row():
    workbook = Workbook()
    sheet = workbook.active
    for col, header in enumerate(["id", "name", "email"], start=1):
        sheet.cell(row=3, column=col, value=header)
    for col, value in enumerate([1, "Alice", "alice@x.com"], start=1):
        sheet.cell(row=4, column=col, value=value)
    buffer = BytesIO()
    workbook.save(buffer)

    rows = read_sheet_rows(buffer.getvalue())

    assert rows == [SheetRow(4, {"id": 1, "name": "Alice", "email": "alice@x.com"})]


def test_row_numbers_survive_blank_rows(make_workbook):
    content = make_workbook(
        ["id", "name", "email"],
        [[1, "Alice", "alice@x.com"], [None, None, None], [2, "Bob", "bob@x.com"]],
    )

    rows = read_sheet_rows(content)

    assert [row.row_number for row in rows] == [2, 4]
    assert rows[1].values["name"] == "Bob"


def test_truncated_sheet_raises_parse_error(truncated_workbook):
    with pytest.raises(ParseError):
        read_sheet_rows(truncated_workbook)
