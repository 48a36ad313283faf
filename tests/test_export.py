import io
from datetime import date

from openpyxl import load_workbook

from export import export_file_name, groups_to_csv_bytes, groups_to_excel_bytes
from grouping import Group
from roster import ingest_text


def sample_groups():
    a, b, c = ingest_text('Alice\nBob "B"\nKim, Minjun')
    return [
        Group(id="group-0", name="Eagles", members=[a, b]),
        Group(id="group-1", name="Group 2", members=[c]),
    ]


def test_csv_has_bom_header_and_quoted_rows():
    data = groups_to_csv_bytes(sample_groups())
    assert data.startswith(b"\xef\xbb\xbf")
    lines = data.decode("utf-8-sig").splitlines()
    assert lines == [
        '"Group","Name"',
        '"Eagles","Alice"',
        '"Eagles","Bob ""B"""',
        '"Group 2","Kim, Minjun"',
    ]


def test_csv_localized_header():
    lines = groups_to_csv_bytes([], locale="ko").decode("utf-8-sig").splitlines()
    assert lines == ['"조","이름"']


def test_excel_sheets():
    data = groups_to_excel_bytes(sample_groups())
    wb = load_workbook(io.BytesIO(data))
    assert wb.sheetnames == ["ByGroup", "Flat"]
    by_group = wb["ByGroup"]
    assert by_group.cell(row=1, column=1).value == "Eagles"
    assert by_group.cell(row=3, column=1).value == 'Bob "B"'
    assert by_group.cell(row=2, column=2).value == "Kim, Minjun"
    flat = list(wb["Flat"].iter_rows(values_only=True))
    assert flat[0] == ("Group", "no", "Name")
    assert flat[1:] == [("Eagles", 1, "Alice"), ("Eagles", 2, 'Bob "B"'), ("Group 2", 1, "Kim, Minjun")]


def test_export_file_name_uses_date():
    assert export_file_name("groups", "csv", today=date(2024, 3, 9)) == "groups_2024-03-09.csv"
