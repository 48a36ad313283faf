import csv
import io
from datetime import date
from typing import List, Optional

from openpyxl import Workbook

from grouping import Group
from messages import message

CSV_MIME = "text/csv"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def export_file_name(prefix: str, ext: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{prefix}_{today.isoformat()}.{ext}"


def groups_to_csv_bytes(groups: List[Group], locale: str = "en") -> bytes:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([message("csv_group", locale), message("csv_name", locale)])
    for group in groups:
        for member in group.members:
            writer.writerow([group.name, member.name])
    # 엑셀에서 한글이 깨지지 않도록 BOM 포함
    return buf.getvalue().encode("utf-8-sig")


def groups_to_excel_bytes(groups: List[Group], locale: str = "en") -> bytes:
    wb = Workbook()
    ws_by_group = wb.active
    ws_by_group.title = "ByGroup"
    ws_flat = wb.create_sheet("Flat")

    # ByGroup: 조마다 한 컬럼
    for col, group in enumerate(groups, start=1):
        ws_by_group.cell(row=1, column=col, value=group.name)
        for row, member in enumerate(group.members, start=2):
            ws_by_group.cell(row=row, column=col, value=member.name)

    ws_flat.append([message("csv_group", locale), "no", message("csv_name", locale)])
    for group in groups:
        for no, member in enumerate(group.members, start=1):
            ws_flat.append([group.name, no, member.name])

    bio = io.BytesIO()
    wb.save(bio)
    bio.seek(0)
    return bio.read()
