import csv
import io
import re
import time
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from openpyxl import load_workbook

from config import SAMPLE_NAMES


@dataclass(frozen=True)
class Participant:
    id: str
    name: str


Roster = Tuple[Participant, ...]

HEADER_TOKEN = "name"

_last_stamp = 0


def _next_stamp() -> int:
    # 같은 밀리초에 두 번 불려도 식별자가 겹치지 않도록 단조 증가
    global _last_stamp
    stamp = int(time.time() * 1000)
    if stamp <= _last_stamp:
        stamp = _last_stamp + 1
    _last_stamp = stamp
    return stamp


def build_roster(names: Iterable[str]) -> Roster:
    stamp = _next_stamp()
    return tuple(Participant(id=f"{stamp}-{i}", name=name) for i, name in enumerate(names))


def clean_names(raw: Iterable[Optional[str]]) -> List[str]:
    names: List[str] = []
    for value in raw:
        name = (value or "").strip()
        if not name or name.lower() == HEADER_TOKEN:
            continue
        names.append(name)
    return names


def ingest_text(raw_text: str) -> Roster:
    return build_roster(clean_names(re.split(r"\r?\n", raw_text or "")))


def ingest_rows(rows: Iterable[Sequence[object]]) -> Roster:
    """표 형태 입력: 각 행의 첫 칸을 이름으로 사용."""
    first_cells: List[str] = []
    for row in rows:
        if not row:
            continue
        cell = row[0]
        first_cells.append("" if cell is None else str(cell))
    return build_roster(clean_names(first_cells))


def read_roster_csv_bytes(data: bytes) -> Roster:
    f = io.StringIO(data.decode("utf-8-sig"))
    return ingest_rows(csv.reader(f))


def read_roster_xlsx_bytes(data: bytes) -> Roster:
    wb = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        return ingest_rows(ws.iter_rows(max_col=1, values_only=True))
    finally:
        wb.close()


def read_roster_upload(file_name: str, data: bytes) -> Roster:
    if file_name.lower().endswith(".xlsx"):
        return read_roster_xlsx_bytes(data)
    return read_roster_csv_bytes(data)


def deduplicate(roster: Sequence[Participant]) -> Roster:
    seen = set()
    unique: List[str] = []
    for p in roster:
        if p.name in seen:
            continue
        seen.add(p.name)
        unique.append(p.name)
    # 식별자는 새 위치 기준으로 재발급
    return build_roster(unique)


def duplicate_count(items: Sequence[Union[Participant, str]]) -> int:
    names = [p.name if isinstance(p, Participant) else p for p in items]
    return len(names) - len(set(names))


def names_to_text(roster: Sequence[Participant]) -> str:
    return "\n".join(p.name for p in roster)


def sample_roster() -> Roster:
    return build_roster(SAMPLE_NAMES)
