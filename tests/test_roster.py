import io

from openpyxl import Workbook

from roster import (
    Participant,
    deduplicate,
    duplicate_count,
    ingest_rows,
    ingest_text,
    names_to_text,
    read_roster_csv_bytes,
    read_roster_upload,
    read_roster_xlsx_bytes,
    sample_roster,
)
from config import SAMPLE_NAMES


def names(roster):
    return [p.name for p in roster]


def test_ingest_text_trims_and_drops_blank_and_header():
    roster = ingest_text("Name\n  Alice \n\n\r\nBob\r\n   \n王小明\n")
    assert names(roster) == ["Alice", "Bob", "王小明"]


def test_ingest_text_assigns_unique_ids():
    roster = ingest_text("A\nA\nB")
    assert len({p.id for p in roster}) == 3
    assert names(roster) == ["A", "A", "B"]


def test_ids_not_reused_across_ingests():
    first = ingest_text("A\nB")
    second = ingest_text("A\nB")
    assert not ({p.id for p in first} & {p.id for p in second})


def test_ingest_empty_text():
    assert ingest_text("") == ()
    assert ingest_text("\n \n") == ()


def test_ingest_rows_uses_first_column():
    roster = ingest_rows([["name", "dept"], ["Alice", "HR"], [], ["  ", "x"], [" Bob ", "IT"], [None]])
    assert names(roster) == ["Alice", "Bob"]


def test_read_csv_bytes_with_bom_and_quotes():
    data = '\ufeffNAME,team\n"Kim, Minjun",A\nLee,B\n\n'.encode("utf-8")
    roster = read_roster_csv_bytes(data)
    assert names(roster) == ["Kim, Minjun", "Lee"]


def test_read_xlsx_bytes():
    wb = Workbook()
    ws = wb.active
    ws.append(["name", "dept"])
    ws.append(["Alice", "HR"])
    ws.append([None, "IT"])
    ws.append(["Bob", None])
    bio = io.BytesIO()
    wb.save(bio)
    data = bio.getvalue()
    assert names(read_roster_xlsx_bytes(data)) == ["Alice", "Bob"]
    assert names(read_roster_upload("people.XLSX", data)) == ["Alice", "Bob"]


def test_read_upload_defaults_to_csv():
    assert names(read_roster_upload("people.txt", b"name\nA\nB\n")) == ["A", "B"]


def test_deduplicate_keeps_first_occurrence_and_order():
    roster = ingest_text("B\nA\nB\nC\nA")
    unique = deduplicate(roster)
    assert names(unique) == ["B", "A", "C"]
    assert len({p.id for p in unique}) == 3


def test_deduplicate_is_idempotent_and_never_grows():
    roster = ingest_text("x\ny\nx\nz\ny\ny")
    once = deduplicate(roster)
    twice = deduplicate(once)
    assert names(twice) == names(once)
    assert len(once) <= len(roster)


def test_deduplicate_is_case_sensitive():
    assert names(deduplicate(ingest_text("Ann\nann"))) == ["Ann", "ann"]


def test_duplicate_count():
    roster = ingest_text("A\nB\nA\nA\nC")
    assert duplicate_count(roster) == 2
    assert duplicate_count(["x", "y"]) == 0
    assert duplicate_count([]) == 0


def test_names_to_text_round_trip():
    roster = ingest_text("A\nB")
    assert names_to_text(roster) == "A\nB"


def test_sample_roster():
    roster = sample_roster()
    assert names(roster) == SAMPLE_NAMES
    assert all(isinstance(p, Participant) for p in roster)
