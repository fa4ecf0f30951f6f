import io

import pandas as pd
import pytest

from student_import import RosterError, student_import_excel


def to_xlsx(rows):
    buffer = io.BytesIO()
    pd.DataFrame(rows).to_excel(buffer, index=False)
    return buffer.getvalue()


def test_reads_roster_with_optional_columns():
    data = to_xlsx([
        {"Roll_Number": "22CS001", "stu_name": "Asha", "dept": " CSE ", "year": 2},
        {"Roll_Number": "22EC001", "stu_name": "Ravi", "dept": None, "year": None},
    ])

    students = student_import_excel(data)

    assert students[0] == {
        "roll_number": "22CS001", "stu_name": "Asha", "dept": "CSE",
        "section": None, "year": 2, "phone": None,
    }
    assert students[1]["dept"] is None
    assert students[1]["year"] is None


def test_rows_without_roll_number_are_dropped():
    data = to_xlsx([
        {"roll_number": None, "stu_name": "Nobody"},
        {"roll_number": "R1", "stu_name": "Somebody"},
    ])
    assert [s["roll_number"] for s in student_import_excel(data)] == ["R1"]


def test_missing_columns():
    with pytest.raises(RosterError, match="Missing columns"):
        student_import_excel(to_xlsx([{"name": "Asha"}]))


def test_unreadable_file():
    with pytest.raises(RosterError, match="Excel read failed"):
        student_import_excel(b"not a spreadsheet")
