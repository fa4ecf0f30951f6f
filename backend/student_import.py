import io

import pandas as pd

REQUIRED_COLUMNS = {"roll_number", "stu_name"}
OPTIONAL_COLUMNS = ("dept", "section", "year", "phone")


class RosterError(ValueError):
    pass


def _clean(value):
    if pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _text(value):
    # numeric columns come back as floats when a cell is empty
    if isinstance(value, float) and not pd.isna(value) and value.is_integer():
        value = int(value)
    return _clean(value)


def _year(value):
    if pd.isna(value):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise RosterError(f"Invalid year: {value!r}")


def student_import_excel(source):
    """Read a student roster (.xlsx path, file object or bytes) into dicts."""
    if isinstance(source, bytes):
        source = io.BytesIO(source)

    try:
        df = pd.read_excel(source)
    except Exception as e:
        raise RosterError(f"Excel read failed: {e}") from e

    df.columns = [str(c).strip().lower() for c in df.columns]

    if not REQUIRED_COLUMNS.issubset(df.columns):
        missing = sorted(REQUIRED_COLUMNS - set(df.columns))
        raise RosterError(f"Missing columns: {missing}")

    students = []
    for _, row in df.iterrows():
        roll_number = _text(row["roll_number"])
        if roll_number is None:
            continue

        student = {
            "roll_number": roll_number,
            "stu_name": _clean(row["stu_name"]) or roll_number,
        }
        for column in OPTIONAL_COLUMNS:
            value = row[column] if column in df.columns else None
            student[column] = _year(value) if column == "year" else _text(value)

        students.append(student)

    return students
