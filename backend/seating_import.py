"""
Parsing for manual seat allocation uploads.

Expected columns: RollNoOrRange, VenueName, [SeatNumber]. A roll spec is
either a single roll number or a range written START-END or START=END.
"""
import re

BOM = "\ufeff"

RANGE_SEPARATOR = re.compile(r"[-=]")


class AllocationRow:
    def __init__(self, line_no, roll_spec, venue_name, seat_no=None):
        self.line_no = line_no
        self.roll_spec = roll_spec
        self.venue_name = venue_name
        self.seat_no = seat_no

    @property
    def range_bounds(self):
        """(start, end) when the roll spec is a range, otherwise None."""
        parts = RANGE_SEPARATOR.split(self.roll_spec)
        if len(parts) != 2:
            return None
        start, end = parts[0].strip(), parts[1].strip()
        if not start or not end:
            return None
        return start, end

    def __repr__(self):
        return f"AllocationRow(line={self.line_no}, {self.roll_spec!r}, {self.venue_name!r}, {self.seat_no!r})"


def split_fields(line):
    parts = line.split(",")
    if len(parts) < 3:
        alt = line.split(";")
        if len(alt) > len(parts):
            parts = alt
    return [p.strip() for p in parts]


def is_header(fields):
    return fields[0].lower().startswith("roll")


def parse_allocation_csv(content):
    """
    Split raw CSV text into rows and line-level errors.

    Returns `(rows, errors)`. Blank lines are skipped; only the first
    non-blank line may be a header. Errors name the 1-based line number.
    """
    rows = []
    errors = []
    seen_data = False

    for line_no, line in enumerate(content.splitlines(), start=1):
        if line_no == 1 and line.startswith(BOM):
            line = line[len(BOM):]

        if not line.strip():
            continue

        fields = split_fields(line)
        first = not seen_data
        seen_data = True

        if first and is_header(fields):
            continue

        if len(fields) < 2:
            errors.append(f"Line {line_no}: insufficient columns")
            continue

        roll_spec, venue_name = fields[0], fields[1]
        seat_no = fields[2] if len(fields) > 2 and fields[2] else None

        if not roll_spec:
            errors.append(f"Line {line_no}: missing roll number")
            continue
        if not venue_name:
            errors.append(f"Line {line_no}: missing venue name")
            continue

        rows.append(AllocationRow(line_no, roll_spec, venue_name, seat_no))

    return rows, errors
