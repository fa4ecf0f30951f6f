import argparse
import logging

from allocator import allocate
from errors import SeatingError
from models import Student, Venue
from student_import import RosterError, student_import_excel


def parse_venue(text):
    name, sep, capacity = text.rpartition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected NAME:CAPACITY, got {text!r}")
    try:
        return name.strip(), int(capacity)
    except ValueError:
        raise argparse.ArgumentTypeError(f"capacity must be an integer in {text!r}")


def plan_from_roster(rows, venue_specs, department=None):
    students = [
        Student(i, row["roll_number"], row.get("dept"), row.get("stu_name"))
        for i, row in enumerate(rows, start=1)
    ]
    venues = [Venue(i, name, capacity) for i, (name, capacity) in enumerate(venue_specs, start=1)]
    return allocate(students, venues, department)


def run(argv=None):
    parser = argparse.ArgumentParser(description="Offline exam seat allocation from an Excel roster")
    parser.add_argument("roster", help="students .xlsx with roll_number, stu_name, dept columns")
    parser.add_argument("--venue", action="append", type=parse_venue, required=True,
                        help="venue as NAME:CAPACITY, repeatable")
    parser.add_argument("--department", help="only seat this department")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)

    try:
        rows = student_import_excel(args.roster)
        seats = plan_from_roster(rows, args.venue, args.department)
    except (RosterError, SeatingError) as e:
        parser.exit(1, f"error: {e}\n")

    print("\n--- Seat Allocation ---")
    for seat in seats:
        s = seat.student
        print(f"{s.roll_number} ({s.dept}) -> {seat.venue.name} | Seat {seat.seat_no}")

    return seats


if __name__ == "__main__":
    run()
