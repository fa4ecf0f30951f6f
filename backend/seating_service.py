import logging
import threading
import weakref
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import repository
from allocator import allocate
from db_models import SeatingDB
from errors import EmptyFile, ExamNotFound, ValidationFailed
from models import Student, Venue
from seating_import import parse_allocation_csv

logger = logging.getLogger(__name__)

AUTO_VENUE_BLOCK = "Allocated Block"
AUTO_VENUE_CAPACITY = 100
AUTO_VENUE_EXAM_TYPE = "All"

_locks_guard = threading.Lock()
_exam_locks = weakref.WeakValueDictionary()


@contextmanager
def exam_lock(exam_id):
    """Serialise replace runs for one exam; different exams run in parallel."""
    with _locks_guard:
        lock = _exam_locks.get(exam_id)
        if lock is None:
            lock = threading.Lock()
            _exam_locks[exam_id] = lock
    with lock:
        yield


def _get_exam(db: Session, exam_id):
    exam = repository.find_exam(db, exam_id)
    if exam is None:
        raise ExamNotFound(exam_id)
    return exam


def _replace(db: Session, exam_id, seatings):
    try:
        return repository.replace_seatings(db, exam_id, seatings)
    except SQLAlchemyError:
        db.rollback()
        raise


def auto_allocate(db: Session, exam_id):
    """
    Seat every eligible student for an exam, spreading departments apart.

    The plan is computed before anything is written; the old seatings are
    only deleted once a complete replacement exists.
    """
    exam = _get_exam(db, exam_id)
    with exam_lock(exam_id):
        logger.info("Auto allocation started for exam %s (%s)", exam.id, exam.department or "all departments")

        students = [Student.from_db(s) for s in repository.find_eligible_students(db, exam.department)]
        venues = [Venue.from_db(v) for v in repository.find_available_venues(db)]

        seats = allocate(students, venues, exam.department)

        seatings = [
            SeatingDB(
                exam_id=exam_id,
                venue_id=seat.venue.id,
                student_id=seat.student.id,
                seat_no=seat.seat_no,
            )
            for seat in seats
        ]
        seatings = _replace(db, exam_id, seatings)

    logger.info("Auto allocation finished for exam %s: %d seatings", exam_id, len(seatings))
    return seatings


def _resolve_students(db: Session, row, errors):
    bounds = row.range_bounds
    if bounds is not None:
        start, end = bounds
        students = repository.find_students_by_roll_range(db, start, end)
        if not students:
            errors.append(f"Line {row.line_no}: No students found in range {start} to {end}")
        return students

    student = repository.find_student_by_roll(db, row.roll_spec)
    if student is None:
        errors.append(f"Line {row.line_no}: Student {row.roll_spec} not found.")
        return []
    return [student]


def import_manual_allocations(db: Session, exam_id, content):
    """
    Replace an exam's seatings with the mapping given in a CSV upload.

    Every line is resolved before anything is written. Any error fails the
    whole import and leaves the existing seatings untouched. Venues named in
    the file but missing from the database are created on success.
    """
    _get_exam(db, exam_id)
    with exam_lock(exam_id):
        if not content or not content.strip():
            raise EmptyFile()

        rows, errors = parse_allocation_csv(content)

        venue_ids = {}
        pending_venues = {}
        planned = []
        placed_on = {}

        for row in rows:
            key = row.venue_name.lower()
            if key not in venue_ids and key not in pending_venues:
                venue = repository.find_venue_by_name(db, row.venue_name)
                if venue is not None:
                    venue_ids[key] = venue.id
                else:
                    pending_venues[key] = row.venue_name

            students = _resolve_students(db, row, errors)
            if row.seat_no and len(students) > 1:
                logger.warning(
                    "Line %d: seat %s shared by %d students in range %s",
                    row.line_no, row.seat_no, len(students), row.roll_spec,
                )

            for student in students:
                if student.id in placed_on:
                    errors.append(
                        f"Line {row.line_no}: Student {student.roll_number} "
                        f"already allocated on line {placed_on[student.id]}"
                    )
                    continue
                placed_on[student.id] = row.line_no
                planned.append((student.id, key, row.seat_no))

        if errors:
            logger.info("Seating import for exam %s rejected with %d errors", exam_id, len(errors))
            raise ValidationFailed(errors)

        if not planned:
            raise EmptyFile()

        try:
            for key, name in pending_venues.items():
                venue = repository.create_venue(
                    db,
                    name=name,
                    capacity=AUTO_VENUE_CAPACITY,
                    block=AUTO_VENUE_BLOCK,
                    exam_type=AUTO_VENUE_EXAM_TYPE,
                )
                logger.info("Created venue %s for exam %s import", name, exam_id)
                venue_ids[key] = venue.id
        except SQLAlchemyError:
            db.rollback()
            raise

        seatings = [
            SeatingDB(exam_id=exam_id, venue_id=venue_ids[key], student_id=student_id, seat_no=seat_no)
            for student_id, key, seat_no in planned
        ]
        seatings = _replace(db, exam_id, seatings)

    logger.info("Seating import for exam %s stored %d seatings", exam_id, len(seatings))
    return seatings


def seatings_for_exam(db: Session, exam_id):
    return repository.seatings_for_exam(db, exam_id)


def seatings_for_venue(db: Session, venue_id):
    return repository.seatings_for_venue(db, venue_id)


def seatings_for_student(db: Session, student_id):
    return repository.seatings_for_student(db, student_id)
