import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from db_models import ExamDB, SeatingDB, StudentDB, VenueDB

logger = logging.getLogger(__name__)


def find_exam(db: Session, exam_id):
    return db.query(ExamDB).filter(ExamDB.id == exam_id).first()


def find_eligible_students(db: Session, department=None):
    query = (
        db.query(StudentDB)
        .filter(StudentDB.dept.isnot(None))
        .filter(func.trim(StudentDB.dept) != "")
    )
    students = query.order_by(StudentDB.roll_number).all()

    # SQLite upper/trim are ASCII-only, so the scope is matched here
    if department is not None and department.strip():
        scope = department.strip().upper()
        students = [s for s in students if s.dept.strip().upper() == scope]

    return students


def find_student_by_roll(db: Session, roll_number):
    return db.query(StudentDB).filter(StudentDB.roll_number == roll_number).first()


def find_students_by_roll_range(db: Session, start, end):
    return (
        db.query(StudentDB)
        .filter(StudentDB.roll_number.between(start, end))
        .order_by(StudentDB.roll_number)
        .all()
    )


def find_all_venues(db: Session):
    return db.query(VenueDB).order_by(VenueDB.id).all()


def find_available_venues(db: Session):
    return (
        db.query(VenueDB)
        .filter(VenueDB.is_available.is_(True))
        .order_by(VenueDB.capacity.desc(), VenueDB.id)
        .all()
    )


def find_venue_by_name(db: Session, name):
    key = name.strip().lower()
    return next((v for v in find_all_venues(db) if v.name.strip().lower() == key), None)


def create_venue(db: Session, name, capacity, block=None, exam_type="All", is_available=True):
    venue = VenueDB(
        name=name,
        block=block,
        capacity=capacity,
        exam_type=exam_type,
        is_available=is_available,
    )
    db.add(venue)
    db.flush()
    return venue


def delete_seatings_for_exam(db: Session, exam_id):
    deleted = (
        db.query(SeatingDB)
        .filter(SeatingDB.exam_id == exam_id)
        .delete(synchronize_session=False)
    )
    logger.debug("Deleted %d seatings for exam %s", deleted, exam_id)
    return deleted


def save_seatings(db: Session, seatings):
    db.add_all(seatings)
    db.commit()
    for seating in seatings:
        db.refresh(seating)
    return seatings


def replace_seatings(db: Session, exam_id, seatings):
    """
    Swap every seating of an exam for `seatings` in one transaction.

    The DELETE is flushed and the session cleared before the new rows are
    added, so the database never sees old and new rows for the same
    (exam, student) pair at once.
    """
    delete_seatings_for_exam(db, exam_id)
    db.flush()
    db.expunge_all()
    return save_seatings(db, seatings)


def seatings_for_exam(db: Session, exam_id):
    return (
        db.query(SeatingDB)
        .filter(SeatingDB.exam_id == exam_id)
        .order_by(SeatingDB.id)
        .all()
    )


def seatings_for_venue(db: Session, venue_id):
    return (
        db.query(SeatingDB)
        .filter(SeatingDB.venue_id == venue_id)
        .order_by(SeatingDB.id)
        .all()
    )


def seatings_for_student(db: Session, student_id):
    return (
        db.query(SeatingDB)
        .filter(SeatingDB.student_id == student_id)
        .order_by(SeatingDB.id)
        .all()
    )


def all_seatings(db: Session):
    return db.query(SeatingDB).order_by(SeatingDB.id).all()
