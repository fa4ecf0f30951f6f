from sqlalchemy import Boolean, Column, Integer, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base

class StudentDB(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key = True, index = True)
    roll_number = Column(String, unique = True, index = True, nullable = False)
    stu_name = Column(String, nullable = False)
    year = Column(Integer, nullable = True)
    # students without a department are not eligible for automatic seating
    dept = Column(String, nullable = True)
    section = Column(String, nullable = True)
    phone = Column(String, nullable = True)


class VenueDB(Base):
    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    block = Column(String, nullable=True)
    capacity = Column(Integer, nullable=False)

    # e.g. "Semester", "Internal", "Lab", "All"
    exam_type = Column(String, nullable=True, default="All")
    is_available = Column(Boolean, nullable=False, default=True)

    seatings = relationship("SeatingDB", back_populates="venue")


class ExamDB(Base):
    __tablename__ = "exams"

    id = Column(Integer, primary_key=True, index=True)
    exam_name = Column(String, nullable=False)
    exam_date = Column(String, nullable=True)
    session = Column(String, nullable=True)

    # internal exams are scoped to one department, semester exams leave it empty
    department = Column(String, nullable=True)

    seatings = relationship("SeatingDB", back_populates="exam", cascade="all, delete")


class SeatingDB(Base):
    __tablename__ = "exam_seatings"
    __table_args__ = (
        UniqueConstraint("exam_id", "student_id", name="uq_exam_seating_exam_student"),
    )

    id = Column(Integer, primary_key=True, index=True)

    exam_id = Column(Integer, ForeignKey("exams.id"), nullable=False, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    seat_no = Column(String, nullable=True)

    exam = relationship("ExamDB", back_populates="seatings")
    venue = relationship("VenueDB", back_populates="seatings")
    student = relationship("StudentDB")
