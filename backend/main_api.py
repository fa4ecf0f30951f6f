import logging
from typing import Optional

import pandas as pd
from fastapi import FastAPI, Depends, File, HTTPException, UploadFile
from fastapi.responses import FileResponse
from pydantic import BaseModel, Field
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas
from sqlalchemy.orm import Session

import repository
import seating_service
from config import EXPORT_DIR, LOG_LEVEL
from database import Base, engine, get_db
from db_models import ExamDB, StudentDB, VenueDB
from errors import ExamNotFound, SeatingError
from student_import import RosterError, student_import_excel

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title = "Exam Seat Allocator API")

Base.metadata.create_all(bind = engine)


class StudentCreate(BaseModel):
    roll_number: str = Field(..., min_length=1)
    stu_name: str
    dept: Optional[str] = None
    section: Optional[str] = None
    year: Optional[int] = None
    phone: Optional[str] = None


class VenueCreate(BaseModel):
    name: str = Field(..., min_length=1)
    block: Optional[str] = None
    capacity: int = Field(..., gt=0)
    exam_type: str = "All"
    is_available: bool = True


class ExamCreate(BaseModel):
    exam_name: str = Field(..., min_length=1)
    exam_date: Optional[str] = None
    session: Optional[str] = None
    department: Optional[str] = None


def raise_http(e: SeatingError):
    status_code = 404 if isinstance(e, ExamNotFound) else 400
    raise HTTPException(status_code=status_code, detail=str(e))


def student_out(s):
    return {
        "id": s.id,
        "roll_number": s.roll_number,
        "stu_name": s.stu_name,
        "dept": s.dept,
        "section": s.section,
        "year": s.year,
    }


def venue_out(v):
    return {
        "id": v.id,
        "name": v.name,
        "block": v.block,
        "capacity": v.capacity,
        "exam_type": v.exam_type,
        "is_available": v.is_available,
    }


def exam_out(e):
    return {
        "id": e.id,
        "exam_name": e.exam_name,
        "exam_date": e.exam_date,
        "session": e.session,
        "department": e.department,
    }


def seating_out(s):
    return {
        "id": s.id,
        "exam_id": s.exam_id,
        "venue_id": s.venue_id,
        "venue_name": s.venue.name,
        "student_id": s.student_id,
        "roll_number": s.student.roll_number,
        "stu_name": s.student.stu_name,
        "dept": s.student.dept,
        "seat_no": s.seat_no,
    }


@app.get("/")
def root():
    return {"message": "Exam Seat Allocator API is running !"}


@app.get("/students")
def get_students(db: Session = Depends(get_db)):
    students = db.query(StudentDB).order_by(StudentDB.roll_number).all()
    return [student_out(s) for s in students]


@app.post("/students", status_code=201)
def create_student(req: StudentCreate, db: Session = Depends(get_db)):
    if repository.find_student_by_roll(db, req.roll_number):
        raise HTTPException(status_code=409, detail=f"Student {req.roll_number} already exists")

    student = StudentDB(**req.model_dump())
    db.add(student)
    db.commit()
    db.refresh(student)
    return student_out(student)


@app.post("/students/import")
def import_students_from_excel(file: UploadFile = File(...), db: Session = Depends(get_db)):
    try:
        rows = student_import_excel(file.file.read())
    except RosterError as e:
        raise HTTPException(status_code=400, detail=str(e))

    inserted = 0
    skipped = 0
    seen = set()

    for row in rows:
        if row["roll_number"] in seen or repository.find_student_by_roll(db, row["roll_number"]):
            skipped += 1
            continue

        seen.add(row["roll_number"])
        db.add(StudentDB(**row))
        inserted += 1

    db.commit()
    logger.info("Student import: %d inserted, %d skipped", inserted, skipped)

    return {
        "message": "Student import completed",
        "inserted": inserted,
        "skipped_duplicates": skipped
    }


@app.get("/venues")
def get_venues(db: Session = Depends(get_db)):
    return [venue_out(v) for v in repository.find_all_venues(db)]


@app.post("/venues", status_code=201)
def create_venue(req: VenueCreate, db: Session = Depends(get_db)):
    venue = repository.create_venue(db, **req.model_dump())
    db.commit()
    db.refresh(venue)
    return venue_out(venue)


def get_venue_or_404(db, venue_id):
    venue = db.query(VenueDB).filter(VenueDB.id == venue_id).first()
    if not venue:
        raise HTTPException(status_code=404, detail="Venue not found")
    return venue


@app.put("/venues/{venue_id}")
def update_venue(venue_id: int, req: VenueCreate, db: Session = Depends(get_db)):
    venue = get_venue_or_404(db, venue_id)
    for field, value in req.model_dump().items():
        setattr(venue, field, value)
    db.commit()
    db.refresh(venue)
    return venue_out(venue)


@app.delete("/venues/{venue_id}")
def delete_venue(venue_id: int, db: Session = Depends(get_db)):
    venue = get_venue_or_404(db, venue_id)
    if repository.seatings_for_venue(db, venue_id):
        raise HTTPException(status_code=409, detail="Venue has seat allocations")
    db.delete(venue)
    db.commit()
    return {"message": "Venue deleted", "id": venue_id}


@app.get("/exams")
def get_exams(db: Session = Depends(get_db)):
    return [exam_out(e) for e in db.query(ExamDB).order_by(ExamDB.id).all()]


@app.post("/exams", status_code=201)
def create_exam(req: ExamCreate, db: Session = Depends(get_db)):
    exam = ExamDB(**req.model_dump())
    db.add(exam)
    db.commit()
    db.refresh(exam)
    return exam_out(exam)


@app.post("/exams/{exam_id}/allocate")
def auto_allocate(exam_id: int, db: Session = Depends(get_db)):
    try:
        seatings = seating_service.auto_allocate(db, exam_id)
    except SeatingError as e:
        raise_http(e)

    overflow = sum(1 for s in seatings if s.seat_no and s.seat_no.startswith("OVF-"))
    return {
        "message": "Allocation completed",
        "exam_id": exam_id,
        "allocated": len(seatings),
        "overflow": overflow,
        "seatings": [seating_out(s) for s in seatings],
    }


@app.post("/exams/{exam_id}/allocate/upload")
def upload_allocation(exam_id: int, file: UploadFile = File(...), db: Session = Depends(get_db)):
    logger.info("Received allocation upload for exam %s: %s", exam_id, file.filename)
    try:
        content = file.file.read().decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File must be UTF-8 encoded CSV")

    try:
        seatings = seating_service.import_manual_allocations(db, exam_id, content)
    except SeatingError as e:
        raise_http(e)

    return {
        "message": "Allocation imported",
        "exam_id": exam_id,
        "allocated": len(seatings),
        "seatings": [seating_out(s) for s in seatings],
    }


@app.get("/seatings")
def get_all_seatings(db: Session = Depends(get_db)):
    return [seating_out(s) for s in repository.all_seatings(db)]


@app.get("/seatings/exam/{exam_id}")
def get_seating_by_exam(exam_id: int, db: Session = Depends(get_db)):
    return [seating_out(s) for s in seating_service.seatings_for_exam(db, exam_id)]


@app.get("/seatings/venue/{venue_id}")
def get_seating_by_venue(venue_id: int, db: Session = Depends(get_db)):
    return [seating_out(s) for s in seating_service.seatings_for_venue(db, venue_id)]


@app.get("/seatings/student/{student_id}")
def get_seating_by_student(student_id: int, db: Session = Depends(get_db)):
    return [seating_out(s) for s in seating_service.seatings_for_student(db, student_id)]


@app.get("/public/seat-lookup")
def seat_lookup(roll_number: str, exam_id: int, db: Session = Depends(get_db)):
    student = repository.find_student_by_roll(db, roll_number)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")

    seating = next(
        (s for s in seating_service.seatings_for_student(db, student.id) if s.exam_id == exam_id),
        None,
    )
    if not seating:
        raise HTTPException(status_code=404, detail="Seat not allocated yet")

    return {
        "roll_number": student.roll_number,
        "stu_name": student.stu_name,
        "exam_id": exam_id,
        "exam_name": seating.exam.exam_name,
        "venue_name": seating.venue.name,
        "block": seating.venue.block,
        "seat_no": seating.seat_no,
    }


def plan_rows(db, exam_id):
    if repository.find_exam(db, exam_id) is None:
        raise HTTPException(status_code=404, detail="Exam not found")

    seatings = seating_service.seatings_for_exam(db, exam_id)
    if not seatings:
        raise HTTPException(status_code=404, detail="No allocation found. Run the allocation first.")

    # seatings_for_exam returns packing order
    return [seating_out(s) for s in seatings]


@app.get("/exams/{exam_id}/export/excel")
def export_allocation_excel(exam_id: int, db: Session = Depends(get_db)):
    rows = plan_rows(db, exam_id)

    df = pd.DataFrame(rows, columns=["roll_number", "stu_name", "dept", "venue_name", "seat_no"])

    EXPORT_DIR.mkdir(parents=True, exist_ok=True)
    file_path = EXPORT_DIR / f"seating_exam_{exam_id}.xlsx"
    df.to_excel(file_path, index=False)

    return FileResponse(
        path=str(file_path),
        filename=file_path.name,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )


@app.get("/exams/{exam_id}/export/pdf")
def export_allocation_pdf(exam_id: int, db: Session = Depends(get_db)):
    rows = plan_rows(db, exam_id)
    exam = repository.find_exam(db, exam_id)

    EXPORT_DIR.mkdir(parents=True, exist_ok=True)
    file_path = EXPORT_DIR / f"seating_exam_{exam_id}.pdf"

    c = canvas.Canvas(str(file_path), pagesize=A4)
    width, height = A4

    y = height - 50
    c.setFont("Helvetica-Bold", 14)
    c.drawString(50, y, f"Seating Arrangement - {exam.exam_name}")
    y -= 30

    c.setFont("Helvetica", 10)
    c.drawString(50, y, "Roll No")
    c.drawString(140, y, "Name")
    c.drawString(300, y, "Dept")
    c.drawString(360, y, "Venue")
    c.drawString(480, y, "Seat")
    y -= 15

    c.line(50, y, 550, y)
    y -= 15

    for row in rows:
        if y < 60:
            c.showPage()
            c.setFont("Helvetica", 10)
            y = height - 50

        c.drawString(50, y, row["roll_number"])
        c.drawString(140, y, row["stu_name"][:24])
        c.drawString(300, y, row["dept"] or "")
        c.drawString(360, y, row["venue_name"][:18])
        c.drawString(480, y, row["seat_no"] or "")
        y -= 15

    c.save()

    return FileResponse(
        path=str(file_path),
        filename=file_path.name,
        media_type="application/pdf"
    )
