class SeatingError(Exception):
    """Base class for seat allocation failures a caller can act on."""


class ExamNotFound(SeatingError):
    def __init__(self, exam_id):
        super().__init__(f"Exam not found: {exam_id}")
        self.exam_id = exam_id


class NoEligibleStudents(SeatingError):
    def __init__(self, department=None):
        message = (
            "No eligible students found for this exam. "
            "Ensure students have their department set in their profile."
        )
        if department:
            message += f" (exam department: {department})"
        super().__init__(message)
        self.department = department


class NoAvailableVenues(SeatingError):
    def __init__(self):
        super().__init__(
            "No available venues found. Add a venue with a positive capacity first."
        )


class EmptyAllocationResult(SeatingError):
    def __init__(self):
        super().__init__("Could not build any seat allocations. Check student data.")


class EmptyFile(SeatingError):
    def __init__(self):
        super().__init__("No valid data found in CSV. Check format.")


class ValidationFailed(SeatingError):
    """Raised with every line-level error collected during a CSV import."""

    max_shown = 5

    def __init__(self, errors):
        self.errors = list(errors)
        message = "; ".join(self.errors[:self.max_shown])
        if len(self.errors) > self.max_shown:
            message += f"... ({len(self.errors) - self.max_shown} more errors)"
        super().__init__(f"Validation failed. Errors: {message}")
