import heapq
import logging
from collections import deque

from errors import EmptyAllocationResult, NoAvailableVenues, NoEligibleStudents
from layouts import generate_layout, sort_venues
from models import Seat

logger = logging.getLogger(__name__)


def department_key(dept):
    return dept.strip().upper()


def is_eligible(student):
    return student.dept is not None and student.dept.strip() != ""


def build_department_queues(students, department_scope=None):
    """
    Group eligible students into one FIFO queue per department.

    Students without a department are dropped. When `department_scope` is set
    only that department (compared trimmed, case-insensitively) is kept. Each
    queue is ordered by roll number so re-runs on the same data agree.
    """
    eligible = [s for s in students if is_eligible(s)]

    if department_scope is not None and department_scope.strip():
        scope = department_key(department_scope)
        eligible = [s for s in eligible if department_key(s.dept) == scope]

    if not eligible:
        raise NoEligibleStudents(department_scope)

    by_dept = {}
    for student in eligible:
        by_dept.setdefault(department_key(student.dept), []).append(student)

    queues = {}
    for dept in sorted(by_dept):
        members = sorted(by_dept[dept], key=lambda s: s.roll_number or "")
        queues[dept] = deque(members)

    return queues


def interleave_departments(queues):
    """
    Linearise the department queues so same-department students sit as far
    apart as possible.

    Greedy task-scheduler: always take from the department with the most
    students left, unless it was the department placed last and another one
    is still waiting. Equal counts fall back to the order of `queues`.
    """
    order = {dept: i for i, dept in enumerate(queues)}
    heap = [(-len(q), order[dept], dept) for dept, q in queues.items() if q]
    heapq.heapify(heap)

    result = []
    last_dept = None
    held = None

    while heap or held is not None:
        curr = heapq.heappop(heap) if heap else None

        if curr is not None and curr[2] == last_dept:
            held = curr
            curr = heapq.heappop(heap) if heap else None

        if curr is None:
            # only the last placed department is left
            curr = held
            held = None

        if curr is None:
            break

        _, rank, dept = curr
        queue = queues[dept]
        result.append(queue.popleft())
        last_dept = dept

        if held is not None:
            heapq.heappush(heap, held)
            held = None

        if queue:
            heapq.heappush(heap, (-len(queue), rank, dept))

    return result


def pack_seats(ordered_students, venues):
    """
    Lay the ordered students into venues, largest venue first.

    Seats are labelled row-major (A1, A2 .. B1 ..). Students left over once
    every venue is full go to the last venue as OVF-1, OVF-2, ...
    """
    venues = sort_venues(venues)
    if not venues:
        raise NoAvailableVenues()

    seats = []
    seen = set()
    idx = 0
    total = len(ordered_students)

    for venue in venues:
        labels = generate_layout(venue.capacity)
        filled = 0

        while filled < venue.capacity and idx < total:
            student = ordered_students[idx]
            idx += 1

            if student.id in seen:
                continue
            seen.add(student.id)

            seats.append(Seat(student, venue, labels[filled]))
            filled += 1

        if idx >= total:
            break

    if idx < total:
        last_venue = venues[-1]
        overflow = 0
        while idx < total:
            student = ordered_students[idx]
            idx += 1
            if student.id in seen:
                continue
            seen.add(student.id)
            overflow += 1
            seats.append(Seat(student, last_venue, f"OVF-{overflow}"))

        if overflow:
            logger.warning(
                "Venue capacity exhausted: %d students placed as overflow in %s",
                overflow, last_venue.name,
            )

    if not seats:
        raise EmptyAllocationResult()

    return seats


def allocate(students, venues, department_scope=None):
    queues = build_department_queues(students, department_scope)
    ordered = interleave_departments(queues)
    return pack_seats(ordered, venues)
