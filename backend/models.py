

class Student:
    def __init__(self, id, roll_number, dept, name=None):
        self.id = id
        self.roll_number = roll_number
        self.dept = dept
        self.name = name

    @classmethod
    def from_db(cls, row):
        return cls(row.id, row.roll_number, row.dept, row.stu_name)

    def __repr__(self):
        return f"Student({self.roll_number!r}, {self.dept!r})"

class Venue:
    def __init__(self, id, name, capacity):
        self.id = id
        self.name = name
        self.capacity = capacity

    @classmethod
    def from_db(cls, row):
        return cls(row.id, row.name, row.capacity)

    def __repr__(self):
        return f"Venue({self.name!r}, {self.capacity})"

class Seat:
    def __init__(self, student, venue, seat_no):
        self.student = student
        self.venue = venue
        self.seat_no = seat_no

    def __repr__(self):
        return f"Seat({self.student.roll_number!r} -> {self.venue.name!r} {self.seat_no})"
