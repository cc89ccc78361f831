from models.timeslot import TimeSlot
from models.subject import Subject
from models.teacher import Teacher
from models.school_class import SchoolClass
from models.timetable_entry import TimetableEntry
from models.validation_issue import ValidationIssue
from models.school_data import TimetableData, FeasibilityReport

__all__ = [
    "TimeSlot",
    "Subject",
    "Teacher",
    "SchoolClass",
    "TimetableEntry",
    "ValidationIssue",
    "TimetableData",
    "FeasibilityReport",
]
