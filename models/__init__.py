from models.teacher import Teacher
from models.school_class import SchoolClass
from models.subject import Subject, SubjectCategory
from models.assignment import Assignment, Semester
from models.school_data import SchoolData

__all__ = [
    "Teacher",
    "SchoolClass",
    "Subject",
    "SubjectCategory",
    "Assignment",
    "Semester",
    "SchoolData",
]
