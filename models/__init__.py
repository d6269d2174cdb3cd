from models.department import Department
from models.subject import Subject
from models.academic_detail import AcademicDetail, DetailKey
from models.quiz_settings import QuizSettings
from models.structure_data import StructureData, DetailRecord

__all__ = [
    "Department",
    "Subject",
    "AcademicDetail",
    "DetailKey",
    "QuizSettings",
    "StructureData",
    "DetailRecord",
]
