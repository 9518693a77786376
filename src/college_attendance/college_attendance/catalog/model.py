from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Paper:
    """A course offering taught by one teacher to one or more sections."""

    paper_id: int
    name: str
    department: str
    semester: str
    year: str
    sections: tuple[str, ...] = ()
    teacher_id: Optional[int] = None

    def has_section(self, section: str) -> bool:
        return section in self.sections

    def is_taught_by(self, teacher_id: int) -> bool:
        return self.teacher_id is not None and int(self.teacher_id) == int(teacher_id)


@dataclass(frozen=True)
class Student:
    student_id: int
    name: str
    roll_no: str
    department: str
    year: str
    section: str


def paper_to_dict(paper: Paper) -> dict:
    return {
        "id": paper.paper_id,
        "paper": paper.name,
        "department": paper.department,
        "semester": paper.semester,
        "year": paper.year,
        "sections": list(paper.sections),
        "teacher": paper.teacher_id,
    }


def student_to_dict(student: Student) -> dict:
    return {"id": student.student_id, "name": student.name, "rollNo": student.roll_no}
