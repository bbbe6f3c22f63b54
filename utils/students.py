from __future__ import annotations

import logging
from typing import Any, List, Mapping, Union

from models import Payment, Student, new_id
from utils.errors import ConflictError
from utils.repository import Repository
from utils.timezone_helpers import utc_now
from utils.updates import StudentUpdate
from utils.validation import coerce_date, optional_text, validate_student

logger = logging.getLogger(__name__)

_FIELDS = (
    "name",
    "roll_number",
    "class_name",
    "section",
    "parent_name",
    "contact_number",
    "email",
    "address",
    "admission_date",
)


class StudentRepository(Repository):
    model = Student
    entity = "Student"

    def _query(self):
        return self.session.query(Student).order_by(Student.name.asc(), Student.id.asc())

    def add(self, data: Mapping[str, Any]) -> Student:
        validate_student(data)
        now = utc_now()
        student = Student(
            id=new_id(),
            name=data["name"],
            roll_number=data["roll_number"],
            class_name=data["class_name"],
            section=data.get("section") or "",
            parent_name=data["parent_name"],
            contact_number=data["contact_number"],
            email=optional_text(data.get("email")),
            address=data["address"],
            admission_date=coerce_date(data["admission_date"], "admission_date", "Admission date"),
            created_at=now,
            updated_at=now,
        )
        self._save(student)
        logger.info("Created student %s (%s)", student.id, student.roll_number)
        return student

    def update(self, student_id: str, changes: Union[StudentUpdate, Mapping[str, Any]]) -> Student:
        student = self._require(student_id)
        patch = StudentUpdate.coerce(changes).changes()
        merged = {field: getattr(student, field) for field in _FIELDS}
        merged.update(patch)
        validate_student(merged)

        for field, value in patch.items():
            if field == "admission_date":
                value = coerce_date(value, "admission_date", "Admission date")
            elif field == "email":
                value = optional_text(value)
            setattr(student, field, value)
        student.updated_at = utc_now()
        self._save(student)
        return student

    def get_by_class(self, class_name: str) -> List[Student]:
        return self._read(
            f"students in class {class_name}",
            lambda: self._query().filter(Student.class_name == class_name).all(),
            [],
        )

    def delete(self, student_id: str) -> bool:
        student = self._require(student_id)
        if self._referenced_by_payment(Payment.student_id, student_id):
            raise ConflictError("Cannot delete student with payment records")
        self._remove(student)
        logger.info("Deleted student %s", student_id)
        return True
