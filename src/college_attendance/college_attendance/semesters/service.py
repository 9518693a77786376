from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import describe_date, format_date
from ..common.validators import require_choice, require_non_empty
from ..core.enums import Semester
from ..core.exceptions import (
    NotFoundError,
    SemesterRangeError,
    SemesterSetupRequiredError,
    ValidationError,
)
from .model import SemesterSetting
from .repository import SemesterRepository


def is_date_within(settings: Sequence[SemesterSetting], on_date: date) -> bool:
    """True iff at least one active window contains on_date."""
    return any(s.is_active and s.covers(on_date) for s in settings)


def setting_to_dict(s: SemesterSetting) -> dict:
    return {
        "id": s.setting_id,
        "department": s.department,
        "academicYear": s.academic_year,
        "semester": s.semester,
        "startDate": format_date(s.start_date),
        "endDate": format_date(s.end_date),
        "isActive": s.is_active,
        "description": s.description,
    }


class SemesterService:
    def __init__(self, settings: SemesterRepository):
        self._settings = settings

    def validate_date(self, *, department: str, academic_year: str, on_date: date) -> SemesterSetting:
        """Return the active window covering on_date.

        Raises SemesterSetupRequiredError when the department/year has no
        active window at all, SemesterRangeError when windows exist but none
        covers the date. The latter carries the ranges for the UI.
        """
        settings = list(self._settings.list(department=department, academic_year=academic_year, active_only=True))
        for s in settings:
            if s.covers(on_date):
                return s

        if not settings:
            raise SemesterSetupRequiredError(
                "No semester dates configured. Please contact HOD to set semester start and end dates.",
                details={"requiresSetup": True},
            )

        ranges = ", ".join(f"{s.semester}: {describe_date(s.start_date)} to {describe_date(s.end_date)}" for s in settings)
        raise SemesterRangeError(
            f"Attendance date {describe_date(on_date)} is outside semester range. Valid ranges: {ranges}",
            details={
                "semesterRanges": [
                    {"semester": s.semester, "startDate": format_date(s.start_date), "endDate": format_date(s.end_date)}
                    for s in settings
                ]
            },
        )

    def check_date(self, *, department: str, semester: str, academic_year: str, on_date: date) -> dict:
        setting = self.find_active(department=department, semester=semester, academic_year=academic_year)
        if setting is None:
            return {
                "isValid": False,
                "message": "No semester settings found for this department and semester",
                "requiresSetup": True,
            }

        valid = setting.covers(on_date)
        return {
            "isValid": valid,
            "message": "Date is within semester range"
            if valid
            else f"Date must be between {describe_date(setting.start_date)} and {describe_date(setting.end_date)}",
            "semesterStart": format_date(setting.start_date),
            "semesterEnd": format_date(setting.end_date),
            "settings": setting_to_dict(setting),
        }

    def find_active(self, *, department: str, semester: str, academic_year: str) -> Optional[SemesterSetting]:
        settings = self._settings.list(
            department=department, academic_year=academic_year, semester=semester, active_only=True
        )
        return settings[0] if settings else None

    def current_semester(self, *, department: str, academic_year: str, today: date) -> Optional[SemesterSetting]:
        for s in self._settings.list(department=department, academic_year=academic_year, active_only=True):
            if s.covers(today):
                return s
        return None

    def list_settings(self, *, department: str, academic_year: Optional[str] = None) -> list[SemesterSetting]:
        return list(self._settings.list(department=department, academic_year=academic_year, active_only=True))

    def save_settings(
        self,
        *,
        department: str,
        academic_year: str,
        semester: str,
        start_date: Optional[date],
        end_date: Optional[date],
        description: str = "",
    ) -> tuple[SemesterSetting, bool]:
        """Create or update the window for (department, academic_year, semester).

        Returns the stored setting and whether it was newly created.
        """
        department = require_non_empty(department, "department")
        academic_year = require_non_empty(academic_year, "academicYear")
        semester = require_choice(require_non_empty(semester, "semester"), Semester, "semester").value
        if start_date is None or end_date is None:
            raise ValidationError("All required fields must be provided", code="missing_fields")
        if end_date <= start_date:
            raise ValidationError("End date must be after start date", code="invalid_range")

        description = (description or "").strip()
        existing = self._settings.get_by_key(department=department, academic_year=academic_year, semester=semester)
        if existing:
            self._settings.update(
                setting_id=existing.setting_id, start_date=start_date, end_date=end_date, description=description
            )
            setting_id, created = existing.setting_id, False
        else:
            setting_id = self._settings.create(
                department=department,
                academic_year=academic_year,
                semester=semester,
                start_date=start_date,
                end_date=end_date,
                description=description,
            )
            created = True

        saved = self._settings.get_by_id(setting_id)
        if saved is None:
            raise NotFoundError("Semester settings not found")
        return saved, created

    def delete_settings(self, *, setting_id: int) -> None:
        if not self._settings.delete(setting_id=int(setting_id)):
            raise NotFoundError("Semester settings not found")
