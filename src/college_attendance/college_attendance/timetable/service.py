from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Optional, Sequence

from ..app_logger import get_logger
from ..catalog.model import Paper
from ..catalog.repository import PaperRepository
from ..common.validators import optional_int, require_choice, require_non_empty
from ..core.constants import DEFAULT_ROOM, TIMETABLE_DAYS, TIMETABLE_HOURS, TIMETABLE_MIN_PAPERS_PER_SECTION
from ..core.enums import Section, Semester
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import TimeSchedule
from .repository import TimetableRepository

logger = get_logger("timetable")

_UPDATABLE = ("department", "semester", "year", "day", "hour", "paper_id", "teacher_id", "section", "room", "is_active")


def slot_to_dict(slot: TimeSchedule) -> dict:
    return {
        "id": slot.schedule_id,
        "department": slot.department,
        "semester": slot.semester,
        "year": slot.year,
        "day": slot.day,
        "hour": slot.hour,
        "paper": slot.paper_id,
        "paperName": slot.paper_name,
        "teacher": slot.teacher_id,
        "section": slot.section,
        "room": slot.room,
        "isActive": slot.is_active,
    }


def _check_day(day: str) -> str:
    if day not in TIMETABLE_DAYS:
        raise ValidationError(f"Invalid day {day!r}. Allowed: {', '.join(TIMETABLE_DAYS)}", code="invalid_day")
    return day


def _check_hour(hour: Any) -> str:
    hour = str(hour)
    if hour not in TIMETABLE_HOURS:
        raise ValidationError(f"Invalid hour {hour!r}. Allowed: {', '.join(TIMETABLE_HOURS)}", code="invalid_hour")
    return hour


def _squash(value: str) -> str:
    return " ".join((value or "").split())


def _pick_paper(candidates: Sequence[Paper], usage: dict[int, int], used_today: set, busy_teachers: set) -> Paper:
    """Least used paper, preferring one the section has not had today and whose teacher is free."""
    fresh = [p for p in candidates if p.paper_id not in used_today]
    free = [p for p in fresh if p.teacher_id not in busy_teachers]
    pool = free or fresh or list(candidates)
    return min(pool, key=lambda p: usage[p.paper_id])


class TimetableService:
    def __init__(self, schedules: TimetableRepository, papers: PaperRepository):
        self._schedules = schedules
        self._papers = papers

    def add_slot(
        self,
        *,
        department: str,
        semester: str,
        year: str,
        day: str,
        hour: str,
        paper_id: Optional[int],
        teacher_id: Optional[int],
        section: str,
        room: Optional[str] = None,
    ) -> TimeSchedule:
        if not all([department, semester, year, day, hour, paper_id, teacher_id, section]):
            raise ValidationError("All fields are required", code="missing_fields")

        semester = require_choice(semester, Semester, "semester").value
        section = require_choice(section, Section, "section").value
        day = _check_day(day)
        hour = _check_hour(hour)

        if self._papers.get_by_id(int(paper_id)) is None:
            raise ValidationError("Invalid paper selected", code="invalid_paper")

        self._raise_on_conflicts(
            department=department, semester=semester, year=year, day=day, hour=hour, section=section
        )

        # The UNIQUE slot index still rejects a concurrent insert that passed the check above.
        schedule_id = self._schedules.create(
            department=department,
            semester=semester,
            year=year,
            day=day,
            hour=hour,
            paper_id=int(paper_id),
            teacher_id=int(teacher_id),
            section=section,
            room=(room or "").strip() or DEFAULT_ROOM,
        )
        return self.get_slot(schedule_id)

    def update_slot(self, schedule_id: int, changes: Mapping[str, Any]) -> TimeSchedule:
        current = self.get_slot(schedule_id)

        fields: dict[str, Any] = {}
        for key in _UPDATABLE:
            value = changes.get(key)
            if value is None or value == "":
                continue
            fields[key] = value

        if "semester" in fields:
            fields["semester"] = require_choice(fields["semester"], Semester, "semester").value
        if "section" in fields:
            fields["section"] = require_choice(fields["section"], Section, "section").value
        if "day" in fields:
            fields["day"] = _check_day(fields["day"])
        if "hour" in fields:
            fields["hour"] = _check_hour(fields["hour"])
        for key in ("paper_id", "teacher_id"):
            if key in fields:
                fields[key] = optional_int(fields[key], key)
        if "paper_id" in fields and self._papers.get_by_id(fields["paper_id"]) is None:
            raise ValidationError("Invalid paper selected", code="invalid_paper")
        if "is_active" in fields:
            fields["is_active"] = bool(fields["is_active"])

        updated = replace(current, **fields)

        if all(k in fields for k in ("day", "hour", "section")):
            self._raise_on_conflicts(
                department=updated.department,
                semester=updated.semester,
                year=updated.year,
                day=updated.day,
                hour=updated.hour,
                section=updated.section,
                exclude_id=current.schedule_id,
            )

        self._schedules.update(updated)
        return self.get_slot(current.schedule_id)

    def delete_slot(self, schedule_id: int) -> None:
        if not self._schedules.delete(schedule_id=int(schedule_id)):
            raise NotFoundError("Time schedule not found")

    def get_slot(self, schedule_id: int) -> TimeSchedule:
        slot = self._schedules.get_by_id(int(schedule_id))
        if slot is None:
            raise NotFoundError("Time schedule not found")
        return slot

    def list_for_teacher(self, teacher_id: int) -> list[TimeSchedule]:
        return list(self._schedules.list_active(teacher_id=int(teacher_id)))

    def list_for_department(self, department: str) -> list[TimeSchedule]:
        return list(self._schedules.list_active(department=department))

    def active_slots(self, *, paper_id: int, teacher_id: int, section: str) -> list[TimeSchedule]:
        return list(self._schedules.list_active(paper_id=int(paper_id), teacher_id=int(teacher_id), section=section))

    def section_timetable(self, *, department: str, semester: str, year: str, section: str) -> dict:
        """Monday..Saturday x hour matrix for one section; empty cells are None."""
        for name, value in (("department", department), ("semester", semester), ("year", year), ("section", section)):
            require_non_empty(value, name)

        slots = list(
            self._schedules.list_active(department=department, semester=semester, year=year, section=section)
        )
        by_cell = {(s.day, s.hour): s for s in slots}
        timetable = {
            day: {hour: slot_to_dict(by_cell[(day, hour)]) if (day, hour) in by_cell else None for hour in TIMETABLE_HOURS}
            for day in TIMETABLE_DAYS
        }
        return {
            "department": department,
            "semester": semester,
            "year": year,
            "section": section,
            "timetable": timetable,
            "timeSchedules": [slot_to_dict(s) for s in slots],
        }

    def timetable_papers(self, teacher_id: int) -> list[dict]:
        """Distinct papers a teacher has active slots for, with their scheduled sections and days."""
        papers: dict[int, dict] = {}
        for slot in self._schedules.list_active(teacher_id=int(teacher_id)):
            entry = papers.get(slot.paper_id)
            if entry is None:
                entry = {
                    "id": slot.paper_id,
                    "paper": slot.paper_name,
                    "semester": slot.semester,
                    "year": slot.year,
                    "department": slot.department,
                    "scheduledSections": [],
                    "scheduledDays": [],
                    "totalSchedules": 0,
                }
                papers[slot.paper_id] = entry
            if slot.section not in entry["scheduledSections"]:
                entry["scheduledSections"].append(slot.section)
            if slot.day not in entry["scheduledDays"]:
                entry["scheduledDays"].append(slot.day)
            entry["totalSchedules"] += 1

        out = list(papers.values())
        for entry in out:
            entry["sections"] = list(entry["scheduledSections"])
        return out

    def generate(self, *, department: str, semester: str, year: str) -> dict:
        """Rebuild the weekly timetable of one department semester.

        Existing slots of that semester are removed first. Each section taught
        by a staffed paper then gets one paper per Monday..Saturday x hour cell.
        """
        for name, value in (("department", department), ("semester", semester), ("year", year)):
            require_non_empty(value, name)
        department, year = _squash(department), _squash(year)
        semester = require_choice(_squash(semester), Semester, "semester").value

        papers = list(self._papers.list_for_scope(department=department, semester=semester, year=year))
        if not papers:
            raise ValidationError(
                f"No papers found for {department} department, semester {semester}, and year {year}.",
                code="no_papers",
            )

        staffed = [p for p in papers if p.teacher_id is not None and p.sections]
        if not staffed:
            raise ValidationError(
                "No valid papers with assigned teacher and sections found for timetable generation.",
                code="no_valid_papers",
                details={
                    "paperDetails": [
                        {"paper": p.name, "hasTeacher": p.teacher_id is not None, "sections": list(p.sections)}
                        for p in papers
                    ]
                },
            )

        sections = list(dict.fromkeys(s for p in staffed for s in p.sections))
        papers_by_section = {s: [p for p in staffed if p.has_section(s)] for s in sections}
        section_paper_count = {s: len(papers_by_section[s]) for s in sections}

        warnings = []
        thin = [s for s in sections if section_paper_count[s] < TIMETABLE_MIN_PAPERS_PER_SECTION]
        if thin:
            warnings.append(
                "Sections with limited papers (may have repeated subjects): "
                + ", ".join(f"{s}({section_paper_count[s]} papers)" for s in thin)
            )

        removed = self._schedules.delete_scope(department=department, semester=semester, year=year)

        usage = {p.paper_id: 0 for p in staffed}
        used_today: dict[tuple[str, str], set] = {}
        busy_teachers: dict[tuple[str, str], set] = {}
        generated: list[TimeSchedule] = []
        skipped: list[dict] = []

        for day in TIMETABLE_DAYS:
            for hour in TIMETABLE_HOURS:
                busy = busy_teachers.setdefault((day, hour), set())
                for section in sections:
                    today = used_today.setdefault((section, day), set())
                    paper = _pick_paper(papers_by_section[section], usage, today, busy)
                    try:
                        schedule_id = self._schedules.create(
                            department=department,
                            semester=semester,
                            year=year,
                            day=day,
                            hour=hour,
                            paper_id=paper.paper_id,
                            teacher_id=int(paper.teacher_id),
                            section=section,
                            room=DEFAULT_ROOM,
                        )
                    except ConflictError as e:
                        skipped.append({"section": section, "day": day, "hour": hour, "error": e.message})
                        continue

                    generated.append(
                        TimeSchedule(
                            schedule_id=schedule_id,
                            department=department,
                            semester=semester,
                            year=year,
                            day=day,
                            hour=hour,
                            paper_id=paper.paper_id,
                            teacher_id=int(paper.teacher_id),
                            section=section,
                            room=DEFAULT_ROOM,
                            paper_name=paper.name,
                        )
                    )
                    today.add(paper.paper_id)
                    busy.add(paper.teacher_id)
                    usage[paper.paper_id] += 1

        total = len(sections) * len(TIMETABLE_DAYS) * len(TIMETABLE_HOURS)
        coverage = round(len(generated) / total * 100, 1)
        message = f"Timetable generated: {len(generated)}/{total} slots filled ({coverage}% coverage)"
        if skipped:
            message += f". {len(skipped)} slots could not be filled."
        logger.info(
            "timetable generated department=%s semester=%s year=%s filled=%d/%d removed=%d",
            department,
            semester,
            year,
            len(generated),
            total,
            removed,
        )

        return {
            "message": message,
            "generatedCount": len(generated),
            "totalSlots": total,
            "coveragePercentage": coverage,
            "removedCount": removed,
            "sections": sections,
            "sectionPaperCount": section_paper_count,
            "warnings": warnings,
            "schedules": [slot_to_dict(s) for s in generated],
            "skippedSlots": skipped,
        }

    def _raise_on_conflicts(self, *, exclude_id: Optional[int] = None, **slot: str) -> None:
        conflicts = self._schedules.find_conflicts(exclude_id=exclude_id, **slot)
        if conflicts:
            raise ConflictError(
                "Time slot conflict detected for this section",
                details={
                    "conflicts": [{"paper": c.paper_id, "section": c.section, "teacher": c.teacher_id} for c in conflicts]
                },
            )
