from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from typing import Any

ASSESSMENT_CATEGORIES: tuple[str, ...] = (
    "Assignment",
    "Lab",
    "Quiz",
    "Midterm",
    "Test",
    "Final",
    "Project",
    "Participation",
    "Other",
)

DEFAULT_TARGET = 80.0


def new_id() -> str:
    return str(uuid.uuid4())


def to_number(value: Any, default: float | None = None) -> float | None:
    """Coerce persisted/user input to float; NaN, infinity and junk count as absent."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


@dataclass
class Assessment:
    id: str
    name: str
    category: str = "Other"
    weight: float = 0.0
    score: float | None = None
    is_final: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "weight": self.weight,
        }
        if self.score is not None:
            data["score"] = self.score
        if self.is_final:
            data["isFinal"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Assessment":
        return cls(
            id=str(data.get("id") or new_id()),
            name=str(data.get("name", "")),
            category=str(data.get("category") or "Other"),
            weight=to_number(data.get("weight"), 0.0),
            score=to_number(data.get("score")),
            is_final=bool(data.get("isFinal", False)),
        )


@dataclass
class GradingScheme:
    id: str
    name: str
    assessments: list[Assessment] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "assessments": [a.to_dict() for a in self.assessments],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GradingScheme":
        return cls(
            id=str(data.get("id") or new_id()),
            name=str(data.get("name", "")),
            assessments=[Assessment.from_dict(a) for a in data.get("assessments") or []],
        )


@dataclass
class Course:
    id: str
    name: str
    credits: float = 0.5
    target: float = DEFAULT_TARGET
    assessments: list[Assessment] = field(default_factory=list)
    grading_schemes: list[GradingScheme] | None = None
    active_scheme_index: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "credits": self.credits,
            "target": self.target,
            "assessments": [a.to_dict() for a in self.assessments],
        }
        if self.grading_schemes is not None:
            data["gradingSchemes"] = [s.to_dict() for s in self.grading_schemes]
        if self.active_scheme_index is not None:
            data["activeSchemeIndex"] = self.active_scheme_index
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Course":
        schemes = data.get("gradingSchemes")
        index = to_number(data.get("activeSchemeIndex"))
        return cls(
            id=str(data.get("id") or new_id()),
            name=str(data.get("name", "")),
            credits=to_number(data.get("credits"), 0.0),
            target=to_number(data.get("target"), DEFAULT_TARGET),
            assessments=[Assessment.from_dict(a) for a in data.get("assessments") or []],
            grading_schemes=[GradingScheme.from_dict(s) for s in schemes] if schemes is not None else None,
            active_scheme_index=int(index) if index is not None else None,
        )


@dataclass
class Semester:
    id: str
    name: str
    courses: list[Course] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "courses": [c.to_dict() for c in self.courses],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Semester":
        return cls(
            id=str(data.get("id") or new_id()),
            name=str(data.get("name", "")),
            courses=[Course.from_dict(c) for c in data.get("courses") or []],
        )


@dataclass
class StoredState:
    semesters: list[Semester] = field(default_factory=list)
    active_semester_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "semesters": [s.to_dict() for s in self.semesters],
            "activeSemesterId": self.active_semester_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StoredState":
        active = data.get("activeSemesterId")
        return cls(
            semesters=[Semester.from_dict(s) for s in data.get("semesters") or []],
            active_semester_id=str(active) if active is not None else None,
        )
