from __future__ import annotations

from dataclasses import replace
from typing import Any, List, Sequence, TypeVar

from gradetrackr.core.models import Assessment, Course, Semester, new_id

T = TypeVar("T")


def move_item(items: Sequence[T], from_index: int, to_index: int) -> List[T]:
    moved = list(items)
    if len(moved) <= 1 or from_index == to_index:
        return moved
    item = moved.pop(from_index)
    moved.insert(to_index, item)
    return moved


def move_up(items: Sequence[T], index: int) -> List[T]:
    if index <= 0 or index >= len(items):
        return list(items)
    return move_item(items, index, index - 1)


def move_down(items: Sequence[T], index: int) -> List[T]:
    if index < 0 or index >= len(items) - 1:
        return list(items)
    return move_item(items, index, index + 1)


def replace_by_id(items: Sequence[T], item_id: str, **changes: Any) -> List[T]:
    return [replace(item, **changes) if item.id == item_id else item for item in items]


def remove_by_id(items: Sequence[T], item_id: str) -> List[T]:
    return [item for item in items if item.id != item_id]


def find_by_id(items: Sequence[T], item_id: str | None) -> T | None:
    for item in items:
        if item.id == item_id:
            return item
    return None


def new_semester(existing: Sequence[Semester]) -> Semester:
    return Semester(id=new_id(), name=f"Sem {len(existing) + 1}", courses=[])


def new_course() -> Course:
    return Course(id=new_id(), name="New Course", credits=0.5, target=85, assessments=[])


def new_assessment(is_final: bool = False) -> Assessment:
    if is_final:
        return Assessment(id=new_id(), name="Final", category="Final", weight=0, is_final=True)
    return Assessment(id=new_id(), name="New Item", category="Other", weight=0)


def select_scheme(course: Course, index: int) -> Course:
    """Switch the live assessments to grading scheme ``index``.

    Scores already entered carry over to the new items by case-insensitive
    name. This is the only place that should touch ``active_scheme_index``.
    """
    if not course.grading_schemes or not 0 <= index < len(course.grading_schemes):
        return course

    scheme = course.grading_schemes[index]
    scores = {a.name.lower(): a.score for a in course.assessments}

    assessments = [
        replace(a, id=new_id(), score=scores.get(a.name.lower()))
        for a in scheme.assessments
    ]
    return replace(course, assessments=assessments, active_scheme_index=index)
