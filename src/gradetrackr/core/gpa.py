from typing import Iterable, List, Optional, Tuple

from gradetrackr.core.grades import current_total
from gradetrackr.core.models import Course, to_number

# (minimum percent, grade point), checked top-down
GRADE_POINT_TABLE: List[Tuple[float, float]] = [
    (85, 4.0),
    (80, 3.7),
    (77, 3.3),
    (73, 3.0),
    (70, 2.7),
    (67, 2.3),
    (63, 2.0),
    (60, 1.7),
    (57, 1.3),
    (53, 1.0),
    (50, 0.7),
]


def grade_point_from_percent(percent: float) -> float:
    value = to_number(percent)
    if value is None:
        return 0.0
    for threshold, point in GRADE_POINT_TABLE:
        if value >= threshold:
            return point
    return 0.0


def overall_gpa(courses: Iterable[Course]) -> Optional[float]:
    """
    Credit-weighted GPA of each course's current total.
    GPA = Σ(grade_point * credits) / Σ(credits), None when Σ(credits) <= 0
    """
    quality_points = 0.0
    total_credits = 0.0

    for course in courses:
        credits = to_number(course.credits, 0.0)
        quality_points += grade_point_from_percent(current_total(course)) * credits
        total_credits += credits

    if total_credits <= 0:
        return None

    return quality_points / total_credits
