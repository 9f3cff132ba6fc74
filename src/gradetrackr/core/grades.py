from __future__ import annotations

from typing import Iterable

from gradetrackr.core.models import Assessment, Course, to_number

REQUIRED_FINAL_MIN = 0.0
# Above 100 means the target is out of reach; keep the real figure up to 2x.
REQUIRED_FINAL_MAX = 200.0
WEIGHT_SUM_EPSILON = 0.01


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _weight(assessment: Assessment) -> float:
    return to_number(assessment.weight, 0.0)


def _graded_fraction(assessment: Assessment) -> float | None:
    """weight fraction x score fraction, or None when the item is ungraded."""
    score = to_number(assessment.score)
    if score is None:
        return None
    return (_weight(assessment) / 100) * (score / 100)


def current_total(course: Course) -> float:
    """Weighted sum of graded assessments, as a percent.

    Ungraded rows contribute nothing. The result is not normalised by the
    actual weight sum, so it only reads as a course grade once weights add
    up to 100.
    """
    total = 0.0
    for assessment in course.assessments:
        fraction = _graded_fraction(assessment)
        if fraction is None:
            continue
        total += fraction * 100
    return total


def weights_sum(course: Course) -> float:
    return sum(_weight(a) for a in course.assessments)


def weights_valid(course: Course, epsilon: float = WEIGHT_SUM_EPSILON) -> bool:
    return abs(weights_sum(course) - 100) <= epsilon


def final_weight(course: Course) -> float:
    return sum(_weight(a) for a in course.assessments if a.is_final)


def contribution(assessment: Assessment) -> float | None:
    score = to_number(assessment.score)
    if score is None:
        return None
    return (_weight(assessment) / 100) * score


def required_final(course: Course) -> float | None:
    """Average score needed on the ungraded final items to reach the target.

    Several ungraded final-flagged items are lumped together and solved for a
    single average. Returns None when no ungraded final weight is left.
    """
    target_frac = to_number(course.target, 0.0) / 100

    non_final_sum_frac = 0.0
    graded_final_sum_frac = 0.0
    remaining_final_weight_frac = 0.0

    for assessment in course.assessments:
        fraction = _graded_fraction(assessment)
        if assessment.is_final:
            if fraction is None:
                remaining_final_weight_frac += _weight(assessment) / 100
            else:
                graded_final_sum_frac += fraction
            continue
        if fraction is not None:
            non_final_sum_frac += fraction

    if remaining_final_weight_frac <= 0:
        return None

    needed = (target_frac - non_final_sum_frac - graded_final_sum_frac) / remaining_final_weight_frac
    return clamp(needed * 100, REQUIRED_FINAL_MIN, REQUIRED_FINAL_MAX)


def average_total(courses: Iterable[Course]) -> float | None:
    totals = [current_total(c) for c in courses]
    if not totals:
        return None
    return sum(totals) / len(totals)
