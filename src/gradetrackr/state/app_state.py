from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Tuple

from gradetrackr.core import editing
from gradetrackr.core.gpa import overall_gpa
from gradetrackr.core.grades import (
    average_total,
    contribution,
    current_total,
    final_weight,
    required_final,
    weights_sum,
    weights_valid,
)
from gradetrackr.core.models import Assessment, Course, Semester
from gradetrackr.services.outline_service import ParsedCourse, convert_parsed_to_course
from gradetrackr.services.semester_store import SemesterStore


@dataclass(frozen=True)
class CourseSummary:
    course_id: str
    name: str
    current_total: float
    required_final: Optional[float]
    final_weight: float
    weights_sum: float
    weights_valid: bool
    # (assessment name, weighted points earned or None when ungraded)
    contributions: List[Tuple[str, Optional[float]]] = field(default_factory=list)


@dataclass(frozen=True)
class SemesterSummary:
    semester_id: str
    name: str
    gpa: Optional[float]
    average: Optional[float]
    courses: List[CourseSummary]


class Gradebook:
    """Session state over a SemesterStore.

    Every mutation builds a new semester list and goes through
    ``commit_semesters`` so the store always sees whole-object replacements.
    """

    def __init__(self, store: SemesterStore) -> None:
        self.store = store
        self.semesters: List[Semester] = store.load_semesters()
        if not self.semesters:
            self.semesters = [editing.new_semester([])]
            store.save_semesters(self.semesters)

        self.active_semester_id: Optional[str] = store.get_active_semester_id()
        if editing.find_by_id(self.semesters, self.active_semester_id) is None:
            self.select_semester(self.semesters[0].id)

        courses = self.courses
        self.active_course_id: Optional[str] = courses[0].id if courses else None

    # selection

    @property
    def active_semester(self) -> Optional[Semester]:
        return editing.find_by_id(self.semesters, self.active_semester_id)

    @property
    def courses(self) -> List[Course]:
        semester = self.active_semester
        return list(semester.courses) if semester else []

    @property
    def active_course(self) -> Optional[Course]:
        return editing.find_by_id(self.courses, self.active_course_id)

    def select_semester(self, semester_id: str) -> None:
        self.active_semester_id = semester_id
        self.store.set_active_semester_id(semester_id)
        courses = self.courses
        self.active_course_id = courses[0].id if courses else None

    def select_course(self, course_id: str) -> None:
        if editing.find_by_id(self.courses, course_id) is not None:
            self.active_course_id = course_id

    # commits

    def commit_semesters(self, semesters: List[Semester]) -> None:
        self.semesters = semesters
        self.store.save_semesters(semesters)

    def commit_courses(self, courses: List[Course]) -> None:
        self.commit_semesters(editing.replace_by_id(self.semesters, self.active_semester_id, courses=courses))

    def _commit_active_course(self, **changes: Any) -> None:
        if self.active_course is None:
            return
        self.commit_courses(editing.replace_by_id(self.courses, self.active_course_id, **changes))

    # semesters

    def add_semester(self) -> Semester:
        semester = editing.new_semester(self.semesters)
        self.commit_semesters([semester, *self.semesters])
        self.select_semester(semester.id)
        return semester

    def rename_semester(self, name: str) -> None:
        self.commit_semesters(editing.replace_by_id(self.semesters, self.active_semester_id, name=name))

    def delete_semester(self, semester_id: str) -> None:
        remaining = editing.remove_by_id(self.semesters, semester_id)
        self.commit_semesters(remaining)
        if self.active_semester_id == semester_id and remaining:
            self.select_semester(remaining[0].id)

    # courses

    def add_course(self) -> Course:
        course = editing.new_course()
        self.commit_courses([course, *self.courses])
        self.active_course_id = course.id
        return course

    def update_course(self, course_id: str, **changes: Any) -> None:
        self.commit_courses(editing.replace_by_id(self.courses, course_id, **changes))

    def delete_course(self, course_id: str) -> None:
        self.commit_courses(editing.remove_by_id(self.courses, course_id))
        if self.active_course_id == course_id:
            courses = self.courses
            self.active_course_id = courses[0].id if courses else None

    def move_course_up(self, index: int) -> None:
        self.commit_courses(editing.move_up(self.courses, index))

    def move_course_down(self, index: int) -> None:
        self.commit_courses(editing.move_down(self.courses, index))

    def import_courses(self, parsed: Iterable[ParsedCourse]) -> List[Course]:
        imported = [convert_parsed_to_course(p, 0) for p in parsed]
        self.commit_courses([*imported, *self.courses])
        if imported:
            self.active_course_id = imported[0].id
        return imported

    # assessments on the active course

    def add_assessment(self, is_final: bool = False) -> Optional[Assessment]:
        course = self.active_course
        if course is None:
            return None
        assessment = editing.new_assessment(is_final)
        self._commit_active_course(assessments=[*course.assessments, assessment])
        return assessment

    def update_assessment(self, assessment_id: str, **changes: Any) -> None:
        course = self.active_course
        if course is None:
            return
        self._commit_active_course(assessments=editing.replace_by_id(course.assessments, assessment_id, **changes))

    def remove_assessment(self, assessment_id: str) -> None:
        course = self.active_course
        if course is None:
            return
        self._commit_active_course(assessments=editing.remove_by_id(course.assessments, assessment_id))

    def move_assessment_up(self, index: int) -> None:
        course = self.active_course
        if course is None:
            return
        self._commit_active_course(assessments=editing.move_up(course.assessments, index))

    def move_assessment_down(self, index: int) -> None:
        course = self.active_course
        if course is None:
            return
        self._commit_active_course(assessments=editing.move_down(course.assessments, index))

    def switch_scheme(self, scheme_index: int) -> None:
        course = self.active_course
        if course is None:
            return
        switched = editing.select_scheme(course, scheme_index)
        if switched is course:
            return
        self.commit_courses([switched if c.id == course.id else c for c in self.courses])

    # derived figures

    @staticmethod
    def summarize_course(course: Course) -> CourseSummary:
        return CourseSummary(
            course_id=course.id,
            name=course.name,
            current_total=current_total(course),
            required_final=required_final(course),
            final_weight=final_weight(course),
            weights_sum=weights_sum(course),
            weights_valid=weights_valid(course),
            contributions=[(a.name, contribution(a)) for a in course.assessments],
        )

    def summary(self, semester_id: Optional[str] = None) -> Optional[SemesterSummary]:
        semester = editing.find_by_id(self.semesters, semester_id or self.active_semester_id)
        if semester is None:
            return None
        return SemesterSummary(
            semester_id=semester.id,
            name=semester.name,
            gpa=overall_gpa(semester.courses),
            average=average_total(semester.courses),
            courses=[self.summarize_course(c) for c in semester.courses],
        )
