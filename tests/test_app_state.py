import unittest

from gradetrackr.core.models import Assessment, Course, GradingScheme, Semester
from gradetrackr.services.outline_service import ParsedCourse
from gradetrackr.services.semester_store import SemesterStore
from gradetrackr.services.storage import SqliteKeyValueStore
from gradetrackr.state.app_state import Gradebook


class GradebookTests(unittest.TestCase):
    def setUp(self):
        self.local = SqliteKeyValueStore(":memory:")
        self.store = SemesterStore(self.local)
        self.book = Gradebook(self.store)

    def tearDown(self):
        self.store.close()

    def _reopen(self):
        return Gradebook(SemesterStore(self.local))

    def test_seeds_first_semester(self):
        self.assertEqual([s.name for s in self.book.semesters], ["Sem 1"])
        self.assertEqual(self.book.active_semester_id, self.book.semesters[0].id)
        self.assertEqual(self._reopen().active_semester_id, self.book.active_semester_id)

    def test_add_rename_delete_semester(self):
        first = self.book.active_semester_id
        added = self.book.add_semester()
        self.assertEqual(added.name, "Sem 2")
        self.assertEqual(self.book.semesters[0].id, added.id)
        self.assertEqual(self.book.active_semester_id, added.id)

        self.book.rename_semester("Winter 2026")
        self.assertEqual(self.book.active_semester.name, "Winter 2026")

        self.book.delete_semester(added.id)
        self.assertEqual(self.book.active_semester_id, first)
        self.assertEqual([s.id for s in self._reopen().semesters], [first])

    def test_course_and_assessment_editing(self):
        course = self.book.add_course()
        self.assertEqual(self.book.active_course_id, course.id)

        self.book.update_course(course.id, name="CIS*2520", target=80)
        midterm = self.book.add_assessment()
        final = self.book.add_assessment(is_final=True)
        self.book.update_assessment(midterm.id, name="Midterm", weight=50, score=90)
        self.book.update_assessment(final.id, weight=50)

        summary = self.book.summary()
        self.assertEqual(summary.courses[0].name, "CIS*2520")
        self.assertAlmostEqual(summary.courses[0].current_total, 45.0)
        self.assertAlmostEqual(summary.courses[0].required_final, 70.0)
        self.assertTrue(summary.courses[0].weights_valid)
        self.assertEqual(summary.courses[0].contributions, [("Midterm", 45.0), ("Final", None)])

        self.book.move_assessment_down(0)
        self.assertEqual([a.name for a in self.book.active_course.assessments], ["Final", "Midterm"])

        self.book.remove_assessment(final.id)
        self.assertIsNone(self.book.summary().courses[0].required_final)
        self.assertFalse(self.book.summary().courses[0].weights_valid)

        reopened = self._reopen()
        self.assertEqual([a.name for a in reopened.courses[0].assessments], ["Midterm"])

    def test_move_and_delete_course(self):
        a = self.book.add_course()
        b = self.book.add_course()
        self.assertEqual([c.id for c in self.book.courses], [b.id, a.id])
        self.book.move_course_down(0)
        self.assertEqual([c.id for c in self.book.courses], [a.id, b.id])
        self.book.move_course_up(0)
        self.assertEqual([c.id for c in self.book.courses], [a.id, b.id])

        self.book.delete_course(b.id)
        self.assertEqual(self.book.active_course_id, a.id)

    def test_import_and_switch_scheme(self):
        parsed = ParsedCourse.model_validate(
            {
                "name": "ENGG*2400",
                "credits": 0.5,
                "schemes": [
                    {"name": "A", "assessments": [{"name": "Midterm", "weight": 40}, {"name": "Final", "weight": 60, "isFinal": True}]},
                    {"name": "B", "assessments": [{"name": "MIDTERM", "weight": 20}, {"name": "Final", "weight": 80, "isFinal": True}]},
                ],
            }
        )
        existing = self.book.add_course()
        imported = self.book.import_courses([parsed])

        self.assertEqual([c.id for c in self.book.courses], [imported[0].id, existing.id])
        self.assertEqual(self.book.active_course_id, imported[0].id)

        midterm = self.book.active_course.assessments[0]
        self.book.update_assessment(midterm.id, score=85)
        self.book.switch_scheme(1)

        course = self.book.active_course
        self.assertEqual(course.active_scheme_index, 1)
        self.assertEqual([(a.name, a.score) for a in course.assessments], [("MIDTERM", 85), ("Final", None)])

    def test_summary_gpa(self):
        semester = Semester(
            id="s",
            name="Fall",
            courses=[
                Course(id="c1", name="A", credits=0.5, assessments=[Assessment(id="1", name="x", weight=100, score=90)]),
                Course(id="c2", name="B", credits=0.5, assessments=[Assessment(id="2", name="x", weight=100, score=72)]),
            ],
        )
        self.book.commit_semesters([semester])
        self.book.select_semester("s")

        summary = self.book.summary()
        self.assertAlmostEqual(summary.gpa, 3.35)
        self.assertAlmostEqual(summary.average, 81.0)

    def test_switch_scheme_without_schemes_is_noop(self):
        course = self.book.add_course()
        self.book.switch_scheme(0)
        self.assertEqual(self.book.active_course, course)


if __name__ == "__main__":
    unittest.main()
