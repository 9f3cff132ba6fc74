import unittest

from gradetrackr.core import editing
from gradetrackr.core.models import Assessment, Course, GradingScheme


def _scheme(name, items):
    return GradingScheme(
        id=name,
        name=name,
        assessments=[Assessment(id=f"{name}-{n}", name=n, weight=w, is_final=n == "Final") for n, w in items],
    )


class MoveTests(unittest.TestCase):
    def test_move_item(self):
        self.assertEqual(editing.move_item([1, 2, 3, 4], 0, 2), [2, 3, 1, 4])

    def test_move_does_not_mutate_input(self):
        items = ["a", "b", "c"]
        self.assertEqual(editing.move_down(items, 0), ["b", "a", "c"])
        self.assertEqual(items, ["a", "b", "c"])

    def test_boundaries_are_noops(self):
        self.assertEqual(editing.move_up(["a", "b"], 0), ["a", "b"])
        self.assertEqual(editing.move_down(["a", "b"], 1), ["a", "b"])
        self.assertEqual(editing.move_up(["a"], 0), ["a"])


class ReplaceTests(unittest.TestCase):
    def test_replace_by_id_copies(self):
        original = [Assessment(id="a", name="Quiz"), Assessment(id="b", name="Lab")]
        updated = editing.replace_by_id(original, "a", score=90)
        self.assertEqual(updated[0].score, 90)
        self.assertIsNone(original[0].score)
        self.assertIs(updated[1], original[1])

    def test_remove_by_id(self):
        items = [Assessment(id="a", name="Quiz"), Assessment(id="b", name="Lab")]
        self.assertEqual([a.id for a in editing.remove_by_id(items, "a")], ["b"])

    def test_new_semester_name(self):
        self.assertEqual(editing.new_semester([]).name, "Sem 1")
        self.assertEqual(editing.new_semester([editing.new_semester([])]).name, "Sem 2")

    def test_new_assessment(self):
        final = editing.new_assessment(is_final=True)
        self.assertEqual((final.name, final.category, final.is_final), ("Final", "Final", True))
        item = editing.new_assessment()
        self.assertEqual((item.name, item.category, item.weight), ("New Item", "Other", 0))


class SelectSchemeTests(unittest.TestCase):
    def setUp(self):
        a = _scheme("Scheme A", [("Midterm", 30), ("Quiz", 20), ("Final", 50)])
        b = _scheme("Scheme B", [("midterm", 20), ("Project", 20), ("Final", 60)])
        self.course = Course(
            id="c",
            name="ENGG*2400",
            assessments=[
                Assessment(id="x1", name="Midterm", weight=30, score=75),
                Assessment(id="x2", name="Quiz", weight=20, score=90),
                Assessment(id="x3", name="Final", weight=50, is_final=True),
            ],
            grading_schemes=[a, b],
            active_scheme_index=0,
        )

    def test_switch_keeps_scores_by_name(self):
        switched = editing.select_scheme(self.course, 1)
        self.assertEqual(switched.active_scheme_index, 1)
        self.assertEqual([a.name for a in switched.assessments], ["midterm", "Project", "Final"])
        self.assertEqual([a.score for a in switched.assessments], [75, None, None])
        self.assertEqual([a.weight for a in switched.assessments], [20, 20, 60])

    def test_switch_assigns_fresh_ids(self):
        switched = editing.select_scheme(self.course, 1)
        scheme_ids = {a.id for a in self.course.grading_schemes[1].assessments}
        self.assertTrue(scheme_ids.isdisjoint(a.id for a in switched.assessments))

    def test_original_untouched(self):
        editing.select_scheme(self.course, 1)
        self.assertEqual(self.course.active_scheme_index, 0)
        self.assertEqual(self.course.assessments[0].name, "Midterm")

    def test_invalid_index_or_no_schemes(self):
        self.assertIs(editing.select_scheme(self.course, 5), self.course)
        plain = Course(id="p", name="Plain")
        self.assertIs(editing.select_scheme(plain, 0), plain)


if __name__ == "__main__":
    unittest.main()
