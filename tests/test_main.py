import io
import os
import unittest
from unittest import mock

import main
from models.tutorial_problem import SparseTutorialProblem

TESTS_DIR = os.path.dirname(os.path.abspath(__file__))


class MainTest(unittest.TestCase):
    def test_default_task_is_the_tutorial_instance(self):
        task = main.build_task()
        self.assertIsInstance(task.problem, SparseTutorialProblem)
        self.assertEqual(task.problem.N, 4)
        self.assertEqual(task.problem.a.tolist(), [0.5, 0.75])

    def test_run_scipy_from_file(self):
        stream = io.StringIO()
        with mock.patch("sys.stdout", stream):
            solutions = main.run([os.path.join(TESTS_DIR, "tutorial.json"), "--solver", "scipy",
                                  "--check-derivatives"])
        self.assertEqual(list(solutions), ["SciPy"])
        self.assertLess(solutions["SciPy"].constraint_violation(), 1e-6)
        self.assertIn("Objective value", stream.getvalue())


if __name__ == '__main__':
    unittest.main()
