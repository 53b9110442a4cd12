import io
import unittest
from unittest import mock
import numpy as np

from managers.scipy_solver import ScipyReferenceSolver, dense_jacobian, estimate_multipliers
from models.errors import ContractViolation
from models.optimization_task import OptimizationTask
from models.tutorial_problem import SparseTutorialProblem, TutorialProblem, tutorial_coefficients


class DenseJacobianTest(unittest.TestCase):
    def test_sparse_problem(self):
        problem = SparseTutorialProblem(4, tutorial_coefficients(4))
        jac = dense_jacobian(problem, np.full(4, -0.5))
        self.assertEqual(jac.shape, (2, 4))
        self.assertEqual(jac[0, 3], 0.0)
        self.assertEqual(jac[1, 0], 0.0)
        self.assertEqual(jac[0, 0], -1.0)

    def test_dense_problem_has_no_values(self):
        problem = TutorialProblem(4, tutorial_coefficients(4))
        self.assertIsNone(dense_jacobian(problem, np.full(4, -0.5)))


class EstimateMultipliersTest(unittest.TestCase):
    def test_bound_multiplier_on_active_upper_bound(self):
        # min (x0 - 1)^2 + (x1 - 1)^2 over x <= 0, constraint x0 - x1 = 0 -> x* = (0, 0)
        x = np.zeros(2)
        grad_f = 2.0 * (x - 1.0)
        jac = np.array([[1.0, -1.0]])
        lagrange, z_L, z_U = estimate_multipliers(grad_f, jac, x, np.full(2, -1.5), np.zeros(2))
        residual = grad_f + jac.T @ lagrange - z_L + z_U
        np.testing.assert_allclose(residual, 0.0, atol=1e-10)
        np.testing.assert_array_equal(z_L, 0.0)
        self.assertTrue(np.all(z_U >= 0.0))

    def test_interior_point_has_no_bound_multipliers(self):
        x = np.array([-0.5, -0.7])
        lagrange, z_L, z_U = estimate_multipliers(np.array([1.0, -1.0]), np.array([[1.0, -1.0]]), x,
                                                  np.full(2, -1.5), np.zeros(2))
        np.testing.assert_allclose(lagrange, [-1.0])
        np.testing.assert_array_equal(z_L, 0.0)
        np.testing.assert_array_equal(z_U, 0.0)


class InequalityTutorialProblem(TutorialProblem):
    def describe_bounds(self, n, m):
        bounds = super().describe_bounds(n, m)
        bounds.g_u = np.full(m, np.inf)
        return bounds


class ScipyReferenceSolverTest(unittest.TestCase):
    def solve(self, problem):
        task = OptimizationTask(problem)
        stream = io.StringIO()
        with mock.patch("sys.stdout", stream):
            solution = ScipyReferenceSolver(task).solve()
        return solution, stream.getvalue()

    def assert_feasible(self, solution):
        self.assertLess(solution.constraint_violation(), 1e-6)
        self.assertTrue(np.all(solution.x >= -1.5))
        self.assertTrue(np.all(solution.x <= 0.0))
        self.assertGreater(solution.obj_value, 0.0)
        self.assertTrue(np.all(solution.z_L >= 0.0))
        self.assertTrue(np.all(solution.z_U >= 0.0))

    def test_sparse_problem(self):
        solution, output = self.solve(SparseTutorialProblem(4, tutorial_coefficients(4)))
        self.assertTrue(solution.success, solution.message)
        self.assert_feasible(solution)
        self.assertIn("Solution of the primal variables, x", output)
        self.assertIn("f(x*) = ", output)

    def test_dense_problem_uses_finite_differences(self):
        with self.assertLogs("managers.scipy_solver", level="WARNING"):
            solution, _ = self.solve(TutorialProblem(4, tutorial_coefficients(4)))
        self.assert_feasible(solution)

    def test_inequality_constraints_are_rejected(self):
        task = OptimizationTask(InequalityTutorialProblem(4, tutorial_coefficients(4)))
        with self.assertRaises(ContractViolation):
            ScipyReferenceSolver(task).solve(report=False)

    def test_both_variants_agree(self):
        sparse, _ = self.solve(SparseTutorialProblem(5, tutorial_coefficients(5)))
        dense, _ = self.solve(TutorialProblem(5, tutorial_coefficients(5)))
        np.testing.assert_allclose(sparse.x, dense.x, atol=1e-4)


if __name__ == '__main__':
    unittest.main()
