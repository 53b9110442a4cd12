import logging
from typing import List
import numpy as np

from models.evaluation import Request

logger = logging.getLogger(__name__)


def central_difference(func, x: np.ndarray, eps: float = 1e-6) -> np.ndarray:
    """
    Вычисляет производные func в точке x центральными конечными разностями.

    Для скалярной func возвращает вектор (n,), для векторной - матрицу (m, n).
    """
    x = np.asarray(x, dtype=float)
    columns = []
    for i in range(len(x)):
        x_plus_eps = x.copy()
        x_plus_eps[i] += eps
        x_minus_eps = x.copy()
        x_minus_eps[i] -= eps
        columns.append((np.asarray(func(x_plus_eps)) - np.asarray(func(x_minus_eps))) / (2 * eps))
    if not columns:
        return np.zeros(0)
    return np.stack(columns, axis=-1)


class DerivativeMismatch:
    def __init__(self, name: str, index, analytic: float, estimate: float, rel_error: float):
        self.name = name
        self.index = index
        self.analytic = analytic
        self.estimate = estimate
        self.rel_error = rel_error

    def __repr__(self):
        return (f"* {self.name}{list(self.index)} = {self.analytic:+.16e} ~ {self.estimate:+.16e}"
                f"  [{self.rel_error:.3e}]")


class DerivativeReport:
    def __init__(self, gradient_mismatches: List[DerivativeMismatch],
                 jacobian_mismatches: List[DerivativeMismatch], jacobian_checked: bool):
        self.gradient_mismatches = gradient_mismatches
        self.jacobian_mismatches = jacobian_mismatches
        self.jacobian_checked = jacobian_checked

    @property
    def ok(self) -> bool:
        return not self.gradient_mismatches and not self.jacobian_mismatches


class DerivativeChecker:
    """
    Проверка первых производных, аналог derivative_test=first-order в Ipopt:
    аналитические значения сравниваются с центральными разностями,
    относительная ошибка |a - fd| / max(1, |a|) не должна превышать tol.
    """

    def __init__(self, problem, perturbation: float = 1e-6, tol: float = 1e-4):
        self.problem = problem
        self.perturbation = perturbation
        self.tol = tol

    def check(self, x=None) -> DerivativeReport:
        if x is None:
            x = self.problem.starting_point(self.problem.n)
        x = np.asarray(x, dtype=float)

        gradient = self.problem.gradient(x)
        gradient_fd = central_difference(self.problem.objective, x, self.perturbation)
        gradient_mismatches = [
            self._mismatch("grad_f", (i,), gradient[i], gradient_fd[i])
            for i in range(len(x))
        ]
        gradient_mismatches = [m for m in gradient_mismatches if m is not None]

        jacobian_mismatches = []
        result = self.problem.jacobian(x, request=Request.VALUES)
        jacobian_checked = result.ok
        if result.ok:
            structure = self.problem.jacobian(request=Request.STRUCTURE).unwrap()
            jacobian_fd = central_difference(self.problem.constraints, x, self.perturbation)
            for (row, col), value in zip(structure.pairs(), result.value):
                mismatch = self._mismatch("jac_g", (row, col), value, jacobian_fd[row, col])
                if mismatch is not None:
                    jacobian_mismatches.append(mismatch)
        else:
            logger.warning(f"Skipping Jacobian check: {result.error}")

        for mismatch in gradient_mismatches + jacobian_mismatches:
            logger.warning(f"Derivative mismatch: {mismatch}")
        if not gradient_mismatches and not jacobian_mismatches:
            logger.info("Derivative checker detected no error")

        return DerivativeReport(gradient_mismatches, jacobian_mismatches, jacobian_checked)

    def _mismatch(self, name, index, analytic, estimate):
        rel_error = abs(analytic - estimate) / max(1.0, abs(analytic))
        if rel_error > self.tol:
            return DerivativeMismatch(name, index, float(analytic), float(estimate), rel_error)
        return None
