"""
Задача из учебного упражнения Ipopt в форме, которую ожидает внешний решатель:

    min  sum_i (x_i - 1)^2
    s.t. (x_{j+1}^2 + 1.5 x_{j+1} - a_j) cos(x_{j+2}) - x_j = 0,   j = 0..N-3
         -1.5 <= x_i <= 0

Решатель сам вызывает методы в нужном ему порядке; адаптер только вычисляет.
"""
import logging
import sys
import numpy as np

from models.errors import ContractViolation, InvalidArgument, UnsupportedCapability
from models.evaluation import EvaluationResult, Request, SparseStructure
from models.problem_shape import IndexStyle, ProblemBounds, ProblemShape
from models.solution import SolverReturn

logger = logging.getLogger(__name__)

VARIABLE_LOWER = -1.5
VARIABLE_UPPER = 0.0
CONSTRAINT_RHS = 0.0
START_VALUE = -0.5


def tutorial_coefficients(N: int) -> np.ndarray:
    """Константы из учебного примера: a_j = (j + 2) / N."""
    if not isinstance(N, (int, np.integer)) or isinstance(N, bool) or N < 3:
        raise InvalidArgument(f"N must be an integer >= 3, got {N!r}")
    return (np.arange(N - 2) + 2.0) / N


class TutorialProblem:
    """
    Адаптер к интерфейсу обратных вызовов решателя.

    Якобиан объявлен плотным (N*(N-2) элементов), а его значения не вычисляются:
    это промежуточный шаг упражнения, запрос VALUES всегда возвращает отказ.
    Гессиан лагранжиана не поддерживается вообще.
    """

    def __init__(self, N: int, a):
        if not isinstance(N, (int, np.integer)) or isinstance(N, bool):
            raise InvalidArgument(f"N must be an integer, got {type(N).__name__}")
        if N < 3:
            raise InvalidArgument(f"N must be >= 3 so that at least one constraint exists, got {N}")

        coefficients = np.array(a, dtype=float).ravel()  # always a copy
        if coefficients.size != N - 2:
            raise ContractViolation(f"a must have exactly N-2 = {N - 2} entries, got {coefficients.size}")
        if not np.all(np.isfinite(coefficients)):
            raise InvalidArgument(f"a must contain finite numbers only, got {coefficients}")
        coefficients.flags.writeable = False

        self.N = int(N)
        self.a = coefficients

    @property
    def n(self) -> int:
        return self.N

    @property
    def m(self) -> int:
        return self.N - 2

    def describe_shape(self) -> ProblemShape:
        return ProblemShape(
            n=self.n,
            m=self.m,
            nnz_jac_g=self._jacobian_nnz(),
            # полная диагональ плюс одна побочная диагональ без первой и последней переменной
            nnz_h_lag=self.n + (self.n - 2),
            index_style=IndexStyle.C_STYLE,
        )

    def describe_bounds(self, n: int, m: int) -> ProblemBounds:
        self._check_sizes(n, m)
        return ProblemBounds(
            x_l=np.full(n, VARIABLE_LOWER),
            x_u=np.full(n, VARIABLE_UPPER),
            g_l=np.full(m, CONSTRAINT_RHS),
            g_u=np.full(m, CONSTRAINT_RHS),
        )

    def starting_point(self, n: int, init_x: bool = True, init_z: bool = False,
                       init_lambda: bool = False) -> np.ndarray:
        # only a primal starting point is available
        if not init_x:
            raise ContractViolation("starting_point expects init_x=True")
        if init_z or init_lambda:
            raise ContractViolation("starting values for bound or constraint multipliers are not provided")
        if n != self.n:
            raise ContractViolation(f"expected n={self.n}, got {n}")
        return np.full(n, START_VALUE)

    def objective(self, x) -> float:
        x = self._as_point(x)
        return float(np.sum((x - 1.0) ** 2))

    def gradient(self, x) -> np.ndarray:
        x = self._as_point(x)
        return 2.0 * (x - 1.0)

    def constraints(self, x) -> np.ndarray:
        x = self._as_point(x)
        x0, x1, x2 = x[:-2], x[1:-1], x[2:]
        return (x1 ** 2 + 1.5 * x1 - self.a) * np.cos(x2) - x0

    def jacobian(self, x=None, request: Request = Request.STRUCTURE) -> EvaluationResult:
        if request is Request.STRUCTURE:
            return EvaluationResult.success(self.jacobian_structure())
        if request is Request.VALUES:
            if x is None:
                raise ContractViolation("x is required when Jacobian values are requested")
            return self._jacobian_values(self._as_point(x))
        raise ContractViolation(f"unknown request {request!r}")

    def jacobian_structure(self) -> SparseStructure:
        # плотная структура, построчно: все столбцы для ограничения 0, затем 1 и т.д.
        rows = np.repeat(np.arange(self.m), self.n)
        cols = np.tile(np.arange(self.n), self.m)
        return SparseStructure(rows, cols)

    def hessian(self, x=None, lagrange=None, obj_factor: float = 1.0,
                request: Request = Request.STRUCTURE) -> EvaluationResult:
        return EvaluationResult.failure(UnsupportedCapability(
            "hessian",
            "exact Hessian of the Lagrangian is not available, use a limited-memory approximation",
        ))

    def report_solution(self, status, x, z_L, z_U, g, lagrange, obj_value: float, stream=None):
        if stream is None:
            stream = sys.stdout
        status = SolverReturn.from_code(status)
        logger.info(f"Solver finished with status {status.name} ({int(status)}), f(x*) = {obj_value:e}")

        lines = ["", "", "Solution of the primal variables, x"]
        lines += ["x[%d] = %e" % (i, v) for i, v in enumerate(x)]
        lines += ["", "", "Solution of the bound multipliers, z_L and z_U"]
        lines += ["z_L[%d] = %e" % (i, v) for i, v in enumerate(z_L)]
        lines += ["z_U[%d] = %e" % (i, v) for i, v in enumerate(z_U)]
        lines += ["", "", "Objective value", "f(x*) = %e" % obj_value]

        try:
            stream.write("\n".join(lines) + "\n")
            stream.flush()
        except (OSError, ValueError) as e:
            # решение уже получено, ошибка вывода не должна доходить до решателя
            logger.error(f"Failed to write the solution report: {e}")

    def _jacobian_nnz(self) -> int:
        return self.n * self.m  # DENSE

    def _jacobian_values(self, x: np.ndarray) -> EvaluationResult:
        return EvaluationResult.failure(UnsupportedCapability(
            "jacobian_values",
            "Jacobian values are not implemented for the dense tutorial problem, use SparseTutorialProblem",
        ))

    def _as_point(self, x) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        if x.shape != (self.n,):
            raise ContractViolation(f"x must have shape ({self.n},), got {x.shape}")
        return x

    def _check_sizes(self, n: int, m: int):
        if n != self.n or m != self.m:
            raise ContractViolation(f"expected n={self.n}, m={self.m}, got n={n}, m={m}")

    def __repr__(self):
        return f"{type(self).__name__}(N={self.N}, a={self.a.tolist()})"


class SparseTutorialProblem(TutorialProblem):
    """
    Вариант с разреженным якобианом: три ненулевых элемента на ограничение
    (столбцы j, j+1, j+2) и аналитические производные. Гессиана по-прежнему нет.
    """

    def _jacobian_nnz(self) -> int:
        return 3 * self.m

    def jacobian_structure(self) -> SparseStructure:
        j = np.arange(self.m)
        rows = np.repeat(j, 3)
        cols = (j[:, None] + np.arange(3)).ravel()
        return SparseStructure(rows, cols)

    def _jacobian_values(self, x: np.ndarray) -> EvaluationResult:
        x1, x2 = x[1:-1], x[2:]
        inner = x1 ** 2 + 1.5 * x1 - self.a
        values = np.empty((self.m, 3))
        values[:, 0] = -1.0                              # dg_j/dx_j
        values[:, 1] = (2.0 * x1 + 1.5) * np.cos(x2)     # dg_j/dx_{j+1}
        values[:, 2] = -inner * np.sin(x2)               # dg_j/dx_{j+2}
        return EvaluationResult.success(values.ravel())
