import logging
import numpy as np
from scipy.optimize import minimize
from scipy.sparse import coo_matrix

from managers.derivative_checker import central_difference
from models.errors import ContractViolation
from models.evaluation import Request
from models.optimization_task import OptimizationTask
from models.solution import Solution, SolverReturn

logger = logging.getLogger(__name__)


def dense_jacobian(problem, x: np.ndarray):
    """
    Собирает плотную матрицу якобиана из разреженных значений адаптера.
    Возвращает None, если значения якобиана адаптер не поддерживает.
    """
    result = problem.jacobian(x, request=Request.VALUES)
    if not result.ok:
        return None
    structure = problem.jacobian(request=Request.STRUCTURE).unwrap()
    # coo_matrix sums duplicate entries, same as a sparse triplet consumer would
    return coo_matrix((result.value, (structure.rows, structure.cols)),
                      shape=(problem.m, problem.n)).toarray()


def estimate_multipliers(grad_f: np.ndarray, jac: np.ndarray, x: np.ndarray,
                         x_l: np.ndarray, x_u: np.ndarray, active_tol: float = 1e-7):
    """
    Оценка множителей по условию стационарности на активном множестве:

        grad_f + J^T lambda - z_L + z_U = 0,   z_L, z_U >= 0

    z_L / z_U отличны от нуля только для переменных на соответствующей границе.
    Возвращает (lambda, z_L, z_U).
    """
    n, m = x.size, jac.shape[0]
    active_l = np.flatnonzero(x - x_l <= active_tol)
    active_u = np.flatnonzero(x_u - x <= active_tol)

    system = np.zeros((n, m + active_l.size + active_u.size))
    system[:, :m] = jac.T
    system[active_l, m + np.arange(active_l.size)] = -1.0
    system[active_u, m + active_l.size + np.arange(active_u.size)] = 1.0

    solution, *_ = np.linalg.lstsq(system, -grad_f, rcond=None)

    lagrange = solution[:m]
    z_L = np.zeros(n)
    z_U = np.zeros(n)
    z_L[active_l] = np.maximum(solution[m:m + active_l.size], 0.0)
    z_U[active_u] = np.maximum(solution[m + active_l.size:], 0.0)
    return lagrange, z_L, z_U


class ScipyReferenceSolver:
    """Решает ту же задачу через SciPy SLSQP, чтобы сравнить результат с Ipopt."""

    def __init__(self, task: OptimizationTask):
        self.task = task
        self.problem = task.problem

    def solve(self, report: bool = True) -> Solution:
        problem = self.problem
        shape = problem.describe_shape()
        bounds = problem.describe_bounds(shape.n, shape.m)
        x0 = problem.starting_point(shape.n)

        supports_jacobian = problem.jacobian(x0, request=Request.VALUES).ok
        if not supports_jacobian:
            logger.warning("Jacobian values are not supported, SLSQP falls back to finite differences")

        eq_mask = bounds.is_equality()
        if not np.all(eq_mask):
            raise ContractViolation("Only equality constraints are handled by the reference solver")

        constraint = {
            'type': 'eq',
            'fun': lambda x: problem.constraints(x) - bounds.g_l,
        }
        if supports_jacobian:
            constraint['jac'] = lambda x: dense_jacobian(problem, x)

        config = self.task.config
        res = minimize(problem.objective, x0, jac=problem.gradient, constraints=[constraint],
                       bounds=bounds.variable_bounds(), method='SLSQP',
                       options={'maxiter': config.max_iter, 'ftol': config.tol})

        x_opt = np.clip(res.x, bounds.x_l, bounds.x_u)
        g = problem.constraints(x_opt)
        jac = dense_jacobian(problem, x_opt) if supports_jacobian else central_difference(problem.constraints, x_opt)
        lagrange, z_L, z_U = estimate_multipliers(problem.gradient(x_opt), jac, x_opt, bounds.x_l, bounds.x_u)

        solution = Solution(
            status=SolverReturn.SOLVE_SUCCEEDED if res.success else self._status_from_scipy(res.status),
            x=x_opt,
            z_L=z_L,
            z_U=z_U,
            g=g,
            lagrange=lagrange,
            obj_value=problem.objective(x_opt),
            message=str(res.message),
            iterations=int(res.nit),
        )
        logger.info(f"SLSQP finished: {res.message} | f(x*)={solution.obj_value:.6e} "
                    f"| max|g|={solution.constraint_violation():.4e} | nit={res.nit}")
        if report:
            solution.report_to(problem)
        return solution

    @staticmethod
    def _status_from_scipy(status: int) -> SolverReturn:
        # коды SLSQP: 9 - превышено число итераций, 4/3 - несовместная линеаризация
        if status == 9:
            return SolverReturn.MAXIMUM_ITERATIONS_EXCEEDED
        if status in (3, 4):
            return SolverReturn.INFEASIBLE_PROBLEM_DETECTED
        if status == 8:
            return SolverReturn.SEARCH_DIRECTION_BECOMES_TOO_SMALL
        return SolverReturn.ERROR_IN_STEP_COMPUTATION
