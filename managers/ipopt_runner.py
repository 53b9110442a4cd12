from typing import List
import numpy as np
import logging
from datetime import datetime

from models.errors import UnsupportedCapability
from models.evaluation import Request
from models.optimization_task import OptimizationTask
from models.solution import Solution, SolverReturn

# cyipopt needs the Ipopt shared library, so it is an optional extra
try:
    import cyipopt
    HAS_CYIPOPT = True
except ImportError:
    HAS_CYIPOPT = False


def _check_cyipopt():
    if not HAS_CYIPOPT:
        raise ImportError(
            "cyipopt is required for IpoptRunner but is not installed.\n"
            "Install it with the 'ipopt' extra or via conda:\n"
            "    conda install -c conda-forge cyipopt"
        )


class IpoptProblemBridge:
    """
    Переводит методы адаптера в имена обратных вызовов cyipopt.

    Метода hessian здесь нет намеренно: cyipopt тогда работает только
    с квазиньютоновским приближением гессиана.
    """

    def __init__(self, problem):
        self.problem = problem
        self.reset()

    def reset(self):
        self.n_evals = 0
        self.iterations = 0
        self.f_val_history: List[float] = []

    def objective(self, x: np.ndarray) -> float:
        self.n_evals += 1
        return self.problem.objective(x)

    def gradient(self, x: np.ndarray) -> np.ndarray:
        return self.problem.gradient(x)

    def constraints(self, x: np.ndarray) -> np.ndarray:
        return self.problem.constraints(x)

    def jacobianstructure(self):
        return self.problem.jacobian(request=Request.STRUCTURE).unwrap().to_tuple()

    def jacobian(self, x: np.ndarray) -> np.ndarray:
        return self.problem.jacobian(x, request=Request.VALUES).unwrap()

    def intermediate(self, alg_mod, iter_count, obj_value, inf_pr, inf_du,
                     mu, d_norm, regularization_size, alpha_du, alpha_pr, ls_trials):
        # iteration 0 is reported too, so the count is the last iter_count
        self.iterations = int(iter_count)
        self.f_val_history.append(obj_value)
        return True


class IpoptRunner:
    def __init__(self, task: OptimizationTask):
        self.task = task
        self.problem = task.problem
        self.bridge = IpoptProblemBridge(self.problem)
        self._setup_logger()

    def solve(self) -> Solution:
        _check_cyipopt()
        shape = self.problem.describe_shape()
        bounds = self.problem.describe_bounds(shape.n, shape.m)
        x0 = self.problem.starting_point(shape.n)
        self.bridge.reset()

        nlp = cyipopt.Problem(
            n=shape.n,
            m=shape.m,
            problem_obj=self.bridge,
            lb=bounds.x_l,
            ub=bounds.x_u,
            cl=bounds.g_l,
            cu=bounds.g_u,
        )
        for key, value in self.task.config.ipopt_options().items():
            nlp.add_option(key, value)

        self.logger.info(f"Starting Ipopt: n={shape.n}, m={shape.m}, nnz_jac_g={shape.nnz_jac_g}")
        try:
            x_opt, info = nlp.solve(x0)
        except UnsupportedCapability as e:
            self.logger.error(f"Solver requested an unsupported capability '{e.capability}': {e}")
            # the solve is over, the final point is still reported once
            self._failed_solution(x0, SolverReturn.ERROR_IN_STEP_COMPUTATION, str(e)).report_to(self.problem)
            raise

        solution = self._make_solution(x_opt, info)
        self.logger.info(
            f"Ipopt finished: status={solution.status.name} | f(x*)={solution.obj_value:.6e}"
            f" | max|g|={solution.constraint_violation():.4e} | iterations={solution.iterations}"
            f" | objective evaluations={self.bridge.n_evals}"
        )
        solution.report_to(self.problem)
        return solution

    def _make_solution(self, x_opt, info: dict) -> Solution:
        message = info.get("status_msg", "")
        if isinstance(message, bytes):
            message = message.decode()
        return Solution(
            status=SolverReturn.from_code(info["status"]),
            x=np.asarray(x_opt, dtype=float),
            z_L=np.asarray(info["mult_x_L"], dtype=float),
            z_U=np.asarray(info["mult_x_U"], dtype=float),
            g=np.asarray(info["g"], dtype=float),
            lagrange=np.asarray(info["mult_g"], dtype=float),
            obj_value=float(info["obj_val"]),
            message=message,
            iterations=self.bridge.iterations,
        )

    def _failed_solution(self, x, status: SolverReturn, message: str) -> Solution:
        n, m = self.problem.n, self.problem.m
        return Solution(
            status=status,
            x=np.asarray(x, dtype=float),
            z_L=np.zeros(n),
            z_U=np.zeros(n),
            g=self.problem.constraints(x),
            lagrange=np.zeros(m),
            obj_value=self.problem.objective(x),
            message=message,
            iterations=self.bridge.iterations,
        )

    def _setup_logger(self):
        self.logger = logging.getLogger(f'IpoptRunner_{id(self)}')
        self.logger.setLevel(self.task.config.log_level)
        self.logger.propagate = False

        if not self.logger.handlers:
            formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s', datefmt='%Y-%m-%d %H:%M:%S')

            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

            if self.task.config.log_to_file:
                log_filename = f"ipopt_run_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
                try:
                    file_handler = logging.FileHandler(log_filename)
                    file_handler.setFormatter(formatter)
                    self.logger.addHandler(file_handler)
                except OSError as e:
                    self.logger.error(f"Failed to create file handler for logging: {e}")

        self.logger.info("Ipopt runner initialized")
        self.logger.info(f"Problem: {self.task.name}")
        self.logger.info(f"Number of variables: {self.problem.n}")
        self.logger.info(f"Number of constraints: {self.problem.m}")
