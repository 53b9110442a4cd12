from enum import IntEnum
import numpy as np


class SolverReturn(IntEnum):
    """Коды завершения внешнего решателя (ApplicationReturnStatus в Ipopt)."""
    SOLVE_SUCCEEDED = 0
    SOLVED_TO_ACCEPTABLE_LEVEL = 1
    INFEASIBLE_PROBLEM_DETECTED = 2
    SEARCH_DIRECTION_BECOMES_TOO_SMALL = 3
    DIVERGING_ITERATES = 4
    USER_REQUESTED_STOP = 5
    FEASIBLE_POINT_FOUND = 6
    MAXIMUM_ITERATIONS_EXCEEDED = -1
    RESTORATION_FAILED = -2
    ERROR_IN_STEP_COMPUTATION = -3
    MAXIMUM_CPUTIME_EXCEEDED = -4
    MAXIMUM_WALLTIME_EXCEEDED = -5
    NOT_ENOUGH_DEGREES_OF_FREEDOM = -10
    INVALID_PROBLEM_DEFINITION = -11
    INVALID_OPTION = -12
    INVALID_NUMBER_DETECTED = -13
    UNRECOVERABLE_EXCEPTION = -100
    NONIPOPT_EXCEPTION_THROWN = -101
    INSUFFICIENT_MEMORY = -102
    INTERNAL_ERROR = -199

    @classmethod
    def from_code(cls, code: int) -> "SolverReturn":
        try:
            return cls(int(code))
        except ValueError:
            return cls.INTERNAL_ERROR

    @property
    def is_success(self) -> bool:
        return self in (SolverReturn.SOLVE_SUCCEEDED, SolverReturn.SOLVED_TO_ACCEPTABLE_LEVEL)


class Solution:
    def __init__(self, status: SolverReturn, x: np.ndarray, z_L: np.ndarray, z_U: np.ndarray,
                 g: np.ndarray, lagrange: np.ndarray, obj_value: float,
                 message: str = "", iterations: int = 0):
        self.status = status
        self.x = x
        self.z_L = z_L
        self.z_U = z_U
        self.g = g
        self.lagrange = lagrange
        self.obj_value = obj_value
        self.message = message
        self.iterations = iterations

    @property
    def success(self) -> bool:
        return self.status.is_success

    def constraint_violation(self) -> float:
        return float(np.max(np.abs(self.g))) if self.g.size else 0.0

    def report_to(self, problem, stream=None):
        problem.report_solution(self.status, self.x, self.z_L, self.z_U,
                                self.g, self.lagrange, self.obj_value, stream=stream)
