from enum import IntEnum
import numpy as np


class IndexStyle(IntEnum):
    C_STYLE = 0        # 0-based
    FORTRAN_STYLE = 1  # 1-based


class ProblemShape:
    def __init__(self, n: int, m: int, nnz_jac_g: int, nnz_h_lag: int,
                 index_style: IndexStyle = IndexStyle.C_STYLE):
        self.n = n
        self.m = m
        self.nnz_jac_g = nnz_jac_g
        self.nnz_h_lag = nnz_h_lag
        self.index_style = index_style

    def __eq__(self, other):
        if not isinstance(other, ProblemShape):
            return NotImplemented
        return (self.n, self.m, self.nnz_jac_g, self.nnz_h_lag, self.index_style) == \
            (other.n, other.m, other.nnz_jac_g, other.nnz_h_lag, other.index_style)

    def __repr__(self):
        return (f"ProblemShape(n={self.n}, m={self.m}, nnz_jac_g={self.nnz_jac_g}, "
                f"nnz_h_lag={self.nnz_h_lag}, index_style={self.index_style.name})")


class ProblemBounds:
    def __init__(self, x_l: np.ndarray, x_u: np.ndarray, g_l: np.ndarray, g_u: np.ndarray):
        self.x_l = x_l
        self.x_u = x_u
        self.g_l = g_l
        self.g_u = g_u

    def variable_bounds(self):
        """Пары (lower, upper) для каждой переменной, как их ждёт scipy."""
        return list(zip(self.x_l.tolist(), self.x_u.tolist()))

    def is_equality(self) -> np.ndarray:
        return self.g_l == self.g_u
