from enum import Enum
from typing import Iterator, Tuple
import numpy as np

from models.errors import ContractViolation


class Request(Enum):
    STRUCTURE = 0  # only the (row, col) pattern
    VALUES = 1     # numeric values at the pattern, for a given x


class SparseStructure:
    def __init__(self, rows, cols):
        self.rows = np.asarray(rows, dtype=int)
        self.cols = np.asarray(cols, dtype=int)
        if self.rows.shape != self.cols.shape or self.rows.ndim != 1:
            raise ContractViolation(
                f"rows and cols must be 1-d arrays of equal length, got {self.rows.shape} and {self.cols.shape}"
            )

    @property
    def nnz(self) -> int:
        return int(self.rows.size)

    def pairs(self) -> Iterator[Tuple[int, int]]:
        return zip(self.rows.tolist(), self.cols.tolist())

    def to_tuple(self) -> Tuple[np.ndarray, np.ndarray]:
        return self.rows, self.cols

    def __len__(self):
        return self.nnz

    def __repr__(self):
        return f"SparseStructure(nnz={self.nnz})"


class EvaluationResult:
    """
    Результат вызова с двумя исходами: успех со значением или отказ с ошибкой.

    Используется вместо булевого кода возврата и выходных параметров:
    отказ несёт исключение, которое можно поднять через unwrap().
    """

    def __init__(self, value=None, error: Exception = None):
        if value is not None and error is not None:
            raise ContractViolation("EvaluationResult cannot carry both a value and an error")
        self.value = value
        self.error = error

    @classmethod
    def success(cls, value) -> "EvaluationResult":
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception) -> "EvaluationResult":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self):
        if self.error is not None:
            raise self.error
        return self.value

    def __repr__(self):
        if self.ok:
            return f"EvaluationResult.success({self.value!r})"
        return f"EvaluationResult.failure({self.error!r})"
