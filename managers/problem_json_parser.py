import json
import logging
import numpy as np
from sympy import Symbol, lambdify, parse_expr
from models.errors import InvalidArgument
from models.optimization_task import OptimizationTask
from models.solver_config import SolverConfig
from models.tutorial_problem import SparseTutorialProblem, TutorialProblem, tutorial_coefficients

logger = logging.getLogger(__name__)

ALLOWED_SYMBOLS = {"j", "N"}
# N must be declared explicitly, otherwise parse_expr resolves it to sympy.N
SYMBOLS = {name: Symbol(name) for name in ALLOWED_SYMBOLS}


class ProblemJSONParser:
    def parseCoefficientsFromString(self, expression_str: str, N: int) -> np.ndarray:
        """
        Вычисляет константы ограничений по формуле от j (номер ограничения, с нуля) и N.

        :param expression_str: Строка с выражением, например "(j + 2) / N".
        :param N: Число переменных задачи.
        :return: Массив из N-2 значений.
        """
        try:
            expr = parse_expr(expression_str, local_dict=dict(SYMBOLS))
        except Exception as e:
            logger.error(f"Failed to parse coefficient expression '{expression_str}': {e}")
            raise ValueError(f"Не удалось разобрать выражение '{expression_str}': {e}") from e

        symbols_in_expr = {str(var) for var in expr.free_symbols}
        if not symbols_in_expr.issubset(ALLOWED_SYMBOLS):
            raise ValueError(
                f"Выражение содержит недопустимые переменные: "
                f"{symbols_in_expr - ALLOWED_SYMBOLS}"
            )

        func = lambdify([SYMBOLS["j"], SYMBOLS["N"]], expr, modules="numpy")
        j = np.arange(N - 2, dtype=float)
        # константное выражение lambdify возвращает скаляром
        values = np.broadcast_to(np.asarray(func(j, float(N)), dtype=float), j.shape)
        return np.array(values)

    def parseCoefficients(self, data: dict, N: int) -> np.ndarray:
        if "a" in data and "a_expression" in data:
            raise ValueError("Укажите либо 'a', либо 'a_expression', но не оба ключа сразу")
        if "a" in data:
            return np.asarray(data["a"], dtype=float)
        if "a_expression" in data:
            return self.parseCoefficientsFromString(data["a_expression"], N)
        return tutorial_coefficients(N)

    def parseN(self, data: dict) -> int:
        N = data.get("N")
        if N is None:
            raise ValueError("В файле отсутствует ключ 'N'")
        if isinstance(N, bool) or not isinstance(N, int):
            raise InvalidArgument(f"'N' должно быть целым числом, получено: {N!r}")
        return N

    def createTask(self, data: dict) -> OptimizationTask:
        N = self.parseN(data)
        a = self.parseCoefficients(data, N)

        problem_cls = SparseTutorialProblem if data.get("sparse_jacobian", True) else TutorialProblem
        problem = problem_cls(N, a)
        config = SolverConfig.from_dict(data.get("solver", {}))

        return OptimizationTask(problem=problem, config=config, name=data.get("name", ""))

    def createProblem(self, filePath: str) -> OptimizationTask:
        try:
            with open(filePath, 'r') as file:
                data = json.load(file)
            return self.createTask(data)

        except FileNotFoundError:
            logger.error(f"Problem file '{filePath}' not found")
            raise
        except json.JSONDecodeError:
            logger.error(f"Invalid JSON in problem file '{filePath}'")
            raise
