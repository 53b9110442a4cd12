import argparse
import logging
from managers.derivative_checker import DerivativeChecker
from managers.ipopt_runner import IpoptRunner
from managers.problem_json_parser import ProblemJSONParser
from managers.report import comparison_table
from managers.scipy_solver import ScipyReferenceSolver
from models.optimization_task import OptimizationTask
from models.tutorial_problem import SparseTutorialProblem, tutorial_coefficients

# param n := 4 из AMPL-формулировки упражнения
DEFAULT_N = 4


def build_task(path=None) -> OptimizationTask:
    if path:
        return ProblemJSONParser().createProblem(path)
    problem = SparseTutorialProblem(DEFAULT_N, tutorial_coefficients(DEFAULT_N))
    return OptimizationTask(problem, name="tutorial")


def run(argv=None):
    parser = argparse.ArgumentParser(description="Solve the Ipopt tutorial NLP")
    parser.add_argument("problem", nargs="?", help="JSON problem file; the built-in tutorial instance if omitted")
    parser.add_argument("--solver", choices=["ipopt", "scipy", "both"], default="ipopt")
    parser.add_argument("--check-derivatives", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    task = build_task(args.problem)

    if args.check_derivatives:
        DerivativeChecker(task.problem).check()

    solutions = {}
    if args.solver in ("ipopt", "both"):
        solutions["Ipopt"] = IpoptRunner(task).solve()
    if args.solver in ("scipy", "both"):
        solutions["SciPy"] = ScipyReferenceSolver(task).solve()

    if len(solutions) == 2:
        print(comparison_table(task.get_variable_names(), solutions["Ipopt"].x, solutions["SciPy"].x))
    return solutions


if __name__ == "__main__":
    run()
