from models.solver_config import SolverConfig


class OptimizationTask:
    def __init__(self, problem, config: SolverConfig = None, name: str = ""):
        self.problem = problem
        self.config = config if config is not None else SolverConfig()
        self.name = name or type(problem).__name__

    def get_variable_names(self):
        return [f"x[{i}]" for i in range(self.problem.N)]
