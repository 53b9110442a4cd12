from models.errors import InvalidArgument


class SolverConfig:
    def __init__(self, max_iter=3000, tol=1e-8, acceptable_tol=1e-6, print_level=0,
                 hessian_approximation="limited-memory", derivative_test="none",
                 mu_strategy="monotone", log_level="INFO", log_to_file=False):
        self.max_iter = max_iter
        self.tol = tol
        self.acceptable_tol = acceptable_tol
        # уровень вывода самого Ipopt (0..12), не путать с log_level
        self.print_level = print_level
        # точного гессиана у задачи нет, поэтому допустимо только квазиньютоновское приближение
        if hessian_approximation != "limited-memory":
            raise InvalidArgument(
                f"hessian_approximation must be 'limited-memory', got '{hessian_approximation}': "
                "the problem does not provide second derivatives"
            )
        self.hessian_approximation = hessian_approximation
        self.derivative_test = derivative_test
        self.mu_strategy = mu_strategy
        self.log_level = log_level
        self.log_to_file = log_to_file

    def ipopt_options(self) -> dict:
        return {
            "max_iter": int(self.max_iter),
            "tol": float(self.tol),
            "acceptable_tol": float(self.acceptable_tol),
            "print_level": int(self.print_level),
            "hessian_approximation": self.hessian_approximation,
            "derivative_test": self.derivative_test,
            "mu_strategy": self.mu_strategy,
            "sb": "yes",
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SolverConfig":
        known = set(cls().__dict__)
        unknown = set(data) - known
        if unknown:
            raise InvalidArgument(f"Unknown solver options: {sorted(unknown)}")
        return cls(**data)

    def __repr__(self):
        return f"SolverConfig({self.__dict__})"
