from typing import Sequence
import numpy as np
from prettytable import PrettyTable


def comparison_table(var_names: Sequence[str], first: np.ndarray, second: np.ndarray,
                     labels=("Ipopt", "SciPy")) -> PrettyTable:
    """Таблица значений переменных для двух решений и модуль их разности."""
    if len(var_names) != len(first) or len(first) != len(second):
        raise ValueError("var_names and both solutions must have the same length")

    table = PrettyTable()
    table.field_names = ["Variable", labels[0], labels[1], "|Difference|"]
    for name, first_val, second_val in zip(var_names, first, second):
        table.add_row([
            name,
            f"{first_val:.6e}",
            f"{second_val:.6e}",
            f"{abs(first_val - second_val):.3e}",
        ])
    return table
