class NLPAdapterError(Exception):
    pass


class InvalidArgument(NLPAdapterError, ValueError):
    """Некорректные входные данные при создании задачи (например, N < 3)."""


class ContractViolation(NLPAdapterError, AssertionError):
    """
    Нарушено предусловие, которое адаптер ожидает от вызывающего кода:
    запрошены двойственные начальные значения, не совпадают размеры массивов и т.п.
    """


class UnsupportedCapability(NLPAdapterError, NotImplementedError):
    """
    Возможность намеренно не реализована (значения якобиана, гессиан лагранжиана).
    Повторять вызов бессмысленно.
    """

    def __init__(self, capability: str, message: str = ""):
        self.capability = capability
        super().__init__(message or f"{capability} is not supported by this problem")
