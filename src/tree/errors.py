"""
Ошибки дерева весов и ценообразования CLMSR.

Все ошибки фатальны для одного вызова: операция отклоняется до любой мутации
состояния дерева, автоматических повторов нет.
"""


class TreeError(ValueError):
    """Базовая ошибка LazyMulSegmentTree."""


class TreeNotInitialized(TreeError):
    """Операция над неинициализированным деревом."""


class TreeAlreadyInitialized(TreeError):
    """Повторный вызов init()."""


class TreeSizeZero(TreeError):
    """Размер домена равен нулю."""


class TreeSizeTooLarge(TreeError):
    """Размер домена превышает допустимый максимум."""


class TreeAlreadySeeded(TreeError):
    """Повторная загрузка начальных весов."""


class TreeNotPristine(TreeError):
    """Загрузка начальных весов после других мутаций дерева."""


class SeedLengthMismatch(TreeError):
    """Длина вектора начальных весов не равна размеру домена."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Seed length mismatch: expected {expected}, got {actual}")


class InvalidRange(TreeError):
    """Диапазон с lo > hi."""

    def __init__(self, lo: int, hi: int):
        self.lo = lo
        self.hi = hi
        super().__init__(f"Invalid range: lo={lo} > hi={hi}")


class IndexOutOfBounds(TreeError):
    """Индекс вне домена [0, size)."""

    def __init__(self, index: int, size: int):
        self.index = index
        self.size = size
        super().__init__(f"Index {index} out of bounds for tree of size {size}")


class InvalidFactor(TreeError):
    """Множитель вне допустимой полосы (или нулевой вес при загрузке)."""

    def __init__(self, factor: int):
        self.factor = factor
        super().__init__(f"Invalid factor: {factor}")


class InvalidLiquidityParameter(TreeError):
    """Нулевой параметр ликвидности α."""
