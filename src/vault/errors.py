"""
Ошибки капитального учёта vault.

Две группы:
- доменные ошибки (VaultError): отклоняют одну операцию без мутации состояния
- нарушения сохранения (ConservationBreach): инвариант вызывающей стороны или
  конфигурации нарушен; обработка должна остановиться, а не «подрезать» значения
"""


class VaultError(Exception):
    """Базовая ошибка vault."""


# =============================================================================
# ДОМЕННЫЕ ОШИБКИ
# =============================================================================


class ZeroSharesNotAllowed(VaultError):
    """Цена батча при нулевом числе долей."""


class ZeroPriceNotAllowed(VaultError):
    """Депозит/вывод по нулевой цене."""


class InsufficientShares(VaultError):
    """Вывод большего числа долей, чем выпущено."""

    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(f"Insufficient shares: requested={requested}, available={available}")


class InsufficientNAV(VaultError):
    """Сумма вывода превышает NAV."""

    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(f"Insufficient NAV: requested={requested}, available={available}")


class SeedAmountTooLow(VaultError):
    """Начальный капитал меньше минимального."""

    def __init__(self, amount: int, minimum: int):
        self.amount = amount
        self.minimum = minimum
        super().__init__(f"Seed amount {amount} below minimum {minimum}")


class VaultAlreadySeeded(VaultError):
    """Повторный seed."""


class VaultNotSeeded(VaultError):
    """Операция над vault до seed."""


# =============================================================================
# НАРУШЕНИЯ СОХРАНЕНИЯ
# =============================================================================


class ConservationBreach(VaultError):
    """Фатальное нарушение инварианта сохранения капитала."""


class CatastrophicLoss(ConservationBreach):
    """Убыток превышает NAV плюс компенсацию из комиссий."""

    def __init__(self, loss: int, available: int):
        self.loss = loss
        self.available = available
        super().__init__(f"Catastrophic loss: loss={loss}, nav_plus_loss_comp={available}")


class InsufficientBackstopForGrant(ConservationBreach):
    """Грант превышает баланс backstop."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient backstop for grant: required={required}, available={available}"
        )


class InvalidFeeSplit(ConservationBreach):
    """Доли распределения комиссий не дают в сумме ровно WAD."""

    def __init__(self, total: int):
        self.total = total
        super().__init__(f"Fee split ratios sum to {total}, expected exactly 1 WAD")


class InvalidDrawdownFloor(ConservationBreach):
    """pdd вне интервала (−WAD, 0)."""

    def __init__(self, pdd: int):
        self.pdd = pdd
        super().__init__(f"Drawdown floor pdd={pdd} must lie in (-WAD, 0)")


class ConservationViolation(ConservationBreach):
    """Сумма капитала после водопада не совпадает с суммой до него."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Conservation violated: expected={expected}, actual={actual}")
