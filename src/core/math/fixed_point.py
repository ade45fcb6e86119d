"""
FixedPoint — WAD Fixed-Point Arithmetic

Модуль целочисленной арифметики с фиксированной точкой:
- Внутренняя единица WAD = 10**18 (представление значения 1.0)
- Конверсия между внешней валютой (6 decimals) и WAD с явным режимом округления
- Умножение/деление с тремя политиками округления (floor / ceil / nearest)
- Ограниченная экспонента и натуральный логарифм

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Все функции чистые: никаких побочных эффектов и скрытого состояния
2. Режим округления задаётся ИМЕНЕМ функции (w_mul / w_mul_up / w_mul_nearest)
3. Nearest-округление: половина округляется вверх (ties up)
4. Результат вне диапазона uint256 → FixedPointOverflow, а не молчаливое усечение
5. Деление на ноль → FixedPointDivisionByZero немедленно

ЭКСПОНЕНТА / ЛОГАРИФМ:
    w_exp: x = k·ln2 + r, r ∈ [0, ln2); exp(r) рядом Тейлора с внутренней
           точностью 1e36; результат = exp(r) · 2^k.
           Домен: 0 ≤ x ≤ MAX_EXP_INPUT_WAD (≈133.084 WAD).
    w_ln:  x = 2^n · y, y ∈ [1, 2); ln(y) = 2·atanh((y-1)/(y+1)) рядом по
           нечётным степеням (|z| ≤ 1/3) с внутренней точностью 1e36.
           Домен: x ≥ WAD.
    Относительная погрешность обеих функций ≤ 1e-15 (floor на выходе).
"""

from dataclasses import dataclass
from typing import Final


# =============================================================================
# КОНСТАНТЫ
# =============================================================================


@dataclass(frozen=True)
class FixedPointConstants:
    """Единый неизменяемый набор числовых констант fixed-point арифметики."""

    wad: int = 10**18
    half_wad: int = 5 * 10**17

    # Внешняя валюта (USDC-подобная, 6 decimals) → WAD
    payment_decimals: int = 6
    scale_diff: int = 10**12

    # Максимальный вход w_exp: exp(x) · WAD < 2^255
    max_exp_input_wad: int = 133_084258667509499440

    # Верхняя граница представимых значений
    max_uint256: int = 2**256 - 1

    # Внутренняя повышенная точность для рядов exp/ln
    precise_one: int = 10**36
    # ln(2) · 1e36 (floor)
    ln2_precise: int = 693147180559945309417232121458176568


FIXED_POINT: Final[FixedPointConstants] = FixedPointConstants()

WAD: Final[int] = FIXED_POINT.wad
HALF_WAD: Final[int] = FIXED_POINT.half_wad
SCALE_DIFF: Final[int] = FIXED_POINT.scale_diff
MAX_EXP_INPUT_WAD: Final[int] = FIXED_POINT.max_exp_input_wad
MAX_UINT256: Final[int] = FIXED_POINT.max_uint256

# Заявленная относительная погрешность w_exp / w_ln
TRANSCENDENTAL_REL_TOLERANCE: Final[float] = 1e-15

_PRECISE_ONE: Final[int] = FIXED_POINT.precise_one
_PRECISE_PER_WAD: Final[int] = FIXED_POINT.precise_one // FIXED_POINT.wad
_LN2_PRECISE: Final[int] = FIXED_POINT.ln2_precise


# =============================================================================
# EXCEPTIONS
# =============================================================================


class FixedPointError(Exception):
    """Базовая ошибка fixed-point арифметики."""


class FixedPointDivisionByZero(FixedPointError, ZeroDivisionError):
    """Деление на ноль (знаменатель == 0)."""


class FixedPointOverflow(FixedPointError, OverflowError):
    """Результат или вход вне представимого диапазона."""


class FixedPointDomainError(FixedPointError, ValueError):
    """Вход вне области определения функции (отрицательный операнд, ln(x < 1))."""


# =============================================================================
# ВНУТРЕННИЕ ПРОВЕРКИ
# =============================================================================


def _require_unsigned(*values: int) -> None:
    for value in values:
        if value < 0:
            raise FixedPointDomainError(f"Operand must be non-negative, got {value}")


def _require_nonzero(denominator: int) -> None:
    if denominator == 0:
        raise FixedPointDivisionByZero("Division by zero in fixed-point operation")


def _checked(result: int) -> int:
    if result > MAX_UINT256:
        raise FixedPointOverflow(f"Fixed-point result {result} exceeds uint256 range")
    return result


def _div_nearest(numerator: int, denominator: int) -> int:
    # ties up: floor((n + d/2) / d) с честной обработкой нечётного d
    return (2 * numerator + denominator) // (2 * denominator)


def _div_up(numerator: int, denominator: int) -> int:
    return -((-numerator) // denominator)


# =============================================================================
# КОНВЕРСИЯ МАСШТАБА (6 decimals ↔ WAD)
# =============================================================================


def to_wad(amount: int) -> int:
    """
    Конверсия внешней суммы (6 decimals) во внутренний WAD.

    Операция точная (умножение на 1e12).

    Args:
        amount: Сумма во внешних единицах (>= 0)

    Returns:
        amount · 1e12

    Raises:
        FixedPointOverflow: Если результат не помещается в uint256

    Examples:
        >>> to_wad(1_000_000)
        1000000000000000000
    """
    _require_unsigned(amount)
    if amount > MAX_UINT256 // SCALE_DIFF:
        raise FixedPointOverflow(f"to_wad overflow: amount={amount}")
    return amount * SCALE_DIFF


def from_wad(amount_wad: int) -> int:
    """WAD → 6 decimals с округлением вниз (floor)."""
    _require_unsigned(amount_wad)
    return amount_wad // SCALE_DIFF


def from_wad_round_up(amount_wad: int) -> int:
    """
    WAD → 6 decimals с округлением вверх (ceil).

    Используется для дебетовых сумм (стоимость, комиссии): пользователь
    никогда не платит меньше WAD-экономики.
    """
    _require_unsigned(amount_wad)
    return _div_up(amount_wad, SCALE_DIFF)


def from_wad_nearest(amount_wad: int) -> int:
    """WAD → 6 decimals с округлением к ближайшему (половина вверх)."""
    _require_unsigned(amount_wad)
    return (amount_wad + SCALE_DIFF // 2) // SCALE_DIFF


def from_wad_nearest_min1(amount_wad: int) -> int:
    """
    WAD → 6 decimals к ближайшему, но не меньше 1 для ненулевого входа.

    Гарантирует, что ненулевая WAD-сумма никогда не превращается в 0.
    """
    if amount_wad == 0:
        return 0
    return max(1, from_wad_nearest(amount_wad))


# =============================================================================
# УМНОЖЕНИЕ
# =============================================================================


def w_mul(a: int, b: int) -> int:
    """
    WAD-умножение с округлением вниз: floor(a · b / WAD).

    Examples:
        >>> w_mul(2 * WAD, 3 * WAD) == 6 * WAD
        True
    """
    _require_unsigned(a, b)
    return _checked(a * b // WAD)


def w_mul_up(a: int, b: int) -> int:
    """WAD-умножение с округлением вверх: ceil(a · b / WAD)."""
    _require_unsigned(a, b)
    return _checked(_div_up(a * b, WAD))


def w_mul_nearest(a: int, b: int) -> int:
    """WAD-умножение с округлением к ближайшему (половина вверх)."""
    _require_unsigned(a, b)
    return _checked((a * b + HALF_WAD) // WAD)


# =============================================================================
# ДЕЛЕНИЕ
# =============================================================================


def w_div(a: int, b: int) -> int:
    """
    WAD-деление с округлением вниз: floor(a · WAD / b).

    Raises:
        FixedPointDivisionByZero: Если b == 0
    """
    _require_unsigned(a, b)
    _require_nonzero(b)
    return _checked(a * WAD // b)


def w_div_up(a: int, b: int) -> int:
    """WAD-деление с округлением вверх: ceil(a · WAD / b)."""
    _require_unsigned(a, b)
    _require_nonzero(b)
    return _checked(_div_up(a * WAD, b))


def w_div_nearest(a: int, b: int) -> int:
    """WAD-деление с округлением к ближайшему (половина вверх)."""
    _require_unsigned(a, b)
    _require_nonzero(b)
    return _checked(_div_nearest(a * WAD, b))


# =============================================================================
# ЭКСПОНЕНТА И ЛОГАРИФМ
# =============================================================================


def w_exp(x: int) -> int:
    """
    Ограниченная экспонента exp(x) в WAD.

    Алгоритм: редукция x = k·ln2 + r, ряд Тейлора для exp(r) с внутренней
    точностью 1e36, затем сдвиг на k бит. Результат округляется вниз.

    Args:
        x: Показатель в WAD, 0 ≤ x ≤ MAX_EXP_INPUT_WAD

    Returns:
        exp(x) в WAD

    Raises:
        FixedPointDomainError: Если x < 0
        FixedPointOverflow: Если x > MAX_EXP_INPUT_WAD

    Examples:
        >>> w_exp(0) == WAD
        True
    """
    _require_unsigned(x)
    if x > MAX_EXP_INPUT_WAD:
        raise FixedPointOverflow(
            f"w_exp input {x} exceeds MAX_EXP_INPUT_WAD={MAX_EXP_INPUT_WAD}"
        )
    if x == 0:
        return WAD

    x_precise = x * _PRECISE_PER_WAD
    k = x_precise // _LN2_PRECISE
    r = x_precise - k * _LN2_PRECISE

    # exp(r), r ∈ [0, ln2): ряд сходится быстрее 1/n!
    total = _PRECISE_ONE
    term = _PRECISE_ONE
    n = 1
    while True:
        term = term * r // (_PRECISE_ONE * n)
        if term == 0:
            break
        total += term
        n += 1

    return _checked((total << k) // _PRECISE_PER_WAD)


def _ln_precise(x: int) -> int:
    """ln(x / WAD) с точностью 1e36 для x ≥ WAD (floor)."""
    n = (x // WAD).bit_length() - 1
    y = (x * _PRECISE_PER_WAD) >> n  # y ∈ [1e36, 2e36)

    z = (y - _PRECISE_ONE) * _PRECISE_ONE // (y + _PRECISE_ONE)
    z_sq = z * z // _PRECISE_ONE

    series = z
    term = z
    k = 1
    while True:
        term = term * z_sq // _PRECISE_ONE
        k += 2
        if term == 0:
            break
        series += term // k

    return n * _LN2_PRECISE + 2 * series


def w_ln(x: int) -> int:
    """
    Натуральный логарифм ln(x) в WAD, округление вниз.

    Args:
        x: Аргумент в WAD, x ≥ WAD

    Returns:
        ln(x) в WAD (≥ 0)

    Raises:
        FixedPointDomainError: Если x < WAD (включая 0)

    Examples:
        >>> w_ln(WAD)
        0
    """
    if x < WAD:
        raise FixedPointDomainError(f"w_ln requires x >= WAD, got {x}")
    if x == WAD:
        return 0
    return _ln_precise(x) // _PRECISE_PER_WAD


def w_ln_up(x: int) -> int:
    """
    Натуральный логарифм ln(x) в WAD с округлением вверх.

    Для дебетовых расчётов (стоимость покупки): ln(x) + 1 wei при x > WAD,
    что покрывает погрешность floor-ряда.
    """
    if x < WAD:
        raise FixedPointDomainError(f"w_ln_up requires x >= WAD, got {x}")
    if x == WAD:
        return 0
    return _div_up(_ln_precise(x), _PRECISE_PER_WAD) + 1


def clmsr_cost(alpha: int, sum_before: int, sum_after: int) -> int:
    """
    Стоимость CLMSR: α · ln(sum_after / sum_before).

    Отношение считается с округлением вниз; при sum_after ≤ sum_before
    стоимость равна 0.

    Raises:
        FixedPointDivisionByZero: Если sum_before == 0
    """
    _require_unsigned(alpha, sum_before, sum_after)
    _require_nonzero(sum_before)
    if sum_after <= sum_before:
        return 0
    ratio = w_div(sum_after, sum_before)
    return w_mul(alpha, w_ln(ratio))
