"""
Fee Waterfall — распределение P&L и комиссий расчётного цикла

Чистая функция: WaterfallParams → WaterfallResult, без состояния между вызовами.

Шаги строго упорядочены, каждый потребляет только остаток предыдущего:
1. Компенсация убытка: loss_comp = min(F, max(0, −L)); pool = F − loss_comp
2. NAV после убытка и грант до пола просадки:
       nav_raw   = N_prev + L + loss_comp
       nav_floor = ceil(N_prev · (1 + pdd))
       grant     = min(max(0, nav_floor − nav_raw), ΔE)
3. Пополнение backstop до rho_bs · (nav_raw + grant) из pool
4. Остаток делится по phi_lp / phi_bs / phi_tr (floor), пыль уходит LP
5. fee_to_lp = loss_comp + lp_share + dust
   nav_pre_batch = nav_raw + grant + lp_share + dust
   backstop_next = B_prev − grant + fill + bs_share
   treasury_next = T_prev + tr_share

КРИТИЧЕСКИЙ ИНВАРИАНТ (точное сохранение):
    nav_pre_batch + backstop_next + treasury_next == N_prev + B_prev + T_prev + L + F
Нарушение → ConservationViolation (не подрезается).
"""

import logging

from src.core.domain.waterfall import WaterfallParams, WaterfallResult
from src.core.math.fixed_point import WAD, w_mul, w_mul_up
from src.vault.errors import (
    CatastrophicLoss,
    ConservationViolation,
    InsufficientBackstopForGrant,
    InvalidDrawdownFloor,
    InvalidFeeSplit,
)

logger = logging.getLogger(__name__)


def _validate_params(params: WaterfallParams) -> None:
    if params.pdd <= -WAD or params.pdd >= 0:
        raise InvalidDrawdownFloor(params.pdd)

    split_total = params.phi_lp + params.phi_bs + params.phi_tr
    if split_total != WAD:
        raise InvalidFeeSplit(split_total)


def _post_loss_nav(nav_prev: int, pnl: int, loss_comp: int) -> int:
    """N_prev + L + loss_comp без ухода в отрицательную область."""
    if pnl >= 0:
        return nav_prev + pnl + loss_comp

    loss = -pnl
    available = nav_prev + loss_comp
    if available < loss:
        raise CatastrophicLoss(loss, available)
    return available - loss


def calculate_fee_waterfall(params: WaterfallParams) -> WaterfallResult:
    """
    Расчёт водопада комиссий одного цикла.

    Args:
        params: Параметры цикла

    Returns:
        WaterfallResult с промежуточными и итоговыми значениями

    Raises:
        InvalidDrawdownFloor: pdd вне (−WAD, 0)
        InvalidFeeSplit: phi_lp + phi_bs + phi_tr != WAD
        CatastrophicLoss: Убыток превышает N_prev + loss_comp
        InsufficientBackstopForGrant: grant > B_prev
        ConservationViolation: Нарушено точное сохранение капитала
    """
    _validate_params(params)

    # Шаг 1: компенсация убытка из комиссий
    loss = -params.pnl if params.pnl < 0 else 0
    loss_comp = min(params.gross_fees, loss)
    pool = params.gross_fees - loss_comp

    # Шаг 2: пол просадки и грант
    nav_raw = _post_loss_nav(params.nav_prev, params.pnl, loss_comp)

    nav_floor = w_mul_up(params.nav_prev, WAD + params.pdd) if params.nav_prev > 0 else 0
    grant_need = max(0, nav_floor - nav_raw)
    grant = min(grant_need, params.delta_et)
    grant_shortfall = grant_need - grant

    if grant > params.backstop_prev:
        raise InsufficientBackstopForGrant(grant, params.backstop_prev)
    if grant_shortfall > 0:
        logger.warning(
            "grant capped by delta_et: need=%d delta_et=%d shortfall=%d",
            grant_need,
            params.delta_et,
            grant_shortfall,
        )

    nav_granted = nav_raw + grant
    backstop_granted = params.backstop_prev - grant

    # Шаг 3: пополнение backstop до целевого покрытия
    backstop_target = w_mul(params.rho_bs, nav_granted)
    fill = min(max(0, backstop_target - backstop_granted), pool)
    remainder = pool - fill

    # Шаг 4: распределение остатка
    lp_share = w_mul(remainder, params.phi_lp)
    bs_share = w_mul(remainder, params.phi_bs)
    tr_share = w_mul(remainder, params.phi_tr)
    dust = remainder - lp_share - bs_share - tr_share

    # Шаг 5: итоговые значения
    fee_to_lp = loss_comp + lp_share + dust
    nav_pre_batch = nav_granted + lp_share + dust
    backstop_next = backstop_granted + fill + bs_share
    treasury_next = params.treasury_prev + tr_share

    expected = params.capital_before()
    actual = nav_pre_batch + backstop_next + treasury_next
    if actual != expected:
        raise ConservationViolation(expected, actual)

    return WaterfallResult(
        loss_comp=loss_comp,
        pool=pool,
        nav_raw=nav_raw,
        nav_floor=nav_floor,
        grant_need=grant_need,
        grant=grant,
        grant_shortfall=grant_shortfall,
        fill=fill,
        lp_share=lp_share,
        bs_share=bs_share,
        tr_share=tr_share,
        dust=dust,
        fee_to_lp=fee_to_lp,
        nav_pre_batch=nav_pre_batch,
        backstop_next=backstop_next,
        treasury_next=treasury_next,
    )
