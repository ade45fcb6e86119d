"""
LazyMulSegmentTree — разреженное дерево отрезков с ленивым умножением

Хранит положительный вес каждой позиции (бина) целочисленного домена
[0, size). Вес по умолчанию — один WAD. Поддерживает:
- умножение всех весов диапазона [lo, hi] на множитель (range-multiply)
- сумму весов диапазона (range-sum)

Узлы живут в пуле (list) и адресуются целочисленным handle; handle 0 —
«отсутствующий узел». Узел создаётся при первом касании поддерева, никогда не
удаляется, выдача handle строго монотонна. Рекурсивные функции принимают handle
и ЯВНО возвращают пересчитанную сумму вызывающему.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. cached_root_sum == сумма весов всех позиций (с учётом неявных WAD)
2. Все масштабирования сумм и отложенных множителей — w_mul_nearest (половина вверх)
3. Отложенный множитель узла держится в полосе
   [UNDERFLOW_FLUSH_THRESHOLD, FLUSH_THRESHOLD]; при выходе из неё он
   немедленно проталкивается в детей
4. Любая ошибка валидации поднимается ДО мутации (all-or-nothing)
5. get_range_sum не мутирует дерево; query_with_flush — мутирует
"""

import logging
from dataclasses import dataclass
from typing import Final, Sequence

from src.core.math.fixed_point import MAX_UINT256, WAD, FixedPointOverflow, w_mul_nearest
from src.tree.errors import (
    IndexOutOfBounds,
    InvalidFactor,
    InvalidRange,
    SeedLengthMismatch,
    TreeAlreadyInitialized,
    TreeAlreadySeeded,
    TreeNotInitialized,
    TreeNotPristine,
    TreeSizeTooLarge,
    TreeSizeZero,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class TreeConfig:
    """Конфигурация дерева: полоса множителей и пороги проталкивания.

    Пороги 0.001 / 1000 WAD подобраны эмпирически для WAD-точности.
    """

    min_factor: int = 10**16  # 0.01 WAD
    max_factor: int = 100 * WAD
    underflow_flush_threshold: int = 10**15  # 0.001 WAD
    flush_threshold: int = 1000 * WAD
    max_size: int = 2**32 - 2  # индексы бинов — uint32

    def __post_init__(self) -> None:
        if not 0 < self.min_factor <= WAD <= self.max_factor:
            raise ValueError(
                f"Factor band must satisfy 0 < min_factor <= WAD <= max_factor, "
                f"got [{self.min_factor}, {self.max_factor}]"
            )
        if not 0 < self.underflow_flush_threshold < WAD < self.flush_threshold:
            raise ValueError(
                f"Flush band must satisfy 0 < underflow_flush_threshold < WAD < flush_threshold, "
                f"got [{self.underflow_flush_threshold}, {self.flush_threshold}]"
            )
        if self.max_size <= 0:
            raise ValueError(f"max_size must be positive, got {self.max_size}")


# Запас по uint256 для сумм узлов во время одного обновления
_SUM_HEADROOM: Final[int] = MAX_UINT256 // 2


DEFAULT_TREE_CONFIG: Final[TreeConfig] = TreeConfig()

MIN_FACTOR: Final[int] = DEFAULT_TREE_CONFIG.min_factor
MAX_FACTOR: Final[int] = DEFAULT_TREE_CONFIG.max_factor

NULL_HANDLE: Final[int] = 0


# =============================================================================
# NODE
# =============================================================================


@dataclass
class Node:
    """Узел дерева. Принадлежит пулу дерева, наружу не отдаётся."""

    sum: int
    pending: int = WAD
    left: int = NULL_HANDLE
    right: int = NULL_HANDLE


# =============================================================================
# TREE
# =============================================================================


class LazyMulSegmentTree:
    """Разреженное дерево отрезков с ленивым мультипликативным обновлением.

    Пример:
        >>> tree = LazyMulSegmentTree()
        >>> tree.init(4)
        >>> tree.apply_range_factor(0, 3, 2 * WAD)
        >>> tree.get_range_sum(0, 3) == 8 * WAD
        True
    """

    def __init__(self, config: TreeConfig | None = None):
        self.config = config or DEFAULT_TREE_CONFIG

        # Пул узлов; индекс 0 — sentinel для NULL_HANDLE
        self._nodes: list[Node] = [Node(sum=0)]
        self._root: int = NULL_HANDLE
        self._size: int = 0
        self._cached_root_sum: int = 0

        self._seeded: bool = False
        self._mutated: bool = False

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def size(self) -> int:
        return self._size

    @property
    def is_initialized(self) -> bool:
        return self._root != NULL_HANDLE

    @property
    def node_count(self) -> int:
        """Количество материализованных узлов."""
        return len(self._nodes) - 1

    @property
    def next_index(self) -> int:
        """Handle, который получит следующий аллоцированный узел."""
        return len(self._nodes)

    def total_sum(self) -> int:
        """Сумма весов всего домена за O(1)."""
        self._require_initialized()
        return self._cached_root_sum

    # -------------------------------------------------------------------------
    # Init / seed
    # -------------------------------------------------------------------------

    def init(self, size: int) -> None:
        """
        Инициализация домена [0, size) весами по умолчанию.

        Аллоцирует только корень.

        Raises:
            TreeAlreadyInitialized: Повторный вызов
            TreeSizeZero: size == 0
            TreeSizeTooLarge: size > config.max_size
        """
        if self.is_initialized:
            raise TreeAlreadyInitialized("Tree is already initialized")
        if size <= 0:
            raise TreeSizeZero("Tree size must be positive")
        if size > self.config.max_size:
            raise TreeSizeTooLarge(f"Tree size {size} exceeds {self.config.max_size}")

        self._size = size
        self._root = self._alloc(size * WAD)
        self._cached_root_sum = size * WAD

    def seed_with_factors(self, factors: Sequence[int]) -> None:
        """
        Однократная загрузка начальных весов.

        Дерево строится снизу вверх; корень переиспользует уже выданный handle,
        так что пул после загрузки содержит ровно 2·size − 1 узлов.

        Raises:
            TreeNotInitialized: Дерево не инициализировано
            TreeAlreadySeeded: Повторная загрузка
            TreeNotPristine: Были другие мутации
            SeedLengthMismatch: len(factors) != size
            InvalidFactor: Нулевой или отрицательный вес
        """
        self._require_initialized()
        if self._seeded:
            raise TreeAlreadySeeded("Tree has already been seeded")
        if self._mutated:
            raise TreeNotPristine("Tree was mutated before seeding")
        if len(factors) != self._size:
            raise SeedLengthMismatch(self._size, len(factors))
        for factor in factors:
            if factor <= 0:
                raise InvalidFactor(factor)

        root_sum = self._build(self._root, 0, self._size - 1, factors)
        self._cached_root_sum = root_sum
        self._seeded = True
        self._mutated = True

    def _build(self, handle: int, l: int, r: int, factors: Sequence[int]) -> int:
        if l == r:
            self._nodes[handle] = Node(sum=factors[l])
            return factors[l]

        mid = (l + r) // 2
        left = self._alloc(0)
        left_sum = self._build(left, l, mid, factors)
        right = self._alloc(0)
        right_sum = self._build(right, mid + 1, r, factors)

        total = left_sum + right_sum
        self._nodes[handle] = Node(sum=total, left=left, right=right)
        return total

    # -------------------------------------------------------------------------
    # Range multiply
    # -------------------------------------------------------------------------

    def apply_range_factor(self, lo: int, hi: int, factor: int) -> None:
        """
        Умножение весов всех позиций [lo, hi] на factor (WAD).

        Raises:
            TreeNotInitialized, InvalidRange, IndexOutOfBounds
            InvalidFactor: factor вне [min_factor, max_factor]
            FixedPointOverflow: Сумма домена после обновления может выйти за uint256
        """
        self._require_initialized()
        self._require_range(lo, hi)
        if factor < self.config.min_factor or factor > self.config.max_factor:
            raise InvalidFactor(factor)

        # Любая сумма узла в ходе обновления не больше total · max(factor, 1)
        if self._cached_root_sum * max(factor, WAD) > _SUM_HEADROOM * WAD:
            raise FixedPointOverflow(
                f"Range update by {factor} would overflow root sum {self._cached_root_sum}"
            )

        self._mutated = True
        self._cached_root_sum = self._apply(self._root, 0, self._size - 1, lo, hi, factor)

    def _apply(self, handle: int, l: int, r: int, lo: int, hi: int, factor: int) -> int:
        node = self._nodes[handle]

        if lo <= l and r <= hi:
            node.sum = w_mul_nearest(node.sum, factor)
            if l == r:
                return node.sum

            node.pending = w_mul_nearest(node.pending, factor)
            if (
                node.pending > self.config.flush_threshold
                or node.pending < self.config.underflow_flush_threshold
            ):
                logger.debug(
                    "pending factor %d out of band at [%d, %d], flushing", node.pending, l, r
                )
                self._push_down(node, l, r)
            return node.sum

        self._push_down(node, l, r)
        mid = (l + r) // 2

        left_sum = self._nodes[node.left].sum
        right_sum = self._nodes[node.right].sum
        if lo <= mid:
            left_sum = self._apply(node.left, l, mid, lo, hi, factor)
        if hi > mid:
            right_sum = self._apply(node.right, mid + 1, r, lo, hi, factor)

        node.sum = left_sum + right_sum
        return node.sum

    # -------------------------------------------------------------------------
    # Range sum
    # -------------------------------------------------------------------------

    def get_range_sum(self, lo: int, hi: int) -> int:
        """
        Сумма весов [lo, hi] без мутации дерева.

        Отложенные множители переносятся вниз как накопленный множитель;
        для нематериализованного поддерева возвращается width · WAD · carried.
        """
        self._require_initialized()
        self._require_range(lo, hi)
        return self._query(self._root, 0, self._size - 1, lo, hi, WAD)

    def _query(self, handle: int, l: int, r: int, lo: int, hi: int, carried: int) -> int:
        if handle == NULL_HANDLE:
            width = min(r, hi) - max(l, lo) + 1
            return w_mul_nearest(width * WAD, carried)

        node = self._nodes[handle]
        if lo <= l and r <= hi:
            return node.sum if carried == WAD else w_mul_nearest(node.sum, carried)

        if node.pending != WAD:
            carried = w_mul_nearest(carried, node.pending)

        mid = (l + r) // 2
        total = 0
        if lo <= mid:
            total += self._query(node.left, l, mid, lo, hi, carried)
        if hi > mid:
            total += self._query(node.right, mid + 1, r, lo, hi, carried)
        return total

    def query_with_flush(self, lo: int, hi: int) -> int:
        """
        Сумма весов [lo, hi] с материализацией отложенных множителей.

        Мутирующая операция: используется перед обновлением тех же узлов.
        """
        self._require_initialized()
        self._require_range(lo, hi)
        self._mutated = True
        return self._query_flush(self._root, 0, self._size - 1, lo, hi)

    def _query_flush(self, handle: int, l: int, r: int, lo: int, hi: int) -> int:
        node = self._nodes[handle]
        if lo <= l and r <= hi:
            return node.sum

        self._push_down(node, l, r)
        mid = (l + r) // 2
        total = 0
        if lo <= mid:
            total += self._query_flush(node.left, l, mid, lo, hi)
        if hi > mid:
            total += self._query_flush(node.right, mid + 1, r, lo, hi)
        return total

    def get_node_value(self, index: int) -> int:
        """Вес одной позиции (read-only)."""
        return self.get_range_sum(index, index)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _alloc(self, node_sum: int, pending: int = WAD) -> int:
        self._nodes.append(Node(sum=node_sum, pending=pending))
        return len(self._nodes) - 1

    def _push_down(self, node: Node, l: int, r: int) -> None:
        """Проталкивание отложенного множителя в детей (с аллокацией)."""
        mid = (l + r) // 2
        factor = node.pending

        # У листьев отложенного множителя нет
        if node.left == NULL_HANDLE:
            node.left = self._alloc(
                w_mul_nearest((mid - l + 1) * WAD, factor), factor if mid > l else WAD
            )
        elif factor != WAD:
            self._scale_node(self._nodes[node.left], l, mid, factor)

        if node.right == NULL_HANDLE:
            node.right = self._alloc(
                w_mul_nearest((r - mid) * WAD, factor), factor if r > mid + 1 else WAD
            )
        elif factor != WAD:
            self._scale_node(self._nodes[node.right], mid + 1, r, factor)

        node.pending = WAD

    def _scale_node(self, child: Node, l: int, r: int, factor: int) -> None:
        child.sum = w_mul_nearest(child.sum, factor)
        if l != r:
            child.pending = w_mul_nearest(child.pending, factor)

    def _require_initialized(self) -> None:
        if not self.is_initialized:
            raise TreeNotInitialized("Tree is not initialized")

    def _require_range(self, lo: int, hi: int) -> None:
        if lo > hi:
            raise InvalidRange(lo, hi)
        if lo < 0:
            raise IndexOutOfBounds(lo, self._size)
        if hi >= self._size:
            raise IndexOutOfBounds(hi, self._size)
