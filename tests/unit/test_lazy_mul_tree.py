"""
Тесты для LazyMulSegmentTree — разреженное дерево с ленивым умножением

Проверяемые инварианты:
1. Неинициализированные позиции имеют вес ровно WAD
2. total_sum() == get_range_sum(0, size − 1) после любой последовательности операций
3. f, затем 1/f восстанавливает сумму диапазона (≤ 1 wei на затронутый узел)
4. Полоса отложенного множителя [0.001, 1000] WAD: выход → проталкивание
5. get_range_sum не аллоцирует узлы; query_with_flush материализует
6. Любая ошибка (валидация или переполнение) не меняет состояние дерева
"""

import random
from fractions import Fraction

import pytest

from src.core.math.fixed_point import WAD, FixedPointOverflow
from src.tree import (
    MAX_FACTOR,
    MIN_FACTOR,
    IndexOutOfBounds,
    InvalidFactor,
    InvalidRange,
    LazyMulSegmentTree,
    SeedLengthMismatch,
    TreeAlreadyInitialized,
    TreeAlreadySeeded,
    TreeConfig,
    TreeError,
    TreeNotInitialized,
    TreeNotPristine,
    TreeSizeTooLarge,
    TreeSizeZero,
)


def _tree(size: int) -> LazyMulSegmentTree:
    tree = LazyMulSegmentTree()
    tree.init(size)
    return tree


def _bins(tree: LazyMulSegmentTree) -> list[int]:
    return [tree.get_node_value(i) for i in range(tree.size)]


# =============================================================================
# ТЕСТЫ: Конфигурация
# =============================================================================


class TestTreeConfig:
    """TreeConfig: проверка полос при создании."""

    def test_default_config(self):
        """Значения по умолчанию: [0.01, 100] и [0.001, 1000] WAD."""
        config = TreeConfig()
        assert (config.min_factor, config.max_factor) == (10**16, 100 * WAD)
        assert (config.underflow_flush_threshold, config.flush_threshold) == (10**15, 1000 * WAD)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"min_factor": 0},
            {"min_factor": 2 * WAD},
            {"max_factor": WAD // 2},
            {"underflow_flush_threshold": 0},
            {"underflow_flush_threshold": WAD},
            {"flush_threshold": WAD},
            {"underflow_flush_threshold": 2000 * WAD},
            {"max_size": 0},
        ],
    )
    def test_invalid_config_rejected(self, kwargs):
        """Нулевой множитель и перепутанные пороги отклоняются сразу."""
        with pytest.raises(ValueError):
            TreeConfig(**kwargs)

    def test_config_frozen(self):
        """Конфигурация неизменяема."""
        config = TreeConfig()
        with pytest.raises(AttributeError):
            config.min_factor = 1  # type: ignore[misc]


# =============================================================================
# ТЕСТЫ: Инициализация
# =============================================================================


class TestInit:
    """init(): аллоцирует только корень."""

    def test_init_allocates_root_only(self):
        """Один узел и сумма size · WAD."""
        tree = _tree(1000)
        assert tree.size == 1000
        assert tree.node_count == 1
        assert tree.is_initialized
        assert tree.total_sum() == 1000 * WAD

    def test_init_zero_size(self):
        """Нулевой размер запрещён."""
        with pytest.raises(TreeSizeZero):
            LazyMulSegmentTree().init(0)

    def test_init_too_large(self):
        """Размер ограничен config.max_size."""
        tree = LazyMulSegmentTree(TreeConfig(max_size=16))
        tree.init(16)
        with pytest.raises(TreeSizeTooLarge):
            LazyMulSegmentTree(TreeConfig(max_size=16)).init(17)

    def test_reinit_rejected(self):
        """Повторная инициализация запрещена."""
        tree = _tree(4)
        with pytest.raises(TreeAlreadyInitialized):
            tree.init(8)
        assert tree.size == 4

    def test_uninitialized_operations(self):
        """Операции над неинициализированным деревом."""
        tree = LazyMulSegmentTree()
        with pytest.raises(TreeNotInitialized):
            tree.total_sum()
        with pytest.raises(TreeNotInitialized):
            tree.get_range_sum(0, 0)
        with pytest.raises(TreeNotInitialized):
            tree.apply_range_factor(0, 0, WAD)
        with pytest.raises(TreeNotInitialized):
            tree.query_with_flush(0, 0)

    def test_errors_are_value_errors(self):
        """Ошибки дерева — ValueError."""
        assert issubclass(TreeError, ValueError)


# =============================================================================
# ТЕСТЫ: Вес по умолчанию
# =============================================================================


class TestDefaultSums:
    """Нетронутое поддерево ширины w даёт ровно w · WAD."""

    @pytest.mark.parametrize("lo,hi", [(0, 0), (2, 5), (0, 9), (9, 9), (3, 8)])
    def test_default_range_sum(self, lo, hi):
        """Сумма по умолчанию без аллокаций."""
        tree = _tree(10)
        assert tree.get_range_sum(lo, hi) == (hi - lo + 1) * WAD
        assert tree.node_count == 1

    def test_default_node_value(self):
        """Каждый бин весит WAD."""
        tree = _tree(7)
        for i in range(7):
            assert tree.get_node_value(i) == WAD

    def test_default_after_partial_update(self):
        """Нетронутые соседи обновлённого бина."""
        tree = _tree(16)
        tree.apply_range_factor(3, 3, 2 * WAD)
        assert tree.get_range_sum(8, 15) == 8 * WAD
        assert tree.get_range_sum(0, 2) == 3 * WAD


# =============================================================================
# ТЕСТЫ: Range multiply
# =============================================================================


class TestApplyRangeFactor:
    """Умножение диапазона."""

    def test_scenario_double_then_halve(self):
        """×2 на всём домене, затем ×0.5."""
        tree = _tree(4)
        tree.apply_range_factor(0, 3, 2 * WAD)
        assert tree.get_range_sum(0, 3) == 8 * WAD
        tree.apply_range_factor(0, 3, WAD // 2)
        assert tree.get_range_sum(0, 3) == 4 * WAD

    def test_partial_range(self):
        """Частичное покрытие домена."""
        tree = _tree(4)
        tree.apply_range_factor(0, 1, 2 * WAD)
        assert tree.get_range_sum(0, 1) == 4 * WAD
        assert tree.get_range_sum(2, 3) == 2 * WAD
        assert tree.total_sum() == 6 * WAD

    def test_single_bin(self):
        """Обновление одного бина."""
        tree = _tree(5)
        tree.apply_range_factor(2, 2, 3 * WAD)
        assert _bins(tree) == [WAD, WAD, 3 * WAD, WAD, WAD]
        assert tree.total_sum() == 7 * WAD

    def test_overlapping_updates(self):
        """Пересекающиеся диапазоны перемножаются."""
        tree = _tree(8)
        tree.apply_range_factor(0, 5, 2 * WAD)
        tree.apply_range_factor(3, 7, 3 * WAD)
        expected = [2, 2, 2, 6, 6, 6, 3, 3]
        assert _bins(tree) == [v * WAD for v in expected]
        assert tree.total_sum() == sum(expected) * WAD

    def test_factor_band_boundaries_accepted(self):
        """Границы полосы множителя допустимы."""
        tree = _tree(4)
        tree.apply_range_factor(0, 1, MIN_FACTOR)
        tree.apply_range_factor(2, 3, MAX_FACTOR)
        assert tree.get_range_sum(0, 1) == 2 * MIN_FACTOR
        assert tree.get_range_sum(2, 3) == 200 * WAD

    @pytest.mark.parametrize("factor", [0, MIN_FACTOR - 1, MAX_FACTOR + 1])
    def test_factor_out_of_band(self, factor):
        """Множитель вне полосы → InvalidFactor."""
        tree = _tree(4)
        with pytest.raises(InvalidFactor):
            tree.apply_range_factor(0, 3, factor)

    def test_invalid_range(self):
        """lo > hi → InvalidRange."""
        tree = _tree(4)
        with pytest.raises(InvalidRange):
            tree.apply_range_factor(3, 2, WAD)
        with pytest.raises(InvalidRange):
            tree.get_range_sum(2, 1)

    def test_index_out_of_bounds(self):
        """Индекс за пределами домена."""
        tree = _tree(4)
        with pytest.raises(IndexOutOfBounds):
            tree.apply_range_factor(0, 4, WAD)
        with pytest.raises(IndexOutOfBounds):
            tree.get_range_sum(-1, 2)
        with pytest.raises(IndexOutOfBounds):
            tree.get_node_value(4)

    def test_failed_update_leaves_state_unchanged(self):
        """Ошибка валидации не трогает дерево."""
        tree = _tree(8)
        tree.apply_range_factor(1, 4, 2 * WAD)
        total, nodes = tree.total_sum(), tree.node_count

        for args in [(0, 8, WAD), (5, 4, WAD), (0, 7, MAX_FACTOR + 1)]:
            with pytest.raises(TreeError):
                tree.apply_range_factor(*args)

        assert tree.total_sum() == total
        assert tree.node_count == nodes

    def test_overflow_leaves_state_unchanged(self):
        """Переполнение суммы отклоняется до мутации: бины и кэш корня не меняются."""
        tree = _tree(4)
        for _ in range(29):
            tree.apply_range_factor(2, 2, 100 * WAD)
        bins, total, nodes = _bins(tree), tree.total_sum(), tree.node_count
        assert bins[2] == 100**29 * WAD

        with pytest.raises(FixedPointOverflow):
            tree.apply_range_factor(1, 2, 100 * WAD)

        assert _bins(tree) == bins
        assert tree.total_sum() == total
        assert tree.node_count == nodes
        assert tree.total_sum() == tree.get_range_sum(0, 3)

    def test_shrinking_factor_allowed_near_overflow(self):
        """Множитель ≤ 1 не может переполнить сумму."""
        tree = _tree(4)
        for _ in range(29):
            tree.apply_range_factor(2, 2, 100 * WAD)
        tree.apply_range_factor(1, 2, WAD // 2)
        assert tree.get_node_value(2) == 100**29 * WAD // 2
        assert tree.total_sum() == tree.get_range_sum(0, 3)

    def test_sparse_allocation_on_huge_domain(self):
        """Домен 2^32 − 2: аллоцируется только путь к бину."""
        size = 2**32 - 2
        tree = _tree(size)
        tree.apply_range_factor(123_456_789, 123_456_789, 2 * WAD)

        assert tree.node_count <= 2 * 33 + 1
        assert tree.get_node_value(123_456_789) == 2 * WAD
        assert tree.get_node_value(123_456_790) == WAD
        assert tree.total_sum() == (size + 1) * WAD


# =============================================================================
# ТЕСТЫ: Проталкивание отложенного множителя
# =============================================================================


class TestPendingFlush:
    """Полоса [UNDERFLOW_FLUSH_THRESHOLD, FLUSH_THRESHOLD]."""

    def test_pending_within_band_stays_lazy(self):
        """×100 остаётся отложенным в корне."""
        tree = _tree(8)
        tree.apply_range_factor(0, 7, 100 * WAD)
        assert tree.node_count == 1
        assert tree.total_sum() == 800 * WAD

    def test_pending_above_band_flushes(self):
        """×10000 > 1000 WAD → проталкивание в детей."""
        tree = _tree(8)
        tree.apply_range_factor(0, 7, 100 * WAD)
        tree.apply_range_factor(0, 7, 100 * WAD)

        assert tree.node_count == 3
        assert tree.get_range_sum(0, 3) == 40_000 * WAD
        assert tree.get_node_value(5) == 10_000 * WAD
        assert tree.total_sum() == 80_000 * WAD

    def test_pending_below_band_flushes(self):
        """×0.0001 < 0.001 WAD → проталкивание в детей."""
        tree = _tree(8)
        tree.apply_range_factor(0, 7, MIN_FACTOR)
        assert tree.node_count == 1
        tree.apply_range_factor(0, 7, MIN_FACTOR)

        assert tree.node_count == 3
        assert tree.get_node_value(0) == 10**14
        assert tree.total_sum() == 8 * 10**14

    def test_custom_thresholds(self):
        """Узкая полоса проталкивает сразу."""
        config = TreeConfig(flush_threshold=2 * WAD, underflow_flush_threshold=WAD // 2)
        tree = LazyMulSegmentTree(config)
        tree.init(4)
        tree.apply_range_factor(0, 3, 3 * WAD)
        assert tree.node_count == 3
        assert tree.get_node_value(3) == 3 * WAD


# =============================================================================
# ТЕСТЫ: Чтение без мутации / с материализацией
# =============================================================================


class TestQueries:
    """get_range_sum vs query_with_flush."""

    def test_get_range_sum_is_read_only(self):
        """get_range_sum не аллоцирует узлы."""
        tree = _tree(8)
        tree.apply_range_factor(0, 3, 2 * WAD)
        nodes = tree.node_count

        assert tree.get_range_sum(0, 1) == 4 * WAD
        assert tree.get_range_sum(2, 5) == 6 * WAD
        assert tree.node_count == nodes

    def test_query_with_flush_materializes(self):
        """query_with_flush проталкивает отложенные множители."""
        tree = _tree(8)
        tree.apply_range_factor(0, 3, 2 * WAD)
        nodes = tree.node_count

        assert tree.query_with_flush(0, 1) == 4 * WAD
        assert tree.node_count > nodes
        assert tree.get_range_sum(0, 1) == 4 * WAD
        assert tree.total_sum() == 12 * WAD

    def test_query_variants_agree(self):
        """Оба варианта запроса совпадают с точностью округления."""
        rng = random.Random(7)
        tree = _tree(32)
        for _ in range(40):
            lo = rng.randrange(32)
            hi = rng.randrange(lo, 32)
            tree.apply_range_factor(lo, hi, rng.choice([WAD // 2, 2 * WAD, 5 * WAD // 4, 4 * WAD // 5]))

        for _ in range(40):
            lo = rng.randrange(32)
            hi = rng.randrange(lo, 32)
            read_only = tree.get_range_sum(lo, hi)
            flushed = tree.query_with_flush(lo, hi)
            assert abs(read_only - flushed) <= max(64, read_only // 10**14)

    def test_handles_monotonic(self):
        """Handle узлов выдаются монотонно."""
        tree = _tree(64)
        previous = tree.next_index
        for lo in range(0, 64, 5):
            tree.apply_range_factor(lo, min(lo + 2, 63), 2 * WAD)
            assert tree.next_index >= previous
            previous = tree.next_index
        assert tree.node_count == tree.next_index - 1


# =============================================================================
# ТЕСТЫ: Загрузка начальных весов
# =============================================================================


class TestSeed:
    """seed_with_factors: однократно, до любых мутаций."""

    def test_seed_builds_full_tree(self):
        """Ровно 2·size − 1 узлов."""
        tree = _tree(5)
        factors = [(i + 1) * WAD for i in range(5)]
        tree.seed_with_factors(factors)

        assert tree.node_count == 2 * 5 - 1
        assert tree.total_sum() == 15 * WAD
        assert _bins(tree) == factors
        assert tree.get_range_sum(1, 3) == 9 * WAD

    def test_seed_single_bin(self):
        """Домен из одного бина."""
        tree = _tree(1)
        tree.seed_with_factors([3 * WAD])
        assert tree.node_count == 1
        assert tree.total_sum() == 3 * WAD

    def test_seed_twice_rejected(self):
        """Повторная загрузка запрещена."""
        tree = _tree(2)
        tree.seed_with_factors([WAD, WAD])
        with pytest.raises(TreeAlreadySeeded):
            tree.seed_with_factors([WAD, WAD])

    def test_seed_after_mutation_rejected(self):
        """Загрузка после обновления запрещена."""
        tree = _tree(2)
        tree.apply_range_factor(0, 0, 2 * WAD)
        with pytest.raises(TreeNotPristine):
            tree.seed_with_factors([WAD, WAD])

    def test_seed_length_mismatch(self):
        """Длина вектора должна совпадать с size."""
        tree = _tree(3)
        with pytest.raises(SeedLengthMismatch) as exc_info:
            tree.seed_with_factors([WAD, WAD])
        assert exc_info.value.expected == 3
        assert exc_info.value.actual == 2

    def test_seed_zero_factor(self):
        """Нулевой вес отклоняется до построения."""
        tree = _tree(3)
        with pytest.raises(InvalidFactor):
            tree.seed_with_factors([WAD, 0, WAD])
        assert tree.node_count == 1

    def test_seed_uninitialized(self):
        """Загрузка в неинициализированное дерево."""
        with pytest.raises(TreeNotInitialized):
            LazyMulSegmentTree().seed_with_factors([WAD])

    def test_update_after_seed(self):
        """Обновление поверх загруженных весов."""
        tree = _tree(4)
        tree.seed_with_factors([WAD, 2 * WAD, 3 * WAD, 4 * WAD])
        tree.apply_range_factor(1, 2, 2 * WAD)
        assert _bins(tree) == [WAD, 4 * WAD, 6 * WAD, 4 * WAD]
        assert tree.total_sum() == 15 * WAD


# =============================================================================
# ТЕСТЫ: Свойства
# =============================================================================

# Пары (f, 1/f) с точным WAD-произведением
_INVERSE_PAIRS = [
    (2 * WAD, WAD // 2),
    (5 * WAD // 4, 4 * WAD // 5),
    (5 * WAD, WAD // 5),
    (10 * WAD, WAD // 10),
    (4 * WAD, WAD // 4),
]


class TestProperties:
    """Round trip, cache agreement, сравнение с точной моделью."""

    def test_round_trip_restores_range_sum(self):
        """f, затем 1/f восстанавливает сумму диапазона."""
        rng = random.Random(2024)
        tree = _tree(50)
        tree.seed_with_factors([rng.randrange(WAD // 10, 10 * WAD) for _ in range(50)])

        for _ in range(100):
            lo = rng.randrange(50)
            hi = rng.randrange(lo, 50)
            factor, inverse = rng.choice(_INVERSE_PAIRS)

            before = tree.get_range_sum(lo, hi)
            tree.apply_range_factor(lo, hi, factor)
            tree.apply_range_factor(lo, hi, inverse)
            after = tree.get_range_sum(lo, hi)

            assert abs(after - before) <= tree.node_count

    def test_cache_agreement(self):
        """Кэш корня совпадает с пересчётом после каждого обновления."""
        rng = random.Random(99)
        tree = _tree(37)
        for _ in range(200):
            lo = rng.randrange(37)
            hi = rng.randrange(lo, 37)
            factor = rng.randrange(MIN_FACTOR, 3 * WAD)
            tree.apply_range_factor(lo, hi, factor)
            assert tree.total_sum() == tree.get_range_sum(0, 36)

    def test_matches_exact_model(self):
        """Суммы совпадают с точной рациональной моделью."""
        rng = random.Random(31337)
        size = 16
        tree = _tree(size)
        model = [Fraction(WAD)] * size
        factors = [WAD // 2, 2 * WAD, 5 * WAD // 4, 4 * WAD // 5, 11 * WAD // 10, 9 * WAD // 10]

        for _ in range(60):
            lo = rng.randrange(size)
            hi = rng.randrange(lo, size)
            factor = rng.choice(factors)
            tree.apply_range_factor(lo, hi, factor)
            for i in range(lo, hi + 1):
                model[i] = model[i] * factor / WAD

            qlo = rng.randrange(size)
            qhi = rng.randrange(qlo, size)
            expected = sum(model[qlo : qhi + 1])
            assert abs(tree.get_range_sum(qlo, qhi) - expected) <= max(10**7, expected / 10**12)
