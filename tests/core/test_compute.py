"""
Tests for shared compute infrastructure: seeds, timing, QR, devices.
"""

import numpy as np
import pytest

from pymodelselect.core.compute import (
    Timer,
    as_generator,
    derive_seed,
    get_cpu_info,
    resolve_base_seed,
    select_device,
    timed,
)
from pymodelselect.core.compute.linalg import qr_cpu, qr_solve_cpu
from pymodelselect.core.exceptions import InvalidParameterError, SingularDesignError


# ═══════════════════════════════════════════════════════════════════════
# Seeds
# ═══════════════════════════════════════════════════════════════════════


class TestSeeds:

    def test_generator_passthrough(self):
        gen = np.random.default_rng(1)
        assert as_generator(gen) is gen

    def test_same_int_same_stream(self):
        a = as_generator(858).standard_normal(5)
        b = as_generator(858).standard_normal(5)
        np.testing.assert_array_equal(a, b)

    @pytest.mark.parametrize("seed", [-1, 1.5, 'x', True])
    def test_bad_seed(self, seed):
        with pytest.raises(InvalidParameterError):
            as_generator(seed)

    def test_resolve_base_seed(self):
        assert resolve_base_seed(858) == 858
        fresh = resolve_base_seed(None)
        assert isinstance(fresh, int) and fresh >= 0

    def test_derive_seed_deterministic(self):
        assert derive_seed(858, 2, 3) == derive_seed(858, 2, 3)

    def test_derive_seed_distinct_coordinates(self):
        seeds = {derive_seed(858, c, f) for c in range(5) for f in range(10)}
        assert len(seeds) == 50

    def test_derive_seed_order_matters(self):
        assert derive_seed(858, 1, 2) != derive_seed(858, 2, 1)


# ═══════════════════════════════════════════════════════════════════════
# Timing
# ═══════════════════════════════════════════════════════════════════════


class TestTimer:

    def test_sections_accumulate(self):
        timer = Timer()
        timer.start()
        with timer.section('a'):
            pass
        with timer.section('a'):
            pass
        timer.stop()
        result = timer.result()
        assert set(result) == {'total_seconds', 'a'}
        assert result['total_seconds'] >= 0.0

    def test_result_before_stop(self):
        timer = Timer()
        timer.start()
        with pytest.raises(RuntimeError):
            timer.result()

    def test_timed(self):
        with timed() as timer:
            pass
        assert 'total_seconds' in timer.result()


# ═══════════════════════════════════════════════════════════════════════
# QR
# ═══════════════════════════════════════════════════════════════════════


class TestQR:

    def test_matches_lstsq(self, rng):
        X = np.column_stack([np.ones(30), rng.standard_normal((30, 2))])
        y = rng.standard_normal(30)
        beta, qr = qr_solve_cpu(X, y)
        expected, *_ = np.linalg.lstsq(X, y, rcond=None)
        np.testing.assert_allclose(beta, expected, rtol=1e-10)
        assert qr.rank == 3

    def test_rank_deficient(self, rng):
        x = rng.standard_normal(20)
        X = np.column_stack([np.ones(20), x, 2.0 * x])
        with pytest.raises(SingularDesignError) as exc_info:
            qr_solve_cpu(X, rng.standard_normal(20))
        assert exc_info.value.rank == 2
        assert exc_info.value.expected_rank == 3

    def test_more_columns_than_rows(self, rng):
        with pytest.raises(SingularDesignError):
            qr_solve_cpu(rng.standard_normal((2, 3)), rng.standard_normal(2))

    def test_qr_cpu_rank(self):
        assert qr_cpu(np.eye(3)).rank == 3


class TestDevice:

    def test_cpu_info(self):
        info = get_cpu_info()
        assert not info.is_gpu
        assert info.torch_device == 'cpu'

    def test_select_cpu(self):
        assert select_device('cpu').device_type == 'cpu'
