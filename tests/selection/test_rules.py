"""
Tests for ranking and the one-standard-error rule.
"""

import numpy as np
import pytest

from pymodelselect.core.exceptions import InvalidParameterError, ValidationError
from pymodelselect.selection import one_se_rule, rank_order, within_one_se


class TestRankOrder:

    def test_minimize(self):
        np.testing.assert_array_equal(rank_order([0.3, 0.1, 0.2]), [1, 2, 0])

    def test_maximize(self):
        np.testing.assert_array_equal(rank_order([0.3, 0.1, 0.2], 'maximize'), [0, 2, 1])

    def test_ties_keep_input_order(self):
        np.testing.assert_array_equal(rank_order([0.2, 0.1, 0.1]), [1, 2, 0])
        np.testing.assert_array_equal(rank_order([0.2, 0.2, 0.1], 'maximize'), [0, 1, 2])

    def test_invalid_direction(self):
        with pytest.raises(InvalidParameterError) as exc_info:
            rank_order([1.0, 2.0], 'lower')
        assert exc_info.value.parameter == 'direction'


class TestWithinOneSE:

    def test_minimize_boundary_inclusive(self):
        mask = within_one_se([1.0, 1.1, 1.3], [0.1, 0.5, 0.5])
        np.testing.assert_array_equal(mask, [True, True, False])

    def test_maximize(self):
        mask = within_one_se([10.0, 9.0, 7.5], [2.0, 2.0, 2.0], 'maximize')
        np.testing.assert_array_equal(mask, [True, True, False])

    def test_empty(self):
        with pytest.raises(ValidationError):
            within_one_se([], [])

    def test_negative_se(self):
        with pytest.raises(ValidationError):
            within_one_se([1.0, 2.0], [0.1, -0.1])

    def test_non_finite(self):
        with pytest.raises(ValidationError):
            within_one_se([1.0, np.nan], [0.1, 0.1])

    def test_length_mismatch(self):
        with pytest.raises(ValidationError):
            within_one_se([1.0, 2.0], [0.1])


# ═══════════════════════════════════════════════════════════════════════
# one_se_rule
# ═══════════════════════════════════════════════════════════════════════


class TestOneSERule:

    def test_rmse_ladder_picks_best(self):
        """Steady improvements larger than one SE: only the best qualifies."""
        means = [0.260, 0.187, 0.144, 0.136, 0.132]
        ses = [0.002, 0.002, 0.001, 0.001, 0.001]
        assert one_se_rule(means, ses, [2, 9, 12, 15, 19]) == 4

    def test_elpd_ladder_maximize(self):
        means = [-3931.0, 13713.0, 27673.0, 30636.0, 32267.0]
        ses = [190.0, 188.0, 219.0, 227.0, 246.0]
        assert one_se_rule(means, ses, [1, 2, 3, 4, 5], 'maximize') == 4

    def test_simpler_within_one_se(self):
        means = [1.00, 0.95, 0.90]
        ses = [0.1, 0.1, 0.1]
        assert one_se_rule(means, ses, [1, 2, 3]) == 0

    def test_best_se_sets_threshold(self):
        # candidate 0 has a huge SE of its own, which does not matter
        means = [1.20, 1.00]
        ses = [5.0, 0.1]
        assert one_se_rule(means, ses, [1, 2]) == 1

    def test_complexity_tie_goes_to_earliest(self):
        means = [1.0, 1.0, 0.95]
        ses = [0.1, 0.1, 0.1]
        assert one_se_rule(means, ses, [2, 2, 3]) == 0

    def test_complexity_order_independent_of_position(self):
        means = [0.95, 1.00]
        ses = [0.1, 0.1]
        assert one_se_rule(means, ses, [5, 1]) == 1

    def test_single_candidate(self):
        assert one_se_rule([0.5], [0.0], [3]) == 0

    def test_complexity_length_mismatch(self):
        with pytest.raises(ValidationError):
            one_se_rule([1.0, 2.0], [0.1, 0.1], [1])
