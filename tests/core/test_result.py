"""
Tests for the Result[P] envelope.

Validates:
    - Generic payloads (least-squares and resampling payloads)
    - Frozen immutability
    - Default warnings tuple and has_warning()
"""

from dataclasses import FrozenInstanceError, dataclass

import numpy as np
import pytest

from pymodelselect.core.result import Result


@dataclass(frozen=True)
class FakeParams:
    """Minimal payload for testing."""
    coefficients: tuple[float, ...]


def _result(**kwargs):
    defaults = dict(
        params=FakeParams(coefficients=(1.0, 2.0)),
        info={'method': 'qr', 'rank': 2},
        timing=None,
        backend_name='cpu_qr',
    )
    defaults.update(kwargs)
    return Result(**defaults)


# ═══════════════════════════════════════════════════════════════════════
# Construction and field access
# ═══════════════════════════════════════════════════════════════════════


class TestResultConstruction:

    def test_basic_creation(self):
        result = _result(timing={'total_seconds': 0.01})
        assert result.params.coefficients == (1.0, 2.0)
        assert result.info['rank'] == 2
        assert result.timing['total_seconds'] == 0.01
        assert result.backend_name == 'cpu_qr'

    def test_tuple_payload(self):
        """Resampling wraps a tuple of folds directly."""
        result = _result(params=(np.arange(3), np.arange(3, 5)), backend_name='cpu_resample')
        assert len(result.params) == 2

    def test_warnings_default_empty(self):
        result = _result()
        assert result.warnings == ()
        assert isinstance(result.warnings, tuple)


# ═══════════════════════════════════════════════════════════════════════
# Immutability
# ═══════════════════════════════════════════════════════════════════════


class TestImmutability:
    """Result is frozen: no attribute mutation allowed."""

    def test_cannot_set_params(self):
        result = _result()
        with pytest.raises(FrozenInstanceError):
            result.params = FakeParams(coefficients=())

    def test_cannot_set_warnings(self):
        result = _result()
        with pytest.raises(FrozenInstanceError):
            result.warnings = ('new',)


# ═══════════════════════════════════════════════════════════════════════
# has_warning()
# ═══════════════════════════════════════════════════════════════════════


class TestHasWarning:

    def test_no_warnings(self):
        assert _result().has_warning('anything') is False

    def test_substring_match(self):
        result = _result(warnings=("Split R-hat above 1.05 for ['x']",))
        assert result.has_warning('R-hat') is True
        assert result.has_warning('Pareto') is False
