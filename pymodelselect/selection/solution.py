"""
Selection results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from pymodelselect.core.result import Result
from pymodelselect.selection._common import CandidateResult


@dataclass
class SelectionSolution:
    """
    Ranked candidate results and the one-SE choice.

    results lists successful candidates best first, followed by failed
    candidates in input order.
    """
    _result: Result[tuple[CandidateResult, ...]]

    @property
    def results(self) -> tuple[CandidateResult, ...]:
        return self._result.params

    @property
    def best(self) -> CandidateResult | None:
        """Top-ranked candidate, or None if every candidate failed."""
        for r in self.results:
            if r.rank == 1:
                return r
        return None

    @property
    def selected(self) -> CandidateResult | None:
        """Simplest candidate within one SE of the best."""
        index = self._result.info['selected_index']
        if index is None:
            return None
        for r in self.results:
            if r.index == index:
                return r
        return None

    @property
    def failed(self) -> tuple[CandidateResult, ...]:
        return tuple(r for r in self.results if r.failed)

    @property
    def metric(self) -> str:
        return self._result.info['metric']

    @property
    def direction(self) -> str:
        return self._result.info['direction']

    @property
    def seed(self) -> int:
        """Base seed every per-unit seed was derived from."""
        return self._result.info['seed']

    @property
    def n_folds(self) -> int | None:
        """Number of folds, None for PSIS-LOO selection."""
        return self._result.info['n_folds']

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[CandidateResult]:
        return iter(self.results)

    def rows(self) -> list[dict[str, Any]]:
        """One dict per candidate, in ranked order."""
        selected = self.selected
        return [
            {
                'rank': r.rank,
                'name': r.name,
                'formula': r.candidate.formula.label,
                'complexity': r.complexity,
                'mean': r.mean,
                'std_err': r.standard_error,
                'n_folds': r.n_folds,
                'within_one_se': r.within_one_se,
                'selected': selected is not None and r.index == selected.index,
                'failed': r.failed,
                'error_kind': r.error_kind,
                'error': r.error,
            }
            for r in self.results
        ]

    def to_dataframe(self):
        """
        Ranked results as a pandas DataFrame.

        Requires pandas.
        """
        try:
            import pandas as pd
        except ImportError:
            raise ImportError(
                "to_dataframe() requires pandas. Install with: pip install pandas"
            ) from None
        return pd.DataFrame(self.rows())

    def summary(self) -> str:
        folds = self.n_folds if self.n_folds is not None else 'PSIS-LOO'
        lines = [
            "Model Selection Results",
            "=" * 72,
            f"Metric: {self.metric} ({self.direction})   Folds: {folds}   Seed: {self.seed}",
            "",
            f"{'Rank':>4s}  {'Candidate':<32s} {'Cplx':>6s} {'Mean':>12s} {'Std.Err':>10s}",
            "-" * 72,
        ]
        selected = self.selected
        for r in self.results:
            mark = '*' if selected is not None and r.index == selected.index else ' '
            name = r.name if len(r.name) <= 32 else r.name[:29] + '...'
            if r.failed:
                lines.append(f"{'-':>4s}  {name:<32s} {r.complexity:6g} FAILED ({r.error_kind})")
            else:
                one_se = '.' if r.within_one_se else ' '
                lines.append(
                    f"{r.rank:4d}{mark}{one_se}{name:<32s} {r.complexity:6g} "
                    f"{r.mean:12.6g} {r.standard_error:10.4g}"
                )
        lines.append("-" * 72)
        if selected is None:
            lines.append("No candidate could be evaluated.")
        else:
            lines.append(f"Selected (one-SE rule): {selected.name}")
        lines.append("'*' selected, '.' within one SE of the best")
        for message in self.warnings:
            lines.append(f"Warning: {message}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        chosen = self.selected.name if self.selected is not None else None
        return (
            f"SelectionSolution(metric={self.metric!r}, "
            f"candidates={len(self.results)}, selected={chosen!r})"
        )
