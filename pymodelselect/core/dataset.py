"""
Universal tabular Dataset for PyModelSelect.

Dataset is the "I have data" abstraction: an immutable, column-oriented
table whose rows all share one schema. It doesn't know which formula will
consume it or how it will be resampled; the formula layer pulls columns out
of it and the partitioner takes row subsets of it.

Each column is a 1-D numpy array. Numeric fields are float64; categorical
fields are object arrays of str, with a declared level order (the first
level is the reference level for treatment coding).

Usage:
    from pymodelselect import Dataset

    ds = Dataset.from_records([{'x': 1.0, 'g': 'a'}, {'x': 2.0, 'g': 'b'}])
    ds = Dataset.from_columns(x=x, y=y)
    ds = Dataset.from_dataframe(df)
    ds = Dataset.from_file("diamonds.csv")

    ds.schema          # {'x': 'numeric', 'g': 'categorical'}
    ds['x']            # array([1., 2.])
    ds.take([0, 0, 1]) # row subset, duplicates allowed
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from numbers import Real
from pathlib import Path
from typing import Any, Literal, TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pymodelselect.core.exceptions import (
    DimensionError,
    UnknownFieldError,
    ValidationError,
)

if TYPE_CHECKING:
    import pandas as pd


FieldKind = Literal['numeric', 'categorical']

NUMERIC: FieldKind = 'numeric'
CATEGORICAL: FieldKind = 'categorical'


@dataclass(frozen=True, eq=False)
class Dataset:
    """
    Immutable columnar table. Domain-agnostic.

    Construct via factory classmethods, not directly.
    """
    _columns: dict[str, NDArray]
    _schema: dict[str, FieldKind]
    _levels: dict[str, tuple[str, ...]]
    _n: int
    _metadata: dict[str, Any] = field(default_factory=dict)

    # === Column Access ===

    def keys(self) -> tuple[str, ...]:
        """Field names in column order."""
        return tuple(self._columns.keys())

    def __getitem__(self, name: str) -> NDArray:
        return self.column(name)

    def __contains__(self, name: object) -> bool:
        return name in self._columns

    def __len__(self) -> int:
        return self._n

    def column(self, name: str) -> NDArray:
        """
        Access a named column.

        Raises:
            UnknownFieldError: If the field is not in the schema, with the
                available field names attached.
        """
        if name not in self._columns:
            raise UnknownFieldError(
                f"Dataset has no field '{name}'. Available: {list(self.keys())}",
                field=name,
                available=self.keys(),
            )
        return self._columns[name]

    def levels(self, name: str) -> tuple[str, ...]:
        """Declared level order of a categorical field."""
        if self.kind(name) != CATEGORICAL:
            raise ValidationError(f"Field '{name}' is numeric, it has no levels")
        return self._levels[name]

    def kind(self, name: str) -> FieldKind:
        """'numeric' or 'categorical' for a field."""
        self.column(name)
        return self._schema[name]

    # === Properties ===

    @property
    def schema(self) -> dict[str, FieldKind]:
        """Field name -> kind."""
        return dict(self._schema)

    @property
    def n_observations(self) -> int:
        """Number of rows."""
        return self._n

    @property
    def metadata(self) -> dict[str, Any]:
        return self._metadata.copy()

    # === Row Operations ===

    def take(self, indices: ArrayLike) -> Dataset:
        """
        Row subset by integer position.

        Duplicates are allowed (bootstrap training sets). The schema and the
        declared level order carry over unchanged.
        """
        idx = np.asarray(indices, dtype=np.intp)
        if idx.ndim != 1:
            raise DimensionError(f"indices: expected 1D array, got {idx.ndim}D")
        if idx.size and (idx.min() < -self._n or idx.max() >= self._n):
            raise ValidationError(
                f"indices out of range for dataset with {self._n} rows"
            )
        columns = {name: _freeze(col[idx]) for name, col in self._columns.items()}
        return Dataset(
            _columns=columns,
            _schema=dict(self._schema),
            _levels=dict(self._levels),
            _n=int(idx.size),
            _metadata={**self._metadata, 'parent_rows': self._n},
        )

    def records(self) -> list[dict[str, Any]]:
        """Rows as a list of dicts (floats for numeric, str for categorical)."""
        out = []
        for i in range(self._n):
            row = {}
            for name, col in self._columns.items():
                value = col[i]
                row[name] = float(value) if self._schema[name] == NUMERIC else str(value)
            out.append(row)
        return out

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}:{v[0]}" for k, v in self._schema.items())
        return f"Dataset(n={self._n}, fields=[{fields}])"

    # === Factory Methods ===

    @classmethod
    def from_columns(
        cls,
        columns: Mapping[str, ArrayLike] | None = None,
        *,
        levels: Mapping[str, Sequence[str]] | None = None,
        **named_columns: ArrayLike,
    ) -> Dataset:
        """
        Construct from 1-D arrays, one per field.

        Numeric arrays become float64 columns; string arrays become
        categorical columns. Level order for a categorical field is taken
        from `levels` when given, else sorted unique values.
        """
        merged: dict[str, ArrayLike] = dict(columns or {})
        merged.update(named_columns)
        if not merged:
            raise ValidationError("Dataset needs at least one column")

        storage: dict[str, NDArray] = {}
        schema: dict[str, FieldKind] = {}
        level_map: dict[str, tuple[str, ...]] = {}
        n: int | None = None

        for name, values in merged.items():
            arr = np.asarray(values)
            if arr.ndim != 1:
                raise DimensionError(
                    f"{name}: expected 1D column, got {arr.ndim}D with shape {arr.shape}"
                )
            if n is None:
                n = arr.shape[0]
            elif arr.shape[0] != n:
                raise DimensionError(
                    f"Inconsistent column lengths: '{name}' has {arr.shape[0]} rows, expected {n}"
                )

            if np.issubdtype(arr.dtype, np.number) or arr.dtype == bool:
                col = arr.astype(np.float64)
                if not np.all(np.isfinite(col)):
                    raise ValidationError(f"{name}: contains non-finite values")
                storage[name] = _freeze(col)
                schema[name] = NUMERIC
            else:
                if not all(isinstance(v, str) for v in arr.tolist()):
                    raise ValidationError(
                        f"{name}: categorical columns must contain only strings"
                    )
                col = arr.astype(object)
                declared = None if levels is None else levels.get(name)
                level_map[name] = _resolve_levels(name, col, declared)
                storage[name] = _freeze(col)
                schema[name] = CATEGORICAL

        return cls(
            _columns=storage,
            _schema=schema,
            _levels=level_map,
            _n=int(n),
            _metadata={'source': 'columns'},
        )

    @classmethod
    def from_records(
        cls,
        records: Sequence[Mapping[str, Any]],
        *,
        levels: Mapping[str, Sequence[str]] | None = None,
    ) -> Dataset:
        """
        Construct from a sequence of row mappings.

        Every record must have the same field set, and each field must hold
        the same kind of value (real number or string) in every record.
        """
        if isinstance(records, Mapping):
            records = [records]
        if len(records) == 0:
            raise ValidationError("records: need at least one record")

        names = list(records[0].keys())
        expected = set(names)
        kinds: dict[str, FieldKind] = {}

        for i, record in enumerate(records):
            if set(record.keys()) != expected:
                missing = sorted(expected - set(record.keys()))
                extra = sorted(set(record.keys()) - expected)
                raise ValidationError(
                    f"record {i}: schema mismatch (missing={missing}, extra={extra})"
                )
            for name in names:
                kind = _value_kind(record[name], name, i)
                if name not in kinds:
                    kinds[name] = kind
                elif kinds[name] != kind:
                    raise ValidationError(
                        f"record {i}: field '{name}' is {kind}, "
                        f"earlier records have {kinds[name]}"
                    )

        columns = {}
        for name in names:
            values = [record[name] for record in records]
            if kinds[name] == NUMERIC:
                columns[name] = np.asarray(values, dtype=np.float64)
            else:
                columns[name] = np.asarray(values, dtype=object)

        ds = cls.from_columns(columns, levels=levels)
        return ds._with_metadata(source='records')

    @classmethod
    def from_dataframe(cls, df: 'pd.DataFrame', *, source_path: str | None = None) -> Dataset:
        """
        Construct from a pandas DataFrame.

        Numeric and boolean columns become numeric fields. Everything else
        becomes categorical; pandas Categorical columns keep their category
        order as the level order.
        """
        import pandas as pd

        columns: dict[str, NDArray] = {}
        level_map: dict[str, list[str]] = {}
        for name in df.columns:
            series = df[name]
            if pd.api.types.is_numeric_dtype(series) or pd.api.types.is_bool_dtype(series):
                columns[str(name)] = series.to_numpy(dtype=np.float64)
            else:
                if isinstance(series.dtype, pd.CategoricalDtype):
                    level_map[str(name)] = [str(c) for c in series.cat.categories]
                if series.isna().any():
                    raise ValidationError(f"{name}: contains missing values")
                columns[str(name)] = series.astype(str).to_numpy(dtype=object)

        ds = cls.from_columns(columns, levels=level_map)
        extra = {'source': 'dataframe'}
        if source_path:
            extra['source_path'] = source_path
        return ds._with_metadata(**extra)

    @classmethod
    def from_file(cls, path: str | Path, *, columns: list[str] | None = None) -> Dataset:
        """Construct from a CSV/TSV file."""
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix in ('.csv', '.tsv'):
            import pandas as pd
            sep = '\t' if suffix == '.tsv' else ','
            df = pd.read_csv(path, usecols=columns, sep=sep)
            return cls.from_dataframe(df, source_path=str(path))
        raise ValidationError(f"Unknown file format: {suffix}")

    @classmethod
    def coerce(cls, data: Any) -> Dataset:
        """
        Accept a Dataset, a single record, a sequence of records, or a
        pandas DataFrame, and return a Dataset.
        """
        if isinstance(data, Dataset):
            return data
        if isinstance(data, Mapping):
            return cls.from_records([data])
        if hasattr(data, 'columns') and hasattr(data, 'dtypes'):
            return cls.from_dataframe(data)
        if isinstance(data, Sequence) and not isinstance(data, (str, bytes)):
            return cls.from_records(data)
        raise ValidationError(
            f"Cannot build a Dataset from {type(data).__name__}"
        )

    def _with_metadata(self, **metadata: Any) -> Dataset:
        return Dataset(
            _columns=self._columns,
            _schema=self._schema,
            _levels=self._levels,
            _n=self._n,
            _metadata={**self._metadata, **metadata},
        )


def _freeze(arr: NDArray) -> NDArray:
    arr.setflags(write=False)
    return arr


def _value_kind(value: Any, name: str, row: int) -> FieldKind:
    if isinstance(value, str):
        return CATEGORICAL
    if isinstance(value, (Real, np.number)):
        return NUMERIC
    raise ValidationError(
        f"record {row}: field '{name}' has unsupported value {value!r} "
        f"({type(value).__name__}); expected a real number or a string"
    )


def _resolve_levels(
    name: str,
    values: NDArray,
    declared: Sequence[str] | None,
) -> tuple[str, ...]:
    observed = set(values.tolist())
    if declared is None:
        return tuple(sorted(observed))
    declared = tuple(str(level) for level in declared)
    unknown = observed - set(declared)
    if unknown:
        raise ValidationError(
            f"{name}: values {sorted(unknown)} are not among declared levels {list(declared)}"
        )
    return declared
