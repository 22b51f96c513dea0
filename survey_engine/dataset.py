"""
Tabular Dataset - Shared data model for all engine stages

Rows are plain mappings from header to cell value. A cell is a number, text,
or missing. Missing is read as None, float NaN or pandas.NA and always
written back as None, so it stays distinct from 0 and from "".
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .config import CLASSIFICATION_NUMERIC_RATIO, CLASSIFICATION_SAMPLE_SIZE
from .exceptions import DatasetError

logger = logging.getLogger(__name__)

MISSING = None

Row = Dict[str, Any]


def is_missing(value: Any) -> bool:
    """True for the missing marker in any of its accepted spellings."""
    if value is None or value is pd.NA:
        return True
    if isinstance(value, (float, np.floating)):
        return bool(np.isnan(value))
    return False


def parse_number(value: Any) -> Optional[float]:
    """
    Parse a cell as a finite number.

    Args:
        value: Cell value (number, text or missing)

    Returns:
        The parsed float, or None when the cell is missing, boolean,
        non-numeric text, or not finite
    """
    if is_missing(value) or isinstance(value, (bool, np.bool_)):
        return None

    if isinstance(value, (int, float, np.integer, np.floating)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None

    return number if math.isfinite(number) else None


def numeric_array(values: Iterable[Any]) -> np.ndarray:
    """Parse a sequence of cells into a float array with NaN for failures."""
    parsed = [parse_number(v) for v in values]
    return np.array([np.nan if p is None else p for p in parsed], dtype=float)


def valid_numbers(values: Iterable[Any]) -> List[float]:
    """Parseable numeric values of a column, in row order."""
    return [p for p in (parse_number(v) for v in values) if p is not None]


def is_numeric_column(values: Sequence[Any]) -> bool:
    """
    Classify a column as numeric or text.

    A column is numeric when at least 70% of its first 100 cells parse as
    finite numbers. Missing cells are part of the sample and never parse.
    A column with no non-missing values is text.

    Args:
        values: Column values in row order

    Returns:
        True if the column is numeric
    """
    sample = list(values[:CLASSIFICATION_SAMPLE_SIZE])
    if all(is_missing(v) for v in sample):
        return False

    n_numeric = sum(1 for v in sample if parse_number(v) is not None)
    return n_numeric >= CLASSIFICATION_NUMERIC_RATIO * len(sample)


@dataclass(frozen=True)
class TabularDataset:
    """
    Ordered headers plus ordered rows.

    Every row must have exactly the header set as keys. Rows are copied on
    construction so the dataset never aliases the caller's mappings.
    """

    headers: Tuple[str, ...]
    rows: Tuple[Row, ...] = field(default_factory=tuple)

    def __post_init__(self):
        headers = tuple(self.headers)
        if len(set(headers)) != len(headers):
            duplicates = sorted({h for h in headers if headers.count(h) > 1})
            raise DatasetError(f"Duplicate headers: {duplicates}")

        header_set = set(headers)
        rows = []
        for i, row in enumerate(self.rows):
            if set(row.keys()) != header_set:
                extra = sorted(set(row.keys()) - header_set)
                absent = sorted(header_set - set(row.keys()))
                raise DatasetError(
                    f"Row {i} does not match headers "
                    f"(unexpected: {extra}, missing: {absent})"
                )
            rows.append({h: (MISSING if is_missing(row[h]) else row[h]) for h in headers})

        object.__setattr__(self, "headers", headers)
        object.__setattr__(self, "rows", tuple(rows))

    def __len__(self) -> int:
        return len(self.rows)

    def column(self, name: str) -> List[Any]:
        """Values of one column in row order."""
        if name not in self.headers:
            raise DatasetError(f"Unknown column: {name}")
        return [row[name] for row in self.rows]

    def with_rows(self, rows: Iterable[Mapping[str, Any]]) -> "TabularDataset":
        """New dataset with the same headers and the given rows."""
        return TabularDataset(self.headers, tuple(dict(r) for r in rows))

    def numeric_columns(self, exclude: Optional[Iterable[str]] = None) -> List[str]:
        """Headers classified as numeric, in header order."""
        skip = set(exclude or ())
        return [h for h in self.headers if h not in skip and is_numeric_column(self.column(h))]

    @classmethod
    def from_records(
        cls,
        records: Sequence[Mapping[str, Any]],
        headers: Optional[Sequence[str]] = None,
    ) -> "TabularDataset":
        """
        Build a dataset from a list of mappings.

        Args:
            records: Row mappings
            headers: Column order (default: key order of the first record)

        Returns:
            TabularDataset
        """
        if headers is None:
            headers = list(records[0].keys()) if records else []
        return cls(tuple(headers), tuple(dict(r) for r in records))

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "TabularDataset":
        """Build a dataset from a DataFrame, NaN cells become missing."""
        headers = [str(c) for c in df.columns]
        frame = df.copy()
        frame.columns = headers
        frame = frame.astype(object).where(pd.notna(frame), None)
        return cls(tuple(headers), tuple(frame.to_dict("records")))

    def to_frame(self) -> pd.DataFrame:
        """Convert to a DataFrame with the header order preserved."""
        return pd.DataFrame.from_records(list(self.rows), columns=list(self.headers))
