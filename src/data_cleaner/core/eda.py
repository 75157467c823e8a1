"""
eda.py
─────────────────────────────────────────────────────────────────────────────
Client-side exploratory data analysis over parsed rows.

  dataTypeDistribution → column counts per type, zero counts omitted
  nullValueAnalysis    → missing cells per flagged column, full row scan
  valueDistributions   → histogram of the first numeric column
  correlationMatrix    → Pearson matrix of the numeric columns (two or more)

Histogram binning
  k = min(max_bins, floor(sqrt(n)))   n = number of numeric values
  bins are [lo, hi) except the last, which is closed so max lands in it.
  Zero range gives one bin labelled with the value; k < 2 gives one bin
  spanning the full range.
─────────────────────────────────────────────────────────────────────────────
"""

import math
from bisect import bisect_right
from typing import List, Optional, Sequence

import pandas as pd

from data_cleaner.config import settings
from data_cleaner.core.cells import is_missing, to_number
from data_cleaner.models import (
    CorrelationMatrix,
    DatasetSchema,
    EdaSummary,
    HistogramBin,
    NullCount,
    Row,
    TypeCount,
    ValueDistribution,
)
from data_cleaner.utils.logger import get_logger

logger = get_logger(__name__)


# ── helpers ───────────────────────────────────────────────────────────────────
def select_histogram_column(schema: DatasetSchema) -> Optional[str]:
    """The representative numeric column: first in numeric_columns order."""
    return schema.numeric_columns[0] if schema.numeric_columns else None


def numeric_values(rows: Sequence[Row], column: str) -> List[float]:
    values = []
    for row in rows:
        number = to_number(row.get(column))
        if number is not None:
            values.append(number)
    return values


def _label(lo: float, hi: float) -> str:
    return f"{lo:.1f}-{hi:.1f}"


# ── 1. type distribution ──────────────────────────────────────────────────────
def type_distribution(schema: DatasetSchema) -> List[TypeCount]:
    counts = [
        TypeCount(name="Numeric", value=len(schema.numeric_columns)),
        TypeCount(name="Categorical", value=len(schema.categorical_columns)),
    ]
    return [c for c in counts if c.value > 0]


# ── 2. null analysis ──────────────────────────────────────────────────────────
def null_analysis(rows: Sequence[Row], schema: DatasetSchema) -> List[NullCount]:
    # Recount against the rows; a flagged column with no missing cell is dropped
    result = []
    for col in schema.columns_with_missing_values:
        missing = sum(1 for row in rows if is_missing(row.get(col.name)))
        if missing > 0:
            result.append(NullCount(name=col.name, missing=missing))
    return result


# ── 3. histogram ──────────────────────────────────────────────────────────────
def histogram(values: Sequence[float], max_bins: Optional[int] = None) -> List[HistogramBin]:
    """
    Bin numeric values so that every value falls into exactly one bin.

    Args:
        values: Finite numbers.
        max_bins: Upper bound on the bin count (``settings.HISTOGRAM_MAX_BINS``).

    Returns:
        Bins in ascending order; empty when there are no values.
    """
    n = len(values)
    if n == 0:
        return []
    if max_bins is None:
        max_bins = settings.HISTOGRAM_MAX_BINS

    lo, hi = min(values), max(values)
    if hi == lo:
        return [HistogramBin(name=f"{lo:.1f}", count=n)]

    k = min(max_bins, math.isqrt(n))
    if k < 2:
        return [HistogramBin(name=_label(lo, hi), count=n)]

    # hi - lo can overflow to inf for wide finite ranges; divide first
    width = hi / k - lo / k
    # edges[i] is the lower bound of bin i; the final edge is max itself
    edges = [lo + i * width for i in range(k)] + [hi]
    counts = [0] * k
    for v in values:
        idx = min(bisect_right(edges, v) - 1, k - 1)
        counts[idx] += 1

    return [
        HistogramBin(name=_label(edges[i], edges[i + 1]), count=counts[i])
        for i in range(k)
    ]


def value_distributions(
    rows: Sequence[Row],
    schema: DatasetSchema,
    max_bins: Optional[int] = None,
) -> List[ValueDistribution]:
    column = select_histogram_column(schema)
    if column is None:
        return []
    bins = histogram(numeric_values(rows, column), max_bins)
    if not bins:
        return []
    return [ValueDistribution(column=column, distribution=bins)]


# ── 4. correlation ────────────────────────────────────────────────────────────
def correlation_matrix(rows: Sequence[Row], schema: DatasetSchema) -> Optional[CorrelationMatrix]:
    """
    Pearson correlation between numeric columns, pairwise over rows where both
    cells are numbers. Undefined pairs (constant column, fewer than two shared
    rows) are None. Needs at least two numeric columns.
    """
    columns = schema.numeric_columns
    if len(columns) < 2:
        return None

    frame = pd.DataFrame(
        {col: [to_number(row.get(col)) for row in rows] for col in columns},
        columns=columns,
        dtype=float,
    )
    corr = frame.corr(method="pearson", min_periods=2).round(3)
    values = [
        [None if pd.isna(v) else float(v) for v in corr.loc[col, columns]]
        for col in columns
    ]
    return CorrelationMatrix(columns=list(columns), values=values)


# ── main entry point ──────────────────────────────────────────────────────────
def compute_eda(
    rows: Sequence[Row],
    schema: DatasetSchema,
    max_bins: Optional[int] = None,
) -> EdaSummary:
    """
    Compute the EDA summary of a dataset from its rows and inferred schema.

    Never raises for data-shape reasons: zero rows yield an all-empty summary
    and a dataset without numeric columns yields no value distribution.
    """
    if not rows:
        return EdaSummary()

    summary = EdaSummary(
        data_type_distribution=type_distribution(schema),
        null_value_analysis=null_analysis(rows, schema),
        value_distributions=value_distributions(rows, schema, max_bins),
        correlation_matrix=correlation_matrix(rows, schema),
    )
    logger.debug(
        f"EDA computed: {len(summary.null_value_analysis)} columns with nulls, "
        f"{len(summary.value_distributions)} histogram(s)"
    )
    return summary
