from typing import Iterable, List, Optional, Sequence

from data_cleaner.config import settings
from data_cleaner.core.cells import CellKind, classify, is_missing
from data_cleaner.models import ColumnType, DatasetSchema, MissingColumn, Row
from data_cleaner.utils.logger import get_logger

logger = get_logger(__name__)


def _ordered_unique(columns: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for col in columns:
        if col not in seen:
            seen.add(col)
            ordered.append(col)
    return ordered


def _classify_column(sample: Sequence[Row], column: str) -> ColumnType:
    """
    Numeric only when the sample has at least one value and every value is a number.
    """
    observed = False
    for row in sample:
        kind = classify(row.get(column))
        if kind is CellKind.MISSING:
            continue
        if kind is CellKind.TEXT:
            return "categorical"
        observed = True
    return "numeric" if observed else "categorical"


def has_missing(rows: Sequence[Row], column: str) -> bool:
    return any(is_missing(row.get(column)) for row in rows)


def infer_schema(
    rows: Sequence[Row],
    columns: Sequence[str],
    sample_size: Optional[int] = None,
) -> DatasetSchema:
    """
    Infer column types and the missing-value inventory of a parsed dataset.

    Classification looks only at the first ``sample_size`` rows
    (``settings.SCHEMA_SAMPLE_SIZE`` by default), so a column whose text values
    appear after the sample is still reported numeric. The missing-value scan
    always covers every row.

    Args:
        rows: Parsed rows; a key absent from a row counts as a missing cell.
        columns: Ordered column names. Keys not listed here are ignored.
        sample_size: Number of leading rows used for classification.

    Returns:
        A DatasetSchema. Empty rows give an all-empty schema.
    """
    if not rows:
        return DatasetSchema()

    if sample_size is None:
        sample_size = settings.SCHEMA_SAMPLE_SIZE
    sample = rows[:max(sample_size, 1)]

    all_columns = _ordered_unique(columns)
    types = {col: _classify_column(sample, col) for col in all_columns}

    numeric = [col for col in all_columns if types[col] == "numeric"]
    categorical = [col for col in all_columns if types[col] == "categorical"]
    with_missing = [
        MissingColumn(name=col, type=types[col])
        for col in all_columns
        if has_missing(rows, col)
    ]

    logger.debug(
        f"Inferred schema over {len(rows)} rows (sample {len(sample)}): "
        f"{len(numeric)} numeric, {len(categorical)} categorical, "
        f"{len(with_missing)} with missing values"
    )
    return DatasetSchema(
        all_columns=all_columns,
        numeric_columns=numeric,
        categorical_columns=categorical,
        columns_with_missing_values=with_missing,
    )
