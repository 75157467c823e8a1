"""
cells.py
─────────────────────────────────────────────────────────────────────────────
Classification of a single cell value into Missing, Number or Text.

  Missing → None, NaN, or a string that is empty once trimmed
  Number  → an int/float that is finite, or a string in plain decimal
            notation (optional sign, fraction and exponent) after trimming
  Text    → everything else, booleans included
─────────────────────────────────────────────────────────────────────────────
"""

import math
import numbers
import re
from enum import Enum
from typing import Optional

from data_cleaner.models import CellValue

_DECIMAL = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


class CellKind(str, Enum):
    MISSING = "missing"
    NUMBER = "number"
    TEXT = "text"


def is_missing(value: CellValue) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def to_number(value: CellValue) -> Optional[float]:
    """Return the finite float a cell converts to losslessly, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        try:
            number = float(value)
        except OverflowError:
            return None
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        text = value.strip()
        if not _DECIMAL.match(text):
            return None
        number = float(text)
        return number if math.isfinite(number) else None
    return None


def classify(value: CellValue) -> CellKind:
    if is_missing(value):
        return CellKind.MISSING
    if to_number(value) is not None:
        return CellKind.NUMBER
    return CellKind.TEXT
