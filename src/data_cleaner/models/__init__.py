from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from typing import Dict, List, Literal, Optional, Union

CellValue = Union[bool, int, float, str, None]
Row = Dict[str, CellValue]

ColumnType = Literal["numeric", "categorical"]


class _Derived(BaseModel):
    """Immutable result type serialised with camelCase keys for the front-end."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class MissingColumn(_Derived):
    """A column with at least one missing cell, paired with its classification."""
    name: str
    type: ColumnType


class DatasetSchema(_Derived):
    """Structural description of a dataset's columns."""
    all_columns: List[str] = Field(default_factory=list)
    numeric_columns: List[str] = Field(default_factory=list)
    categorical_columns: List[str] = Field(default_factory=list)
    columns_with_missing_values: List[MissingColumn] = Field(default_factory=list)

    def column_type(self, name: str) -> Optional[ColumnType]:
        if name in self.numeric_columns:
            return "numeric"
        if name in self.categorical_columns:
            return "categorical"
        return None


class TypeCount(_Derived):
    name: Literal["Numeric", "Categorical"]
    value: int


class NullCount(_Derived):
    name: str
    missing: int


class HistogramBin(_Derived):
    name: str
    count: int


class ValueDistribution(_Derived):
    column: str
    distribution: List[HistogramBin]


class CorrelationMatrix(_Derived):
    """Pearson correlations between numeric columns; None where undefined."""
    columns: List[str]
    values: List[List[Optional[float]]]


class EdaSummary(_Derived):
    """Descriptive statistics rendered by the dashboard."""
    data_type_distribution: List[TypeCount] = Field(default_factory=list)
    null_value_analysis: List[NullCount] = Field(default_factory=list)
    value_distributions: List[ValueDistribution] = Field(default_factory=list)
    correlation_matrix: Optional[CorrelationMatrix] = None


class Dataset(BaseModel):
    """
    A parsed tabular dataset: rows keyed by column name plus the ordered column list.
    """
    rows: List[Row] = Field(default_factory=list)
    columns: List[str] = Field(default_factory=list)
    source: str = ""


class RowPage(_Derived):
    """One page of the data preview table."""
    page: int
    page_size: int
    total_rows: int
    total_pages: int
    columns: List[str]
    rows: List[Row]


# --- Cleaning service contracts ---

ImputationStrategy = Literal["remove", "mean", "median", "mode", "constant"]
EncodingStrategy = Literal["none", "onehot", "label"]
ScalingStrategy = Literal["none", "standard", "minmax"]


class OutlierHandling(BaseModel):
    method: Literal["none", "iqr"] = "none"


class CleaningConfig(BaseModel):
    """Manual cleaning choices, keyed the way the cleaning service expects them."""
    columns_to_drop: List[str] = Field(default_factory=list)
    imputation: Dict[str, ImputationStrategy] = Field(default_factory=dict)
    outlier_handling: OutlierHandling = Field(default_factory=OutlierHandling)
    encoding: Dict[str, EncodingStrategy] = Field(default_factory=dict)
    scaling: Dict[str, ScalingStrategy] = Field(default_factory=dict)


class CleaningRequest(BaseModel):
    mode: Literal["default", "manual"] = "default"
    config: Optional[CleaningConfig] = None

    @model_validator(mode="after")
    def _manual_needs_config(self) -> "CleaningRequest":
        if self.mode == "manual" and self.config is None:
            raise ValueError("manual mode requires a cleaning config")
        return self


class CleaningResult(BaseModel):
    cleaned: Dataset
    report_html: str
