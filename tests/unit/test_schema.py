import math

from data_cleaner.core.cells import CellKind, classify, is_missing, to_number
from data_cleaner.core.schema import infer_schema
from data_cleaner.models import MissingColumn

# --- Tests for cell classification ---

def test_missing_markers():
    """None, NaN and blank strings are all missing; zero and False are not."""
    assert is_missing(None)
    assert is_missing(float("nan"))
    assert is_missing("")
    assert is_missing("   ")
    assert not is_missing(0)
    assert not is_missing(False)
    assert not is_missing("0")

def test_numeric_coercion():
    """Plain decimal notation converts; everything else stays text."""
    assert to_number(" 12 ") == 12.0
    assert to_number("-3.5") == -3.5
    assert to_number("1e3") == 1000.0
    assert to_number(".5") == 0.5
    assert to_number(7) == 7.0
    assert to_number("0x10") is None
    assert to_number("1,000") is None
    assert to_number("inf") is None
    assert to_number("NaN") is None
    assert to_number(math.inf) is None
    assert to_number(True) is None
    assert to_number("abc") is None

def test_classify_closed_variant():
    assert classify(None) is CellKind.MISSING
    assert classify("42") is CellKind.NUMBER
    assert classify("2024-01-01") is CellKind.TEXT
    assert classify(True) is CellKind.TEXT

# --- Tests for schema inference ---

def test_empty_input_gives_empty_schema():
    """No rows and no columns produces an all-empty schema."""
    schema = infer_schema([], [])
    assert schema.model_dump(by_alias=True) == {
        "allColumns": [],
        "numericColumns": [],
        "categoricalColumns": [],
        "columnsWithMissingValues": [],
    }

def test_string_numbers_with_missing_cell():
    """Parseable strings classify numeric and the null is inventoried."""
    rows = [{"age": "28"}, {"age": "34"}, {"age": None}, {"age": "45"}]
    schema = infer_schema(rows, ["age"])
    assert schema.numeric_columns == ["age"]
    assert schema.categorical_columns == []
    assert schema.columns_with_missing_values == [MissingColumn(name="age", type="numeric")]

def test_partition_preserves_column_order():
    """Every column is classified exactly once, in source order."""
    rows = [
        {"b": "x", "a": 1, "c": "2.5", "d": None},
        {"b": "y", "a": 2, "c": "3", "d": ""},
    ]
    columns = ["b", "a", "c", "d"]
    schema = infer_schema(rows, columns)
    assert schema.all_columns == columns
    assert schema.numeric_columns == ["a", "c"]
    assert schema.categorical_columns == ["b", "d"]
    assert not set(schema.numeric_columns) & set(schema.categorical_columns)
    assert set(schema.numeric_columns) | set(schema.categorical_columns) == set(columns)

def test_all_missing_column_is_categorical():
    rows = [{"x": None}, {"x": "  "}]
    schema = infer_schema(rows, ["x"])
    assert schema.categorical_columns == ["x"]
    assert schema.columns_with_missing_values == [MissingColumn(name="x", type="categorical")]

def test_mixed_content_is_categorical():
    rows = [{"v": "1"}, {"v": "two"}, {"v": True}]
    schema = infer_schema(rows, ["v"])
    assert schema.categorical_columns == ["v"]

def test_classification_uses_only_the_sample():
    """Text after the sample does not reclassify the column, but later nulls are found."""
    rows = [{"n": str(i)} for i in range(100)] + [{"n": "oops"}, {"n": None}]
    schema = infer_schema(rows, ["n"])
    assert schema.numeric_columns == ["n"]
    assert schema.columns_with_missing_values == [MissingColumn(name="n", type="numeric")]

def test_custom_sample_size():
    rows = [{"n": "1"}, {"n": "text"}]
    assert infer_schema(rows, ["n"], sample_size=1).numeric_columns == ["n"]
    assert infer_schema(rows, ["n"], sample_size=2).categorical_columns == ["n"]

def test_unlisted_keys_are_ignored_and_absent_keys_are_missing():
    rows = [{"a": "1", "extra": "z"}, {"extra": "y"}]
    schema = infer_schema(rows, ["a"])
    assert schema.all_columns == ["a"]
    assert schema.columns_with_missing_values == [MissingColumn(name="a", type="numeric")]

def test_unrecognised_columns_degrade_gracefully():
    """Rows sharing no key with the column list do not raise."""
    rows = [{"foo": 1}, {"bar": 2}]
    schema = infer_schema(rows, ["a", "b"])
    assert schema.numeric_columns == []
    assert schema.categorical_columns == ["a", "b"]

def test_infer_schema_is_idempotent():
    rows = [{"a": "1", "b": "x"}, {"a": None, "b": "y"}]
    assert infer_schema(rows, ["a", "b"]) == infer_schema(rows, ["a", "b"])

def test_missing_inventory_matches_full_row_scan():
    rows = [{"a": str(i), "b": "x"} for i in range(150)]
    rows[140]["b"] = ""
    schema = infer_schema(rows, ["a", "b"])
    for col in schema.columns_with_missing_values:
        assert any(is_missing(row.get(col.name)) for row in rows)
    assert [c.name for c in schema.columns_with_missing_values] == ["b"]
