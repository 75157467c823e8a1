"""
cleaning.py
─────────────────────────────────────────────────────────────────────────────
Client for the remote, LLM-backed cleaning service.

  default mode → mean/mode imputation, one-hot encoding, standard scaling
  manual mode  → the user's CleaningConfig, validated against the schema

The model is asked for a JSON object {"cleaned_csv": ..., "report_html": ...};
the cleaned CSV is parsed back into a Dataset like any upload.
─────────────────────────────────────────────────────────────────────────────
"""

import json
import re
from typing import Optional

from groq import Groq

from data_cleaner.config import settings
from data_cleaner.core.ingestion import dataset_to_csv, ingest_file
from data_cleaner.models import (
    CleaningConfig,
    CleaningRequest,
    CleaningResult,
    Dataset,
    DatasetSchema,
)
from data_cleaner.utils.exceptions import (
    CleaningServiceError,
    FileProcessingError,
    InvalidConfigError,
)
from data_cleaner.utils.logger import get_logger

logger = get_logger(__name__)


def _get_client() -> Groq:
    if not settings.GROQ_API_KEY:
        raise CleaningServiceError("GROQ_API_KEY is not configured; the cleaning service is unavailable.")
    return Groq(api_key=settings.GROQ_API_KEY)


# ---------------------------------------------------------------------------
# CONFIGURATION
# ---------------------------------------------------------------------------

def build_default_config(schema: DatasetSchema) -> CleaningConfig:
    """The configuration that default (auto) mode applies, spelled out per column."""
    imputation = {
        col.name: "mean" if col.type == "numeric" else "mode"
        for col in schema.columns_with_missing_values
    }
    return CleaningConfig(
        columns_to_drop=[],
        imputation=imputation,
        outlier_handling={"method": "none"},
        encoding={col: "onehot" for col in schema.categorical_columns},
        scaling={col: "standard" for col in schema.numeric_columns},
    )


def validate_config(config: CleaningConfig, schema: DatasetSchema) -> None:
    """
    Raises:
        InvalidConfigError: Unknown columns, encoding a numeric column,
            scaling a categorical column, or a numeric-only imputation on text.
    """
    known = set(schema.all_columns)
    referenced = set(config.columns_to_drop) | set(config.imputation) | set(config.encoding) | set(config.scaling)
    unknown = sorted(referenced - known)
    if unknown:
        raise InvalidConfigError(f"Unknown column(s) in cleaning config: {', '.join(unknown)}")

    numeric = set(schema.numeric_columns)
    for col, strategy in config.encoding.items():
        if col in numeric and strategy != "none":
            raise InvalidConfigError(f"Column '{col}' is numeric and cannot be encoded with '{strategy}'.")
    for col, strategy in config.scaling.items():
        if col not in numeric and strategy != "none":
            raise InvalidConfigError(f"Column '{col}' is categorical and cannot be scaled with '{strategy}'.")
    for col, strategy in config.imputation.items():
        if col not in numeric and strategy in ("mean", "median"):
            raise InvalidConfigError(f"Column '{col}' is categorical; '{strategy}' imputation needs numbers.")


def summarize_default_clean(schema: DatasetSchema) -> str:
    """Markdown bullet summary of what default mode will do to this dataset."""
    numeric_missing = [c.name for c in schema.columns_with_missing_values if c.type == "numeric"]
    categorical_missing = [c.name for c in schema.columns_with_missing_values if c.type == "categorical"]

    def _cols(names):
        return ", ".join(f"`{n}`" for n in names)

    lines = ["**1. Handle Missing Values**"]
    if not schema.columns_with_missing_values:
        lines.append("- No missing values found; this step is skipped.")
    if numeric_missing:
        lines.append(f"- Fill numeric columns with the mean: {_cols(numeric_missing)}")
    if categorical_missing:
        lines.append(f"- Fill categorical columns with the mode: {_cols(categorical_missing)}")

    lines.append("**2. Encode Categorical Data**")
    if schema.categorical_columns:
        lines.append(f"- One-Hot Encode: {_cols(schema.categorical_columns)}")
    else:
        lines.append("- No categorical columns; this step is skipped.")

    lines.append("**3. Scale Numerical Data**")
    if schema.numeric_columns:
        lines.append(f"- Standardize to mean 0, std 1: {_cols(schema.numeric_columns)}")
    else:
        lines.append("- No numeric columns; this step is skipped.")

    return "\n".join(lines)


# ---------------------------------------------------------------------------
# PROMPTS
# ---------------------------------------------------------------------------

_SYSTEM_PROMPT = (
    "You are an expert data scientist who cleans tabular datasets.\n"
    "You receive a CSV dataset and cleaning instructions.\n"
    "Respond with ONLY a JSON object with exactly two string fields:\n"
    '  "cleaned_csv": the cleaned dataset as CSV text with a header row,\n'
    '  "report_html": an HTML report with a title, an introduction, the transformations '
    "applied with their reasoning and impact, and a summary, written for a non-technical reader.\n"
    "Do not wrap the JSON in any explanation."
)


def _build_user_prompt(dataset: Dataset, request: CleaningRequest, schema: DatasetSchema) -> str:
    if request.mode == "manual":
        instructions = (
            "Apply exactly this configuration and nothing else:\n"
            f"{request.config.model_dump_json(indent=2)}"
        )
    else:
        instructions = (
            "Apply the default cleaning steps:\n"
            f"{summarize_default_clean(schema)}\n"
            "Also remove exact duplicate rows."
        )
    return (
        f"Numeric columns: {json.dumps(schema.numeric_columns)}\n"
        f"Categorical columns: {json.dumps(schema.categorical_columns)}\n\n"
        f"{instructions}\n\n"
        f"Dataset:\n```csv\n{dataset_to_csv(dataset)}```"
    )


# ---------------------------------------------------------------------------
# RESPONSE PARSING
# ---------------------------------------------------------------------------

def _extract_json(raw: str) -> dict:
    """
    Extract the JSON object from an LLM response.
    Handles: ```json ... ```, ``` ... ```, or a bare object.
    """
    match = re.search(r"```(?:json)?\s*(\{.*\})\s*```", raw, re.DOTALL)
    if match:
        text = match.group(1)
    else:
        start, end = raw.find("{"), raw.rfind("}")
        if start == -1 or end <= start:
            raise CleaningServiceError("Cleaning service returned no JSON object.")
        text = raw[start:end + 1]

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise CleaningServiceError(f"Cleaning service returned invalid JSON: {e}")

    if not isinstance(payload, dict):
        raise CleaningServiceError("Cleaning service returned JSON that is not an object.")
    for key in ("cleaned_csv", "report_html"):
        if not isinstance(payload.get(key), str):
            raise CleaningServiceError(f"Cleaning service response is missing '{key}'.")
    return payload


def _parse_result(raw: str, source: str) -> CleaningResult:
    payload = _extract_json(raw)
    try:
        cleaned = ingest_file(payload["cleaned_csv"].encode("utf-8"), "cleaned.csv")
    except FileProcessingError as e:
        raise CleaningServiceError(f"Cleaned data could not be parsed: {e.message}")
    return CleaningResult(
        cleaned=cleaned.model_copy(update={"source": f"cleaned:{source}"}),
        report_html=payload["report_html"],
    )


# ---------------------------------------------------------------------------
# MAIN ENTRY POINT
# ---------------------------------------------------------------------------

def clean_dataset(
    dataset: Dataset,
    request: CleaningRequest,
    schema: DatasetSchema,
    client: Optional[Groq] = None,
    max_retries: int = 2,
) -> CleaningResult:
    """
    Send a dataset to the cleaning service and return the cleaned data plus report.

    Args:
        dataset: The dataset to clean.
        request: Default or manual mode; manual carries a CleaningConfig.
        schema: Schema of ``dataset``, used for prompts and config validation.
        client: Groq client; built from settings when omitted.
        max_retries: Extra attempts after an API error or unusable payload.

    Raises:
        InvalidConfigError: Manual config does not match the schema.
        CleaningServiceError: No API key, or every attempt failed.
    """
    if request.mode == "manual":
        validate_config(request.config, schema)

    logger.info(f"Requesting {request.mode} clean for '{dataset.source}' ({len(dataset.rows)} rows)")
    client = client or _get_client()
    messages = [
        {"role": "system", "content": _SYSTEM_PROMPT},
        {"role": "user", "content": _build_user_prompt(dataset, request, schema)},
    ]

    last_exc = None
    for attempt in range(max_retries + 1):
        try:
            response = client.chat.completions.create(
                messages=messages,
                model=settings.DEFAULT_MODEL,
                temperature=settings.TEMPERATURE,
                max_tokens=settings.MAX_TOKENS,
            )
            raw = response.choices[0].message.content or ""
            result = _parse_result(raw, dataset.source)
            logger.info(f"Cleaning succeeded on attempt {attempt + 1}: {len(result.cleaned.rows)} rows returned")
            return result

        except Exception as e:
            last_exc = e
            logger.warning(f"Cleaning attempt {attempt + 1} failed: {e}")

    raise CleaningServiceError(f"Cleaning service error after {max_retries + 1} attempts: {last_exc}")
