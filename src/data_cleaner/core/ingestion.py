import csv
import io
import os
from urllib.parse import urlparse

import pandas as pd
import requests

from data_cleaner.config import settings
from data_cleaner.models import Dataset
from data_cleaner.utils.exceptions import FileProcessingError, RemoteSourceError
from data_cleaner.utils.logger import get_logger

logger = get_logger(__name__)

DELIMITED_EXTENSIONS = {".csv", ".txt", ".tsv"}
SPREADSHEET_EXTENSIONS = {".xlsx"}


def _extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lower()


def _sniff_delimiter(content: bytes) -> str:
    # Decode a small chunk to sniff the delimiter
    try:
        chunk = content[:4096].decode("utf-8-sig", errors="ignore")
        return csv.Sniffer().sniff(chunk, delimiters=",;\t|").delimiter
    except csv.Error:
        return ","


def dataset_from_frame(df: pd.DataFrame, source: str) -> Dataset:
    """
    Convert a DataFrame into a Dataset, dropping fully-empty rows.

    Blank strings and NaN both count as empty; surviving NaN cells become None.
    """
    df = df.copy()
    df.columns = [str(c).strip() for c in df.columns]
    blank = df.map(lambda v: isinstance(v, str) and not v.strip())
    df = df[~(df.isna() | blank).all(axis=1)]
    df = df.astype(object).where(df.notna(), None)
    return Dataset(
        rows=df.to_dict(orient="records"),
        columns=list(df.columns),
        source=source,
    )


def ingest_file(file_content: bytes, filename: str) -> Dataset:
    """
    Parse an uploaded delimited-text or spreadsheet file into a Dataset.

    Cells are read as raw strings so schema inference decides what is numeric
    and what is missing.

    Raises:
        FileProcessingError: Unsupported extension, oversize file, parse failure or no data.
    """
    logger.info(f"Starting ingestion for file: {filename}")
    ext = _extension(filename)
    if ext not in DELIMITED_EXTENSIONS | SPREADSHEET_EXTENSIONS:
        raise FileProcessingError(f"Unsupported file type '{ext or filename}'. Please upload a .csv or .xlsx file.")

    size_mb = len(file_content) / (1024 * 1024)
    if size_mb > settings.MAX_UPLOAD_SIZE_MB:
        raise FileProcessingError(f"File exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit.")

    if not file_content.strip():
        raise FileProcessingError("The uploaded file contains no data.")

    try:
        if ext in SPREADSHEET_EXTENSIONS:
            df = pd.read_excel(io.BytesIO(file_content), dtype=str, keep_default_na=False)
        else:
            delimiter = _sniff_delimiter(file_content)
            logger.info(f"Detected delimiter: '{delimiter}'")
            df = pd.read_csv(
                io.BytesIO(file_content),
                sep=delimiter,
                dtype=str,
                keep_default_na=False,
                on_bad_lines="warn",
                encoding="utf-8-sig",
            )
    except Exception as e:
        logger.error(f"Error during ingestion: {str(e)}")
        raise FileProcessingError(f"Failed to parse {filename}: {str(e)}")

    dataset = dataset_from_frame(df, source=filename)
    if not dataset.rows:
        raise FileProcessingError("The uploaded file contains no data.")

    logger.info(f"Ingestion successful. Shape: ({len(dataset.rows)}, {len(dataset.columns)})")
    return dataset


def fetch_url(url: str) -> Dataset:
    """
    Download a dataset from a public URL and parse it like an upload.

    The file type comes from the URL path; paths without a known extension are read as CSV.
    """
    logger.info(f"Fetching dataset from URL: {url}")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise RemoteSourceError(f"Unsupported URL scheme '{parsed.scheme}'. Use http or https.")

    try:
        response = requests.get(url, timeout=settings.URL_FETCH_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"URL fetch failed: {e}")
        raise RemoteSourceError(f"Could not fetch {url}: {e}")

    filename = os.path.basename(parsed.path) or "download.csv"
    if _extension(filename) not in DELIMITED_EXTENSIONS | SPREADSHEET_EXTENSIONS:
        filename = f"{filename}.csv"
    dataset = ingest_file(response.content, filename)
    return dataset.model_copy(update={"source": url})


def dataset_to_csv(dataset: Dataset) -> str:
    """Serialise a Dataset back to CSV text, columns in dataset order."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=dataset.columns, extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    for row in dataset.rows:
        writer.writerow({col: "" if row.get(col) is None else row.get(col) for col in dataset.columns})
    return buffer.getvalue()
