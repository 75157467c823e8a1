from typing import Optional

from fastapi import Depends, FastAPI, File, Header, Query, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from data_cleaner.config import settings
from data_cleaner.utils.exceptions import AppException, FileProcessingError, NoDatasetError
from data_cleaner.utils.logger import get_logger

# Import core logic
from data_cleaner.core.cleaning import build_default_config, clean_dataset, summarize_default_clean
from data_cleaner.core.ingestion import fetch_url, ingest_file
from data_cleaner.core.preview import paginate
from data_cleaner.core.session import DataSession, SessionSnapshot, SessionStore
from data_cleaner.models import CleaningRequest, Dataset

logger = get_logger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs"
)
app.state.sessions = SessionStore()


class UrlPayload(BaseModel):
    url: str


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# --- Session lookup ---
# Only loading a dataset creates a session; every other route looks one up.

def create_session(request: Request, x_session_id: str = Header("default")) -> DataSession:
    return request.app.state.sessions.get_or_create(x_session_id)


def current_snapshot(request: Request, x_session_id: str = Header("default")) -> SessionSnapshot:
    session = request.app.state.sessions.get(x_session_id)
    if session is None:
        raise NoDatasetError()
    return session.require()


def _superseded() -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={"detail": "The dataset changed while this request was in progress."},
    )


def _dataset_response(snapshot: SessionSnapshot) -> dict:
    return {
        "source": snapshot.dataset.source,
        "generation": snapshot.generation,
        "rows": len(snapshot.dataset.rows),
        "columns": snapshot.dataset.columns,
        "schema": snapshot.schema.model_dump(by_alias=True),
        "eda": snapshot.eda.model_dump(by_alias=True),
    }


def _load(session: DataSession, dataset: Dataset):
    snapshot = session.load(dataset)
    if snapshot is None:
        return _superseded()
    return _dataset_response(snapshot)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "online", "message": f"{settings.APP_NAME} API is running"}


@app.post("/upload")
def upload_file(file: UploadFile = File(...), session: DataSession = Depends(create_session)):
    """
    Uploads a CSV/XLSX file, infers its schema and computes the EDA summary.
    """
    logger.info(f"Received file upload: {file.filename}")
    limit = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    # Never buffer more than one byte past the limit
    content = file.file.read(limit + 1)
    if len(content) > limit:
        raise FileProcessingError(f"File exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit.")
    return _load(session, ingest_file(content, file.filename))


@app.post("/load-url")
def load_url(payload: UrlPayload, session: DataSession = Depends(create_session)):
    """
    Fetches a dataset from a public URL and loads it like an upload.
    Expected Payload: {"url": "https://example.com/data.csv"}
    """
    return _load(session, fetch_url(payload.url))


@app.get("/schema")
async def get_schema(snapshot: SessionSnapshot = Depends(current_snapshot)):
    return snapshot.schema.model_dump(by_alias=True)


@app.get("/eda")
async def get_eda(snapshot: SessionSnapshot = Depends(current_snapshot)):
    return snapshot.eda.model_dump(by_alias=True)


@app.get("/rows")
async def get_rows(
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    snapshot: SessionSnapshot = Depends(current_snapshot),
):
    """One page of the active dataset for the preview table."""
    return paginate(snapshot.dataset, page, page_size).model_dump(by_alias=True)


@app.get("/clean/default-config")
async def get_default_config(snapshot: SessionSnapshot = Depends(current_snapshot)):
    return build_default_config(snapshot.schema).model_dump()


@app.get("/clean/summary")
async def get_default_summary(snapshot: SessionSnapshot = Depends(current_snapshot)):
    """Markdown summary of the default cleaning steps for the loaded dataset."""
    return {"summary": summarize_default_clean(snapshot.schema)}


@app.post("/clean")
def clean(
    payload: CleaningRequest,
    request: Request,
    snapshot: SessionSnapshot = Depends(current_snapshot),
    x_session_id: str = Header("default"),
):
    """
    Sends the active dataset to the cleaning service and loads the cleaned result.
    Expected Payload: {"mode": "default"} or {"mode": "manual", "config": {...}}
    """
    result = clean_dataset(snapshot.dataset, payload, snapshot.schema)

    # A newer upload or reset during the remote call wins over this result
    session = request.app.state.sessions.get(x_session_id)
    cleaned = session.replace(result.cleaned, base_generation=snapshot.generation) if session else None
    if cleaned is None:
        return _superseded()

    response = _dataset_response(cleaned)
    response["report_html"] = result.report_html
    original = session.original
    response["original_eda"] = original.eda.model_dump(by_alias=True) if original else None
    return response


@app.delete("/session")
async def reset_session(request: Request, x_session_id: str = Header("default")):
    session = request.app.state.sessions.get(x_session_id)
    if session is not None:
        session.reset()
        request.app.state.sessions.drop(x_session_id)
    return {"message": "Session reset."}
