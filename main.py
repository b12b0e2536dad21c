import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from config import configure_logging, get_settings
from exceptions import IngestionNotFound, SchedulerFaulted
from models import IngestionRequest, IngestionResponse, IngestionStatusResponse
from processor import IngestionProcessor

settings = get_settings()
configure_logging(settings)
logger = logging.getLogger(__name__)

# --- In-memory state ---
processor = IngestionProcessor(settings)
ingestion_requests = processor.store
processing_queue = processor.queue


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await processor.aclose()


app = FastAPI(title="Data Ingestion API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(IngestionNotFound)
def _not_found(request: Request, exc: IngestionNotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(SchedulerFaulted)
def _faulted(request: Request, exc: SchedulerFaulted) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": exc.message})


# --- Endpoints ---
@app.post("/ingest", response_model=IngestionResponse, status_code=status.HTTP_202_ACCEPTED)
async def ingest(request: IngestionRequest) -> IngestionResponse:
    """Accept a list of ids, split it into batches and queue it for processing."""
    if not request.ids:
        raise HTTPException(status_code=400, detail="ids must not be empty")
    for id_ in request.ids:
        if not 1 <= id_ <= settings.max_id_value:
            raise HTTPException(
                status_code=400,
                detail=f"ID {id_} is out of the valid range (1 to {settings.max_id_value})",
            )

    ingestion_id = processor.submit(request.ids, request.priority)
    return IngestionResponse(ingestion_id=ingestion_id)


@app.get("/status/{ingestion_id}", response_model=IngestionStatusResponse)
async def get_status(ingestion_id: str) -> IngestionStatusResponse:
    return processor.get_status(ingestion_id)


@app.get("/health", tags=["ops"])
async def health() -> dict:
    return {
        "status": "ok",
        "queued": len(processing_queue),
        "idle": processor.is_idle,
        "faulted": processor.fault is not None,
    }
