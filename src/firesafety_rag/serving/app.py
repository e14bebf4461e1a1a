"""FastAPI application exposing ingestion and question answering."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Body, Depends, FastAPI, Request
from pydantic import BaseModel

from firesafety_rag.answering.pipeline import QueryPipeline
from firesafety_rag.config import settings
from firesafety_rag.errors import ConfigurationError
from firesafety_rag.ingestion.loader import load_directory
from firesafety_rag.ingestion.pipeline import IngestionPipeline
from firesafety_rag.retrieval import create_vector_store
from firesafety_rag.retrieval.models import IngestionReport, SourceDocument
from firesafety_rag.serving.errors import register_exception_handlers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the vector-store handle for the lifetime of the process."""
    logging.basicConfig(level=settings.log_level)
    store = create_vector_store()
    store.initialize()
    logger.info("Vector store %s initialized", type(store).__name__)
    app.state.store = store
    app.state.query_pipeline = QueryPipeline(store)
    app.state.ingestion_pipeline = IngestionPipeline(store)
    try:
        yield
    finally:
        store.close()


app = FastAPI(
    title="Fire Safety RAG API",
    version="0.1.0",
    description="Grounded answers to fire safety engineering questions.",
    lifespan=lifespan,
)
register_exception_handlers(app)


# ── Request / Response schemas ────────────────────────────────────────
class QueryRequest(BaseModel):
    """Incoming question from the user."""

    question: str


class QueryResponse(BaseModel):
    """Answer plus the retrieved text it was grounded on."""

    data: str
    context: str


class IngestRequest(BaseModel):
    """Documents posted for ingestion."""

    documents: list[SourceDocument]


# ── Dependencies ──────────────────────────────────────────────────────
def get_query_pipeline(request: Request) -> QueryPipeline:
    return request.app.state.query_pipeline


def get_ingestion_pipeline(request: Request) -> IngestionPipeline:
    return request.app.state.ingestion_pipeline


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.post("/read", response_model=QueryResponse)
def read(
    payload: QueryRequest | str = Body(...),
    pipeline: QueryPipeline = Depends(get_query_pipeline),
) -> QueryResponse:
    """Answer a question.  Accepts ``{"question": ...}`` or a bare JSON string."""
    question = payload.question if isinstance(payload, QueryRequest) else payload
    if not question.strip():
        raise ConfigurationError("question must not be empty")

    answer = pipeline.answer(question)
    return QueryResponse(data=answer.text, context=answer.supporting_context)


@app.post("/setup", response_model=IngestionReport)
def setup(pipeline: IngestionPipeline = Depends(get_ingestion_pipeline)) -> IngestionReport:
    """Ingest every supported file under ``settings.documents_dir``."""
    try:
        documents = load_directory(settings.documents_dir)
    except FileNotFoundError as exc:
        raise ConfigurationError(str(exc)) from exc
    return pipeline.ingest(documents)


@app.post("/ingest", response_model=IngestionReport)
def ingest(
    request: IngestRequest,
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline),
) -> IngestionReport:
    """Ingest documents posted in the request body."""
    return pipeline.ingest(request.documents)
