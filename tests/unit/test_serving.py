"""Unit tests for the serving layer."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from firesafety_rag.errors import (
    AuthenticationError,
    CollectionNotReadyError,
    ConfigurationError,
    DimensionMismatchError,
    NoResultError,
    RateLimitError,
    TransientNetworkError,
)
from firesafety_rag.retrieval.models import Answer, IngestionReport


@pytest.fixture()
def app():
    from firesafety_rag.serving.app import app

    yield app
    app.dependency_overrides.clear()


@pytest.fixture()
def query_pipeline(app) -> MagicMock:
    from firesafety_rag.serving.app import get_query_pipeline

    pipeline = MagicMock()
    pipeline.answer.return_value = Answer(text="Install smoke vents.", supporting_context="Vents are required.")
    app.dependency_overrides[get_query_pipeline] = lambda: pipeline
    return pipeline


@pytest.fixture()
def ingestion_pipeline(app) -> MagicMock:
    from firesafety_rag.serving.app import get_ingestion_pipeline

    pipeline = MagicMock()
    pipeline.ingest.return_value = IngestionReport(documents=1, chunks=3)
    app.dependency_overrides[get_ingestion_pipeline] = lambda: pipeline
    return pipeline


def test_health_endpoint(app) -> None:
    """GET /health should return 200 with status ok."""
    client = TestClient(app)
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_read_returns_data_and_context(app, query_pipeline) -> None:
    response = TestClient(app).post("/read", json={"question": "Do I need smoke vents?"})
    assert response.status_code == 200
    assert response.json() == {"data": "Install smoke vents.", "context": "Vents are required."}
    query_pipeline.answer.assert_called_once_with("Do I need smoke vents?")


def test_read_accepts_bare_json_string(app, query_pipeline) -> None:
    response = TestClient(app).post("/read", json="Do I need smoke vents?")
    assert response.status_code == 200
    query_pipeline.answer.assert_called_once_with("Do I need smoke vents?")


def test_read_rejects_blank_question(app, query_pipeline) -> None:
    response = TestClient(app).post("/read", json={"question": "   "})
    assert response.status_code == 400
    query_pipeline.answer.assert_not_called()


@pytest.mark.parametrize(
    ("error", "status", "kind"),
    [
        (NoResultError("nothing"), 404, "no_result"),
        (ConfigurationError("bad"), 400, "configuration_error"),
        (RateLimitError("429"), 429, "rate_limited"),
        (TransientNetworkError("reset"), 503, "upstream_unavailable"),
        (CollectionNotReadyError("slow"), 503, "collection_not_ready"),
        (AuthenticationError("key"), 502, "upstream_authentication_failed"),
        (DimensionMismatchError("idx", 8, 4), 500, "internal_error"),
    ],
)
def test_errors_map_to_non_2xx(app, query_pipeline, error, status, kind) -> None:
    query_pipeline.answer.side_effect = error
    response = TestClient(app).post("/read", json={"question": "q"})
    assert response.status_code == status
    assert response.json()["error"] == kind


def test_ingest_posts_documents(app, ingestion_pipeline) -> None:
    response = TestClient(app).post(
        "/ingest", json={"documents": [{"source": "doc1", "text": "A.B.C."}]}
    )
    assert response.status_code == 200
    assert response.json() == {"documents": 1, "chunks": 3, "records_pruned": 0}
    docs = ingestion_pipeline.ingest.call_args.args[0]
    assert docs[0].source == "doc1"


def test_setup_loads_documents_dir(app, ingestion_pipeline, tmp_path, monkeypatch) -> None:
    from firesafety_rag.config import settings

    (tmp_path / "regs.txt").write_text("Fire doors must self-close.")
    monkeypatch.setattr(settings, "documents_dir", str(tmp_path))

    response = TestClient(app).post("/setup")

    assert response.status_code == 200
    docs = ingestion_pipeline.ingest.call_args.args[0]
    assert [d.text for d in docs] == ["Fire doors must self-close."]


def test_setup_missing_dir_is_a_configuration_error(app, ingestion_pipeline, tmp_path, monkeypatch) -> None:
    from firesafety_rag.config import settings

    monkeypatch.setattr(settings, "documents_dir", str(tmp_path / "missing"))
    response = TestClient(app).post("/setup")
    assert response.status_code == 400
    ingestion_pipeline.ingest.assert_not_called()
