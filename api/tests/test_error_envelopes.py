from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from placement_api.api.errors import INTERNAL_ERROR_MESSAGE, STATUS_BY_KIND, http_error
from placement_api.main import app
from placement_api.services.companies import get_company_repository
from placement_api.services.errors import (
    ErrorKind,
    RepositoryError,
    RepositoryReferenceError,
    RepositoryUnavailableError,
)


class ExplodingCompanyRepository:
    async def get_company(self, company_id: int) -> dict[str, object]:
        raise RuntimeError("connection reset by peer at 10.0.0.5")

    async def delete_company(self, company_id: int) -> dict[str, object]:
        raise RepositoryError("unclassified failure with internals")

    async def list_companies(self, query: object) -> tuple[list[dict[str, object]], int]:
        raise RepositoryUnavailableError("PLACEMENT_DATABASE_URL is required")


@pytest.fixture
def client() -> TestClient:
    app.dependency_overrides[get_company_repository] = lambda: ExplodingCompanyRepository()

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def test_every_error_kind_has_a_status() -> None:
    assert set(STATUS_BY_KIND) == set(ErrorKind)


def test_referential_violation_maps_to_400() -> None:
    exc = http_error(RepositoryReferenceError("Student not found"))

    assert exc.status_code == 400
    assert exc.detail == "Student not found"


def test_unexpected_exception_is_hidden_behind_generic_500(
    client: TestClient,
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.ERROR, logger="placement_api.api.errors"):
        response = client.get("/api/companies/1")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": INTERNAL_ERROR_MESSAGE}
    assert "10.0.0.5" not in response.text
    assert any("unhandled exception" in record.getMessage() for record in caplog.records)


def test_request_that_raises_is_still_logged(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="placement_api.main"):
        client.get("/api/companies/1")

    messages = [record.getMessage() for record in caplog.records if record.name == "placement_api.main"]
    assert any("path=/api/companies/1 status=500" in message for message in messages)


def test_unclassified_repository_error_is_500(client: TestClient) -> None:
    response = client.delete("/api/companies/1")

    assert response.status_code == 500
    assert response.json()["message"] == INTERNAL_ERROR_MESSAGE


def test_unavailable_database_is_503(client: TestClient) -> None:
    response = client.get("/api/companies")

    assert response.status_code == 503
    assert response.json() == {"success": False, "message": "PLACEMENT_DATABASE_URL is required"}


def test_unknown_route_uses_envelope(client: TestClient) -> None:
    response = client.get("/api/nowhere")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Not Found"}


def test_malformed_json_is_400(client: TestClient) -> None:
    response = client.post(
        "/api/companies",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["success"] is False
