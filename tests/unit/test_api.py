"""Unit tests for invoice generation API.

Tests cover:
- Health check endpoints
- Invoice generation and error mapping
- Layout model reload
- Prometheus metrics endpoint
"""

from typing import Any
from unittest.mock import patch

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from services.api.main import app
from services.generation.errors import InvoiceValidationError, RenderingError


@pytest.fixture
def client() -> TestClient:
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def invoice_payload() -> dict[str, Any]:
    """Invoice request body."""
    address = {
        "company_name": "Tech Solutions LLC",
        "street": "456 Technology Drive",
        "city": "Austin",
        "state": "TX",
        "email": "billing@techsolutions.example",
    }
    return {
        "number": "INV-2001",
        "issued_date": "2024-01-15",
        "due_date": "2024-02-15",
        "seller_address": address,
        "customer_address": {**address, "company_name": "Enterprise Corp"},
        "line_items": [{"name": "Consulting", "price": "120.00", "quantity": "3"}],
        "currency_code": "EUR",
        "tax_rate": "19",
    }


def test_health_check(client: TestClient) -> None:
    """Test health check endpoint."""
    response = client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "invoice-layout-generator"
    assert "version" in data


def test_readiness_check(client: TestClient) -> None:
    """Test readiness check endpoint."""
    response = client.get("/ready")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["ready"] is True
    assert isinstance(data["layout_model_trained"], bool)


def test_generate_invoice_pdf(client: TestClient, invoice_payload: dict[str, Any]) -> None:
    """Test generating a PDF with the real pipeline."""
    response = client.post("/api/v1/invoices/generate", json=invoice_payload)

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"] == "application/pdf"
    assert 'filename="invoice-INV-2001.pdf"' in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


def test_generate_passes_smart_layout_flag(
    client: TestClient, invoice_payload: dict[str, Any]
) -> None:
    with patch("services.api.main.generation_pipeline.generate_async") as mock_generate:
        mock_generate.return_value = b"%PDF-1.7 mocked"

        response = client.post(
            "/api/v1/invoices/generate?smart_layout=false", json=invoice_payload
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.content == b"%PDF-1.7 mocked"
        invoice, smart_layout = mock_generate.call_args.args
        assert invoice.number == "INV-2001"
        assert smart_layout is False


@pytest.mark.parametrize(
    "number,fallback,encoded",
    [
        ("请求-42", "invoice-__-42.pdf", "invoice-%E8%AF%B7%E6%B1%82-42.pdf"),
        ('INV"7;x', "invoice-INV_7_x.pdf", "invoice-INV%227%3Bx.pdf"),
    ],
)
def test_generate_unsafe_invoice_number_header(
    client: TestClient,
    invoice_payload: dict[str, Any],
    number: str,
    fallback: str,
    encoded: str,
) -> None:
    """Test that invoice numbers outside plain ASCII still produce a valid header."""
    invoice_payload["number"] = number

    with patch("services.api.main.generation_pipeline.generate_async") as mock_generate:
        mock_generate.return_value = b"%PDF-1.7 mocked"

        response = client.post("/api/v1/invoices/generate", json=invoice_payload)

    assert response.status_code == status.HTTP_200_OK
    disposition = response.headers["content-disposition"]
    assert f'filename="{fallback}"' in disposition
    assert f"filename*=UTF-8''{encoded}" in disposition


def test_generate_rejects_malformed_invoice(
    client: TestClient, invoice_payload: dict[str, Any]
) -> None:
    """Test schema validation of the request body."""
    invoice_payload["seller_address"]["email"] = "not-an-email"

    response = client.post("/api/v1/invoices/generate", json=invoice_payload)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert "Invalid email address format" in response.text


def test_generate_business_rule_violation(
    client: TestClient, invoice_payload: dict[str, Any]
) -> None:
    """Test that broken business rules return 422 naming the rule."""
    invoice_payload["due_date"] = "2024-01-01"

    response = client.post("/api/v1/invoices/generate", json=invoice_payload)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    detail = response.json()["detail"]
    assert detail["rule"] == "due_date_order"
    assert "Due date" in detail["message"]


def test_generate_missing_customer(client: TestClient, invoice_payload: dict[str, Any]) -> None:
    del invoice_payload["customer_address"]

    response = client.post("/api/v1/invoices/generate", json=invoice_payload)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["detail"]["rule"] == "customer_address"


def test_generate_validation_error_from_pipeline(
    client: TestClient, invoice_payload: dict[str, Any]
) -> None:
    with patch("services.api.main.generation_pipeline.generate_async") as mock_generate:
        mock_generate.side_effect = InvoiceValidationError(
            "line_items", "Invoice must have at least one line item", "INV-2001"
        )

        response = client.post("/api/v1/invoices/generate", json=invoice_payload)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["detail"]["rule"] == "line_items"


def test_generate_rendering_failure(client: TestClient, invoice_payload: dict[str, Any]) -> None:
    """Test that rendering failures return 500 with the invoice number."""
    with patch("services.api.main.generation_pipeline.generate_async") as mock_generate:
        mock_generate.side_effect = RenderingError(
            "INV-2001", "document", RuntimeError("converter crashed")
        )

        response = client.post("/api/v1/invoices/generate", json=invoice_payload)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        detail = response.json()["detail"]
        assert "INV-2001" in detail
        assert "converter crashed" in detail


def test_reload_layout_model(client: TestClient) -> None:
    with patch("services.api.main.layout_model.load") as mock_load:
        mock_load.return_value = True

        response = client.post("/api/v1/layout/reload")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["loaded"] is True
        mock_load.assert_called_once_with(data["model_path"])


def test_reload_layout_model_failure(client: TestClient) -> None:
    with patch("services.api.main.layout_model.load") as mock_load:
        mock_load.return_value = False

        response = client.post("/api/v1/layout/reload")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["loaded"] is False


def test_metrics_endpoint(client: TestClient, invoice_payload: dict[str, Any]) -> None:
    """Test Prometheus metrics endpoint."""
    client.post("/api/v1/invoices/generate", json=invoice_payload)

    response = client.get("/metrics")

    assert response.status_code == status.HTTP_200_OK
    assert "http_requests_total" in response.text
    assert "invoices_generated_total" in response.text
    assert "layout_predictions_total" in response.text
