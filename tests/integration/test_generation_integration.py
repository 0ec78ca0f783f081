"""Integration tests for invoice document generation.

Runs the full pipeline (layout model, Jinja2 templates, PyMuPDF) without
mocks and inspects the resulting PDF. Training makes these tests slower
than the unit tests.
Use pytest -v tests/integration to run only integration tests.
"""

from collections.abc import Callable
from decimal import Decimal
from pathlib import Path

import pymupdf as fitz
import pytest

from services.generation.factory import create_generation_pipeline, create_layout_model
from services.invoice.schema import Invoice, LineItem
from services.layout.model import LayoutModel
from services.layout.synthesizer import TrainingDataSynthesizer
from services.shared.config import Settings


@pytest.fixture(scope="module")
def trained_model_path(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """Train a layout model once and save it for the module."""
    path = tmp_path_factory.mktemp("models") / "layout_model.pt"
    model = LayoutModel(epochs=300)
    assert model.train(TrainingDataSynthesizer().generate(800))
    assert model.save(path)
    return path


@pytest.fixture
def settings(trained_model_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        layout_model_path=str(trained_model_path),
        pdf_title="Integration Invoice",
    )


def pdf_text(document: bytes) -> str:
    with fitz.open(stream=document, filetype="pdf") as pdf:
        return "".join(page.get_text() for page in pdf)


def test_generate_with_trained_model(settings: Settings, sample_invoice: Invoice) -> None:
    """Test end-to-end generation with a loaded model."""
    model = create_layout_model(settings)
    assert model.is_trained is True

    pipeline = create_generation_pipeline(settings, model)
    document = pipeline.generate(sample_invoice)

    assert document.startswith(b"%PDF")
    text = pdf_text(document)
    assert "INV-1001" in text
    assert "Enterprise Corp" in text
    with fitz.open(stream=document, filetype="pdf") as pdf:
        assert pdf.metadata["title"] == "Integration Invoice"


def test_long_invoice_uses_compact_template(
    settings: Settings, make_invoice: Callable[..., Invoice]
) -> None:
    """Test that a long invoice is rendered with the compact template."""
    items = [
        LineItem(name=f"Part {i}", price=Decimal("12.50"), quantity=Decimal("2"))
        for i in range(45)
    ]
    invoice = make_invoice(line_items=items)
    model = create_layout_model(settings)
    pipeline = create_generation_pipeline(settings, model)

    decision = pipeline.layout_optimizer.optimize(invoice)
    document = pipeline.generate(invoice)

    assert decision.options.layout_template == "Compact"
    assert "45 items" in pdf_text(document)


def test_generate_without_model(tmp_path: Path, sample_invoice: Invoice) -> None:
    """Test that a missing model file still produces a document."""
    settings = Settings(_env_file=None, layout_model_path=str(tmp_path / "missing.pt"))
    model = create_layout_model(settings)

    document = create_generation_pipeline(settings, model).generate(sample_invoice)

    assert model.is_trained is False
    assert "INV-1001" in pdf_text(document)


def test_generate_smart_layout_disabled(settings: Settings, sample_invoice: Invoice) -> None:
    settings.smart_layout_enabled = False
    pipeline = create_generation_pipeline(settings, create_layout_model(settings))

    document = pipeline.generate(sample_invoice)

    assert pipeline.layout_optimizer.is_ready is False
    assert "INV-1001" in pdf_text(document)
