"""Rendering capabilities used by the generation pipeline.

The pipeline only depends on these protocols, so the template engine and
the HTML-to-PDF converter can be swapped independently.
"""

from typing import Protocol

from pydantic import BaseModel, Field

from services.invoice.schema import Invoice
from services.layout.schema import LayoutOptions
from services.shared.config import Orientation, PageSize, Settings


class InvoiceViewModel(BaseModel):
    """Data handed to invoice templates."""

    invoice: Invoice
    layout: LayoutOptions


class RenderSettings(BaseModel):
    """Page setup for generated documents."""

    page_size: PageSize = "A4"
    orientation: Orientation = "Portrait"
    margin_mm: float = Field(15.0, ge=0)
    title: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "RenderSettings":
        return cls(
            page_size=settings.pdf_page_size,
            orientation=settings.pdf_orientation,
            margin_mm=settings.pdf_margin_mm,
            title=settings.pdf_title,
        )


class ViewRenderer(Protocol):
    """Protocol for template engines."""

    def render_view(self, template_path: str, view_model: InvoiceViewModel) -> str:
        """Render a template to markup. Must raise if the template is missing."""
        ...


class DocumentRenderer(Protocol):
    """Protocol for markup-to-document converters."""

    def render(self, markup: str) -> bytes:
        """Convert markup into final document bytes."""
        ...
