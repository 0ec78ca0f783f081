"""Invoice document generation pipeline.

Stages, in order:
1. Validate the invoice (raises InvoiceValidationError, nothing rendered)
2. Choose layout options (smart layout or defaults, never raises)
3. Resolve the template path for the chosen layout family
4. Render the template to HTML
5. Convert the HTML to the final document

Failures in stages 4-5 are logged with the invoice number and re-raised
as RenderingError. The pipeline holds no per-request state, so one
instance can serve concurrent requests.
"""

import asyncio
import logging
import time

from prometheus_client import Counter, Histogram

from services.generation.errors import InvoiceValidationError, RenderingError
from services.invoice.schema import Invoice
from services.layout.mapper import resolve_template_path
from services.layout.optimizer import LayoutDecision, LayoutOptimizer, NullLayoutOptimizer
from services.rendering.base import DocumentRenderer, InvoiceViewModel, ViewRenderer

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "invoice_report.html"

invoices_generated_total = Counter(
    "invoices_generated_total",
    "Invoice generation attempts",
    ["status"],  # success, invalid, failed
)

invoice_generation_duration_seconds = Histogram(
    "invoice_generation_duration_seconds",
    "Time to generate an invoice document",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

layout_predictions_total = Counter(
    "layout_predictions_total",
    "Layout decisions by source",
    ["source"],  # model, untrained, inference_error, disabled
)


def validate_invoice(invoice: Invoice) -> None:
    """Check the rules an invoice must satisfy before rendering.

    Raises:
        InvoiceValidationError: For the first rule the invoice breaks
    """
    if invoice.due_date < invoice.issued_date:
        raise InvoiceValidationError(
            "due_date_order", "Due date cannot be earlier than issue date", invoice.number
        )
    if not invoice.line_items:
        raise InvoiceValidationError(
            "line_items", "Invoice must have at least one line item", invoice.number
        )
    if invoice.seller_address is None:
        raise InvoiceValidationError(
            "seller_address", "Seller address is required", invoice.number
        )
    if invoice.customer_address is None:
        raise InvoiceValidationError(
            "customer_address", "Customer address is required", invoice.number
        )


class GenerationPipeline:
    """Turns invoices into rendered documents.

    Attributes:
        view_renderer: Template engine producing HTML
        document_renderer: Converter producing the final document bytes
        layout_optimizer: Chooses layout options (no-op default when not configured)
        default_template: Template path for the Standard layout family
    """

    def __init__(
        self,
        view_renderer: ViewRenderer,
        document_renderer: DocumentRenderer,
        layout_optimizer: LayoutOptimizer | None = None,
        default_template: str = DEFAULT_TEMPLATE,
    ) -> None:
        self.view_renderer = view_renderer
        self.document_renderer = document_renderer
        self.layout_optimizer = layout_optimizer or NullLayoutOptimizer()
        self.default_template = default_template

    def generate(self, invoice: Invoice, smart_layout_enabled: bool = True) -> bytes:
        """Generate the document for an invoice.

        Args:
            invoice: Invoice to render
            smart_layout_enabled: Let the layout optimizer choose layout options

        Returns:
            Rendered document bytes

        Raises:
            InvoiceValidationError: If the invoice breaks a business rule
            RenderingError: If template or document rendering fails
        """
        try:
            validate_invoice(invoice)
        except InvoiceValidationError as e:
            invoices_generated_total.labels(status="invalid").inc()
            logger.warning(f"Invoice {invoice.number} failed validation: {e.message}")
            raise

        start = time.perf_counter()
        logger.info(f"Generating invoice document for invoice {invoice.number}")

        decision = self._choose_layout(invoice, smart_layout_enabled)
        template_path = resolve_template_path(
            self.default_template, decision.options.layout_template
        )
        if template_path != self.default_template:
            logger.info(f"Using layout template {template_path} for invoice {invoice.number}")

        view_model = InvoiceViewModel(invoice=invoice, layout=decision.options)

        try:
            markup = self.view_renderer.render_view(template_path, view_model)
        except Exception as e:
            self._record_failure(invoice, "view", e)
            raise RenderingError(invoice.number, "view", e) from e

        try:
            document = self.document_renderer.render(markup)
        except Exception as e:
            self._record_failure(invoice, "document", e)
            raise RenderingError(invoice.number, "document", e) from e

        invoices_generated_total.labels(status="success").inc()
        invoice_generation_duration_seconds.observe(time.perf_counter() - start)
        logger.info(
            f"Successfully generated document for invoice {invoice.number}, "
            f"size: {len(document)} bytes"
        )
        return document

    async def generate_async(self, invoice: Invoice, smart_layout_enabled: bool = True) -> bytes:
        """Run generate in a worker thread so the event loop is not blocked."""
        return await asyncio.to_thread(self.generate, invoice, smart_layout_enabled)

    def _choose_layout(self, invoice: Invoice, smart_layout_enabled: bool) -> LayoutDecision:
        optimizer = self.layout_optimizer if smart_layout_enabled else NullLayoutOptimizer()
        decision = optimizer.optimize(invoice)
        layout_predictions_total.labels(source=decision.source).inc()

        if decision.source == "model":
            logger.info(
                f"Applied smart layout {decision.options.layout_template} to invoice "
                f"{invoice.number} (confidence {decision.prediction.score_value:.2%})"
            )
        elif decision.source in ("untrained", "inference_error"):
            logger.warning(
                f"Smart layout unavailable for invoice {invoice.number} "
                f"({decision.source}); using default layout"
            )
        return decision

    def _record_failure(self, invoice: Invoice, stage: str, error: Exception) -> None:
        invoices_generated_total.labels(status="failed").inc()
        logger.error(
            f"Error generating document for invoice {invoice.number} at {stage} stage: {error}",
            exc_info=True,
        )
