"""Exceptions raised by invoice generation.

Exception Hierarchy:
    InvoiceGenerationError (base)
    ├── InvoiceValidationError  - invoice breaks a business rule, nothing rendered
    └── RenderingError          - view or document rendering failed

Layout fallbacks are not errors and have no exception type.
"""

from typing import Literal

ValidationRule = Literal["due_date_order", "line_items", "seller_address", "customer_address"]
RenderingStage = Literal["view", "document"]


class InvoiceGenerationError(Exception):
    """Base exception for invoice generation errors.

    Attributes:
        message: Human-readable error message
        invoice_number: Invoice the error relates to, if known
    """

    def __init__(self, message: str, invoice_number: str | None = None) -> None:
        self.message = message
        self.invoice_number = invoice_number
        super().__init__(message)


class InvoiceValidationError(InvoiceGenerationError):
    """Raised when an invoice breaks a rule required for rendering.

    Attributes:
        rule: Identifier of the broken rule
    """

    def __init__(self, rule: ValidationRule, message: str, invoice_number: str | None = None):
        self.rule = rule
        super().__init__(message, invoice_number)


class RenderingError(InvoiceGenerationError):
    """Raised when the view or document renderer fails.

    The underlying exception is chained as ``__cause__``.

    Attributes:
        stage: Rendering stage that failed
    """

    def __init__(self, invoice_number: str, stage: RenderingStage, cause: BaseException):
        self.stage = stage
        message = f"Failed to render invoice {invoice_number} ({stage} stage): {cause}"
        super().__init__(message, invoice_number)
