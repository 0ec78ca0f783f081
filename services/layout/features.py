"""Feature extraction from invoices for layout prediction."""

from services.invoice.schema import Invoice
from services.layout.schema import LayoutFeatures


def extract_features(invoice: Invoice) -> LayoutFeatures:
    """Summarise an invoice into a layout feature record.

    Counts are taken as-is and the currency code is copied verbatim. A
    customer counts as a business when its company name is non-empty.

    Args:
        invoice: Invoice to summarise

    Returns:
        Feature record for the invoice
    """
    customer = invoice.customer_address
    return LayoutFeatures(
        line_item_count=float(len(invoice.line_items)),
        invoice_total=float(invoice.total),
        custom_field_count=float(len(invoice.custom_fields)),
        notes_length=float(len(invoice.notes) if invoice.notes else 0),
        is_business_customer=bool(customer is not None and customer.company_name),
        currency_code=invoice.currency_code,
    )
