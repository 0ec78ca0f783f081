"""Unit tests for layout feature extraction."""

from collections.abc import Callable

from services.invoice.schema import Address, Invoice
from services.layout.features import extract_features


def test_extract_features(sample_invoice: Invoice) -> None:
    """Should summarise counts, total and customer type."""
    features = extract_features(sample_invoice)

    assert features.line_item_count == 2
    assert features.invoice_total == 27.5
    assert features.custom_field_count == 1
    assert features.notes_length == len("Thank you")
    assert features.is_business_customer is True
    assert features.currency_code == "USD"


def test_extract_features_is_pure(sample_invoice: Invoice) -> None:
    """Should return identical records for the same invoice."""
    assert extract_features(sample_invoice) == extract_features(sample_invoice)


def test_missing_notes_counts_zero(make_invoice: Callable[..., Invoice]) -> None:
    features = extract_features(make_invoice(notes=None))
    assert features.notes_length == 0


def test_individual_customer(
    make_invoice: Callable[..., Invoice], customer_address: Address
) -> None:
    """Should treat an empty company name as a non-business customer."""
    individual = customer_address.model_copy(update={"company_name": ""})
    features = extract_features(make_invoice(customer_address=individual))
    assert features.is_business_customer is False


def test_currency_copied_verbatim(make_invoice: Callable[..., Invoice]) -> None:
    features = extract_features(make_invoice(currency_code="chf"))
    assert features.currency_code == "chf"


def test_counts_not_clamped(make_invoice: Callable[..., Invoice]) -> None:
    custom_fields = {f"field-{i}": str(i) for i in range(25)}
    features = extract_features(make_invoice(custom_fields=custom_fields))
    assert features.custom_field_count == 25
