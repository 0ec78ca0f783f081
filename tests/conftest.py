"""Shared test fixtures: sample addresses and invoices."""

from collections.abc import Callable
from datetime import date
from decimal import Decimal
from typing import Any

import pytest

from services.invoice.schema import Address, Invoice, LineItem


@pytest.fixture
def seller_address() -> Address:
    """Create seller address."""
    return Address(
        company_name="Tech Solutions LLC",
        street="456 Technology Drive",
        city="Austin",
        state="TX",
        email="billing@techsolutions.example",
        postal_code="73301",
        phone="+1 (512) 555-0100",
    )


@pytest.fixture
def customer_address() -> Address:
    """Create business customer address."""
    return Address(
        company_name="Enterprise Corp",
        street="789 Business Parkway",
        city="Denver",
        state="CO",
        email="ap@enterprise.example",
    )


@pytest.fixture
def make_invoice(
    seller_address: Address, customer_address: Address
) -> Callable[..., Invoice]:
    """Factory for invoices; keyword arguments override the defaults."""

    def _make(**overrides: Any) -> Invoice:
        data: dict[str, Any] = {
            "number": "INV-1001",
            "issued_date": date(2024, 1, 15),
            "due_date": date(2024, 2, 15),
            "seller_address": seller_address,
            "customer_address": customer_address,
            "line_items": [
                LineItem(name="Consulting", price=Decimal("10.00"), quantity=Decimal("2")),
                LineItem(name="Support", price=Decimal("5.00"), quantity=Decimal("1")),
            ],
            "custom_fields": {"PO Number": "PO-77"},
            "currency_code": "USD",
            "notes": "Thank you",
            "tax_rate": Decimal("10"),
        }
        data.update(overrides)
        return Invoice(**data)

    return _make


@pytest.fixture
def sample_invoice(make_invoice: Callable[..., Invoice]) -> Invoice:
    """Create a valid two-line invoice (subtotal 25.00, 10% tax)."""
    return make_invoice()
