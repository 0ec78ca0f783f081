"""Invoice data models used as input to document generation.

Amounts are Decimal so that totals are exact. Derived values (subtotal,
tax, total) are computed on access and never stored.
"""

import re
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_PATTERN = re.compile(r"^\+?[\d\s().-]+$")


class Address(BaseModel):
    """Postal address and contact information of a seller or customer."""

    company_name: str = Field(..., description="Company name (empty for individuals)")
    street: str = Field(..., min_length=1, description="Street address")
    city: str = Field(..., min_length=1, description="City")
    state: str = Field(..., min_length=1, description="State or province")
    email: str = Field(..., description="Contact email address")
    postal_code: str | None = Field(None, description="Postal/zip code")
    phone: str | None = Field(None, description="Contact phone number")

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        value = value.strip()
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Invalid email address format")
        return value

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: str | None) -> str | None:
        if value is None:
            return None
        digits = sum(ch.isdigit() for ch in value)
        if not PHONE_PATTERN.match(value) or digits < 7:
            raise ValueError("Invalid phone number format")
        return value


class LineItem(BaseModel):
    """A single billed item."""

    name: str = Field(..., min_length=1, description="Item name or description")
    price: Decimal = Field(..., gt=0, description="Price per unit")
    quantity: Decimal = Field(..., gt=0, description="Number of units")

    @property
    def total(self) -> Decimal:
        """Price multiplied by quantity."""
        return self.price * self.quantity


class Invoice(BaseModel):
    """Structured invoice to be rendered into a document.

    Cross-field rules (due date ordering, at least one line item, both
    addresses present) are checked by the generation pipeline so that a
    failing invoice can be reported with the rule it broke.
    """

    number: str = Field(..., min_length=1, description="Invoice identifier")
    issued_date: date = Field(..., description="Date the invoice was issued")
    due_date: date = Field(..., description="Payment due date")

    seller_address: Address | None = Field(None, description="Seller address")
    customer_address: Address | None = Field(None, description="Customer address")

    line_items: list[LineItem] = Field(default_factory=list)
    custom_fields: dict[str, str] = Field(default_factory=dict)

    currency_code: str = Field("USD", description="Currency code (ISO 4217)")
    notes: str | None = Field(None, description="Free-text notes printed on the invoice")
    tax_rate: Decimal = Field(Decimal("0"), ge=0, description="Tax rate in percent")

    @property
    def subtotal(self) -> Decimal:
        return sum((item.total for item in self.line_items), Decimal("0"))

    @property
    def tax_amount(self) -> Decimal:
        return self.subtotal * self.tax_rate / Decimal("100")

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.tax_amount
