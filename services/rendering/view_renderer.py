"""Jinja2 view renderer for invoice templates.

Templates are looked up by path relative to the template directory (the
bundled templates by default). Undefined variables and missing templates
raise instead of producing empty output.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from services.rendering.base import InvoiceViewModel

logger = logging.getLogger(__name__)

BUNDLED_TEMPLATE_DIR = Path(__file__).parent / "templates"


def format_money(value: Decimal | float, currency_code: str = "") -> str:
    """Format an amount with two decimals and thousands separators."""
    amount = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    text = f"{amount:,.2f}"
    return f"{text} {currency_code}".strip()


def format_quantity(value: Decimal | float) -> str:
    """Drop trailing zeros from quantities (2.00 -> 2, 1.50 -> 1.5)."""
    amount = Decimal(str(value))
    if amount == amount.to_integral_value():
        return str(amount.quantize(Decimal("1")))
    return format(amount.normalize(), "f")


class JinjaViewRenderer:
    """Renders invoice templates to HTML with Jinja2."""

    def __init__(self, template_dir: str | Path | None = None) -> None:
        """Initialize renderer.

        Args:
            template_dir: Directory containing templates (defaults to bundled templates)
        """
        self.template_dir = Path(template_dir) if template_dir else BUNDLED_TEMPLATE_DIR
        self.environment = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            undefined=StrictUndefined,
            autoescape=select_autoescape(["html", "htm", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.environment.filters["money"] = format_money
        self.environment.filters["quantity"] = format_quantity
        logger.info(f"JinjaViewRenderer using templates from {self.template_dir}")

    def render_view(self, template_path: str, view_model: InvoiceViewModel) -> str:
        """Render a template with the invoice and its layout options.

        Raises:
            jinja2.TemplateNotFound: If the template does not exist
            jinja2.UndefinedError: If the template references unknown data
        """
        template = self.environment.get_template(template_path)
        return template.render(invoice=view_model.invoice, layout=view_model.layout)
