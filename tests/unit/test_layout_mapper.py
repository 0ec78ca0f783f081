"""Unit tests for prediction mapping and template resolution."""

import pytest

from services.layout.mapper import resolve_template_path, to_options
from services.layout.schema import LayoutOptions, LayoutPrediction


@pytest.mark.parametrize(
    "font_size,emphasis,compact,highlight",
    [
        (12.0, 0.8, False, True),
        (10.9, 0.7, True, False),
        (11.0, 0.71, False, True),
        (9.0, 0.5, True, False),
    ],
)
def test_to_options_flags(font_size: float, emphasis: float, compact: bool, highlight: bool) -> None:
    """Should derive compact and highlight flags from thresholds."""
    options = to_options(LayoutPrediction(font_size=font_size, total_emphasis=emphasis))

    assert options.use_compact_layout is compact
    assert options.highlight_important_fields is highlight


def test_to_options_copies_values() -> None:
    prediction = LayoutPrediction(
        font_size=10.5,
        section_spacing=1.2,
        total_emphasis=0.9,
        layout_template="Premium",
        score=(0.9, 0.05, 0.05),
    )
    options = to_options(prediction)

    assert options.font_size == 10.5
    assert options.section_spacing == 1.2
    assert options.total_emphasis == 0.9
    assert options.layout_template == "Premium"
    assert options.color_scheme == "Default"


def test_default_prediction_maps_to_default_options() -> None:
    assert to_options(LayoutPrediction()) == LayoutOptions()


def test_resolve_standard_template_unchanged() -> None:
    assert resolve_template_path("invoice_report.html", "Standard") == "invoice_report.html"


def test_resolve_family_variant() -> None:
    assert (
        resolve_template_path("invoice_report.html", "Compact") == "invoice_report.Compact.html"
    )


def test_resolve_keeps_directory() -> None:
    assert (
        resolve_template_path("views/invoice_report.html", "Premium")
        == "views/invoice_report.Premium.html"
    )
