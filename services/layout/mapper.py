"""Mapping of layout predictions to renderer settings and templates."""

from pathlib import PurePosixPath

from services.layout.schema import STANDARD_TEMPLATE, LayoutOptions, LayoutPrediction

COMPACT_FONT_THRESHOLD = 11.0
HIGHLIGHT_EMPHASIS_THRESHOLD = 0.7


def to_options(prediction: LayoutPrediction) -> LayoutOptions:
    """Convert a layout prediction into concrete layout options.

    Small fonts switch to the compact layout and strong total emphasis
    turns on field highlighting.

    Args:
        prediction: Prediction to convert

    Returns:
        Layout options for the renderer
    """
    return LayoutOptions(
        font_size=prediction.font_size,
        section_spacing=prediction.section_spacing,
        total_emphasis=prediction.total_emphasis,
        layout_template=prediction.layout_template,
        use_compact_layout=prediction.font_size < COMPACT_FONT_THRESHOLD,
        highlight_important_fields=prediction.total_emphasis > HIGHLIGHT_EMPHASIS_THRESHOLD,
    )


def resolve_template_path(default_path: str, layout_template: str) -> str:
    """Pick the template file for a layout family.

    Non-standard families use a variant of the default template named by
    inserting the family after the base name, e.g. ``invoice_report.html``
    becomes ``invoice_report.Compact.html``.

    Args:
        default_path: Configured template path for the Standard family
        layout_template: Template family name

    Returns:
        Template path to render
    """
    if not layout_template or layout_template == STANDARD_TEMPLATE:
        return default_path

    path = PurePosixPath(default_path)
    base, dot, rest = path.name.partition(".")
    variant = f"{base}.{layout_template}{dot}{rest}"
    return str(path.with_name(variant))
