"""Layout optimization data models.

Feature records, training targets, predictions and the renderer-facing
layout options. All of them are immutable once built.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

STANDARD_TEMPLATE = "Standard"
TEMPLATE_LABELS: tuple[str, ...] = ("Standard", "Compact", "Premium")

DEFAULT_FONT_SIZE = 12.0
DEFAULT_SECTION_SPACING = 1.5
DEFAULT_TOTAL_EMPHASIS = 0.8
DEFAULT_SCORES: tuple[float, ...] = (0.5, 0.3, 0.2)
DEFAULT_COLOR_SCHEME = "Default"


class LayoutFeatures(BaseModel):
    """Fixed-shape summary of an invoice used as model input."""

    model_config = ConfigDict(frozen=True)

    line_item_count: float
    invoice_total: float
    custom_field_count: float
    notes_length: float
    is_business_customer: bool
    currency_code: str = "USD"


class LayoutTargets(BaseModel):
    """Labels attached to a feature record for training."""

    model_config = ConfigDict(frozen=True)

    font_size: float
    section_spacing: float
    total_emphasis: float
    layout_template: str = STANDARD_TEMPLATE
    score: tuple[float, ...] = ()


class LabeledExample(BaseModel):
    """One training sample."""

    model_config = ConfigDict(frozen=True)

    features: LayoutFeatures
    targets: LayoutTargets


class LayoutPrediction(BaseModel):
    """Raw model output for one invoice.

    Attributes:
        font_size: Predicted body font size in points
        section_spacing: Predicted spacing between sections (line-height units)
        total_emphasis: Predicted emphasis of the total amount (0-1)
        layout_template: Predicted template family
        score: Confidence scores, primary score first
    """

    model_config = ConfigDict(frozen=True)

    font_size: float = DEFAULT_FONT_SIZE
    section_spacing: float = DEFAULT_SECTION_SPACING
    total_emphasis: float = Field(DEFAULT_TOTAL_EMPHASIS, ge=0, le=1)
    layout_template: str = STANDARD_TEMPLATE
    score: tuple[float, ...] = DEFAULT_SCORES

    @property
    def score_value(self) -> float:
        """Primary confidence score, 0 when no scores are present."""
        return self.score[0] if self.score else 0.0


DEFAULT_PREDICTION = LayoutPrediction()


class Predicted(BaseModel):
    """Prediction produced by a trained model."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["predicted"] = "predicted"
    prediction: LayoutPrediction


class Fallback(BaseModel):
    """Default prediction used when no model output is available."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["fallback"] = "fallback"
    reason: Literal["untrained", "inference_error"]
    prediction: LayoutPrediction = DEFAULT_PREDICTION


LayoutOutcome = Annotated[Predicted | Fallback, Field(discriminator="kind")]


class LayoutOptions(BaseModel):
    """Resolved layout settings consumed by the invoice templates."""

    model_config = ConfigDict(frozen=True)

    font_size: float = DEFAULT_FONT_SIZE
    section_spacing: float = DEFAULT_SECTION_SPACING
    total_emphasis: float = DEFAULT_TOTAL_EMPHASIS
    layout_template: str = STANDARD_TEMPLATE
    use_compact_layout: bool = False
    highlight_important_fields: bool = True
    color_scheme: str = DEFAULT_COLOR_SCHEME
