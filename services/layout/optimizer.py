"""Layout optimizer capability used by the generation pipeline.

Based on Strategy Pattern: the pipeline depends on LayoutOptimizer and is
given either the model-backed implementation or the no-op default, which
always answers with default layout options.
"""

from abc import ABC, abstractmethod
from typing import Literal

from pydantic import BaseModel

from services.invoice.schema import Invoice
from services.layout.features import extract_features
from services.layout.mapper import to_options
from services.layout.model import LayoutModel
from services.layout.schema import DEFAULT_PREDICTION, LayoutOptions, LayoutPrediction, Predicted

LayoutSource = Literal["model", "untrained", "inference_error", "disabled"]


class LayoutDecision(BaseModel):
    """Layout chosen for one invoice.

    Attributes:
        options: Layout options handed to the templates
        prediction: Prediction the options were derived from
        source: Where the prediction came from ('model' or a fallback reason)
    """

    options: LayoutOptions
    prediction: LayoutPrediction
    source: LayoutSource

    @property
    def is_fallback(self) -> bool:
        return self.source != "model"


class LayoutOptimizer(ABC):
    """Chooses layout options for an invoice."""

    @abstractmethod
    def optimize(self, invoice: Invoice) -> LayoutDecision:
        """Choose layout options for an invoice.

        Must not raise for a valid invoice; failures degrade to defaults.
        """
        pass

    @property
    @abstractmethod
    def is_ready(self) -> bool:
        """Whether optimize can return model output rather than defaults."""
        pass


class NullLayoutOptimizer(LayoutOptimizer):
    """Optimizer used when smart layout is not configured."""

    def optimize(self, invoice: Invoice) -> LayoutDecision:
        return LayoutDecision(
            options=LayoutOptions(), prediction=DEFAULT_PREDICTION, source="disabled"
        )

    @property
    def is_ready(self) -> bool:
        return False


class ModelLayoutOptimizer(LayoutOptimizer):
    """Optimizer backed by a LayoutModel.

    The model is shared between requests and only read here.
    """

    def __init__(self, model: LayoutModel) -> None:
        self.model = model

    def optimize(self, invoice: Invoice) -> LayoutDecision:
        features = extract_features(invoice)
        outcome = self.model.predict_outcome(features)
        source: LayoutSource = "model" if isinstance(outcome, Predicted) else outcome.reason
        return LayoutDecision(
            options=to_options(outcome.prediction),
            prediction=outcome.prediction,
            source=source,
        )

    @property
    def is_ready(self) -> bool:
        return self.model.is_trained
