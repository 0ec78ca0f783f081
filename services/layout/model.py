"""Layout model: predicts template and typography settings for an invoice.

Training pipeline:
1. Concatenate numeric features and min-max normalise them
2. One-hot encode the currency code
3. Map template labels to class indices
4. Fit a small torch network with a classification head (template) and a
   regression head (font size, section spacing, total emphasis)
5. Map predicted class indices back to template labels at inference

Trained state lives in an immutable LayoutSnapshot. Training and loading
build a complete new snapshot and publish it with a single reference
assignment, so concurrent predict calls see either the old or the new
model and never a mix. Predictions do not take any lock.

Without a trained model, or when inference fails, predict returns the
default prediction instead of raising.
"""

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import torch
import torch.nn.functional as F
from prometheus_client import Counter
from torch import nn

from services.layout.schema import (
    Fallback,
    LabeledExample,
    LayoutFeatures,
    LayoutOutcome,
    LayoutPrediction,
    Predicted,
)
from services.layout.training_data import read_examples

logger = logging.getLogger(__name__)

MODEL_FORMAT_VERSION = 1
MIN_FONT_SIZE = 1.0

layout_training_runs_total = Counter(
    "layout_model_training_runs_total",
    "Layout model training runs",
    ["status"],  # success, failed
)


class LayoutNetwork(nn.Module):
    """Shared hidden layer with a template head and a typography head."""

    def __init__(self, input_size: int, hidden_size: int, class_count: int) -> None:
        super().__init__()
        self.hidden = nn.Sequential(nn.Linear(input_size, hidden_size), nn.ReLU())
        self.classifier = nn.Linear(hidden_size, class_count)
        self.regressor = nn.Linear(hidden_size, 3)

    def forward(self, inputs: torch.Tensor) -> tuple[torch.Tensor, torch.Tensor]:
        hidden = self.hidden(inputs)
        return self.classifier(hidden), self.regressor(hidden)


def _numeric_values(features: LayoutFeatures) -> list[float]:
    return [
        features.line_item_count,
        features.invoice_total,
        features.custom_field_count,
        features.notes_length,
    ]


def _target_values(example: LabeledExample) -> list[float]:
    targets = example.targets
    return [targets.font_size, targets.section_spacing, targets.total_emphasis]


def _min_max(rows: list[list[float]]) -> tuple[tuple[float, ...], tuple[float, ...]]:
    columns = list(zip(*rows, strict=True))
    return tuple(min(c) for c in columns), tuple(max(c) for c in columns)


def _scale(values: Sequence[float], low: Sequence[float], high: Sequence[float]) -> list[float]:
    scaled = []
    for value, lo, hi in zip(values, low, high, strict=True):
        span = hi - lo
        scaled.append((value - lo) / span if span > 0 else 0.0)
    return scaled


def _unscale(values: Sequence[float], low: Sequence[float], high: Sequence[float]) -> list[float]:
    return [lo + value * (hi - lo) for value, lo, hi in zip(values, low, high, strict=True)]


def encode_features(
    features: LayoutFeatures,
    feature_min: Sequence[float],
    feature_max: Sequence[float],
    currencies: Sequence[str],
) -> list[float]:
    """Build the network input vector for one feature record.

    Layout: normalised numerics, business flag, currency one-hot. Unknown
    currencies encode as all zeros.
    """
    vector = _scale(_numeric_values(features), feature_min, feature_max)
    vector.append(1.0 if features.is_business_customer else 0.0)
    vector.extend(1.0 if features.currency_code == c else 0.0 for c in currencies)
    return vector


@dataclass(frozen=True)
class LayoutSnapshot:
    """Immutable trained state: network weights plus encoding tables."""

    network: LayoutNetwork
    labels: tuple[str, ...]
    currencies: tuple[str, ...]
    feature_min: tuple[float, ...]
    feature_max: tuple[float, ...]
    target_min: tuple[float, ...]
    target_max: tuple[float, ...]
    hidden_size: int

    def encode(self, features: LayoutFeatures) -> list[float]:
        return encode_features(features, self.feature_min, self.feature_max, self.currencies)

    def predict(self, features: LayoutFeatures) -> LayoutPrediction:
        inputs = torch.tensor([self.encode(features)], dtype=torch.float32)
        with torch.no_grad():
            logits, regression = self.network(inputs)
            probabilities = torch.softmax(logits, dim=1)[0]

        index = int(torch.argmax(probabilities).item())
        font_size, section_spacing, total_emphasis = _unscale(
            regression[0].tolist(), self.target_min, self.target_max
        )
        return LayoutPrediction(
            font_size=max(font_size, MIN_FONT_SIZE),
            section_spacing=max(section_spacing, 0.0),
            total_emphasis=min(max(total_emphasis, 0.0), 1.0),
            layout_template=self.labels[index],
            score=tuple(sorted(probabilities.tolist(), reverse=True)),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "format_version": MODEL_FORMAT_VERSION,
            "state_dict": self.network.state_dict(),
            "hidden_size": self.hidden_size,
            "labels": list(self.labels),
            "currencies": list(self.currencies),
            "feature_min": list(self.feature_min),
            "feature_max": list(self.feature_max),
            "target_min": list(self.target_min),
            "target_max": list(self.target_max),
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "LayoutSnapshot":
        """Rebuild a snapshot from a saved payload.

        Raises:
            ValueError: If the payload has an unknown format
            KeyError: If a required entry is missing
        """
        if not isinstance(payload, dict):
            raise ValueError("Model file does not contain a layout model")
        version = payload.get("format_version")
        if version != MODEL_FORMAT_VERSION:
            raise ValueError(f"Unsupported layout model format version: {version}")

        labels = tuple(payload["labels"])
        currencies = tuple(payload["currencies"])
        feature_min = tuple(float(v) for v in payload["feature_min"])
        hidden_size = int(payload["hidden_size"])
        input_size = len(feature_min) + 1 + len(currencies)

        network = LayoutNetwork(input_size, hidden_size, len(labels))
        network.load_state_dict(payload["state_dict"])
        network.eval()

        return cls(
            network=network,
            labels=labels,
            currencies=currencies,
            feature_min=feature_min,
            feature_max=tuple(float(v) for v in payload["feature_max"]),
            target_min=tuple(float(v) for v in payload["target_min"]),
            target_max=tuple(float(v) for v in payload["target_max"]),
            hidden_size=hidden_size,
        )


class LayoutModel:
    """Trainable layout predictor with an atomically swapped snapshot.

    Attributes:
        epochs: Full-batch optimisation steps per training run
        learning_rate: Adam learning rate
        hidden_size: Width of the shared hidden layer
        seed: Seed for weight initialisation
    """

    def __init__(
        self,
        epochs: int = 300,
        learning_rate: float = 0.05,
        hidden_size: int = 32,
        seed: int = 42,
    ) -> None:
        self.epochs = epochs
        self.learning_rate = learning_rate
        self.hidden_size = hidden_size
        self.seed = seed
        self._snapshot: LayoutSnapshot | None = None
        self._write_lock = threading.Lock()

    @property
    def is_trained(self) -> bool:
        return self._snapshot is not None

    @property
    def snapshot(self) -> LayoutSnapshot | None:
        """Currently published trained state, None while untrained."""
        return self._snapshot

    def predict(self, features: LayoutFeatures) -> LayoutPrediction:
        """Predict layout settings, falling back to defaults when needed."""
        return self.predict_outcome(features).prediction

    def predict_outcome(self, features: LayoutFeatures) -> LayoutOutcome:
        """Predict layout settings and report whether the model produced them.

        Args:
            features: Feature record of the invoice

        Returns:
            Predicted with the model output, or Fallback with the default
            prediction and the reason no model output is available
        """
        snapshot = self._snapshot
        if snapshot is None:
            logger.warning("Attempting to predict without a trained model. Using default values.")
            return Fallback(reason="untrained")

        try:
            prediction = snapshot.predict(features)
        except Exception as e:
            logger.error(f"Error predicting layout: {e}", exc_info=True)
            return Fallback(reason="inference_error")

        logger.debug(
            f"Predicted layout {prediction.layout_template} "
            f"with confidence {prediction.score_value:.2%}"
        )
        return Predicted(prediction=prediction)

    def train(self, examples: Sequence[LabeledExample]) -> bool:
        """Fit a new model and publish it.

        Args:
            examples: Labeled training examples

        Returns:
            True if training succeeded, False otherwise (the previous state
            is kept on failure)
        """
        examples = list(examples)
        if not examples:
            logger.error("Cannot train layout model: no training examples provided")
            layout_training_runs_total.labels(status="failed").inc()
            return False

        with self._write_lock:
            try:
                snapshot = self._fit(examples)
            except Exception as e:
                logger.error(f"Error training layout model: {e}", exc_info=True)
                layout_training_runs_total.labels(status="failed").inc()
                return False
            self._snapshot = snapshot

        layout_training_runs_total.labels(status="success").inc()
        logger.info(
            f"Layout model training completed successfully on {len(examples)} examples "
            f"({len(snapshot.labels)} templates, {len(snapshot.currencies)} currencies)"
        )
        return True

    def train_from_file(self, training_data_path: str | Path) -> bool:
        """Train from a CSV file in the training data format.

        Returns:
            True if training succeeded, False if the file is missing,
            unreadable or training failed
        """
        path = Path(training_data_path)
        if not path.is_file():
            logger.error(f"Training data file not found: {path}")
            layout_training_runs_total.labels(status="failed").inc()
            return False

        try:
            examples = read_examples(path)
        except (OSError, ValueError) as e:
            logger.error(f"Error reading training data from {path}: {e}")
            layout_training_runs_total.labels(status="failed").inc()
            return False

        return self.train(examples)

    def save(self, model_path: str | Path) -> bool:
        """Persist the trained model.

        Returns:
            True if saved, False if there is no trained model or writing failed
        """
        snapshot = self._snapshot
        if snapshot is None:
            logger.error("Cannot save model: No trained model available")
            return False

        path = Path(model_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            torch.save(snapshot.to_payload(), path)
        except Exception as e:
            logger.error(f"Error saving model to {path}: {e}", exc_info=True)
            return False

        logger.info(f"Model saved to {path}")
        return True

    def load(self, model_path: str | Path) -> bool:
        """Replace the current state with a persisted model.

        Returns:
            True if loaded, False if the file is missing or corrupt (the
            current state is left unchanged)
        """
        path = Path(model_path)
        if not path.is_file():
            logger.error(f"Model file not found: {path}")
            return False

        try:
            payload = torch.load(path, map_location="cpu", weights_only=True)
            snapshot = LayoutSnapshot.from_payload(payload)
        except Exception as e:
            logger.error(f"Error loading model from {path}: {e}")
            return False

        with self._write_lock:
            self._snapshot = snapshot

        logger.info(f"Model loaded from {path}")
        return True

    def _fit(self, examples: list[LabeledExample]) -> LayoutSnapshot:
        labels = tuple(sorted({e.targets.layout_template for e in examples}))
        currencies = tuple(sorted({e.features.currency_code for e in examples}))
        feature_min, feature_max = _min_max([_numeric_values(e.features) for e in examples])
        target_min, target_max = _min_max([_target_values(e) for e in examples])
        label_index = {label: i for i, label in enumerate(labels)}
        input_size = len(feature_min) + 1 + len(currencies)

        inputs = torch.tensor(
            [encode_features(e.features, feature_min, feature_max, currencies) for e in examples],
            dtype=torch.float32,
        )
        classes = torch.tensor([label_index[e.targets.layout_template] for e in examples])
        targets = torch.tensor(
            [_scale(_target_values(e), target_min, target_max) for e in examples],
            dtype=torch.float32,
        )

        logger.info(f"Training layout model on {len(examples)} examples for {self.epochs} epochs")

        with torch.random.fork_rng(devices=[]):
            torch.manual_seed(self.seed)
            network = LayoutNetwork(input_size, self.hidden_size, len(labels))
            optimizer = torch.optim.Adam(network.parameters(), lr=self.learning_rate)
            network.train()
            for _ in range(self.epochs):
                optimizer.zero_grad()
                logits, regression = network(inputs)
                loss = F.cross_entropy(logits, classes) + F.mse_loss(regression, targets)
                loss.backward()
                optimizer.step()

        if not torch.isfinite(loss):
            raise ValueError(f"Training diverged (loss={loss.item()})")

        logger.debug(f"Final training loss: {loss.item():.4f}")
        network.eval()

        return LayoutSnapshot(
            network=network,
            labels=labels,
            currencies=currencies,
            feature_min=feature_min,
            feature_max=feature_max,
            target_min=target_min,
            target_max=target_max,
            hidden_size=self.hidden_size,
        )
