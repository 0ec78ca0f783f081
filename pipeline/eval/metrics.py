"""Evaluation metrics for the layout model.

Template choice is scored like a classification task (accuracy plus
per-template precision, recall and F1). Font size, section spacing and
total emphasis are scored by mean absolute error.
"""

from dataclasses import dataclass

from services.layout.schema import LayoutPrediction, LayoutTargets


@dataclass
class TemplateMetrics:
    """Metrics for a single template label."""

    precision: float
    recall: float
    f1: float
    support: int  # Number of samples with this label


@dataclass
class EvaluationReport:
    """Complete evaluation report."""

    accuracy: float
    template_metrics: dict[str, TemplateMetrics]
    macro_f1: float
    font_size_mae: float
    section_spacing_mae: float
    total_emphasis_mae: float
    total_samples: int


def mean_absolute_error(expected: list[float], predicted: list[float]) -> float:
    if not expected:
        return 0.0
    return sum(abs(e - p) for e, p in zip(expected, predicted, strict=True)) / len(expected)


def evaluate_layout(
    expected: list[LayoutTargets], predicted: list[LayoutPrediction]
) -> EvaluationReport:
    """Evaluate layout predictions against labeled targets.

    Args:
        expected: Ground truth targets
        predicted: Model predictions, aligned with expected

    Returns:
        Evaluation report
    """
    if len(expected) != len(predicted):
        raise ValueError("Expected and predicted lists must have same length")

    labels = sorted(
        {e.layout_template for e in expected} | {p.layout_template for p in predicted}
    )
    correct = sum(
        e.layout_template == p.layout_template for e, p in zip(expected, predicted, strict=True)
    )

    template_metrics: dict[str, TemplateMetrics] = {}
    for label in labels:
        true_positives = 0
        false_positives = 0
        false_negatives = 0
        for exp, pred in zip(expected, predicted, strict=True):
            is_expected = exp.layout_template == label
            is_predicted = pred.layout_template == label
            if is_expected and is_predicted:
                true_positives += 1
            elif is_predicted:
                false_positives += 1
            elif is_expected:
                false_negatives += 1

        precision = (
            true_positives / (true_positives + false_positives)
            if (true_positives + false_positives) > 0
            else 0.0
        )
        recall = (
            true_positives / (true_positives + false_negatives)
            if (true_positives + false_negatives) > 0
            else 0.0
        )
        f1 = 2 * (precision * recall) / (precision + recall) if (precision + recall) > 0 else 0.0

        template_metrics[label] = TemplateMetrics(
            precision=precision,
            recall=recall,
            f1=f1,
            support=sum(e.layout_template == label for e in expected),
        )

    macro_f1 = (
        sum(m.f1 for m in template_metrics.values()) / len(template_metrics)
        if template_metrics
        else 0.0
    )

    return EvaluationReport(
        accuracy=correct / len(expected) if expected else 0.0,
        template_metrics=template_metrics,
        macro_f1=macro_f1,
        font_size_mae=mean_absolute_error(
            [e.font_size for e in expected], [p.font_size for p in predicted]
        ),
        section_spacing_mae=mean_absolute_error(
            [e.section_spacing for e in expected], [p.section_spacing for p in predicted]
        ),
        total_emphasis_mae=mean_absolute_error(
            [e.total_emphasis for e in expected], [p.total_emphasis for p in predicted]
        ),
        total_samples=len(expected),
    )
