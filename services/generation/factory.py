"""Factory functions wiring the generation pipeline from configuration."""

import logging
from pathlib import Path

from services.generation.pipeline import GenerationPipeline
from services.layout.model import LayoutModel
from services.layout.optimizer import LayoutOptimizer, ModelLayoutOptimizer, NullLayoutOptimizer
from services.rendering.base import RenderSettings
from services.rendering.pdf_renderer import PyMuPDFRenderer
from services.rendering.view_renderer import JinjaViewRenderer
from services.shared.config import Settings

logger = logging.getLogger(__name__)


def create_layout_model(settings: Settings) -> LayoutModel:
    """Create a layout model, loading saved weights when configured.

    A missing model file is not an error: the model stays untrained and
    predictions fall back to default layout options.

    Args:
        settings: Application settings

    Returns:
        Layout model (trained if a saved model was loaded)
    """
    model = LayoutModel(
        epochs=settings.layout_training_epochs,
        learning_rate=settings.layout_learning_rate,
        hidden_size=settings.layout_hidden_size,
        seed=settings.layout_seed,
    )

    model_path = Path(settings.layout_model_path)
    if settings.layout_model_autoload and model_path.is_file():
        model.load(model_path)
    elif settings.layout_model_autoload:
        logger.warning(
            f"No layout model found at {model_path}; smart layout will use default values "
            f"until a model is trained"
        )
    return model


def create_layout_optimizer(settings: Settings, model: LayoutModel | None) -> LayoutOptimizer:
    if not settings.smart_layout_enabled or model is None:
        logger.info("Smart layout disabled; using default layout options")
        return NullLayoutOptimizer()
    return ModelLayoutOptimizer(model)


def create_generation_pipeline(
    settings: Settings, model: LayoutModel | None = None
) -> GenerationPipeline:
    """Build the generation pipeline from settings.

    Args:
        settings: Application settings
        model: Shared layout model (smart layout is off when None)

    Returns:
        Configured generation pipeline
    """
    pipeline = GenerationPipeline(
        view_renderer=JinjaViewRenderer(settings.template_dir),
        document_renderer=PyMuPDFRenderer(RenderSettings.from_settings(settings)),
        layout_optimizer=create_layout_optimizer(settings, model),
        default_template=settings.default_template,
    )
    logger.info("Created invoice generation pipeline")
    return pipeline
