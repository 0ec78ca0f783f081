"""Train the layout model offline and save it.

Usage:
    python -m scripts.train_layout_model --data data/training/layout_training.csv
    python -m scripts.train_layout_model --synthesize 2000

Defaults for paths and training parameters come from Settings (APP_*
environment variables). A running API picks up the new model through
POST /api/v1/layout/reload.
"""

import argparse
import logging
from pathlib import Path

from services.layout.model import LayoutModel
from services.layout.synthesizer import TrainingDataSynthesizer
from services.shared.config import get_settings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Train the invoice layout model")
    parser.add_argument(
        "--data",
        type=Path,
        default=Path(settings.training_data_path),
        help="Training data CSV file",
    )
    parser.add_argument(
        "--model",
        type=Path,
        default=Path(settings.layout_model_path),
        help="Where to save the trained model",
    )
    parser.add_argument(
        "--synthesize",
        type=int,
        default=0,
        metavar="N",
        help="Generate N synthetic samples into --data before training",
    )
    parser.add_argument(
        "--epochs",
        type=int,
        default=settings.layout_training_epochs,
        help="Training epochs",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=settings.layout_seed,
        help="Random seed for data synthesis and weight initialisation",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run training.

    Returns:
        Process exit code (0 on success)
    """
    settings = get_settings()
    args = build_parser().parse_args(argv)

    if args.synthesize > 0:
        synthesizer = TrainingDataSynthesizer(seed=args.seed)
        if not synthesizer.write(args.data, args.synthesize):
            return 1

    model = LayoutModel(
        epochs=args.epochs,
        learning_rate=settings.layout_learning_rate,
        hidden_size=settings.layout_hidden_size,
        seed=args.seed,
    )
    if not model.train_from_file(args.data):
        return 1
    if not model.save(args.model):
        return 1

    logger.info(f"Layout model ready at {args.model}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    raise SystemExit(main())
