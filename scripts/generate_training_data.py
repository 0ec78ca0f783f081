"""Generate synthetic training data for the layout model.

Usage:
    python -m scripts.generate_training_data --output data/training/layout_training.csv

Output is a CSV file in the layout training data format. The same seed
and sample count always produce the same file.
"""

import argparse
import logging
from pathlib import Path

from services.layout.synthesizer import DEFAULT_SEED, TrainingDataSynthesizer

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate synthetic layout training data")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("data/training/layout_training.csv"),
        help="Output CSV file path",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=1000,
        help="Number of samples to generate",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=DEFAULT_SEED,
        help="Random seed",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the generator.

    Returns:
        Process exit code (0 on success)
    """
    args = build_parser().parse_args(argv)
    synthesizer = TrainingDataSynthesizer(seed=args.seed)
    return 0 if synthesizer.write(args.output, args.samples) else 1


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    raise SystemExit(main())
