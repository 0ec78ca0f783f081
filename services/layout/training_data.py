"""Reading and writing layout training data as CSV.

One header row followed by one row per sample. Booleans are written as
``true``/``false`` and the score sequence as ``[a;b;c]``.
"""

import csv
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import TextIO

from services.layout.schema import LabeledExample, LayoutFeatures, LayoutTargets

HEADER = [
    "LineItemCount",
    "InvoiceTotal",
    "CustomFieldCount",
    "NotesLength",
    "IsBusinessCustomer",
    "CurrencyCode",
    "FontSize",
    "SectionSpacing",
    "TotalEmphasis",
    "LayoutTemplate",
    "Score",
]


def format_number(value: float) -> str:
    """Format a number so that whole values print without a fraction."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_score(score: Iterable[float]) -> str:
    return "[" + ";".join(repr(float(s)) for s in score) + "]"


def parse_score(text: str) -> tuple[float, ...]:
    inner = text.strip().removeprefix("[").removesuffix("]").strip()
    if not inner:
        return ()
    return tuple(float(part) for part in inner.split(";"))


def parse_bool(text: str) -> bool:
    value = text.strip().lower()
    if value in ("true", "1"):
        return True
    if value in ("false", "0"):
        return False
    raise ValueError(f"Invalid boolean value: {text!r}")


def example_to_row(example: LabeledExample) -> list[str]:
    features, targets = example.features, example.targets
    return [
        format_number(features.line_item_count),
        format_number(features.invoice_total),
        format_number(features.custom_field_count),
        format_number(features.notes_length),
        "true" if features.is_business_customer else "false",
        features.currency_code,
        repr(float(targets.font_size)),
        repr(float(targets.section_spacing)),
        repr(float(targets.total_emphasis)),
        targets.layout_template,
        format_score(targets.score),
    ]


def row_to_example(row: dict[str, str]) -> LabeledExample:
    """Parse one CSV row.

    Raises:
        ValueError: If a column is missing or malformed
    """
    try:
        features = LayoutFeatures(
            line_item_count=float(row["LineItemCount"]),
            invoice_total=float(row["InvoiceTotal"]),
            custom_field_count=float(row["CustomFieldCount"]),
            notes_length=float(row["NotesLength"]),
            is_business_customer=parse_bool(row["IsBusinessCustomer"]),
            currency_code=row["CurrencyCode"].strip(),
        )
        targets = LayoutTargets(
            font_size=float(row["FontSize"]),
            section_spacing=float(row["SectionSpacing"]),
            total_emphasis=float(row["TotalEmphasis"]),
            layout_template=row["LayoutTemplate"].strip(),
            score=parse_score(row.get("Score") or ""),
        )
    except (KeyError, AttributeError) as e:
        raise ValueError(f"Missing column in training row: {e}") from e
    return LabeledExample(features=features, targets=targets)


def write_examples(stream: TextIO, examples: Iterable[LabeledExample]) -> int:
    """Write examples to an open text stream.

    Returns:
        Number of rows written
    """
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(HEADER)
    count = 0
    for example in examples:
        writer.writerow(example_to_row(example))
        count += 1
    return count


def iter_examples(stream: TextIO) -> Iterator[LabeledExample]:
    reader = csv.DictReader(stream)
    if reader.fieldnames is None:
        return
    missing = [column for column in HEADER if column not in reader.fieldnames]
    if missing:
        raise ValueError(f"Training data is missing columns: {', '.join(missing)}")
    for line_number, row in enumerate(reader, start=2):
        try:
            yield row_to_example(row)
        except ValueError as e:
            raise ValueError(f"Invalid training row at line {line_number}: {e}") from e


def read_examples(path: Path) -> list[LabeledExample]:
    """Load all examples from a CSV file.

    Raises:
        OSError: If the file cannot be read
        ValueError: If the content is malformed
    """
    with open(path, encoding="utf-8", newline="") as f:
        return list(iter_examples(f))
