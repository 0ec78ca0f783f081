"""HTML to PDF conversion using PyMuPDF.

Lays the HTML out with ``fitz.Story`` page by page inside the page margins
and writes the pages with ``fitz.DocumentWriter``.

Based on PyMuPDF Story documentation:
https://pymupdf.readthedocs.io/en/latest/story-class.html
"""

import io
import logging

import pymupdf as fitz

from services.rendering.base import RenderSettings

logger = logging.getLogger(__name__)

POINTS_PER_MM = 72 / 25.4

# Portrait (width, height) in points
PAGE_SIZES: dict[str, tuple[float, float]] = {
    "A0": (841 * POINTS_PER_MM, 1189 * POINTS_PER_MM),
    "A1": (594 * POINTS_PER_MM, 841 * POINTS_PER_MM),
    "A2": (420 * POINTS_PER_MM, 594 * POINTS_PER_MM),
    "A3": (297 * POINTS_PER_MM, 420 * POINTS_PER_MM),
    "A4": (210 * POINTS_PER_MM, 297 * POINTS_PER_MM),
    "A5": (148 * POINTS_PER_MM, 210 * POINTS_PER_MM),
    "A6": (105 * POINTS_PER_MM, 148 * POINTS_PER_MM),
    "Letter": (612.0, 792.0),
    "Legal": (612.0, 1008.0),
    "Tabloid": (792.0, 1224.0),
}


def page_rect(settings: RenderSettings) -> fitz.Rect:
    """Media box for the configured page size and orientation."""
    width, height = PAGE_SIZES[settings.page_size]
    if settings.orientation == "Landscape":
        width, height = height, width
    return fitz.Rect(0, 0, width, height)


class PyMuPDFRenderer:
    """Converts invoice HTML into PDF bytes."""

    def __init__(self, settings: RenderSettings | None = None) -> None:
        self.settings = settings or RenderSettings()

    def render(self, markup: str) -> bytes:
        """Convert HTML markup to a PDF document.

        Args:
            markup: HTML to lay out

        Returns:
            PDF file content

        Raises:
            ValueError: If the margins leave no room for content
            RuntimeError: If PyMuPDF fails to lay out or write the document
        """
        mediabox = page_rect(self.settings)
        margin = self.settings.margin_mm * POINTS_PER_MM
        where = mediabox + (margin, margin, -margin, -margin)
        if where.is_empty:
            raise ValueError(
                f"Margin of {self.settings.margin_mm}mm leaves no printable area "
                f"on {self.settings.page_size} {self.settings.orientation}"
            )

        story = fitz.Story(html=markup)
        buffer = io.BytesIO()
        writer = fitz.DocumentWriter(buffer)
        more = 1
        pages = 0
        while more:
            device = writer.begin_page(mediabox)
            more, _ = story.place(where)
            story.draw(device)
            writer.end_page()
            pages += 1
        writer.close()

        data = buffer.getvalue()
        if self.settings.title:
            data = self._set_title(data, self.settings.title)

        logger.debug(f"Rendered PDF with {pages} page(s), {len(data)} bytes")
        return data

    def _set_title(self, data: bytes, title: str) -> bytes:
        with fitz.open(stream=data, filetype="pdf") as document:
            metadata = dict(document.metadata or {})
            metadata["title"] = title
            document.set_metadata(metadata)
            return document.tobytes()
