"""
Page Renderer Module
Rasterizes single PDF pages to PNG bytes.
"""

import fitz  # pymupdf
from pathlib import Path
from typing import Optional

from rich.console import Console

from .errors import RenderUnavailable

console = Console()


class PageRenderer:
    """Renders pages of a PDF (1-indexed) to PNG images."""

    def __init__(self, pdf_path: str | Path, dpi: int = 300, image_dir: Optional[Path] = None):
        self.pdf_path = Path(pdf_path)
        if not self.pdf_path.exists():
            raise FileNotFoundError(f"PDF not found: {self.pdf_path}")

        self.dpi = dpi
        self.image_dir = Path(image_dir) if image_dir else None
        if self.image_dir:
            self.image_dir.mkdir(parents=True, exist_ok=True)

        self.doc = fitz.open(self.pdf_path)

    @property
    def page_count(self) -> int:
        """Return total number of pages in the PDF."""
        return len(self.doc)

    def render(self, page_index: int) -> Optional[bytes]:
        """
        Render one page as PNG.

        Args:
            page_index: One-indexed page number

        Returns:
            PNG bytes, or None if the page rendered empty

        Raises:
            RenderUnavailable: if the page lies outside the document
        """
        if page_index < 1 or page_index > self.page_count:
            raise RenderUnavailable(page_index, self.page_count)

        page = self.doc[page_index - 1]

        zoom = self.dpi / 72  # PDF default is 72 DPI
        pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom))
        png_bytes = pix.tobytes("png")
        if not png_bytes:
            console.print(f"  [yellow]⚠ Page {page_index} rendered to an empty image[/]")
            return None

        if self.image_dir:
            (self.image_dir / f"page{page_index}.png").write_bytes(png_bytes)

        return png_bytes

    def close(self):
        """Close the PDF document."""
        self.doc.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
