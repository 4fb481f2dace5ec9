"""
Context Window Builder
Collects the previous, current and next page images for one target page.
"""

from dataclasses import dataclass
from typing import Optional, Protocol

from .errors import CurrentPageRenderMissing, RenderUnavailable


class Renderer(Protocol):
    def render(self, page_index: int) -> Optional[bytes]: ...


@dataclass(frozen=True)
class ContextWindow:
    """The (previous, current, next) image triple for one page."""
    page_index: int
    current: bytes
    previous: Optional[bytes] = None
    next: Optional[bytes] = None

    def images(self) -> list[bytes]:
        """Present images in page order; absent neighbours are dropped."""
        return [img for img in (self.previous, self.current, self.next) if img is not None]


def _try_render(renderer: Renderer, page_index: int) -> Optional[bytes]:
    try:
        return renderer.render(page_index) or None
    except RenderUnavailable:
        return None


def build_window(renderer: Renderer, page_index: int, total_pages: int) -> ContextWindow:
    """
    Render the target page and whichever neighbours exist.

    Args:
        renderer: Anything with render(page_index) -> bytes | None
        page_index: One-indexed target page
        total_pages: Page count of the document

    Returns:
        ContextWindow for the page

    Raises:
        CurrentPageRenderMissing: if the target page produced no image
    """
    previous = _try_render(renderer, page_index - 1) if page_index - 1 >= 1 else None
    current = _try_render(renderer, page_index)
    following = _try_render(renderer, page_index + 1) if page_index + 1 <= total_pages else None

    if current is None:
        raise CurrentPageRenderMissing(page_index)

    return ContextWindow(
        page_index=page_index,
        current=current,
        previous=previous,
        next=following,
    )
