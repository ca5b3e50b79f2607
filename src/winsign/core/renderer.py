"""
Page renderer: decode a PDF and rasterize its pages at a zoom factor.

Rendering is split into batches.  Every batch is stamped with a render
token taken from its :class:`PageRenderer`; starting a new batch, loading a
new document, or calling :meth:`PageRenderer.cancel_in_flight` advances the
token, and a batch whose token is no longer current commits nothing.  The
token is checked before each page is rasterized and again before the
result is committed, so a page that was mid-rasterization when the token
moved is dropped.

Batches advance one page per :meth:`RenderBatch.step` call, which lets the
GUI interleave rendering with its event loop via ``after()``.
"""

from __future__ import annotations

__all__ = [
    "PageGeometry",
    "PageRenderer",
    "PageSurface",
    "RenderBatch",
    "backing_size",
    "clamp_scale",
    "zoom_in",
    "zoom_out",
]

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from ..constants import MAX_SCALE, MIN_SCALE, PDF_MAGIC, SCALE_STEP
from ..errors import DecodeError, RenderError
from . import require_pymupdf
from .geometry import SurfaceGeometry

if TYPE_CHECKING:
    from types import TracebackType

    import pymupdf
    from PIL import Image

_logger = logging.getLogger(__name__)


# ── Zoom helpers ─────────────────────────────────────────────────────


def clamp_scale(scale: float, minimum: float = MIN_SCALE, maximum: float = MAX_SCALE) -> float:
    return max(minimum, min(maximum, scale))


def zoom_in(scale: float, step: float = SCALE_STEP, maximum: float = MAX_SCALE) -> float:
    return min(scale + step, maximum)


def zoom_out(scale: float, step: float = SCALE_STEP, minimum: float = MIN_SCALE) -> float:
    return max(scale - step, minimum)


# ── Surfaces ─────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class PageGeometry:
    """Intrinsic page size in PDF points at scale 1."""

    width: float
    height: float


def backing_size(geometry: PageGeometry, scale: float, device_pixel_ratio: float) -> tuple[int, int]:
    """Pixel size of a page bitmap: ``floor(size * scale * dpr)``, at least 1."""
    return (
        max(1, math.floor(geometry.width * scale * device_pixel_ratio)),
        max(1, math.floor(geometry.height * scale * device_pixel_ratio)),
    )


@dataclass(frozen=True, slots=True, eq=False)
class PageSurface:
    """One rasterized page, committed by a render batch.

    Attributes:
        page_number: 1-based page number.
        geometry: Intrinsic page size.
        scale: Zoom factor the bitmap was rendered at.
        device_pixel_ratio: Display density the bitmap was rendered at.
        image: Pillow RGB image, ``backing_width x backing_height`` pixels.
    """

    page_number: int
    geometry: PageGeometry
    scale: float
    device_pixel_ratio: float
    image: Image.Image

    @property
    def backing_width(self) -> int:
        return self.image.width

    @property
    def backing_height(self) -> int:
        return self.image.height

    @property
    def display_size(self) -> tuple[float, float]:
        """Nominal on-screen size: ``size * scale``."""
        return self.geometry.width * self.scale, self.geometry.height * self.scale

    def surface_geometry(self, bbox_width: float, bbox_height: float) -> SurfaceGeometry:
        """Transform input for this surface as measured on screen right now."""
        return SurfaceGeometry(
            bbox_width=bbox_width,
            bbox_height=bbox_height,
            backing_width=self.backing_width,
            backing_height=self.backing_height,
            device_pixel_ratio=self.device_pixel_ratio,
            scale=self.scale,
        )


# ── Renderer ─────────────────────────────────────────────────────────


class PageRenderer:
    """Owns the decoded document, the committed surfaces, and the render token.

    Use as a context manager (or call :meth:`release`) so the decoded
    document is freed on every exit path.
    """

    def __init__(self) -> None:
        self._token = 0
        self._doc: pymupdf.Document | None = None
        self._geometries: tuple[PageGeometry, ...] = ()
        self._surfaces: dict[int, PageSurface] = {}

    def __enter__(self) -> PageRenderer:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    # ── Token ────────────────────────────────────────────────────────

    def current_token(self) -> int:
        return self._token

    def cancel_in_flight(self) -> int:
        """Supersede every outstanding batch.  Returns the new token."""
        self._token += 1
        return self._token

    # ── Document lifecycle ───────────────────────────────────────────

    @property
    def loaded(self) -> bool:
        return self._doc is not None

    @property
    def page_count(self) -> int:
        return len(self._geometries)

    @property
    def page_geometries(self) -> tuple[PageGeometry, ...]:
        return self._geometries

    @property
    def surfaces(self) -> tuple[PageSurface, ...]:
        """Committed surfaces in page order."""
        return tuple(self._surfaces[n] for n in sorted(self._surfaces))

    def surface(self, page_number: int) -> PageSurface | None:
        return self._surfaces.get(page_number)

    def begin_load(self, pdf_bytes: bytes) -> int:
        """Decode a new document, discarding the previous one.

        Any in-flight batch is cancelled and the previous document is
        released before decoding starts.

        Returns:
            Number of pages in the new document.

        Raises:
            DecodeError: The bytes are not a readable PDF.  No pages are kept.
        """
        self.cancel_in_flight()
        self.release()
        self._doc = self._decode(pdf_bytes)
        geometries = []
        for page in self._doc:
            # Burn-in places fields in the unrotated box; show the same box
            if page.rotation:
                _logger.debug("Page %d: ignoring /Rotate %d", page.number + 1, page.rotation)
                page.set_rotation(0)
            geometries.append(PageGeometry(float(page.rect.width), float(page.rect.height)))
        self._geometries = tuple(geometries)
        _logger.debug("Decoded document with %d page(s)", len(self._geometries))
        return len(self._geometries)

    def release(self) -> None:
        """Free the decoded document and drop all surfaces."""
        doc, self._doc = self._doc, None
        self._geometries = ()
        self._surfaces.clear()
        if doc is not None:
            doc.close()

    @staticmethod
    def _decode(pdf_bytes: bytes) -> pymupdf.Document:
        if not pdf_bytes or not pdf_bytes.startswith(PDF_MAGIC):
            raise DecodeError("Unable to open document: not a PDF file")
        pymupdf = require_pymupdf()
        try:
            doc = pymupdf.open(stream=pdf_bytes, filetype="pdf")
        except (RuntimeError, ValueError) as exc:
            raise DecodeError(f"Unable to open document: {exc}") from exc
        if doc.needs_pass:
            doc.close()
            raise DecodeError("Unable to open document: it is password protected")
        if doc.page_count == 0:
            doc.close()
            raise DecodeError("Unable to open document: it has no pages")
        return doc

    # ── Rendering ────────────────────────────────────────────────────

    def start_batch(
        self,
        scale: float,
        device_pixel_ratio: float | None = None,
        on_page: Callable[[PageSurface], None] | None = None,
    ) -> RenderBatch:
        """Start rendering every page at ``scale``, superseding older batches.

        Committed surfaces from earlier batches are dropped.

        Raises:
            RenderError: No document is loaded.
        """
        if self._doc is None:
            raise RenderError("No document loaded")
        token = self.cancel_in_flight()
        self._surfaces.clear()
        return RenderBatch(
            renderer=self,
            token=token,
            scale=scale,
            device_pixel_ratio=device_pixel_ratio or 1.0,
            on_page=on_page,
        )

    def render_all(
        self,
        scale: float,
        device_pixel_ratio: float | None = None,
    ) -> tuple[PageSurface, ...]:
        """Render every page synchronously and return the surfaces."""
        batch = self.start_batch(scale, device_pixel_ratio)
        while batch.step():
            pass
        return self.surfaces

    def render_page(
        self,
        page_number: int,
        scale: float,
        device_pixel_ratio: float = 1.0,
    ) -> PageSurface:
        """Rasterize a single page without committing it."""
        if self._doc is None:
            raise RenderError("No document loaded")
        if not 1 <= page_number <= self.page_count:
            raise RenderError(f"Page {page_number} out of range (document has {self.page_count})")
        image = self._rasterize(page_number, scale, device_pixel_ratio)
        return PageSurface(
            page_number=page_number,
            geometry=self._geometries[page_number - 1],
            scale=scale,
            device_pixel_ratio=device_pixel_ratio,
            image=image,
        )

    def _rasterize(self, page_number: int, scale: float, device_pixel_ratio: float) -> Image.Image:
        from PIL import Image

        pymupdf = require_pymupdf()
        page = self._doc[page_number - 1]
        zoom = scale * device_pixel_ratio
        pix = page.get_pixmap(matrix=pymupdf.Matrix(zoom, zoom), alpha=False)
        img = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
        # The rasterizer rounds its own way; the backing store must match the
        # floor() size the transform engine assumes.
        expected = backing_size(self._geometries[page_number - 1], scale, device_pixel_ratio)
        if img.size != expected:
            img = img.resize(expected, Image.Resampling.LANCZOS)
        return img

    def _commit(self, token: int, surface: PageSurface) -> bool:
        if token != self._token:
            return False
        self._surfaces[surface.page_number] = surface
        return True

    def _discard(self, token: int) -> None:
        if token == self._token:
            self._surfaces.clear()


@dataclass(slots=True)
class RenderBatch:
    """One pass over every page of the loaded document at a fixed scale."""

    renderer: PageRenderer
    token: int
    scale: float
    device_pixel_ratio: float
    on_page: Callable[[PageSurface], None] | None = None
    next_page: int = 1
    done: bool = False
    committed: list[int] = field(default_factory=list)

    @property
    def stale(self) -> bool:
        return self.token != self.renderer.current_token()

    def step(self) -> bool:
        """Render and commit the next page.

        Returns:
            True if more pages remain, False once the batch is finished or
            has been superseded.

        Raises:
            RenderError: A page failed while this batch was still current.
                Surfaces already committed by the batch are dropped.
        """
        if self.done:
            return False
        if self.stale or self.next_page > self.renderer.page_count:
            self._finish()
            return False

        page_number = self.next_page
        try:
            image = self.renderer._rasterize(page_number, self.scale, self.device_pixel_ratio)
        except Exception as exc:
            self._finish()
            if self.stale:
                _logger.debug("Ignoring failure of superseded render (page %d): %s", page_number, exc)
                return False
            _logger.exception("Rendering page %d failed", page_number)
            # A partly rendered document is not shown
            self.renderer._discard(self.token)
            raise RenderError("Unable to render pages") from exc

        surface = PageSurface(
            page_number=page_number,
            geometry=self.renderer.page_geometries[page_number - 1],
            scale=self.scale,
            device_pixel_ratio=self.device_pixel_ratio,
            image=image,
        )
        if not self.renderer._commit(self.token, surface):
            self._finish()
            return False

        self.committed.append(page_number)
        if self.on_page is not None:
            self.on_page(surface)
        self.next_page += 1
        if self.next_page > self.renderer.page_count:
            self.done = True
        return not self.done

    def _finish(self) -> None:
        if not self.done and self.stale:
            _logger.debug(
                "Render batch %d superseded by %d after %d page(s)",
                self.token,
                self.renderer.current_token(),
                len(self.committed),
            )
        self.done = True
