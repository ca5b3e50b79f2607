"""Shared test fixtures for the WinSign test suite."""

from __future__ import annotations

import io
from unittest.mock import patch

import pytest


def make_pdf(*sizes: tuple[float, float]) -> bytes:
    """Build a PDF with one blank page per (width, height) in points."""
    import pikepdf

    pdf = pikepdf.Pdf.new()
    for size in sizes or ((612, 792),):
        pdf.add_blank_page(page_size=size)
    buf = io.BytesIO()
    pdf.save(buf)
    return buf.getvalue()


def make_png(width: int = 120, height: int = 40, *, color=(0, 0, 0, 255)) -> bytes:
    """Solid RGBA PNG."""
    from PIL import Image

    buf = io.BytesIO()
    Image.new("RGBA", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def valid_pdf_bytes():
    """A single US Letter page."""
    return make_pdf((612, 792))


@pytest.fixture
def two_page_pdf_bytes():
    """Two US Letter pages."""
    return make_pdf((612, 792), (612, 792))


@pytest.fixture
def signature_png():
    return make_png()


@pytest.fixture
def pdf_file(tmp_path, valid_pdf_bytes):
    path = tmp_path / "contract.pdf"
    path.write_bytes(valid_pdf_bytes)
    return path


@pytest.fixture
def config_dir(tmp_path):
    """Redirect config to a temp directory."""
    cfg_dir = tmp_path / "cfg"
    config_file = cfg_dir / "config.json"
    with (
        patch("winsign.config._storage.CONFIG_DIR", cfg_dir),
        patch("winsign.config._storage.CONFIG_FILE", config_file),
    ):
        yield cfg_dir, config_file


@pytest.fixture
def clean_env(monkeypatch):
    """Remove WINSIGN_* overrides from the environment."""
    for name in ("WINSIGN_SIGNER", "WINSIGN_REASON", "WINSIGN_LOCATION", "WINSIGN_SCALE"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def pdf_factory():
    return make_pdf


@pytest.fixture
def png_factory():
    return make_png
