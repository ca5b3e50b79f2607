"""
Application-wide constants for WinSign.

Zoom limits, field sizes, size limits, and other magic numbers are
centralized here for easy maintenance and configuration.
"""

from __future__ import annotations

import importlib.metadata

try:
    __version__ = importlib.metadata.version("winsign")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.1.0"

__all__ = [
    "BYTES_PER_MB",
    "CERT_VALIDITY_DAYS",
    "DEFAULT_FIELD_HEIGHT",
    "DEFAULT_FIELD_WIDTH",
    "DEFAULT_LOCATION",
    "DEFAULT_REASON",
    "DEFAULT_SCALE",
    "DEFAULT_SIGNER",
    "ENV_LOCATION",
    "ENV_REASON",
    "ENV_SCALE",
    "ENV_SIGNER",
    "HOVER_HIDE_DELAY_MS",
    "HOVER_SHOW_DELAY_MS",
    "LEGACY_RENDER_SCALE",
    "MAX_SCALE",
    "METADATA_SUFFIX",
    "MIN_FIELD_HEIGHT",
    "MIN_FIELD_WIDTH",
    "MIN_SCALE",
    "PDF_MAGIC",
    "PDF_WARN_SIZE",
    "PREVIEW_DEFAULT_SCALE",
    "PREVIEW_MIN_SCALE",
    "SCALE_STEP",
    "SIGNED_SUFFIX",
    "__version__",
]

# ── Zoom (editor) ─────────────────────────────────────────────────────

# Scale applied when a document is first opened in the signature editor
DEFAULT_SCALE = 0.75
MIN_SCALE = 0.25
MAX_SCALE = 2.5
SCALE_STEP = 0.25

# Read-only preview starts larger and cannot zoom out as far
PREVIEW_DEFAULT_SCALE = 1.25
PREVIEW_MIN_SCALE = 0.75

# Render scale the legacy burn-in assumed for every stored rectangle
LEGACY_RENDER_SCALE = 0.75


# ── Signature fields (stored units, i.e. PDF points) ─────────────────

DEFAULT_FIELD_WIDTH = 150.0
DEFAULT_FIELD_HEIGHT = 60.0

# Resize floor
MIN_FIELD_WIDTH = 50.0
MIN_FIELD_HEIGHT = 30.0


# ── Hover controls (milliseconds) ────────────────────────────────────

HOVER_SHOW_DELAY_MS = 2500
HOVER_HIDE_DELAY_MS = 500


# ── Size units and limits ────────────────────────────────────────────

BYTES_PER_MB = 1024 * 1024

# Large PDFs render slowly page by page; warn before opening
PDF_WARN_SIZE = 50 * BYTES_PER_MB


# ── Output naming ────────────────────────────────────────────────────

SIGNED_SUFFIX = "_signed"
METADATA_SUFFIX = "_signature_metadata.json"


# ── Signer identity defaults ────────────────────────────────────────

DEFAULT_SIGNER = "WinSign User"
DEFAULT_REASON = "Document approval"
DEFAULT_LOCATION = "WinSign Application"

# Self-signed certificate lifetime
CERT_VALIDITY_DAYS = 365


# ── Environment variable names ──────────────────────────────────────

ENV_SIGNER = "WINSIGN_SIGNER"
ENV_REASON = "WINSIGN_REASON"
ENV_LOCATION = "WINSIGN_LOCATION"
ENV_SCALE = "WINSIGN_SCALE"


# PDF file magic bytes
PDF_MAGIC = b"%PDF-"
