"""
Configuration management.

Import from this package directly rather than from its submodules.
"""

from __future__ import annotations

from .config import (
    CONFIG_DIR,
    CONFIG_FILE,
    get_default_scale,
    get_signer_identity,
    reset_all,
    save_default_scale,
    save_signer_identity,
)

__all__ = [
    "CONFIG_DIR",
    "CONFIG_FILE",
    "get_default_scale",
    "get_signer_identity",
    "reset_all",
    "save_default_scale",
    "save_signer_identity",
]
