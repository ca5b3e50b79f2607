"""
Configuration management for WinSign.

Stores the signer identity recorded in signature metadata and the
editor's default zoom in ~/.winsign/config.json.

Priority for every value: environment variable > config file > built-in
default.
"""

from __future__ import annotations

__all__ = [
    "CONFIG_DIR",
    "CONFIG_FILE",
    "get_default_scale",
    "get_signer_identity",
    "reset_all",
    "save_default_scale",
    "save_signer_identity",
]

import logging
import os

from ..constants import (
    DEFAULT_LOCATION,
    DEFAULT_REASON,
    DEFAULT_SCALE,
    DEFAULT_SIGNER,
    ENV_LOCATION,
    ENV_REASON,
    ENV_SCALE,
    ENV_SIGNER,
    MAX_SCALE,
    MIN_SCALE,
)
from ..core.signing import SignerIdentity
from ..errors import ConfigError
from ._storage import CONFIG_DIR, CONFIG_FILE, load_config, load_raw_config, save_config

_logger = logging.getLogger(__name__)


# ── Signer identity ─────────────────────────────────────────────────


def get_signer_identity() -> SignerIdentity:
    """Resolve signer, reason, and location."""
    config = load_config()

    def pick(env_name: str, key: str, default: str) -> str:
        env_val = os.environ.get(env_name, "").strip()
        if env_val:
            return env_val
        return config.get(key) or default  # type: ignore[return-value]

    return SignerIdentity(
        signer=pick(ENV_SIGNER, "signer", DEFAULT_SIGNER),
        reason=pick(ENV_REASON, "reason", DEFAULT_REASON),
        location=pick(ENV_LOCATION, "location", DEFAULT_LOCATION),
    )


def save_signer_identity(
    signer: str,
    reason: str | None = None,
    location: str | None = None,
) -> None:
    """Save signer identity to the config file.

    Omitted reason or location are removed so the built-in defaults apply.

    Raises:
        ConfigError: ``signer`` is blank.
    """
    signer = signer.strip()
    if not signer:
        raise ConfigError("Signer name cannot be empty")
    config = load_raw_config()
    config["signer"] = signer
    for key, value in (("reason", reason), ("location", location)):
        if value and value.strip():
            config[key] = value.strip()
        else:
            config.pop(key, None)
    save_config(config)


# ── Editor zoom ─────────────────────────────────────────────────────


def get_default_scale() -> float:
    """Zoom factor applied when a document is opened in the editor."""
    scale_str = os.environ.get(ENV_SCALE, "").strip()
    if scale_str:
        try:
            scale = float(scale_str)
        except ValueError:
            _logger.warning("Invalid %s value %r, ignoring", ENV_SCALE, scale_str)
        else:
            if MIN_SCALE <= scale <= MAX_SCALE:
                return scale
            _logger.warning(
                "%s=%s out of range [%s, %s], ignoring", ENV_SCALE, scale, MIN_SCALE, MAX_SCALE
            )
    return load_config().get("default_scale", DEFAULT_SCALE)


def save_default_scale(scale: float) -> None:
    """Persist the editor's default zoom.

    Raises:
        ConfigError: ``scale`` is outside the supported zoom range.
    """
    if not MIN_SCALE <= scale <= MAX_SCALE:
        raise ConfigError(f"Scale must be between {MIN_SCALE} and {MAX_SCALE}, got {scale}")
    config = load_raw_config()
    config["default_scale"] = scale
    save_config(config)


def reset_all() -> None:
    """Clear all saved settings."""
    save_config({})
