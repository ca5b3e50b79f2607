"""
Interactive setup for WinSign CLI.

Configures the signer identity recorded in signature metadata and the
editor's default zoom.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from ...config import (
    _storage,
    get_default_scale,
    get_signer_identity,
    save_default_scale,
    save_signer_identity,
)
from ...constants import MAX_SCALE, MIN_SCALE
from ...errors import ConfigError
from ..helpers import confirm_choice, safe_input

if TYPE_CHECKING:
    import argparse


def _prompt(label: str, current: str) -> str | None:
    answer = safe_input(f"{label} [{current}]: ")
    if answer is None:
        return None
    return answer or current


def _prompt_scale(current: float) -> float | None:
    while True:
        answer = safe_input(f"Default zoom ({MIN_SCALE}-{MAX_SCALE}) [{current:g}]: ")
        if answer is None:
            return None
        if not answer:
            return current
        try:
            scale = float(answer)
        except ValueError:
            print(f"  Not a number: {answer!r}")
            continue
        if MIN_SCALE <= scale <= MAX_SCALE:
            return scale
        print(f"  Zoom must be between {MIN_SCALE} and {MAX_SCALE}")


def cmd_setup(args: argparse.Namespace) -> None:
    """Interactive or flag-driven configuration of signer identity."""
    identity = get_signer_identity()

    if args.signer:
        signer, reason, location = args.signer, args.reason, args.location
        scale = args.scale
    else:
        print("WinSign setup\n")
        signer = _prompt("Signer name", identity.signer)
        reason = _prompt("Reason", identity.reason) if signer is not None else None
        location = _prompt("Location", identity.location) if reason is not None else None
        scale = _prompt_scale(get_default_scale()) if location is not None else None
        if scale is None:
            print("Setup cancelled.")
            sys.exit(1)
        print(f"\n  Signer:   {signer}\n  Reason:   {reason}\n  Location: {location}")
        print(f"  Zoom:     {scale:g}")
        if not confirm_choice("Save these settings?"):
            print("Settings not saved.")
            return

    try:
        save_signer_identity(signer, reason, location)
        if scale is not None:
            save_default_scale(scale)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"Settings saved to {_storage.CONFIG_FILE}")
