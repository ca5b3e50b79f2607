"""
Command-line interface for WinSign.

Argument parsing, dispatch, and small subcommands.
Signing logic lives in ``sign``; inspection in ``verify``.
"""

from __future__ import annotations

import argparse
import logging
import sys

from ...constants import (
    DEFAULT_SCALE,
    ENV_LOCATION,
    ENV_REASON,
    ENV_SCALE,
    ENV_SIGNER,
    LEGACY_RENDER_SCALE,
    __version__,
)
from ...core.appearance import DEFAULT_SIGNATURE_FONT, SIGNATURE_FONTS
from .setup import cmd_setup
from .sign import cmd_sign
from .verify import cmd_info, cmd_render, cmd_verify


def _cmd_reset() -> None:
    """Clear all configuration."""
    from ...config import reset_all

    reset_all()
    print("All configuration cleared.")
    print("Run 'winsign setup' to reconfigure.")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="winsign",
        description="Place signatures on PDF pages and burn them in.",
        epilog=(
            "Environment variables:\n"
            f"  {ENV_SIGNER}    Signer name recorded in metadata\n"
            f"  {ENV_REASON}    Signing reason\n"
            f"  {ENV_LOCATION}  Signing location\n"
            f"  {ENV_SCALE}     Default editor zoom (default: {DEFAULT_SCALE})\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-V", "--version", action="version", version=f"winsign {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="store_true", default=False, help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command", help="Available commands")

    # sign
    p_sign = sub.add_parser("sign", help="Burn a signature into a PDF")
    p_sign.add_argument("file", help="PDF file to sign")
    p_sign.add_argument(
        "-f",
        "--field",
        action="append",
        required=True,
        metavar="PAGE,X,Y,W,H",
        help=(
            "Signature field: 1-based page, then position and size in PDF points "
            "from the page's top-left corner. Repeat for several fields."
        ),
    )
    source = p_sign.add_mutually_exclusive_group(required=True)
    source.add_argument("--image", help="Signature image (PNG, JPEG, ...); paper is made transparent")
    source.add_argument("--text", help="Typed signature text")
    p_sign.add_argument(
        "--font",
        choices=SIGNATURE_FONTS,
        default=DEFAULT_SIGNATURE_FONT,
        help="Display font for a typed signature (preview only)",
    )
    p_sign.add_argument("-o", "--output", help="Also copy the signed PDF to this path")
    p_sign.add_argument(
        "--unit-scale",
        type=float,
        default=1.0,
        help=(
            "Divide field coordinates by this factor before drawing "
            f"(use {LEGACY_RENDER_SCALE} for coordinates measured on a {LEGACY_RENDER_SCALE}x canvas)"
        ),
    )

    # verify
    p_verify = sub.add_parser("verify", help="Check a signed PDF's signature metadata")
    p_verify.add_argument("pdf", help="Signed PDF file")

    # info
    p_info = sub.add_parser("info", help="Show page count and page sizes")
    p_info.add_argument("pdf", help="PDF file")

    # render
    p_render = sub.add_parser("render", help="Render one page to PNG")
    p_render.add_argument("pdf", help="PDF file")
    p_render.add_argument("--page", type=int, default=1, help="1-based page number (default: 1)")
    p_render.add_argument("--scale", type=float, default=1.0, help="Zoom factor (default: 1.0)")
    p_render.add_argument("-o", "--output", help="Output PNG (default: <stem>_page<N>.png)")

    # setup
    p_setup = sub.add_parser("setup", help="Configure signer identity and default zoom")
    p_setup.add_argument("--signer", default=None, help="Signer name (non-interactive)")
    p_setup.add_argument("--reason", default=None, help="Signing reason")
    p_setup.add_argument("--location", default=None, help="Signing location")
    p_setup.add_argument("--scale", type=float, default=None, help="Default editor zoom")

    # reset
    sub.add_parser("reset", help="Clear all configuration")

    # gui
    sub.add_parser("gui", help="Launch graphical interface")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "sign":
        cmd_sign(args)
    elif args.command == "verify":
        cmd_verify(args)
    elif args.command == "info":
        cmd_info(args)
    elif args.command == "render":
        cmd_render(args)
    elif args.command == "setup":
        cmd_setup(args)
    elif args.command == "reset":
        _cmd_reset()
    elif args.command == "gui":
        from ..gui import main as gui_main

        gui_main()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
