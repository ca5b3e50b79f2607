"""
Verification and inspection commands.

cmd_verify checks the sidecar metadata of a signed document.
cmd_info prints page count and page sizes.
cmd_render rasterizes one page to a PNG.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from ...core.renderer import PageRenderer, clamp_scale
from ...errors import WinSignError
from ..helpers import format_size_kb, safe_read_file
from ..workflows import LocalSigningBackend

if TYPE_CHECKING:
    import argparse


def cmd_verify(args: argparse.Namespace) -> None:
    """Check that a signed document has well-formed signature metadata."""
    signed_path = Path(args.pdf)
    print(f"Verifying {signed_path.name}...")

    result = LocalSigningBackend().verify(signed_path)
    if not result.is_valid:
        print(f"  INVALID: {result.reason}", file=sys.stderr)
        sys.exit(1)

    info = result.info
    cert = info.get("certificateInfo") or {}
    print(f"  Signer:   {info.get('signer', 'Unknown')}")
    print(f"  Reason:   {info.get('reason', '')}")
    print(f"  Location: {info.get('location', '')}")
    print(f"  Signed:   {info.get('signatureDate', '')}")
    if cert:
        print(f"  Certificate: {cert.get('subject')} (issued by {cert.get('issuer')})")
        print(f"    Valid {cert.get('validFrom')} to {cert.get('validTo')}")
    for entry in info.get("signatureFields", []):
        coords = entry.get("coordinates", {})
        dims = entry.get("dimensions", {})
        print(
            f"  Field on page {entry.get('pageNumber')}: "
            f"({coords.get('x', 0):.1f}, {coords.get('y', 0):.1f}) "
            f"{dims.get('width', 0):.1f} x {dims.get('height', 0):.1f} pt"
        )
    print(f"  VALID (checked {result.verification_date})")


def cmd_info(args: argparse.Namespace) -> None:
    """Print page count and page sizes of a PDF."""
    pdf_path = Path(args.pdf)
    pdf_bytes = safe_read_file(pdf_path, "PDF")
    if pdf_bytes is None:
        sys.exit(1)

    with PageRenderer() as renderer:
        try:
            count = renderer.begin_load(pdf_bytes)
        except WinSignError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        print(f"{pdf_path.name} ({format_size_kb(len(pdf_bytes))}), {count} page(s)")
        for number, geometry in enumerate(renderer.page_geometries, start=1):
            print(f"  Page {number}: {geometry.width:.1f} x {geometry.height:.1f} pt")


def cmd_render(args: argparse.Namespace) -> None:
    """Rasterize a single page to PNG."""
    pdf_path = Path(args.pdf)
    pdf_bytes = safe_read_file(pdf_path, "PDF")
    if pdf_bytes is None:
        sys.exit(1)

    scale = clamp_scale(args.scale)
    output = Path(args.output) if args.output else pdf_path.with_name(
        f"{pdf_path.stem}_page{args.page}.png"
    )
    with PageRenderer() as renderer:
        try:
            renderer.begin_load(pdf_bytes)
            surface = renderer.render_page(args.page, scale)
        except WinSignError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        try:
            surface.image.save(output, format="PNG")
        except OSError as e:
            print(f"Error: cannot write {output}: {e}", file=sys.stderr)
            sys.exit(1)
    print(
        f"Rendered page {args.page} at {scale:g}x: "
        f"{surface.backing_width} x {surface.backing_height} px -> {output}"
    )
