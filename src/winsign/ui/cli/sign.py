"""
CLI signing command: burn signatures into a PDF at explicit positions.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from ...core.appearance import image_signature, typed_signature
from ...core.models import Field, Rect
from ..helpers import (
    default_output_path,
    format_size_kb,
    metadata_path_for,
    parse_field_spec,
    safe_read_file,
)
from ..workflows import LocalSigningBackend

if TYPE_CHECKING:
    import argparse

    from ...core.models import SignaturePayload


def _build_payload(args: argparse.Namespace) -> SignaturePayload:
    if args.image:
        return image_signature(args.image)
    return typed_signature(args.text, args.font)


def _build_fields(
    document_id: str,
    specs: list[str],
    payload: SignaturePayload,
) -> list[Field]:
    fields = []
    for spec in specs:
        page, x, y, w, h = parse_field_spec(spec)
        fields.append(Field.create(document_id, page, Rect(x, y, w, h), payload))
    return fields


def cmd_sign(args: argparse.Namespace) -> None:
    """Sign a PDF with one or more fields sharing a single signature."""
    pdf_path = Path(args.file)
    if pdf_path.suffix.lower() != ".pdf":
        print(f"Error: {pdf_path.name} is not a PDF file", file=sys.stderr)
        sys.exit(1)
    if safe_read_file(pdf_path, "PDF") is None:
        sys.exit(1)

    backend = LocalSigningBackend()
    document = backend.open_documents([pdf_path])[0]

    try:
        payload = _build_payload(args)
        fields = _build_fields(document.id, args.field, payload)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    output = Path(args.output) if args.output else None
    target = default_output_path(pdf_path)
    print(f"Signing {pdf_path.name}: {len(fields)} field(s), {payload.label}")

    result = backend.sign(pdf_path, fields, unit_scale=args.unit_scale)
    if not result.ok:
        print(f"  FAILED: {result.error_message}", file=sys.stderr)
        sys.exit(1)

    signed_path = result.signed_path or target
    if output is not None and output.resolve() != signed_path.resolve():
        for src, dest in (
            (signed_path, output),
            (result.metadata_path, metadata_path_for(output)),
        ):
            saved = backend.save(src, dest)
            if not saved.ok:
                print(f"  FAILED to write {dest}: {saved.error_message}", file=sys.stderr)
                sys.exit(1)
        signed_path = output
        metadata_path = metadata_path_for(output)
    else:
        metadata_path = result.metadata_path

    print(f"  Signed: {signed_path} ({format_size_kb(result.output_size)})")
    print(f"  Metadata: {metadata_path}")
