"""
Entry point for `python -m winsign`.

Usage:
    python -m winsign sign document.pdf --field 1,100,100,150,60 --text "Jane Doe"
    python -m winsign verify document_signed.pdf
    python -m winsign info document.pdf
"""

from .ui.cli import main

main()
