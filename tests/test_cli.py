"""Tests for winsign.ui.cli -- argument parsing and subcommands."""

from __future__ import annotations

import json
import subprocess
import sys
from unittest.mock import patch

import pytest
from PIL import Image

from winsign.ui.cli import _build_parser, main

pytestmark = pytest.mark.usefixtures("clean_env", "config_dir")


# ── Parser ────────────────────────────────────────────────────────


def test_parser_sign_requires_field_and_source():
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["sign", "a.pdf", "--text", "Jane"])
    with pytest.raises(SystemExit):
        parser.parse_args(["sign", "a.pdf", "-f", "1,0,0,150,60"])
    with pytest.raises(SystemExit):
        parser.parse_args(["sign", "a.pdf", "-f", "1,0,0,150,60", "--text", "J", "--image", "x.png"])


def test_parser_sign_defaults():
    args = _build_parser().parse_args(["sign", "a.pdf", "-f", "1,0,0,150,60", "--text", "Jane"])
    assert args.field == ["1,0,0,150,60"]
    assert args.font == "Dancing Script"
    assert args.unit_scale == 1.0
    assert args.output is None


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1
    assert "usage: winsign" in capsys.readouterr().out


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == 0
    assert capsys.readouterr().out.startswith("winsign ")


# ── sign ──────────────────────────────────────────────────────────


def test_sign_text(pdf_file, capsys):
    main(["sign", str(pdf_file), "-f", "1,100,100,150,60", "--text", "Jane Doe"])
    out = capsys.readouterr().out
    assert "Signing contract.pdf: 1 field(s), Text: Jane Doe" in out
    assert pdf_file.with_name("contract_signed.pdf").exists()
    metadata = json.loads(
        pdf_file.with_name("contract_signed_signature_metadata.json").read_text(encoding="utf-8")
    )
    assert metadata["signatureFields"][0]["coordinates"] == {"x": 100.0, "y": 100.0}


def test_sign_image_several_fields(pdf_file, tmp_path, capsys):
    image = tmp_path / "sig.png"
    Image.new("RGB", (60, 20), (255, 255, 255)).save(image)
    main(
        [
            "sign",
            str(pdf_file),
            "-f",
            "1,0,0,150,60",
            "-f",
            "1,200,300,100,40",
            "--image",
            str(image),
        ]
    )
    assert "2 field(s)" in capsys.readouterr().out


def test_sign_with_output_copies_both_files(pdf_file, tmp_path, capsys):
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    output = out_dir / "final.pdf"
    main(["sign", str(pdf_file), "-f", "1,0,0,150,60", "--text", "J", "-o", str(output)])
    assert output.exists()
    assert (out_dir / "final_signature_metadata.json").exists()
    assert f"Signed: {output}" in capsys.readouterr().out


def test_sign_rejects_non_pdf_extension(tmp_path, capsys):
    path = tmp_path / "notes.txt"
    path.write_text("hello")
    with pytest.raises(SystemExit) as exc:
        main(["sign", str(path), "-f", "1,0,0,150,60", "--text", "J"])
    assert exc.value.code == 1
    assert "not a PDF file" in capsys.readouterr().err


def test_sign_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit):
        main(["sign", str(tmp_path / "gone.pdf"), "-f", "1,0,0,150,60", "--text", "J"])
    assert "PDF not found" in capsys.readouterr().err


def test_sign_bad_field_spec(pdf_file, capsys):
    with pytest.raises(SystemExit):
        main(["sign", str(pdf_file), "-f", "1,0,0", "--text", "J"])
    assert "Expected PAGE,X,Y,W,H" in capsys.readouterr().err


def test_sign_missing_image(pdf_file, tmp_path, capsys):
    with pytest.raises(SystemExit):
        main(["sign", str(pdf_file), "-f", "1,0,0,150,60", "--image", str(tmp_path / "no.png")])
    assert "Signature image not found" in capsys.readouterr().err


def test_sign_backend_failure(pdf_file, capsys):
    with patch("winsign.core.signing.burn_in", side_effect=ValueError("unit_scale bad")), pytest.raises(
        SystemExit
    ):
        main(["sign", str(pdf_file), "-f", "1,0,0,150,60", "--text", "J"])
    assert "FAILED: unit_scale bad" in capsys.readouterr().err


# ── verify ────────────────────────────────────────────────────────


def test_verify_signed(pdf_file, capsys):
    main(["sign", str(pdf_file), "-f", "2,10,20,150,60", "--text", "J"])
    capsys.readouterr()
    main(["verify", str(pdf_file.with_name("contract_signed.pdf"))])
    out = capsys.readouterr().out
    assert "Certificate: WinSign Document Signer" in out
    assert "Field on page 2: (10.0, 20.0) 150.0 x 60.0 pt" in out
    assert "VALID" in out


def test_verify_unsigned(pdf_file, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["verify", str(pdf_file)])
    assert exc.value.code == 1
    assert "INVALID: No signature metadata found" in capsys.readouterr().err


# ── info / render ─────────────────────────────────────────────────


def test_info(tmp_path, two_page_pdf_bytes, capsys):
    path = tmp_path / "two.pdf"
    path.write_bytes(two_page_pdf_bytes)
    main(["info", str(path)])
    out = capsys.readouterr().out
    assert "2 page(s)" in out
    assert "Page 2: 612.0 x 792.0 pt" in out


def test_info_corrupt(tmp_path, capsys):
    path = tmp_path / "bad.pdf"
    path.write_bytes(b"not a pdf at all")
    with pytest.raises(SystemExit):
        main(["info", str(path)])
    assert "Error:" in capsys.readouterr().err


def test_render_default_output(pdf_file, capsys):
    main(["render", str(pdf_file), "--scale", "0.5"])
    output = pdf_file.with_name("contract_page1.png")
    with Image.open(output) as img:
        assert img.size == (306, 396)
    assert "306 x 396 px" in capsys.readouterr().out


def test_render_page_out_of_range(pdf_file, capsys):
    with pytest.raises(SystemExit):
        main(["render", str(pdf_file), "--page", "3"])
    assert "out of range" in capsys.readouterr().err


# ── setup / reset ─────────────────────────────────────────────────


def test_setup_non_interactive(config_dir, capsys):
    _, config_file = config_dir
    main(["setup", "--signer", "Jane Doe", "--reason", "Approval", "--scale", "1.5"])
    assert json.loads(config_file.read_text()) == {
        "signer": "Jane Doe",
        "reason": "Approval",
        "default_scale": 1.5,
    }
    assert str(config_file) in capsys.readouterr().out


def test_setup_rejects_bad_scale(config_dir, capsys):
    with pytest.raises(SystemExit):
        main(["setup", "--signer", "Jane", "--scale", "7"])
    assert "Scale must be between" in capsys.readouterr().err


def test_setup_interactive(config_dir, capsys):
    _, config_file = config_dir
    answers = iter(["Jane Doe", "", "Berlin", "abc", "1.25", "y"])
    with patch("builtins.input", side_effect=lambda _prompt: next(answers)):
        main(["setup"])
    saved = json.loads(config_file.read_text())
    assert saved["signer"] == "Jane Doe"
    assert saved["location"] == "Berlin"
    assert saved["default_scale"] == 1.25
    assert "Not a number" in capsys.readouterr().out


def test_setup_interactive_cancelled(config_dir):
    _, config_file = config_dir
    with patch("builtins.input", side_effect=EOFError), pytest.raises(SystemExit):
        main(["setup"])
    assert not config_file.exists()


def test_reset(config_dir, capsys):
    _, config_file = config_dir
    main(["setup", "--signer", "Jane"])
    main(["reset"])
    assert json.loads(config_file.read_text()) == {}
    assert "All configuration cleared." in capsys.readouterr().out


# ── Entry points ──────────────────────────────────────────────────


def test_gui_command_dispatches():
    with patch("winsign.ui.gui.main") as gui_main:
        main(["gui"])
    gui_main.assert_called_once_with()


def test_module_entry_point_help():
    result = subprocess.run(
        [sys.executable, "-m", "winsign", "--help"],
        capture_output=True,
        text=True,
        timeout=60,
        check=False,
    )
    assert result.returncode == 0
    assert "WINSIGN_SIGNER" in result.stdout
