"""Tests for the Typer command line interface."""
from unittest.mock import patch

import fitz
import pytest
from typer.testing import CliRunner

from texocr import config
from texocr.cli import app
from texocr.loop import RunResult

runner = CliRunner()


@pytest.fixture
def sample_pdf(tmp_path):
    path = tmp_path / "book.pdf"
    doc = fitz.open()
    doc.new_page()
    doc.save(str(path))
    doc.close()
    return path


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "TexOCR" in result.output


def test_status_on_partial_output(tmp_path):
    (tmp_path / "page1.tex").write_text("a\n", encoding="utf-8")
    (tmp_path / "page2.tex").write_text("b\n", encoding="utf-8")
    (tmp_path / "main.tex").write_text("preamble\n\\include{page1}\n", encoding="utf-8")

    result = runner.invoke(app, ["status", "--output", str(tmp_path)])

    assert result.exit_code == 0
    assert "Recorded pages: 2" in result.output
    assert "Next start page: 3" in result.output
    assert "Included in main.tex: 1" in result.output
    assert "not referenced" in result.output


def test_convert_without_api_key_fails(monkeypatch, sample_pdf, tmp_path):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "")

    result = runner.invoke(app, ["convert", str(sample_pdf), "--output", str(tmp_path / "out")])

    assert result.exit_code == 1
    assert "GEMINI_API_KEY" in result.output
    assert not (tmp_path / "out").exists()


def test_convert_passes_options_to_pipeline(monkeypatch, sample_pdf, tmp_path):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "k")
    out = tmp_path / "out"

    with patch("texocr.cli.OCRPipeline") as pipeline_class:
        pipeline_class.return_value.process_pdf.return_value = RunResult(
            pdf_path=sample_pdf, output_dir=out, start_page=1, total_pages=1,
        )
        result = runner.invoke(app, [
            "convert", str(sample_pdf),
            "--output", str(out),
            "--max-attempts", "5",
            "--title", "Dogmatik",
            "--keep-images",
        ])

    assert result.exit_code == 0
    cfg = pipeline_class.call_args[0][0]
    assert cfg.output_dir == out
    assert cfg.max_attempts == 5
    assert cfg.title == "Dogmatik"
    assert cfg.keep_images is True


def test_convert_halted_run_exits_with_2(monkeypatch, sample_pdf, tmp_path):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "k")
    out = tmp_path / "out"

    with patch("texocr.cli.OCRPipeline") as pipeline_class:
        pipeline_class.return_value.process_pdf.return_value = RunResult(
            pdf_path=sample_pdf, output_dir=out, start_page=1, total_pages=3,
            halted_at=2, error="backend error",
        )
        result = runner.invoke(app, ["convert", str(sample_pdf), "--output", str(out)])

    assert result.exit_code == 2
    assert "Stopped at page 2" in result.output


def test_root_entry_point_uses_package_cli():
    import main

    assert main.app is app
