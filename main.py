#!/usr/bin/env python3
"""
TexOCR: resumable PDF to LaTeX transcription
Main CLI entry point.
"""

from texocr.cli import app


if __name__ == "__main__":
    app()
