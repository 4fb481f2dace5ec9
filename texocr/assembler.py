"""
Document Assembler

Owns the output directory layout: one ``page<N>.tex`` fragment per page and a
``main.tex`` master document that \\include's them in page order. No LLM calls.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from rich.console import Console

from .resume import find_page_units, page_unit_name


console = Console()

MAIN_TEX_NAME = "main.tex"
CLOSING_MARKER = r"\end{document}"

INCLUDE_PATTERN = re.compile(r"^\s*\\include\{page(\d+)\}\s*$")
CLOSING_PATTERN = re.compile(r"^\s*\\end\{document\}\s*$")

# Lines a fragment must never carry into main.tex
FORBIDDEN_FRAGMENT_PATTERNS = [
    r"^[ \t]*\\documentclass\b.*$",
    r"^[ \t]*\\begin\{document\}[ \t]*$",
    r"^[ \t]*\\end\{document\}[ \t]*$",
    r"^[ \t]*```(?:latex|tex)?[ \t]*$",
]

FORBIDDEN_FRAGMENT_REGEX = re.compile("|".join(FORBIDDEN_FRAGMENT_PATTERNS), re.MULTILINE)


def build_preamble(title: str = "", author: str = "") -> str:
    """LaTeX preamble written when main.tex is first created."""
    lines = [
        r"\documentclass[12pt, a4paper]{article}",
        r"\usepackage[utf8]{inputenc}",
        r"\usepackage{fontspec}",
        r"\usepackage{geometry}",
        r"\geometry{a4paper, margin=1in}",
        rf"\title{{{title}}}",
        rf"\author{{{author}}}",
        r"\date{}",
        r"\begin{document}",
    ]
    if title:
        lines.append(r"\maketitle")
    lines.append("% Pages are included below")
    return "\n".join(lines) + "\n"


def sanitize_fragment(text: str) -> str:
    """Drop document-level commands and code fences from a page fragment."""
    if not text:
        return ""
    cleaned = FORBIDDEN_FRAGMENT_REGEX.sub("", text)
    return cleaned.strip() + "\n"


@dataclass
class Manifest:
    """
    In-memory model of main.tex.

    Lines the operator added between the includes (``\\newpage``,
    ``\\chapter{...}``) are kept in ``extra_lines``, keyed by the page whose
    include they follow.
    """
    preamble: str = ""
    pages: list[int] = field(default_factory=list)
    closed: bool = False
    extra_lines: dict[int, list[str]] = field(default_factory=dict)

    def include(self, page_index: int) -> bool:
        """Add a page reference, keeping order. Returns False if already present."""
        if page_index in self.pages:
            return False
        self.pages.append(page_index)
        self.pages.sort()
        return True

    def close(self):
        self.closed = True

    def render(self) -> str:
        """Serialize to LaTeX source."""
        parts = [self.preamble.rstrip("\n") + "\n"]
        for page_index in self.pages:
            parts.append(f"\\include{{page{page_index}}}\n")
            for line in self.extra_lines.get(page_index, []):
                parts.append(line + "\n")
        if self.closed:
            parts.append(f"\n{CLOSING_MARKER}\n")
        return "".join(parts)

    @classmethod
    def parse(cls, text: str) -> "Manifest":
        """
        Parse main.tex source.

        Everything before the first \\include or \\end{document} is the
        preamble. Other lines between the includes stay attached to the
        include above them; lines after \\end{document} are dropped.
        """
        preamble_lines = []
        pages = []
        extra_lines = {}
        closed = False
        in_body = False
        dropped = 0

        for line in text.splitlines():
            include = INCLUDE_PATTERN.match(line)
            if include:
                in_body = True
                pages.append(int(include.group(1)))
            elif CLOSING_PATTERN.match(line):
                in_body = True
                closed = True
            elif not in_body:
                preamble_lines.append(line)
            elif not line.strip():
                continue
            elif closed:
                dropped += 1
            else:
                extra_lines.setdefault(pages[-1], []).append(line)

        if dropped:
            console.print(f"  [yellow]⚠ Ignoring {dropped} line(s) after \\end{{document}} in main.tex[/]")

        unique_pages = sorted(set(pages))
        if len(unique_pages) != len(pages) or unique_pages != pages:
            console.print("  [yellow]⚠ main.tex had duplicate or out-of-order page includes, normalizing[/]")

        preamble = "\n".join(preamble_lines).rstrip("\n") + "\n"
        return cls(preamble=preamble, pages=unique_pages, closed=closed, extra_lines=extra_lines)


def write_atomic(path: Path, text: str):
    """Write text so readers only ever see the old or the new file."""
    tmp_path = path.with_name(f".{path.name}.tmp")
    tmp_path.write_text(text, encoding="utf-8")
    os.replace(tmp_path, path)


class DocumentAssembler:
    """Writes page fragments and keeps main.tex in sync with them."""

    def __init__(self, output_dir: Path, preamble: Optional[str] = None):
        self.output_dir = Path(output_dir)
        self.main_tex_path = self.output_dir / MAIN_TEX_NAME
        self.preamble = preamble if preamble is not None else build_preamble()

    def bootstrap(self) -> bool:
        """Create the output directory and main.tex if missing. Returns True if created."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        if self.main_tex_path.exists():
            return False
        console.print(f"[dim]{MAIN_TEX_NAME} not found, creating a new one.[/]")
        self._save(Manifest(preamble=self.preamble))
        return True

    def manifest(self) -> Manifest:
        """Current state of main.tex."""
        if not self.main_tex_path.exists():
            return Manifest(preamble=self.preamble)
        return Manifest.parse(self.main_tex_path.read_text(encoding="utf-8"))

    def _save(self, manifest: Manifest):
        write_atomic(self.main_tex_path, manifest.render())

    def record_page(self, page_index: int, text: str) -> Path:
        """
        Persist one page and reference it from main.tex.

        Any fragment at or below ``page_index`` that main.tex does not yet
        reference (e.g. after a crash between the two writes) is added too.

        Args:
            page_index: One-indexed page number
            text: LaTeX fragment for the page

        Returns:
            Path of the written fragment
        """
        fragment_path = self.output_dir / page_unit_name(page_index)
        write_atomic(fragment_path, sanitize_fragment(text))

        manifest = self.manifest()
        for existing in sorted(find_page_units(self.output_dir)):
            if existing < page_index and manifest.include(existing):
                console.print(f"  [yellow]⚠ Backfilled missing include for page {existing}[/]")
        manifest.include(page_index)
        self._save(manifest)
        return fragment_path

    def finalize(self) -> bool:
        """Make sure main.tex ends with \\end{document}. Returns True if it was added."""
        manifest = self.manifest()
        if manifest.closed:
            return False
        manifest.close()
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self._save(manifest)
        return True
