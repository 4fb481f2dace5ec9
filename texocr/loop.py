"""
OCR Pipeline Orchestrator
Walks a PDF page by page, resuming after the last recorded page, and assembles main.tex.
"""

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import PipelineConfig
from .assembler import DocumentAssembler, build_preamble
from .errors import PageExhausted, RunAborted
from .notifier import PushoverNotifier
from .recognizer import GeminiRecognizer
from .renderer import PageRenderer
from .resume import determine_start_page
from .retry import AttemptState, PageOutcome, RetryController
from .usage import UsageTracker
from .window import build_window


console = Console()


@dataclass
class RunResult:
    """Result of one pipeline run over a PDF."""
    pdf_path: Path
    output_dir: Path
    start_page: int
    total_pages: int = 0
    pages: list[PageOutcome] = field(default_factory=list)
    halted_at: Optional[int] = None
    error: Optional[str] = None
    aborted: bool = False
    usage: dict = field(default_factory=dict)

    @property
    def recorded_pages(self) -> list[int]:
        return [p.page_index for p in self.pages if p.state == AttemptState.SUCCEEDED]

    @property
    def completed(self) -> bool:
        """True when every page of the document is recorded."""
        return self.halted_at is None and not self.aborted


class OCRPipeline:
    """
    Main pipeline orchestrator.

    For each page from the resume point to the end of the document:
    1. Render the previous, current and next page
    2. Transcribe the current page with Gemini
    3. Write page<N>.tex and include it in main.tex
    Quota errors wait and retry; other errors retry up to max_attempts, after
    which the operator is notified and the run stops.
    """

    def __init__(
        self,
        config: PipelineConfig,
        recognizer=None,
        notifier=None,
        renderer_factory: Optional[Callable[[Path], PageRenderer]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.config = config
        self.cancel_event = threading.Event()

        # Initialize components
        self.assembler = DocumentAssembler(
            config.output_dir,
            preamble=build_preamble(config.title, config.author),
        )
        self.recognizer = recognizer or GeminiRecognizer(config.api_key, config.model)
        self.notifier = notifier or PushoverNotifier(config.pushover_user_key, config.pushover_api_token)
        self.renderer_factory = renderer_factory or self._default_renderer
        self.retry = RetryController(
            max_attempts=config.max_attempts,
            default_quota_delay=config.default_quota_delay,
            sleep=sleep,
            cancel_event=self.cancel_event,
        )
        self.usage = UsageTracker()

    def _default_renderer(self, pdf_path: Path) -> PageRenderer:
        image_dir = self.config.image_dir if self.config.keep_images else None
        return PageRenderer(pdf_path, dpi=self.config.dpi, image_dir=image_dir)

    def abort(self):
        """Ask a running pipeline to stop; interrupts a pending quota wait."""
        self.cancel_event.set()

    def process_pdf(self, pdf_path: str | Path) -> RunResult:
        """
        Process (or resume processing of) a PDF document.

        Args:
            pdf_path: Path to the PDF file

        Returns:
            RunResult describing what this run did
        """
        pdf_path = Path(pdf_path)

        self.assembler.bootstrap()
        start_page = determine_start_page(self.config.output_dir)
        console.print(f"\n[bold blue]Processing PDF:[/] {pdf_path.name}")
        console.print(f"[dim]Resuming at page {start_page}[/]")

        result = RunResult(pdf_path=pdf_path, output_dir=self.config.output_dir, start_page=start_page)

        try:
            with self.renderer_factory(pdf_path) as renderer:
                result.total_pages = renderer.page_count
                console.print(f"[dim]Pages: {result.total_pages}[/]\n")

                if start_page > result.total_pages:
                    console.print("[green]All pages already processed.[/]")

                for page_index in range(start_page, result.total_pages + 1):
                    try:
                        outcome = self.process_page(renderer, page_index, result.total_pages)
                    except PageExhausted as e:
                        result.halted_at = page_index
                        result.error = str(e.last_error)
                        if e.outcome is not None:
                            result.pages.append(e.outcome)
                        self._report_failure(pdf_path, e)
                        break
                    result.pages.append(outcome)
        except RunAborted:
            result.aborted = True
            console.print("\n[yellow]Run aborted by operator.[/]")
        finally:
            self.assembler.finalize()
            result.usage = self.usage.to_dict()

        self._print_summary(result)
        return result

    def process_page(self, renderer: PageRenderer, page_index: int, total_pages: int) -> PageOutcome:
        """
        Process a single page with retries.

        Args:
            renderer: Open page renderer for the document
            page_index: One-indexed page number
            total_pages: Page count of the document

        Returns:
            PageOutcome of the successful attempt

        Raises:
            PageExhausted: if every counted attempt failed
        """
        console.print(Panel(f"[bold]Processing Page {page_index}/{total_pages}[/]", expand=False))

        def attempt():
            # Rendering is redone on every attempt
            with console.status("  [bold green]Rendering context window..."):
                window = build_window(renderer, page_index, total_pages)
            console.print(f"  [dim]Context images: {len(window.images())}[/]")

            with console.status("  [bold green]Transcribing page..."):
                recognition = self.recognizer.recognize(window)

            fragment_path = self.assembler.record_page(page_index, recognition.content)
            self.usage.add_call(
                page_index=page_index,
                model=self.config.model,
                input_tokens=recognition.input_tokens,
                output_tokens=recognition.output_tokens,
                duration_ms=recognition.duration_ms,
            )
            return fragment_path

        outcome = self.retry.run(page_index, attempt)
        console.print(f"  [bold green]✓ Page {page_index} recorded and included in main.tex[/]")
        return outcome

    def _report_failure(self, pdf_path: Path, error: PageExhausted):
        message = (
            f"{pdf_path.name}: page {error.page_index} could not be processed "
            f"after {error.attempts} attempts."
        )
        console.print(f"\n[bold red]✗ {message} Stopping the run.[/]")
        console.print(f"  [dim]Last error: {escape(str(error.last_error))}[/]")
        self.notifier.notify(message)

    def _print_summary(self, result: RunResult):
        """Print final processing summary."""
        console.print("\n" + "=" * 50)
        console.print("[bold]Processing Complete[/]\n" if result.completed else "[bold]Processing Stopped[/]\n")

        if result.pages:
            table = Table(title="Results Summary")
            table.add_column("Page", justify="center")
            table.add_column("Status", justify="center")
            table.add_column("Attempts", justify="center")
            table.add_column("Quota Waits", justify="center")

            for outcome in result.pages:
                status = "[green]✓ Recorded[/]" if outcome.state == AttemptState.SUCCEEDED else "[red]✗ Failed[/]"
                waits = f"{outcome.quota_waits} ({outcome.waited_seconds:g}s)" if outcome.quota_waits else "0"
                table.add_row(str(outcome.page_index), status, str(outcome.attempts), waits)

            console.print(table)

        console.print(f"\n[bold]Recorded this run:[/] {len(result.recorded_pages)} page(s)")
        if result.total_pages:
            console.print(f"[bold]Document:[/] {result.total_pages} page(s)")
        console.print(f"[dim]{self.usage.format_summary()}[/]")
