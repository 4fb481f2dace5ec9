"""
TexOCR: resumable PDF to LaTeX transcription
Command line interface.
"""

import dataclasses
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from . import __version__
from .assembler import DocumentAssembler
from .config import PipelineConfig, validate_config
from .errors import ConfigurationError
from .loop import OCRPipeline
from .resume import determine_start_page, find_page_units

app = typer.Typer(
    name="texocr",
    help="Transcribe PDF documents page by page into a LaTeX document, resuming where the last run stopped.",
    add_completion=False,
)
console = Console()


def _print_config_issues(config_status: dict):
    console.print("[bold red]Configuration Error:[/]")
    for issue in config_status["issues"]:
        console.print(f"  • {issue}")
    console.print("\n[dim]Please check your .env file.[/]")


@app.command()
def convert(
    pdf_path: Path = typer.Argument(
        ...,
        help="Path to the PDF file to transcribe",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    output_dir: Path = typer.Option(
        None,
        "--output", "-o",
        help="Output directory for main.tex and page fragments (default: OUTPUT_DIR)",
    ),
    model: str = typer.Option(
        None,
        "--model", "-m",
        help="Gemini model name (default: GEMINI_MODEL)",
    ),
    dpi: int = typer.Option(
        None,
        "--dpi",
        help="Rendering resolution",
        min=72,
        max=1200,
    ),
    max_attempts: int = typer.Option(
        None,
        "--max-attempts", "-r",
        help="Counted attempts per page before the run stops",
        min=1,
        max=20,
    ),
    title: str = typer.Option(
        None,
        "--title",
        help="Document title for a newly created main.tex",
    ),
    author: str = typer.Option(
        None,
        "--author",
        help="Document author for a newly created main.tex",
    ),
    keep_images: bool = typer.Option(
        False,
        "--keep-images",
        help="Keep rendered page PNGs in <output>/images",
    ),
):
    """
    Transcribe a PDF into LaTeX.

    Each page is sent to Gemini together with its neighbours as context.
    Results go to page<N>.tex files which main.tex includes in order.
    Re-running the command continues after the last recorded page.
    """
    overrides = {
        "output_dir": output_dir,
        "model": model,
        "dpi": dpi,
        "max_attempts": max_attempts,
        "title": title,
        "author": author,
        "keep_images": True if keep_images else None,
    }
    config = dataclasses.replace(
        PipelineConfig.from_env(),
        **{key: value for key, value in overrides.items() if value is not None},
    )

    # Validate configuration
    config_status = validate_config(config)
    if not config_status["valid"]:
        _print_config_issues(config_status)
        raise typer.Exit(1)
    for warning in config_status["warnings"]:
        console.print(f"[yellow]⚠ {warning}[/]")

    console.print(Panel.fit(
        f"[bold]TexOCR Pipeline[/]\n"
        f"[dim]Model:[/] {config.model}\n"
        f"[dim]Output:[/] {config.output_dir}\n"
        f"[dim]Max Attempts:[/] {config.max_attempts}\n"
        f"[dim]DPI:[/] {config.dpi}",
        title="Configuration",
    ))

    pipeline = OCRPipeline(config)

    try:
        result = pipeline.process_pdf(pdf_path)
    except KeyboardInterrupt:
        pipeline.abort()
        console.print("\n[yellow]Interrupted by user[/]")
        raise typer.Exit(130)
    except ConfigurationError as e:
        console.print(f"\n[bold red]Configuration Error:[/] {escape(str(e))}")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"\n[bold red]Error:[/] {escape(str(e))}")
        console.print_exception()
        raise typer.Exit(1)

    if result.aborted:
        raise typer.Exit(130)
    if result.halted_at is not None:
        console.print(f"\n[bold red]Stopped at page {result.halted_at}:[/] {escape(str(result.error))}")
        raise typer.Exit(2)

    console.print("\n[bold green]✓ All pages transcribed![/]")
    console.print(f"[dim]Output saved to:[/] {config.output_dir / 'main.tex'}")


@app.command()
def status(
    output_dir: Path = typer.Option(
        None,
        "--output", "-o",
        help="Output directory to inspect (default: OUTPUT_DIR)",
    ),
):
    """
    Show which pages are recorded and where the next run will start.
    """
    output_dir = output_dir or PipelineConfig.from_env().output_dir
    units = find_page_units(output_dir)
    manifest = DocumentAssembler(output_dir).manifest()

    console.print(f"[bold]Output:[/] {output_dir}")
    console.print(f"[bold]Recorded pages:[/] {len(units)}")
    if units:
        console.print(f"[bold]Highest page:[/] {max(units)}")
    console.print(f"[bold]Next start page:[/] {determine_start_page(output_dir)}")
    console.print(f"[bold]Included in main.tex:[/] {len(manifest.pages)}")
    console.print(f"[bold]main.tex closed:[/] {'yes' if manifest.closed else 'no'}")

    missing = sorted(set(units) - set(manifest.pages))
    if missing:
        console.print(f"[yellow]⚠ Fragments not referenced by main.tex: {', '.join(map(str, missing))}[/]")


@app.command()
def check():
    """
    Check configuration and dependencies.
    """
    console.print("[bold]Checking TexOCR Configuration...[/]\n")

    config_status = validate_config()

    if config_status["valid"]:
        console.print("[green]✓[/] API key configured")
    else:
        console.print("[red]✗[/] Configuration issues:")
        for issue in config_status["issues"]:
            console.print(f"    • {issue}")
    for warning in config_status["warnings"]:
        console.print(f"[yellow]⚠[/] {warning}")

    console.print("\n[bold]Dependencies:[/]")

    dependencies = [
        ("pymupdf", "fitz"),
        ("google-generativeai", "google.generativeai"),
        ("requests", "requests"),
        ("python-dotenv", "dotenv"),
        ("rich", "rich"),
        ("typer", "typer"),
    ]

    all_ok = True
    for name, import_name in dependencies:
        try:
            __import__(import_name)
            console.print(f"  [green]✓[/] {name}")
        except ImportError:
            console.print(f"  [red]✗[/] {name} - not installed")
            all_ok = False

    if all_ok and config_status["valid"]:
        console.print("\n[bold green]All checks passed! Ready to transcribe PDFs.[/]")
    else:
        console.print("\n[yellow]Some issues need attention.[/]")
        raise typer.Exit(1)


@app.command()
def version():
    """Show version information."""
    console.print("[bold]TexOCR[/] - resumable PDF to LaTeX transcription")
    console.print(f"[dim]Version {__version__}[/]")


if __name__ == "__main__":
    app()
