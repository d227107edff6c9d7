"""Command-line interface for LogSentinel."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from .analysis import AnalysisClient
from .config import AnalysisSettings
from .ingestion import ParseFailure, export_dataset, parse_dataset
from .models import Dataset
from .paths import get_log_path
from .server_runner import run_dashboard
from .session import Session

app = typer.Typer(help="Activity log and forensic artifact dashboard.")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


@app.callback(no_args_is_help=True)
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the dashboard."),
    port: int = typer.Option(
        8765, "--port", min=1, max=65535, help="TCP port for the dashboard."
    ),
    open_browser: bool = typer.Option(
        True,
        "--open-browser/--no-open-browser",
        help="Automatically launch the dashboard in your default browser.",
    ),
    demo: bool = typer.Option(
        False, "--demo", help="Start with the simulated forensic dataset loaded."
    ),
    log_file: bool = typer.Option(
        False, "--log-file", help="Also write logs to the per-user log directory."
    ),
) -> None:
    """Start the local dashboard."""
    if log_file:
        handler = logging.FileHandler(get_log_path(), encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)
    run_dashboard(
        host=host,
        port=port,
        settings=AnalysisSettings.from_env(),
        open_browser=open_browser,
        load_demo=demo,
    )


@app.command()
def summary(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Uploaded JSON file."),
) -> None:
    """Print dashboard statistics for a log or forensic export file."""
    from .reporting import SummaryPrinter

    dataset = _load_dataset(path)
    SummaryPrinter().print_summary(dataset.events, dataset.artifacts)


@app.command()
def digest(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Uploaded JSON file."),
) -> None:
    """Print the context digest that would be sent for analysis."""
    from .summarizer import summarize

    dataset = _load_dataset(path)
    typer.echo(summarize(dataset.events, dataset.artifacts))


@app.command()
def ask(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Uploaded JSON file."),
    question: str = typer.Argument(..., help="Question for the analyst."),
    model: Optional[str] = typer.Option(None, "--model", help="Chat model name."),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="OpenAI-compatible endpoint URL."
    ),
) -> None:
    """Ask a one-off question about a dataset."""
    settings = AnalysisSettings.from_env().with_overrides(model=model, base_url=base_url)
    if not settings.is_configured:
        typer.echo("API key is missing. Set LOGSENTINEL_API_KEY or GEMINI_API_KEY.", err=True)
        raise typer.Exit(code=1)

    session = Session(AnalysisClient(settings))
    session.load(_load_dataset(path))
    try:
        reply = session.ask(question)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(reply.content)


@app.command()
def demo(
    output: Path = typer.Option(
        Path("forensics_data.json"), "--output", "-o", path_type=Path, help="Destination file."
    ),
    forensics: bool = typer.Option(
        True, "--forensics/--no-forensics", help="Include simulated forensic artifacts."
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for repeatable data."),
) -> None:
    """Write a simulated dataset in the upload format."""
    from .demo import demo_dataset

    dataset = demo_dataset(forensics=forensics, seed=seed)
    output.write_text(export_dataset(dataset), encoding="utf-8")
    typer.echo(
        f"Wrote {len(dataset.events)} events and {len(dataset.artifacts)} artifacts to {output}"
    )


@app.command("collector-script")
def collector_script(
    output_dir: Path = typer.Option(
        Path("."), "--output-dir", "-o", file_okay=False, path_type=Path,
        help="Directory to write collect_data.ps1 into.",
    ),
) -> None:
    """Write the PowerShell collection script."""
    from .collector_script import write_collector_script

    output_dir.mkdir(parents=True, exist_ok=True)
    typer.echo(f"Wrote {write_collector_script(output_dir)}")


def _load_dataset(path: Path) -> Dataset:
    result = parse_dataset(path.read_bytes())
    if isinstance(result, ParseFailure):
        typer.echo(result.message, err=True)
        raise typer.Exit(code=1)
    return result.dataset
