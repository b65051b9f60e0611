"""Command-line interface for license_inventory.

Provides the main entry point and subcommands for building a license
inventory, classifying a single license file, and inspecting the reference
corpus.
"""

import asyncio
import logging
from dataclasses import replace
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from license_inventory.config import InventoryConfig, load_config
from license_inventory.corpus import ReferenceCorpus, load_bundled_corpus, load_corpus_dir
from license_inventory.engine import InventoryEngine
from license_inventory.errors import CorpusLoadError, EmptyInputError
from license_inventory.matcher import LicenseMatcher
from license_inventory.models import InventoryResult
from license_inventory.normalizer import TextNormalizer
from license_inventory.reporters import get_reporter
from license_inventory.sources import load_dependencies

app = typer.Typer(
    name="license-inventory",
    help="Consolidated third-party license inventory for mixed dependency graphs.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger("license_inventory")


def _setup_logging(verbose: bool) -> None:
    """Configure logging level based on verbosity flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("license_inventory").setLevel(level)


def _load_settings(
    config_path: Optional[Path],
    corpus_dir: Optional[Path],
    threshold: Optional[float],
    workers: Optional[int],
) -> tuple[InventoryConfig, ReferenceCorpus]:
    """Build the run configuration and load the reference corpus.

    Command-line options override values from the config file.

    Raises:
        ConfigError: If the configuration is invalid.
        CorpusLoadError: If the corpus cannot be loaded.
    """
    config = load_config(config_path) if config_path else InventoryConfig()
    overrides: dict[str, Any] = {}
    if threshold is not None:
        overrides["threshold"] = threshold
    if workers is not None:
        overrides["max_workers"] = workers
    if overrides:
        config = replace(config, **overrides)

    directory = corpus_dir or config.corpus_dir
    corpus = load_corpus_dir(directory) if directory else load_bundled_corpus()
    return config, corpus


def _print_summary(result: InventoryResult) -> None:
    """Print run statistics and enumerate entries needing manual review."""
    console.print(f"Inventoried [bold]{len(result.packages)}[/bold] packages")

    if result.excluded:
        console.print(f"[dim]Excluded {len(result.excluded)} dependencies[/dim]")

    if result.unresolved:
        console.print(f"\n[yellow]Unresolved ({result.unresolved_count}):[/yellow]")
        for pkg in result.unresolved:
            console.print(f"  - {pkg.name} {pkg.version}: {', '.join(pkg.unresolved_texts)}")

    if result.skipped:
        console.print(f"\n[red]Skipped ({result.skipped_count}):[/red]")
        for item in result.skipped:
            console.print(f"  - {item.name} {item.version}: {item.reason}")


@app.command()
def gen(
    declared: Annotated[
        Optional[list[Path]],
        typer.Option(
            "--declared",
            "-d",
            help="Path to `cargo metadata --format-version 1` JSON (repeatable)",
            exists=True,
            readable=True,
        ),
    ] = None,
    scraped: Annotated[
        Optional[list[Path]],
        typer.Option(
            "--scraped",
            "-s",
            help="Path to a scraped third-party license report (repeatable)",
            exists=True,
            readable=True,
        ),
    ] = None,
    output: Annotated[
        Path,
        typer.Option(
            "--output",
            "-o",
            help="Output file path",
        ),
    ] = Path("licenses.json"),
    output_format: Annotated[
        str,
        typer.Option(
            "--format",
            "-f",
            help="Output format: json or markdown",
        ),
    ] = "json",
    config_path: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="TOML configuration file",
            exists=True,
            readable=True,
        ),
    ] = None,
    corpus_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--corpus",
            help="Directory of canonical license texts (<SPDX-ID>.txt)",
        ),
    ] = None,
    threshold: Annotated[
        Optional[float],
        typer.Option(
            "--threshold",
            "-t",
            help="Minimum match confidence (default 0.9)",
        ),
    ] = None,
    workers: Annotated[
        Optional[int],
        typer.Option(
            "--workers",
            "-w",
            help="Maximum dependencies processed concurrently",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output",
        ),
    ] = False,
) -> None:
    """Generate the license inventory.

    Reads manifest-declared and scraped dependency reports, classifies raw
    license texts, and writes one record per dependency with all of its
    licenses.

    Exit codes:
        0 - Inventory written
        1 - Corpus, configuration or input error
    """
    _setup_logging(verbose)

    if not declared and not scraped:
        err_console.print(
            "[red]Error:[/red] Specify at least one --declared or --scraped report"
        )
        raise typer.Exit(code=1)

    try:
        reporter = get_reporter(output_format)
        config, corpus = _load_settings(config_path, corpus_dir, threshold, workers)
    except CorpusLoadError as e:
        err_console.print(f"[red]Corpus error:[/red] {e}")
        raise typer.Exit(code=1)
    except (ValueError, FileNotFoundError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    try:
        dependencies = load_dependencies(
            declared or [], scraped or [], config.thirdparty_metadata_key
        )
    except (ValueError, FileNotFoundError) as e:
        err_console.print(f"[red]Error reading input:[/red] {e}")
        raise typer.Exit(code=1)

    if verbose:
        console.print(
            f"[dim]Loaded {len(dependencies)} dependencies, "
            f"{len(corpus)} corpus licenses[/dim]"
        )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Classifying licenses...", total=None)
        engine = InventoryEngine(corpus, config)
        result = asyncio.run(engine.build(dependencies))
        progress.update(task, completed=True)

    try:
        reporter.write(result, output)
    except OSError as e:
        err_console.print(f"[red]Error writing output:[/red] {e}")
        raise typer.Exit(code=1)

    _print_summary(result)
    console.print(f"[green]Generated:[/green] {output}")


@app.command()
def match(
    license_file: Annotated[
        Path,
        typer.Argument(
            help="License file to classify",
            exists=True,
            readable=True,
        ),
    ],
    source_type: Annotated[
        Optional[str],
        typer.Option(
            "--source-type",
            help="Comment style to strip (c, cpp, shell, python, ...)",
        ),
    ] = None,
    threshold: Annotated[
        Optional[float],
        typer.Option("--threshold", "-t", help="Minimum match confidence"),
    ] = None,
    corpus_dir: Annotated[
        Optional[Path],
        typer.Option("--corpus", help="Directory of canonical license texts"),
    ] = None,
    show_all: Annotated[
        bool,
        typer.Option("--all", help="Also show candidates below the threshold"),
    ] = False,
) -> None:
    """Classify a single license file against the reference corpus."""
    try:
        config, corpus = _load_settings(None, corpus_dir, threshold, None)
    except CorpusLoadError as e:
        err_console.print(f"[red]Corpus error:[/red] {e}")
        raise typer.Exit(code=1)
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    normalizer = TextNormalizer(config.comment_markers)
    matcher = LicenseMatcher(corpus, threshold=config.threshold, shingle_size=config.shingle_size)

    try:
        normalized = normalizer.normalize(
            license_file.read_text(encoding="utf-8", errors="replace"),
            source_type=source_type,
            label=license_file.name,
        )
    except EmptyInputError as e:
        err_console.print(f"[yellow]Unresolved:[/yellow] {e}")
        raise typer.Exit(code=1)

    accepted = matcher.match(normalized)
    shown = matcher.evaluate(normalized)[:10] if show_all else accepted
    accepted_ids = {c.identifier for c in accepted}

    if not shown:
        console.print(f"[yellow]No license recognized in {license_file.name}[/yellow]")
        raise typer.Exit(code=1)

    table = Table(title=license_file.name)
    table.add_column("License")
    table.add_column("Confidence", justify="right")
    table.add_column("Accepted")
    for candidate in shown:
        table.add_row(
            str(candidate.identifier),
            f"{candidate.confidence:.3f}",
            "yes" if candidate.identifier in accepted_ids else "no",
        )
    console.print(table)

    if not accepted:
        raise typer.Exit(code=1)


@app.command()
def corpus(
    corpus_dir: Annotated[
        Optional[Path],
        typer.Option("--corpus", help="Directory of canonical license texts"),
    ] = None,
) -> None:
    """List the licenses in the reference corpus."""
    try:
        reference = load_corpus_dir(corpus_dir) if corpus_dir else load_bundled_corpus()
    except CorpusLoadError as e:
        err_console.print(f"[red]Corpus error:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(f"[bold]Licenses:[/bold] {len(reference)}")
    for identifier, entry in reference.items():
        texts = len(entry.texts)
        suffix = f" ({texts} texts)" if texts > 1 else ""
        console.print(f"  - {identifier}{suffix}")


if __name__ == "__main__":
    app()
