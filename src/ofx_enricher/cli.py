"""
Command-line interface for the OFX enricher.
"""

from functools import partial
from pathlib import Path
from typing import Optional
import logging
import sys

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .client.bank_client import BankClient, describe_session
from .config import EnricherConfig, generate_default_config, load_config
from .enrichment.store import DiskResultStore, InMemoryResultStore
from .models.transaction import ExportSummary
from .ofx.document import read_ofx_file
from .output import write_outputs
from .parsers.decoders import get_decoder
from .parsers.listing import ListingParser
from .parsers.session import SessionParser
from .period import build_period, previous_month
from .pipeline import ExportPipeline
from .utils.exceptions import OfxEnricherError
from .utils.logging_config import setup_logging

console = Console()


@click.group()
@click.version_option(version="0.1.0")
def main():
    """Enrich bank OFX exports with NPP/OSKO payment references."""
    pass


@main.command()
@click.option("--month", type=str, default=None, help="Month to export (1-12)")
@click.option("--year", type=str, default=None, help="Four-digit year to export")
@click.option(
    "--curl-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="File holding the copied cURL request (read from stdin otherwise)",
)
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option(
    "-o",
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    help="Directory for the exported files",
)
@click.option("--keep-original", is_flag=True, help="Also save the unmodified OFX export")
@click.option(
    "--diagnostics-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Record every payment lookup response in this directory",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def export(
    month: Optional[str],
    year: Optional[str],
    curl_file: Optional[Path],
    config: Optional[Path],
    output_dir: Path,
    keep_original: bool,
    diagnostics_dir: Optional[Path],
    verbose: bool,
):
    """
    Export a month of transactions from the bank and enrich the OFX file.
    """
    try:
        enricher_config = _load_and_setup(config, verbose)

        default_year, default_month = previous_month()
        if month is None:
            month = click.prompt("Enter month (1-12)", default=str(default_month))
        if year is None:
            year = click.prompt("Enter year", default=str(default_year))
        period = build_period(month, year)

        session = SessionParser().parse(_read_capture(curl_file))
        if verbose:
            console.print(f"[dim]Session: {describe_session(session)}[/dim]")

        client = BankClient(enricher_config.bank, session)
        diagnostics_dir = diagnostics_dir or _configured_dir(enricher_config)
        store = DiskResultStore(diagnostics_dir) if diagnostics_dir else InMemoryResultStore()
        pipeline = ExportPipeline(enricher_config, store=store)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task(
                f"Exporting {period.year}-{period.month:02d}...", total=None
            )
            outcome = pipeline.run(
                partial(client.fetch_listing, period),
                partial(client.fetch_ofx, period),
                fetch_payment=client.fetch_payment,
            )
            progress.update(task, completed=True)

        paths = write_outputs(
            outcome,
            period,
            output_dir,
            enricher_config.output,
            keep_original=keep_original or None,
        )

        _display_summary(outcome.summary)
        console.print("\n[green]Export complete![/green]")
        for path in paths:
            console.print(f"  - {path}")

    except OfxEnricherError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command()
@click.argument("ofx_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("listing_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--replay-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Diagnostics directory from an earlier export to take payment references from",
)
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def enrich(
    ofx_file: Path,
    listing_file: Path,
    replay_dir: Optional[Path],
    config: Optional[Path],
    output: Optional[Path],
    verbose: bool,
):
    """
    Rewrite a saved OFX export without contacting the bank.

    OFX_FILE: Path to the OFX export
    LISTING_FILE: Path to the saved transaction history JSON
    """
    try:
        enricher_config = _load_and_setup(config, verbose)
        pipeline = ExportPipeline(enricher_config)
        replay_store = DiskResultStore(replay_dir) if replay_dir else InMemoryResultStore()

        outcome = pipeline.run(
            partial(listing_file.read_text, encoding="utf-8"),
            partial(read_ofx_file, ofx_file),
            replay_store=replay_store,
        )

        if output is None:
            output = ofx_file.with_name(f"{ofx_file.stem}-enriched{ofx_file.suffix}")
        with open(output, "w", encoding="utf-8", newline="") as f:
            f.write(outcome.document)

        _display_summary(outcome.summary)
        console.print(f"\n[green]Enriched OFX written: {output}[/green]")

    except OfxEnricherError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command("parse-listing")
@click.argument("listing_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def parse_listing(listing_file: Path, config: Optional[Path]):
    """
    Parse a saved transaction history and display a summary.

    LISTING_FILE: Path to the saved transaction history JSON
    """
    try:
        enricher_config = load_config(config)
        parser = ListingParser(get_decoder(enricher_config.enrichment.decoder))
        transactions = parser.parse_file(listing_file)
    except OfxEnricherError as e:
        console.print(f"[red]Error parsing file: {e}[/red]")
        sys.exit(1)

    table = Table(title=f"Transactions: {listing_file.name}")
    table.add_column("Transaction ID")
    table.add_column("NPP Payment ID")
    table.add_column("Description")

    for txn in transactions[:20]:  # Show first 20
        description = txn.long_description or ""
        table.add_row(
            txn.transaction_id,
            txn.npp_payment_id or "-",
            description[:40] + "..." if len(description) > 40 else description,
        )

    console.print(table)

    if len(transactions) > 20:
        console.print(f"\n... and {len(transactions) - 20} more transactions")

    npp_count = sum(1 for txn in transactions if txn.is_npp)
    console.print(f"\nTotal transactions: {len(transactions)} ({npp_count} NPP/OSKO)")


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _load_and_setup(config_path: Optional[Path], verbose: bool) -> EnricherConfig:
    """Load configuration and configure logging from it."""
    enricher_config = load_config(config_path)
    level = logging.DEBUG if verbose else getattr(
        logging, enricher_config.logging.level.upper(), logging.INFO
    )
    setup_logging(level, log_format=enricher_config.logging.format)
    return enricher_config


def _configured_dir(config: EnricherConfig) -> Optional[Path]:
    directory = config.output.diagnostics_dir
    return Path(directory) if directory else None


def _read_capture(curl_file: Optional[Path]) -> str:
    """Read the cURL capture from a file or stdin."""
    if curl_file is not None:
        return curl_file.read_text(encoding="utf-8")

    console.print(
        "Log into internet banking, expand the transactions toggle, and copy the "
        "request to platform.axd?u=account/getaccount as a cURL command."
    )
    console.print("Paste it below, then press Ctrl-D:")
    return click.get_text_stream("stdin").read()


def _display_summary(summary: ExportSummary) -> None:
    """Display the export summary in the console."""
    table = Table(title="Export Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total Transactions", str(summary.total_transactions))
    table.add_row("Transactions in OFX", str(summary.ofx_transactions))
    table.add_row("NPP/OSKO Transactions", str(summary.npp_transactions))
    table.add_row("Descriptions Fetched", str(summary.descriptions_fetched))
    table.add_row("MEMO Tags Updated", str(summary.memos_updated))

    console.print(table)

    if summary.count_mismatch:
        console.print(
            f"[yellow]Warning: OFX has {summary.ofx_transactions} transactions but "
            f"{summary.total_transactions} were listed[/yellow]"
        )


if __name__ == "__main__":
    main()
