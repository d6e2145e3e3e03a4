"""Command-line interface for statement ingestion."""
import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .batch_runner import run_batch, write_manifest
from .config import get_taxonomy_loader
from .exceptions import InvoiceDateError
from .invoices import calculate_invoice_dates, format_for_display, get_month_name
from .models import CardDates, InvoiceCompetency, ParseContext, StatementFile
from .pipeline import default_parsers, dispatch
from .recognition import PROVIDERS, build_recognition_client
from .utils import format_currency, setup_logger

console = Console()
logger = setup_logger()

SUPPORTED_EXTENSIONS = {".csv", ".ofx", ".qfx", ".pdf"}


def _build_parsers(ocr_provider):
    try:
        return default_parsers(build_recognition_client(ocr_provider))
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
def cli():
    """Statement Ingest - Parse card statements and compute invoice dates."""
    pass


@cli.command()
@click.argument('file_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--json', 'json_path', type=click.Path(), help='Write the parse result as JSON to this path')
@click.option('--ocr-provider', type=click.Choice(PROVIDERS), help='Recognition service for PDFs (defaults to RECOGNITION_PROVIDER)')
@click.option('--timeout', type=float, help='Overall time budget in seconds')
def parse(file_path, json_path, ocr_provider, timeout):
    """
    Parse a card statement.

    FILE_PATH: Path to the statement (CSV, OFX/QFX or PDF)
    """
    console.print("\n[bold blue]Statement Ingest[/bold blue]\n")

    statement = StatementFile.from_path(Path(file_path))
    parsers = _build_parsers(ocr_provider)

    console.print(f"[cyan]Processing:[/cyan] {statement.name}")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console
    ) as progress:
        progress.add_task("Parsing statement...", total=None)
        result = dispatch(statement, parsers, ParseContext(timeout=timeout))

    if json_path:
        try:
            Path(json_path).write_text(json.dumps(result.to_dict(), indent=2, ensure_ascii=False), encoding='utf-8')
            console.print(f"[green]Result written to {json_path}[/green]")
        except OSError as json_exc:
            console.print(f"[yellow]Could not write {json_path}: {json_exc}[/yellow]")

    if not result.success:
        console.print(f"\n[red]✗ Parsing failed[/red] ({result.failure_kind.value})")
        for error in result.errors:
            console.print(f"  {error}")
        sys.exit(1)

    metadata = result.metadata
    console.print(f"\n[green]✓ Parsed with {result.parser_name}[/green]")
    console.print(f"  Bank: {metadata.bank_name or '-'}")
    console.print(f"  Period: {metadata.statement_period or '-'}")
    console.print(f"  Transactions: {result.transaction_count}")
    console.print(f"  Total: {format_currency(result.total_amount)}")
    if metadata.dropped_count:
        console.print(f"  Dropped: {metadata.dropped_count}")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Date", style="cyan")
    table.add_column("Description")
    table.add_column("Category", style="green")
    table.add_column("Installment")
    table.add_column("Amount", justify="right")

    for transaction in result.transactions:
        table.add_row(
            format_for_display(transaction.date),
            transaction.description,
            transaction.category,
            transaction.installment or "",
            format_currency(transaction.amount),
        )

    console.print(table)

    if result.notices:
        console.print("\n[yellow]Notices:[/yellow]")
        for notice in result.notices:
            console.print(f"  {notice}")

    if result.errors:
        console.print("\n[yellow]Skipped items:[/yellow]")
        for error in result.errors:
            console.print(f"  ⚠ {error}")


@cli.command()
@click.option('--closing-day', type=int, required=True, help='Card closing day (1-31)')
@click.option('--due-day', type=int, required=True, help='Card due day (1-31)')
@click.option('--month', type=int, required=True, help='Competency month (1-12)')
@click.option('--year', type=int, required=True, help='Competency year (2020-2100)')
def dates(closing_day, due_day, month, year):
    """Compute closing and due dates for an invoice competency."""
    try:
        calculated = calculate_invoice_dates(
            CardDates(closing_day=closing_day, due_day=due_day),
            InvoiceCompetency(month=month, year=year),
        )
    except InvoiceDateError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    console.print(f"\n[bold blue]Invoice {get_month_name(month)} {year}[/bold blue]")
    console.print(f"  Closing: {format_for_display(calculated.closing_date)}")
    console.print(f"  Due:     {format_for_display(calculated.due_date)}")


@cli.command()
@click.option('--ocr-provider', type=click.Choice(PROVIDERS), help='Recognition service for PDFs')
def parsers(ocr_provider):
    """List parsing strategies in priority order."""
    console.print("\n[bold blue]Parsing Strategies[/bold blue]\n")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#", style="cyan")
    table.add_column("Strategy", style="green")

    for position, parser in enumerate(_build_parsers(ocr_provider), start=1):
        table.add_row(str(position), parser.name)

    console.print(table)

    banks = get_taxonomy_loader().banks
    console.print(f"\n[cyan]Recognized issuers:[/cyan] {', '.join(bank.name for bank in banks)}")


@cli.command()
@click.argument('directory', type=click.Path(exists=True, file_okay=False))
@click.option('--json-dir', type=click.Path(), help='Directory for one JSON result per statement')
@click.option('--manifest', type=click.Path(), help='Path for batch summary JSON (defaults to <directory>/batch_summary.json)')
@click.option('--workers', type=int, default=4, show_default=True, help='Files parsed concurrently')
@click.option('--ocr-provider', type=click.Choice(PROVIDERS), help='Recognition service for PDFs')
def batch(directory, json_dir, manifest, workers, ocr_provider):
    """Parse every statement file in DIRECTORY and emit a manifest."""
    directory = Path(directory)

    files = sorted(
        path for path in directory.iterdir()
        if path.is_file() and path.suffix.lower() in SUPPORTED_EXTENSIONS
    )
    if not files:
        console.print(f"[yellow]No statements found in {directory}[/yellow]")
        sys.exit(0)

    manifest_path = Path(manifest) if manifest else directory / "batch_summary.json"
    parsers = _build_parsers(ocr_provider)

    console.print(f"\n[cyan]{len(files)} statements in {directory}[/cyan]")

    with Progress(SpinnerColumn(), TextColumn("{task.description}"), console=console) as progress:
        task = progress.add_task("Parsing statements...", total=len(files))

        def on_file_done(idx: int, total: int, name: str) -> None:
            progress.update(task, description=f"Processed {name}", completed=idx)

        summary = run_batch(
            files,
            parsers,
            json_output_dir=Path(json_dir) if json_dir else None,
            max_workers=workers,
            progress_callback=on_file_done,
            root_directory=directory,
        )

    write_manifest(summary, manifest_path)

    totals = summary.totals
    console.print(f"\n[green]Batch complete[/green]: {totals['successes']} succeeded, {totals['failures']} failed")
    console.print(f"Manifest: {manifest_path}")

    if totals['failures']:
        console.print("\n[red]Some statements could not be parsed[/red]; see the manifest.")
        sys.exit(1)


def main():
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"\n[red]Error: {e}[/red]")
        logger.exception("Unhandled exception")
        sys.exit(1)


if __name__ == '__main__':
    main()
