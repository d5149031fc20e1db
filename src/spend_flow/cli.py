import typer
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from spend_flow.categorization import CategorizationEngine
from spend_flow.config.settings import ConfigLoader
from spend_flow.domain.enums import NodeKind
from spend_flow.flows.formatting import format_currency, format_percent
from spend_flow.logging_setup import configure_logging
from spend_flow.normalization.normalizer import TransactionNormalizer
from spend_flow.repositories.json_artifact_repository import JsonArtifactRepository
from spend_flow.services.pipeline_service import PipelineService

app = typer.Typer(
    name="spend-flow",
    help="Categorize bank statement exports and chart where the money goes",
    add_completion=False,
)

console = Console()

class State:
    verbose: bool = False


state = State()

@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose output",
    )
):
    """
    Spend Flow - Normalize, categorize, and chart your bank transactions.
    """
    state.verbose = verbose
    configure_logging("DEBUG" if verbose else None)


@app.command(name="ingest")
def ingest(
    filepath: Path = typer.Argument(
        ...,
        help="Path to the bank export CSV",
        file_okay=True,
        dir_okay=False
    ),
    out_dir: Optional[Path] = typer.Option(
        None,
        "--out-dir", "-o",
        help="Where to write transactions.json, sankey.json and uncategorized.json",
    ),
    rules: Optional[Path] = typer.Option(
        None,
        "--rules",
        help="Category rules file (.json/.yml)",
    ),
    overrides: Optional[Path] = typer.Option(
        None,
        "--overrides",
        help="Overrides file (.json/.yml)",
    ),
    publish_dir: Optional[Path] = typer.Option(
        None,
        "--publish-dir",
        help="Also copy artifacts here when the directory exists",
    ),
    publish: bool = typer.Option(
        True,
        "--publish/--no-publish",
        help="Mirror artifacts into the publish directory",
    ),
    currency: Optional[str] = typer.Option(
        None,
        "--currency", "-c",
        help="Currency code recorded on the spend graph",
    ),
    strict_money: bool = typer.Option(
        False,
        "--strict-money",
        help="Fail on malformed amounts instead of reading them as 0",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Preview without writing artifacts",
    ),
):
    """
    Ingest a bank export and write the categorized artifacts.

    Examples:
        spend-flow ingest Data_export_23022026.csv
        spend-flow ingest export.csv --rules rules/categories.yml --overrides rules/overrides.yml
        spend-flow ingest export.csv --no-publish --dry-run
    """
    try:
        settings = ConfigLoader.load_settings()
        currency = (currency or settings["currency"]).upper()
        out_dir = out_dir or Path(settings["output_dir"])
        if publish:
            publish_dir = publish_dir or (
                Path(settings["publish_dir"]) if settings.get("publish_dir") else None
            )
        else:
            publish_dir = None

        service = PipelineService(
            repository=JsonArtifactRepository(out_dir, publish_dir),
            categorization_engine=CategorizationEngine(
                rules_config=ConfigLoader.load_rules_config(rules),
                overrides_config=ConfigLoader.load_overrides_config(overrides),
            ),
            normalizer=TransactionNormalizer(strict_money=strict_money),
        )

        console.print(Panel.fit(
            f"[bold cyan]Ingest Configuration[/bold cyan]\n"
            f"File: {filepath}\n"
            f"Output: {out_dir}\n"
            f"Currency: {currency}\n"
            f"Mode: {'DRY RUN' if dry_run else 'LIVE'}",
            border_style="cyan"
        ))

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Processing transactions...", total=None)

            result = service.run(filepath=filepath, currency=currency, dry_run=dry_run)

            progress.update(task, completed=True)

        console.print(Panel(
            f"[bold]Input rows:[/bold] {result.input_rows}\n"
            f"[bold]Normalized transactions:[/bold] {result.transaction_count}\n"
            f"[bold]Spend transactions:[/bold] {result.spend_transaction_count}\n"
            f"[red]Total spend:[/red] {format_currency(result.total_spend, currency)}\n"
            f"[yellow]Uncategorized debits:[/yellow] {len(result.uncategorized)}",
            title="[bold]Run Summary[/bold]",
            border_style="cyan",
            padding=(1, 2)
        ))

        category_table = Table(title="Category counts", box=None, padding=(0, 2))
        category_table.add_column("Category", style="cyan", no_wrap=True)
        category_table.add_column("Transactions", justify="right")
        for category, count in sorted(
            result.category_counts.items(), key=lambda x: x[1], reverse=True
        ):
            category_table.add_row(category, str(count))
        console.print(category_table)

        if dry_run:
            console.print("[yellow]DRY RUN - No artifacts written[/yellow]")
        else:
            console.print(f"[bold green]✓ Wrote output to {out_dir}[/bold green]")

    except Exception as e:
        console.print(f"[bold red]Ingestion failed:[/bold red] {e}")
        if state.verbose:
            console.print_exception()
        raise typer.Exit(code=1)


@app.command(name="flow")
def flow(
    out_dir: Optional[Path] = typer.Option(
        None,
        "--out-dir", "-o",
        help="Directory holding the last run's artifacts",
    ),
    currency: Optional[str] = typer.Option(
        None,
        "--currency", "-c",
        help="Currency for labels (defaults to the last run's)",
    ),
    limit: int = typer.Option(
        24,
        "--limit", "-n",
        help="How many uncategorized transactions to list",
        min=0,
    ),
):
    """
    Show income flowing into spending categories and savings.

    Examples:
        spend-flow flow
        spend-flow flow --out-dir data/processed --limit 10
    """
    try:
        settings = ConfigLoader.load_settings()
        out_dir = out_dir or Path(settings["output_dir"])
        service = PipelineService(repository=JsonArtifactRepository(out_dir))

        currency = (currency or service.repository.load_currency(settings["currency"])).upper()
        viz = service.build_flow(currency=currency)
        uncategorized = service.get_uncategorized()

        console.print(f"\n[bold cyan]Flow: Income -> Spending + Savings[/bold cyan]")

        # ═══════════════════════════════════════════════════════════
        # TOTALS
        # ═══════════════════════════════════════════════════════════

        console.print(Panel(
            f"[green]Total Income:[/green]  {format_currency(viz.total_income, currency):>14}\n"
            f"[red]Total Spend:[/red]   {format_currency(viz.total_spend, currency):>14}\n"
            f"[bold]Savings:[/bold]       {format_currency(viz.savings, currency):>14}\n"
            f"[yellow]Uncategorized:[/yellow] {len(uncategorized):>14}",
            border_style="cyan",
            padding=(1, 2)
        ))

        # ═══════════════════════════════════════════════════════════
        # INCOME SOURCES
        # ═══════════════════════════════════════════════════════════

        income_table = Table(title="Income", show_header=True, box=None, padding=(0, 2))
        income_table.add_column("Source", no_wrap=True)
        income_table.add_column("Amount", justify="right", style="green")
        income_table.add_column("% of Income", justify="right", style="dim")
        for stat in viz.income_stats:
            income_table.add_row(
                f"[{stat.color}]{stat.source}[/{stat.color}]",
                format_currency(stat.total, currency),
                format_percent(stat.percent),
            )
        console.print(income_table)

        # ═══════════════════════════════════════════════════════════
        # OUTFLOWS - categories and savings, as drawn in the graph
        # ═══════════════════════════════════════════════════════════

        outflow_table = Table(title="Outflows", show_header=True, box=None, padding=(0, 2))
        outflow_table.add_column("Bucket", no_wrap=True)
        outflow_table.add_column("Amount", justify="right", style="red")
        outflow_table.add_column("% of Income", justify="right", style="dim")
        outflow_table.add_column("Count", justify="right", style="dim")
        counts = {stat.category: stat.count for stat in viz.category_stats}
        for node in viz.nodes:
            if node.kind not in (NodeKind.CATEGORY, NodeKind.SAVINGS):
                continue
            outflow_table.add_row(
                f"[{node.color}]{node.name}[/{node.color}]",
                format_currency(node.value, currency),
                format_percent(node.percent),
                str(counts.get(node.name, 0)) if node.kind == NodeKind.CATEGORY else "",
            )
        console.print(outflow_table)

        # ═══════════════════════════════════════════════════════════
        # NEEDS CATEGORIZATION
        # ═══════════════════════════════════════════════════════════

        console.print(f"\n[bold]Needs Categorization[/bold]")
        if not uncategorized:
            console.print("[green]All debit transactions are categorized.[/green]")
        else:
            txn_table = Table(show_header=True, padding=(0, 1))
            txn_table.add_column("Date", style="cyan", width=12)
            txn_table.add_column("Merchant", style="white", max_width=40)
            txn_table.add_column("Amount", justify="right", width=12)
            txn_table.add_column("Id", style="dim")
            for txn in uncategorized[:limit]:
                txn_table.add_row(
                    str(txn.date),
                    txn.merchant,
                    f"[red]{format_currency(txn.amount, currency)}[/red]",
                    txn.id,
                )
            console.print(txn_table)

            if len(uncategorized) > limit:
                console.print(f"\n[dim]Showing {limit} of {len(uncategorized)} transactions[/dim]")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        if state.verbose:
            console.print_exception()
        raise typer.Exit(code=1)


def cli_main():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    cli_main()
