"""
Command Line Interface

CLI for the pharmacy tools: OMEQ calculation, medication search and
interaction lookup.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

app = typer.Typer(
    name="pharmacy-tools",
    help="Medication parsing, OMEQ calculation, search and interaction lookup",
    add_completion=False,
)
console = Console()

def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_toolkit(ctx: typer.Context):
    import yaml

    from pharmacy_tools import Toolkit, ToolkitConfig

    config_path = (ctx.obj or {}).get("config")
    try:
        if config_path:
            return Toolkit.from_config(config_path)
        return Toolkit(ToolkitConfig())
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)


@app.callback()
def main_options(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Pharmacy support tools."""
    import yaml

    ctx.obj = {"config": config}

    level = "DEBUG" if verbose else "WARNING"
    try:
        if config and not verbose and config.exists():
            from pharmacy_tools.toolkit.config import load_config

            level = load_config(config).logging.level
        _setup_logging(level)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)


@app.command()
def parse(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="Medication text or product number"),
) -> None:
    """Parse medication input into product and strength."""
    toolkit = _load_toolkit(ctx)

    try:
        parsed = toolkit.parse_medication(text)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if parsed.product is None:
        console.print("[yellow]No product found[/yellow]")
        raise typer.Exit(0)

    product = parsed.product
    console.print(f"[bold]{product.name}[/bold] ({product.atc_code})")
    console.print(f"  Form: {product.form.value if product.form else '-'}")
    console.print(f"  Route: {product.route.value if product.route else '-'}")
    if parsed.strength:
        unit = f"{parsed.strength.unit}/time" if parsed.strength.per_hour else parsed.strength.unit
        console.print(f"  Strength: {parsed.strength.value:g} {unit}")
    else:
        console.print("  Strength: [yellow]not found[/yellow]")
    if parsed.variant and parsed.variant.strength:
        console.print(f"  Variant: {parsed.variant.strength}")


@app.command()
def omeq(
    ctx: typer.Context,
    medications: list[str] = typer.Argument(
        ..., help="Medication text, optionally with ':<daily dose>' (e.g. 'Paralgin forte:6')"
    ),
    dose: Optional[str] = typer.Option(None, "--dose", "-d", help="Daily dose for all rows"),
) -> None:
    """Calculate oral morphine equivalents per row and in total."""
    from pharmacy_tools.omeq.calc import OMEQRow

    toolkit = _load_toolkit(ctx)

    rows = []
    for entry in medications:
        text, sep, row_dose = entry.rpartition(":")
        if not sep:
            text, row_dose = entry, dose or ""
        rows.append(OMEQRow(medication_text=text, dose_text=row_dose))

    table = Table(title="OMEQ")
    table.add_column("Medication")
    table.add_column("Dose", justify="right")
    table.add_column("OMEQ", justify="right")
    table.add_column("Status")

    try:
        for row in rows:
            result = toolkit.calculate_row(row)
            value = "-" if result.omeq is None else f"{result.omeq:g}"
            status = "[green]ok[/green]" if result.ok else f"[yellow]{result.reason.value}[/yellow]"
            table.add_row(row.medication_text, row.dose_text or "-", value, status)
        total = toolkit.total_omeq(rows)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(table)
    console.print(f"[bold]Total OMEQ: {total:g} mg[/bold]")


@app.command()
def opioids() -> None:
    """Show the OMEQ conversion table."""
    from pharmacy_tools.omeq.opioids import format_factor, opioid_groups, route_label

    table = Table(title="OMEQ-faktorer")
    table.add_column("Virkestoff")
    table.add_column("ATC")
    table.add_column("Administrasjonsvei")
    table.add_column("Faktor", justify="right")

    for substance, codes, items in opioid_groups():
        for i, item in enumerate(items):
            table.add_row(
                substance if i == 0 else "",
                codes if i == 0 else "",
                route_label(item.routes),
                format_factor(item.omeq_factor),
            )

    console.print(table)


@app.command()
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Search text"),
    fest: Optional[Path] = typer.Option(None, "--fest", help="FEST rows (JSON)"),
    pim: Optional[Path] = typer.Option(None, "--pim", help="PIM rows (JSON)"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Max results"),
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Search the medication catalogs."""
    toolkit = _load_toolkit(ctx)
    if fest:
        toolkit.config.data.fest_path = str(fest)
    if pim:
        toolkit.config.data.pim_path = str(pim)

    try:
        items = toolkit.search(query, limit)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps([item.to_dict() for item in items], indent=2, ensure_ascii=False))
        return

    if not items:
        console.print("[yellow]No matches[/yellow]")
        raise typer.Exit(0)

    for item in items:
        source = escape(f"[{item.source.value}]")
        extra = item.farmalogg_number or item.atc or ""
        console.print(f"  {source} {escape(item.display_name)} [dim]{extra}[/dim]")


@app.command()
def interactions(
    ctx: typer.Context,
    terms: list[str] = typer.Argument(..., help="Substance names or ATC codes"),
    data: Optional[Path] = typer.Option(None, "--data", help="Interaction register (JSON)"),
) -> None:
    """Find interactions between the given substances."""
    from pharmacy_tools.interactions.index import (
        format_interaction_summary,
        pair_label,
        relevance_kind,
    )

    toolkit = _load_toolkit(ctx)
    if data:
        toolkit.config.data.interactions_path = str(data)

    try:
        index = toolkit.interaction_index
        matches = toolkit.match_interactions(terms)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not matches:
        console.print("[green]No interactions found[/green]")
        raise typer.Exit(0)

    colors = {"avoid": "red", "caution": "yellow", "ok": "green"}
    for match in matches:
        record = index.interactions[match.interaction_index]
        kind = relevance_kind(record.relevance_text)
        color = colors[kind.value]
        console.print(
            f"\n[bold]{pair_label(record, match)}[/bold] "
            f"[{color}]{record.relevance_text or kind.value}[/{color}]"
        )
        console.print(format_interaction_summary(record))

    console.print(f"\n[dim]{len(matches)} interaction(s)[/dim]")


@app.command()
def suggest(
    ctx: typer.Context,
    query: str = typer.Argument("", help="Start of a substance name or ATC code"),
    data: Optional[Path] = typer.Option(None, "--data", help="Interaction register (JSON)"),
) -> None:
    """Suggest substances for the interaction lookup."""
    toolkit = _load_toolkit(ctx)
    if data:
        toolkit.config.data.interactions_path = str(data)

    try:
        entities = toolkit.suggest_substances(query)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    for entity in entities:
        console.print(f"  {entity.display_label}")


@app.command()
def version() -> None:
    """Show version information."""
    from pharmacy_tools import __version__

    console.print(f"pharmacy-tools version {__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
