"""CLI entry point for update lens."""

import asyncio
import json
from pathlib import Path
from typing import Optional

import httpx
import typer

from update_lens.adapters.export import MarkdownExporter
from update_lens.adapters.snapshots import JsonSnapshotLoader
from update_lens.config import Settings, get_settings
from update_lens.core import CustomerDirectory, FilterMode, FilterStore
from update_lens.core.capabilities import (
    FIELD_FILTER_KEYS,
    is_filter_visible,
    supported_sources_for_filter,
)
from update_lens.use_cases import ReleaseFeedService, UpdateExportService

cli = typer.Typer(help="Curated release updates filtered per customer.")

CONFIG_OPTION = typer.Option(Path("config.yaml"), "--config", help="Path to config.yaml")


def _build_export_service(settings: Settings) -> UpdateExportService:
    loader = JsonSnapshotLoader(
        path=settings.snapshot_path,
        url=settings.snapshot_url,
        timeout=settings.snapshot.timeout,
    )
    return UpdateExportService(
        loader=loader,
        store=FilterStore(settings.store_dir),
        exporter=MarkdownExporter(),
        directory=CustomerDirectory.load(settings.customers_path),
        defaults=settings.defaults,
    )


def _load_feed(service: UpdateExportService) -> ReleaseFeedService:
    try:
        return asyncio.run(service.load_feed())
    except (httpx.HTTPError, OSError, json.JSONDecodeError) as e:
        print(f"❌ Could not load snapshot: {e}")
        raise typer.Exit(code=1)


@cli.command()
def export(
    customer: Optional[str] = typer.Option(None, "--customer", help="Customer id (default: all customers)"),
    output: Optional[Path] = typer.Option(None, "--output", help="Markdown file to write"),
    config: Path = CONFIG_OPTION,
) -> None:
    """Export the filtered release update as Markdown."""
    settings = get_settings(config)
    service = _build_export_service(settings)

    try:
        path, records = asyncio.run(
            service.export(customer_id=customer, output=output, output_dir=settings.output_dir)
        )
    except (httpx.HTTPError, OSError, json.JSONDecodeError) as e:
        print(f"❌ Export failed: {e}")
        raise typer.Exit(code=1)

    print("\n" + "=" * 70)
    print("✅ DONE!")
    print("=" * 70)
    print(f"📄 {len(records)} updates exported to {path}")


@cli.command()
def mode(
    customer: str = typer.Argument(..., help="Customer id"),
    new_mode: FilterMode = typer.Argument(..., metavar="MODE", help="inherit or custom"),
    config: Path = CONFIG_OPTION,
) -> None:
    """Switch a customer between inherited and custom filters."""
    settings = get_settings(config)
    service = _build_export_service(settings)
    feed = _load_feed(service)

    state = service.store.load()
    state.ensure_global_filters(feed.default_filters())
    feed.switch_mode(state, customer, new_mode)
    service.store.save(state)

    print(f"✓ {customer}: {new_mode.value}")


@cli.command()
def options(
    dimension: str = typer.Argument(..., help="Dimension, e.g. products, months, geography"),
    config: Path = CONFIG_OPTION,
) -> None:
    """List the values available for a filter dimension."""
    settings = get_settings(config)
    service = _build_export_service(settings)
    feed = _load_feed(service)

    try:
        values = feed.metadata.options_for(dimension)
    except KeyError:
        print(f"❌ Unknown dimension: {dimension}")
        raise typer.Exit(code=1)

    key = FIELD_FILTER_KEYS.get(dimension)
    active = feed.effective_filters(service.store.load(), None).sources
    if key is not None and not is_filter_visible(active, key):
        print(f"⚠️  {dimension} does not apply to the selected sources")

    for option in values:
        sources = ", ".join(source.value for source in option.sources)
        print(f"  • {option.value} ({option.count}) [{sources}]")


@cli.command()
def explain(
    customer: Optional[str] = typer.Option(None, "--customer", help="Customer id (default: all customers)"),
    config: Path = CONFIG_OPTION,
) -> None:
    """Show which filters exclude the most updates."""
    settings = get_settings(config)
    service = _build_export_service(settings)
    feed = _load_feed(service)

    state = service.store.load()
    filters = feed.effective_filters(state, customer)

    print(f"Visible updates: {len(feed.visible_items(filters))}")
    report = feed.explain(filters)
    if not report:
        print("✓ No filter excludes anything")
        return
    for dimension, excluded in report.items():
        key = FIELD_FILTER_KEYS.get(dimension)
        scope = ""
        if key is not None:
            scope = " (" + ", ".join(s.value for s in supported_sources_for_filter(key)) + ")"
        print(f"  • {dimension}: excludes {excluded}{scope}")


@cli.command()
def audience(config: Path = CONFIG_OPTION) -> None:
    """List the customers targeted by the global filters."""
    settings = get_settings(config)
    service = _build_export_service(settings)
    feed = _load_feed(service)

    filters = feed.effective_filters(service.store.load(), None)
    for customer_id in feed.audience(filters):
        customer = service.directory.get(customer_id)
        name = customer.name if customer else customer_id
        groups = ", ".join(service.directory.groups_of(customer_id))
        print(f"  • {name} ({customer_id}){f' [{groups}]' if groups else ''}")


def app() -> None:
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    app()
