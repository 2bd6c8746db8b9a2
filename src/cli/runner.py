# src/cli/runner.py

"""Command handlers for the buying_list CLI."""

import asyncio
import json
import logging
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from src.extraction.pipeline import SelectorResolutionPipeline
from src.models.extraction_result import ExtractionResult
from src.models.shopping_item import (
    AlertCondition,
    ShoppingItem,
    TrackedSource,
)
from src.scrapers.page_fetcher import FetchError, PageFetcher
from src.services.price_service import PriceService
from src.services.scheduler import ExtractionScheduler
from src.storage.data_store import DataStore

logger = logging.getLogger("buying_list.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)

_DECISION_STYLE: dict[str, str] = {
    "buy": "bold green",
    "wait": "bold yellow",
    "uncertain": "dim",
}


def open_store(data_path: str | None = None) -> DataStore:
    """Create and load the data store."""
    store = DataStore(Path(data_path) if data_path else None)
    store.load()
    return store


def parse_price(raw: str) -> Decimal | None:
    """Parse a user-typed price, printing an error on bad input."""
    try:
        value = Decimal(raw)
    except InvalidOperation:
        _err.print(f"[red]Invalid price: {raw}[/red]")
        return None
    if value <= 0:
        _err.print(f"[red]Price must be positive: {raw}[/red]")
        return None
    return value


def _fmt_price(price: Decimal | None, currency: str) -> str:
    return f"{price:,.2f} {currency}" if price is not None else "N/A"


def _print_result(result: ExtractionResult, label: str) -> None:
    if result.success:
        status = "changed" if result.changed else "unchanged"
        _err.print(
            f"[green]✓ {label}: {result.price}[/green] "
            f"[dim]({status}, via {escape(result.used_selector) or '—'})[/dim]"
        )
        if result.extracted_text:
            _err.print(f"[dim]  text: {escape(result.extracted_text[:80])}[/dim]")
    else:
        _err.print(f"[red]✗ {label}: {escape(result.error)}[/red]")
        if result.extracted_text:
            _err.print(f"[dim]  {escape(result.extracted_text[:120])}[/dim]")


# ── Item management ──────────────────────────────────────

def cmd_list(store: DataStore) -> int:
    """Print all items with their sources and current prices."""
    items = store.get_items(sort_field="order")
    if not items:
        _err.print("[yellow]The buying list is empty.[/yellow]")
        return 0

    table = Table(title="Buying List", show_lines=True, title_style="bold cyan")
    table.add_column("Item", style="bold")
    table.add_column("Item ID", style="dim")
    table.add_column("Source")
    table.add_column("Source ID", style="dim")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Updated", style="dim")
    table.add_column("Active", justify="center")

    for item in items:
        if not item.sources:
            table.add_row(item.name, item.id, "—", "", "", "", "")
            continue
        for idx, src in enumerate(item.sources):
            table.add_row(
                item.name if idx == 0 else "",
                item.id if idx == 0 else "",
                src.name or src.url[:40],
                src.id,
                _fmt_price(src.current_price, src.currency),
                (
                    src.last_updated.strftime("%Y-%m-%d %H:%M")
                    if src.last_updated else "—"
                ),
                "✓" if src.active else "✗",
            )
    Console().print(table)
    return 0


def cmd_add_item(
    store: DataStore,
    name: str,
    category: str | None,
    priority: str,
    tags: list[str],
) -> int:
    item = store.add_item(ShoppingItem(
        id="",
        name=name,
        category_id=category or "",
        priority=priority,
        tags=tags,
    ))
    _err.print(f"[green]✓ Added item[/green] {item.name} [dim]{item.id}[/dim]")
    sys.stdout.write(item.id + "\n")
    return 0


async def cmd_add_source(
    service: PriceService,
    item_id: str,
    url: str,
    name: str,
    selectors: list[str],
    currency: str | None,
) -> int:
    source = await service.add_source(item_id, TrackedSource(
        id="",
        url=url,
        name=name,
        selectors=selectors,
        currency=currency or service.store.get_settings().default_currency,
    ))
    if source is None:
        _err.print(f"[red]Unknown item: {item_id}[/red]")
        return 1
    _err.print(f"[green]✓ Added source[/green] {name} [dim]{source.id}[/dim]")
    sys.stdout.write(source.id + "\n")
    return 0


# ── Price updates ────────────────────────────────────────

async def cmd_update(
    service: PriceService,
    item_id: str | None,
    source_id: str | None,
) -> int:
    """Update one source, all sources of one item, or everything."""
    if item_id is None:
        _err.print("[bold]Updating all active sources...[/bold]")
        summary = await service.update_all_prices()
        _err.print(
            f"[green]✓ {summary.succeeded} updated[/green], "
            f"[red]{summary.failed} failed[/red] of {summary.total}"
        )
        return 0 if summary.failed == 0 else 1

    item = service.store.get_item(item_id)
    if item is None:
        _err.print(f"[red]Unknown item: {item_id}[/red]")
        return 1
    source_ids = (
        [source_id] if source_id
        else [s.id for s in item.sources if s.active]
    )
    ok = True
    for sid in source_ids:
        result = await service.update_source_price(item_id, sid)
        src = item.find_source(sid)
        _print_result(result, src.name if src and src.name else sid)
        ok = ok and result.success
    return 0 if ok else 1


async def cmd_set_price(
    service: PriceService, item_id: str, source_id: str, raw_price: str,
) -> int:
    price = parse_price(raw_price)
    if price is None:
        return 1
    if not await service.manual_price_update(item_id, source_id, price):
        _err.print("[red]Could not record price (unknown id or out of range)[/red]")
        return 1
    _err.print(f"[green]✓ Recorded {price}[/green]")
    return 0


def cmd_extract(
    url: str | None,
    file_path: str | None,
    selectors: list[str],
) -> int:
    """Run the extraction pipeline on a URL or a saved HTML file."""
    if file_path:
        markup = Path(file_path).read_text(encoding="utf-8")
    elif url:
        fetcher = PageFetcher()
        try:
            response = fetcher.fetch(url)
        except FetchError as exc:
            _err.print(f"[red]Network error: {exc}[/red]")
            return 1
        finally:
            fetcher.close()
        if response.status != 200:
            _err.print(f"[red]HTTP {response.status}[/red]")
            return 1
        markup = response.body
    else:
        _err.print("[red]Give a URL or --file[/red]")
        return 1

    result = SelectorResolutionPipeline().extract(markup, selectors)
    _print_result(result, "price")
    json.dump(
        {
            "success": result.success,
            "price": str(result.price) if result.price is not None else None,
            "usedSelector": result.used_selector,
            "stage": result.stage.value,
            "extractedText": result.extracted_text,
            "error": result.error,
        },
        sys.stdout,
        ensure_ascii=False,
        indent=2,
    )
    sys.stdout.write("\n")
    return 0 if result.success else 1


# ── Analytics ────────────────────────────────────────────

def cmd_compare(service: PriceService, item_id: str) -> int:
    comparison = service.get_comparison(item_id)
    if comparison is None:
        _err.print("[yellow]No priced sources for this item.[/yellow]")
        return 1

    table = Table(title="Price Comparison", show_lines=True, title_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Source", style="magenta")
    table.add_column("Price", justify="right")
    table.add_column("URL", overflow="fold", style="dim")
    for idx, row in enumerate(comparison.sources, 1):
        style = "bold green" if idx == 1 else ""
        table.add_row(
            str(idx),
            row.name or row.source_id,
            f"[{style}]{_fmt_price(row.price, row.currency)}[/{style}]"
            if style else _fmt_price(row.price, row.currency),
            row.url,
        )
    Console().print(table)
    best = comparison.best
    _err.print(
        f"Best: [green]{best.name or best.source_id}[/green], "
        f"saves {comparison.savings:,.2f} {best.currency} vs the most expensive"
    )
    return 0


def cmd_history(
    service: PriceService,
    item_id: str,
    source_id: str | None,
    days: int,
) -> int:
    points = service.get_history(item_id, source_id, days)
    if not points:
        _err.print("[yellow]No price history in this window.[/yellow]")
        return 1
    table = Table(title=f"Price History ({days} days)", title_style="bold cyan")
    table.add_column("Time", style="dim")
    table.add_column("Source", style="magenta")
    table.add_column("Price", justify="right", style="green")
    for p in points:
        table.add_row(
            p.timestamp.strftime("%Y-%m-%d %H:%M"),
            p.source_id,
            f"{p.price:,.2f}",
        )
    Console().print(table)
    return 0


def cmd_stats(service: PriceService, item_id: str, source_id: str) -> int:
    stats = service.get_statistics(item_id, source_id)
    if stats is None:
        _err.print("[yellow]No price history for this source.[/yellow]")
        return 1
    table = Table(title="Price Statistics", title_style="bold cyan")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Current", f"{stats.current:,.2f}")
    table.add_row("Previous", f"{stats.previous:,.2f}")
    table.add_row("Average", f"{stats.average:,.2f}")
    table.add_row("Lowest", f"{stats.lowest:,.2f}")
    table.add_row("Highest", f"{stats.highest:,.2f}")
    table.add_row("Change", f"{stats.change_percent:+.2f}%")
    table.add_row("Trend", stats.trend.value)
    table.add_row("Points", str(stats.points))
    Console().print(table)
    return 0


def cmd_recommend(service: PriceService, item_id: str) -> int:
    rec = service.get_recommendation(item_id)
    if rec is None:
        _err.print("[yellow]No priced sources for this item.[/yellow]")
        return 1
    style = _DECISION_STYLE.get(rec.decision.value, "")
    Console().print(
        f"[{style}]{rec.decision.value.upper()}[/{style}] "
        f"({rec.confidence}% confidence) at {rec.best_source or '—'}\n"
        f"{rec.reason}"
    )
    return 0


# ── Alerts ───────────────────────────────────────────────

async def cmd_alert(
    service: PriceService,
    action: str,
    item_id: str,
    target: str,
    raw_price: str | None,
    condition: str,
) -> int:
    """Add, remove or toggle an alert (*target* is a source or alert id)."""
    if action == "add":
        price = parse_price(raw_price or "")
        if price is None:
            return 1
        alert = await service.add_alert(
            item_id, target, price, AlertCondition(condition),
        )
        if alert is None:
            _err.print("[red]Unknown item or source[/red]")
            return 1
        _err.print(
            f"[green]✓ Alert {alert.id}[/green]: "
            f"{condition} {price}"
        )
        return 0
    if action == "remove":
        removed = await service.remove_alert(item_id, target)
        if not removed:
            _err.print("[red]Alert not found[/red]")
            return 1
        _err.print("[green]✓ Alert removed[/green]")
        return 0
    state = await service.toggle_alert(item_id, target)
    if state is None:
        _err.print("[red]Alert not found[/red]")
        return 1
    _err.print(f"[green]✓ Alert {'activated' if state else 'deactivated'}[/green]")
    return 0


# ── Long-running / maintenance ───────────────────────────

async def run_watch(
    service: PriceService, interval: float | None,
) -> int:
    """Run the scheduler until interrupted."""
    scheduler = ExtractionScheduler(service, interval)
    _err.print(
        f"[bold]Watching prices every {scheduler.interval_seconds:.0f}s "
        "(Ctrl+C to stop)[/bold]"
    )
    scheduler.tick()
    scheduler.start()
    try:
        while True:
            await asyncio.sleep(3600)
    except asyncio.CancelledError:
        pass
    finally:
        scheduler.stop()
        await scheduler.wait_idle()
    return 0


async def run_health_check(store: DataStore) -> int:
    """Run a connectivity check on all active sources."""
    from src.services.health_checker import HealthChecker

    _err.print("[bold]Running source health check...[/bold]")
    results = await HealthChecker(store).check_all()

    table = Table(title="Source Health Check", show_lines=True, title_style="bold cyan")
    table.add_column("Item", style="bold")
    table.add_column("Source", style="dim")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]✅ OK[/green]"
        elif r.status == "slow":
            status = "[yellow]⚠️  SLOW[/yellow]"
        else:
            status = "[red]❌ DOWN[/red]"
            any_down = True
        latency = f"{r.latency_ms:.0f}ms" if r.latency_ms > 0 else "—"
        table.add_row(r.item_name, r.source_id, status, latency, r.message)

    Console().print(table)
    return 1 if any_down else 0


def cmd_export(store: DataStore, output: str | None) -> int:
    payload = store.export_data()
    if output:
        Path(output).write_text(payload, encoding="utf-8")
        _err.print(f"[dim]Exported → {output}[/dim]")
    else:
        sys.stdout.write(payload + "\n")
    return 0


def cmd_import(store: DataStore, path: str) -> int:
    try:
        store.import_data(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.error("Import failed: %s", exc, exc_info=True)
        _err.print(f"[red]Import failed: {exc}[/red]")
        return 1
    _err.print(f"[green]✓ Imported {path}[/green]")
    return 0
