"""CLI entry point for saved items and search."""

import asyncio
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import typer

from hfn_discovery.adapters.export import MarkdownExporter
from hfn_discovery.adapters.export.markdown_exporter import format_date
from hfn_discovery.adapters.providers import DemoSearchProvider, HttpSearchProvider
from hfn_discovery.adapters.storage import FileStorage
from hfn_discovery.config import Settings, get_settings
from hfn_discovery.core import (
    FailureKind,
    ItemType,
    SavedItem,
    SavedItemInput,
    SavedItemStore,
    SavedSearchStore,
    SearchProvider,
    SearchResult,
    SortOrder,
)
from hfn_discovery.logging_config import setup_logging
from hfn_discovery.use_cases import SearchEngine

DATE_FORMATS = ["%Y-%m-%d"]

TYPE_EMOJI = {
    ItemType.PROFILE: "👤",
    ItemType.JOB: "💼",
    ItemType.EVENT: "📅",
    ItemType.GROUP: "👥",
    ItemType.ARTICLE: "📄",
    ItemType.POST: "💬",
}

app = typer.Typer(help="Saved items and search for the Hindustan Founders Network.")
saved_app = typer.Typer(help="Manage saved items.")
searches_app = typer.Typer(help="Manage saved and recent searches.")
app.add_typer(saved_app, name="saved")
app.add_typer(searches_app, name="searches")


@app.callback()
def main(
    ctx: typer.Context,
    config: Path = typer.Option(Path("config.yaml"), "--config", help="Path to config.yaml"),
) -> None:
    """Load settings and configure logging for every command."""
    settings = get_settings(config)
    setup_logging(settings)
    ctx.obj = settings


def build_provider(settings: Settings) -> SearchProvider:
    """Create the configured search provider."""
    if settings.provider.kind == "http":
        return HttpSearchProvider(
            base_url=settings.provider.base_url,
            timeout=settings.search.provider_timeout,
            page_size=settings.search.page_size,
            token=settings.api_token,
        )
    return DemoSearchProvider(latency=settings.provider.demo_latency)


def open_saved_items(settings: Settings) -> SavedItemStore:
    store = SavedItemStore(FileStorage(settings.saved_items_path))
    loaded = store.init()
    if not loaded.ok:
        print(f"⚠️  Could not load saved items: {loaded.failure.message}")
        raise typer.Exit(code=1)
    return store


def open_saved_searches(settings: Settings) -> SavedSearchStore:
    store = SavedSearchStore(
        FileStorage(settings.saved_searches_path),
        recent_limit=settings.search.recent_limit,
    )
    loaded = store.init()
    if not loaded.ok:
        print(f"⚠️  Could not load saved searches: {loaded.failure.message}")
        raise typer.Exit(code=1)
    return store


def build_engine(settings: Settings) -> SearchEngine:
    return SearchEngine(
        provider=build_provider(settings),
        saved_items=open_saved_items(settings),
        saved_searches=open_saved_searches(settings),
        debounce_seconds=settings.search.debounce_seconds,
        provider_timeout=settings.search.provider_timeout,
        tag_match=settings.tag_match,
    )


def format_tags(tags: list[str]) -> str:
    if not tags:
        return ""
    shown = ", ".join(tags[:3])
    if len(tags) > 3:
        shown += f" +{len(tags) - 3} more"
    return shown


def print_saved_item(item: SavedItem) -> None:
    print(f"  {TYPE_EMOJI[item.type]} {item.title}  [{item.type.value}:{item.id}]")
    details = [f"Saved {format_date(item.saved_at)}"]
    if item.date:
        details.append(format_date(item.date))
    if item.tags:
        details.append(format_tags(item.tags))
    print(f"  └─ {' • '.join(details)}")


def print_result(result: SearchResult, is_saved: bool) -> None:
    marker = "★" if is_saved else "☆"
    print(f"  {marker} {TYPE_EMOJI[result.type]} {result.title}  [{result.type.value}:{result.id}]")
    if result.description:
        print(f"  └─ {result.description[:100]}")
    details = []
    if result.date:
        details.append(format_date(result.date))
    if result.tags:
        details.append(format_tags(result.tags))
    if details:
        print(f"  └─ {' • '.join(details)}")


def print_results(engine: SearchEngine) -> None:
    results = engine.results
    counts = engine.type_counts()
    tabs = [f"All ({len(results)})"] + [
        f"{item_type.value} ({count})" for item_type, count in counts.items() if count
    ]
    print(" | ".join(tabs))

    if not results:
        print("\n❌ No results. Try adjusting your search or filters.")
        return

    for result in results:
        print_result(result, engine.is_result_saved(result))


@saved_app.command("add")
def saved_add(
    ctx: typer.Context,
    item_type: ItemType = typer.Argument(..., help="Content type"),
    item_id: str = typer.Argument(..., help="Identifier, unique per type"),
    title: str = typer.Argument(..., help="Title shown in the list"),
    url: str = typer.Option("", "--url", help="Navigation target"),
    description: Optional[str] = typer.Option(None, "--description"),
    tag: Optional[list[str]] = typer.Option(None, "--tag", help="Tag (repeatable)"),
    content_date: Optional[datetime] = typer.Option(None, "--date", formats=DATE_FORMATS),
) -> None:
    """Save an item."""
    store = open_saved_items(ctx.obj)
    try:
        candidate = SavedItemInput(
            id=item_id,
            type=item_type,
            title=title,
            url=url,
            description=description,
            date=content_date,
            tags=list(tag or []),
        )
    except ValueError as e:
        print(f"⚠️  Invalid item: {e}")
        raise typer.Exit(code=1)

    outcome = store.save_item(candidate)
    if outcome.kind == FailureKind.ALREADY_SAVED:
        print(f"ℹ️  Already saved: {title}")
        return
    if not outcome.ok:
        print(f"⚠️  Could not save item: {outcome.failure.message}")
        raise typer.Exit(code=1)

    print(f"✓ Saved: {outcome.value.title}")


@saved_app.command("list")
def saved_list(
    ctx: typer.Context,
    sort: SortOrder = typer.Option(SortOrder.RECENT, "--sort"),
    item_type: Optional[ItemType] = typer.Option(None, "--type"),
    query: Optional[str] = typer.Option(None, "--query", "-q"),
) -> None:
    """List saved items."""
    store = open_saved_items(ctx.obj)
    items = store.list_items(sort_by=sort, item_type=item_type, query=query)

    if not items:
        print("No saved items found.")
        return

    print(f"🔖 Saved items: {len(items)}")
    for item in items:
        print_saved_item(item)


@saved_app.command("remove")
def saved_remove(
    ctx: typer.Context,
    item_id: str = typer.Argument(...),
    item_type: Optional[ItemType] = typer.Option(None, "--type", help="Disambiguate ids shared across types"),
) -> None:
    """Remove a saved item."""
    store = open_saved_items(ctx.obj)
    if item_type is not None:
        removed = store.remove(item_type, item_id)
    else:
        removed = store.remove_item(item_id)

    if not removed.ok:
        print(f"⚠️  Could not remove item: {removed.failure.message}")
        raise typer.Exit(code=1)

    if removed.value:
        print(f"✓ Removed: {item_id}")
    else:
        print(f"Nothing removed for id {item_id}")


@saved_app.command("clear")
def saved_clear(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Remove every saved item."""
    if not yes:
        typer.confirm("Remove all saved items?", abort=True)

    store = open_saved_items(ctx.obj)
    outcome = store.clear_all_items()
    if not outcome.ok:
        print(f"⚠️  Could not clear saved items: {outcome.failure.message}")
        raise typer.Exit(code=1)

    print(f"✓ Cleared {outcome.value} saved items")


@saved_app.command("counts")
def saved_counts(ctx: typer.Context) -> None:
    """Show how many items are saved per type."""
    store = open_saved_items(ctx.obj)
    for item_type, count in store.get_item_type_counts().items():
        print(f"  {TYPE_EMOJI[item_type]} {item_type.value}: {count}")
    print(f"Total: {len(store)}")


@saved_app.command("export")
def saved_export(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(None, "--output", "-o"),
    sort: SortOrder = typer.Option(SortOrder.RECENT, "--sort"),
) -> None:
    """Export saved items as markdown."""
    store = open_saved_items(ctx.obj)
    document = MarkdownExporter().render(store.list_items(sort_by=sort), date.today())

    if output is None:
        print(document)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(document, encoding="utf-8")
    print(f"✓ Exported to {output}")


@app.command("search")
def search(
    ctx: typer.Context,
    query: str = typer.Argument("", help="Free text"),
    item_type: Optional[list[ItemType]] = typer.Option(None, "--type", help="Type facet (repeatable)"),
    tag: Optional[list[str]] = typer.Option(None, "--tag", help="Tag facet (repeatable)"),
    date_from: Optional[datetime] = typer.Option(None, "--from", formats=DATE_FORMATS),
    date_to: Optional[datetime] = typer.Option(None, "--to", formats=DATE_FORMATS),
    save: bool = typer.Option(False, "--save", help="Save this search"),
    save_results: bool = typer.Option(False, "--save-results", help="Save every result"),
) -> None:
    """Search content."""
    asyncio.run(
        async_search(ctx.obj, query, item_type, tag, date_from, date_to, save, save_results)
    )


async def async_search(
    settings: Settings,
    query: str,
    item_types: Optional[list[ItemType]],
    tags: Optional[list[str]],
    date_from: Optional[datetime],
    date_to: Optional[datetime],
    save: bool,
    save_results: bool,
) -> None:
    """Async implementation of the search command."""
    engine = build_engine(settings)

    patch: dict = {}
    if item_types:
        patch["types"] = item_types
    if tags:
        patch["tags"] = tags
    if date_from or date_to:
        patch["date"] = {
            "from": date_from,
            "to": date_to.replace(hour=23, minute=59, second=59) if date_to else None,
        }

    engine.set_query(query)
    if patch:
        engine.set_filters(patch)

    outcome = await engine.execute()
    if not outcome.ok:
        print(f"⚠️  Search failed: {outcome.failure.message}")
        raise typer.Exit(code=1)

    if not query.strip() and engine.filters.is_empty:
        print("Enter a query or choose a filter to search.")
        return

    print_results(engine)

    if save_results:
        saved_count = 0
        for result in engine.results:
            if engine.save_result(result).ok:
                saved_count += 1
        print(f"\n✓ Saved {saved_count} new items")

    if save:
        saved = engine.save_search()
        if saved.kind == FailureKind.EMPTY_QUERY:
            print("\n⚠️  Cannot save empty search. Please enter a search query first.")
        elif not saved.ok:
            print(f"\n⚠️  Could not save search: {saved.failure.message}")
        else:
            print(f"\n✓ Search saved: {saved.value}")


@searches_app.command("list")
def searches_list(ctx: typer.Context) -> None:
    """List saved searches."""
    store = open_saved_searches(ctx.obj)
    searches = store.list_searches()
    if not searches:
        print("No saved searches.")
        return

    for saved_search in searches:
        active = saved_search.filters.active_count
        suffix = f" ({active} filters)" if active else ""
        print(f"  • {saved_search.id}  \"{saved_search.query}\"{suffix}  {format_date(saved_search.created_at)}")


@searches_app.command("delete")
def searches_delete(ctx: typer.Context, search_id: str = typer.Argument(...)) -> None:
    """Delete a saved search."""
    store = open_saved_searches(ctx.obj)
    if store.delete(search_id):
        print(f"✓ Deleted search {search_id}")
    else:
        print(f"No saved search with id {search_id}")
        raise typer.Exit(code=1)


@searches_app.command("run")
def searches_run(ctx: typer.Context, search_id: str = typer.Argument(...)) -> None:
    """Run a saved search."""
    asyncio.run(async_run_saved(ctx.obj, search_id))


async def async_run_saved(settings: Settings, search_id: str) -> None:
    engine = build_engine(settings)
    if not engine.apply_saved_search(search_id):
        print(f"No saved search with id {search_id}")
        raise typer.Exit(code=1)

    await engine.wait_idle()
    if engine.last_failure:
        print(f"⚠️  Search failed: {engine.last_failure}")
        raise typer.Exit(code=1)

    print(f"🔍 \"{engine.query}\"")
    print_results(engine)


@searches_app.command("recent")
def searches_recent(ctx: typer.Context) -> None:
    """Show recent queries."""
    store = open_saved_searches(ctx.obj)
    recent = store.recent()
    if not recent:
        print("No recent searches.")
        return
    for query in recent:
        print(f"  • {query}")


@searches_app.command("clear-recent")
def searches_clear_recent(ctx: typer.Context) -> None:
    """Forget recent queries."""
    store = open_saved_searches(ctx.obj)
    if not store.clear_recent():
        print("⚠️  Could not clear recent searches")
        raise typer.Exit(code=1)
    print("✓ Recent searches cleared")


if __name__ == "__main__":
    app()
