from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from macrocal.aggregator import EventAggregator, summarize
from macrocal.config import get_settings
from macrocal.core.logger import setup_logging, get_logger
from macrocal.core.models import MarketEvent
from macrocal.ingestion.newsapi import NewsApiClient
from macrocal.views import group_by_month, upcoming

log = get_logger("macrocal")
cli_app = typer.Typer(help="Economic calendar mined from financial news (NewsAPI).")
console = Console()


def _events_table(events: list[MarketEvent], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Date")
    table.add_column("Event")
    table.add_column("Impact")
    table.add_column("Confidence")
    table.add_column("Sources")
    for e in events:
        table.add_row(
            e.display_date,
            f"{e.icon} {e.title}",
            e.impact,
            e.confidence,
            ", ".join(e.sources),
        )
    return table


@cli_app.command()
def fetch(
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Show only the next N events"),
    by_month: bool = typer.Option(False, "--by-month", help="One table per month"),
):
    """Run one aggregation pass and print the calendar."""
    settings = get_settings()
    setup_logging(settings.log_level)

    try:
        settings.validate_news_api_credentials()
    except ValueError as e:
        log.error(f"Configuration error: {e}")
        raise typer.Exit(code=1)

    with NewsApiClient(
        api_key=settings.news_api_key,
        base_url=settings.news_api_base_url,
        language=settings.news_language,
        page_size=settings.news_page_size,
        lookback_days=settings.news_lookback_days,
        timeout=settings.request_timeout,
    ) as client:
        aggregator = EventAggregator(client, trusted_sources=settings.trusted_sources_list)
        events = aggregator.aggregate(settings.search_queries_list)

    if limit is not None:
        events = upcoming(events, count=limit)

    if not events:
        console.print("No upcoming events found in recent news.")
        return

    if by_month:
        for month, month_events in group_by_month(events).items():
            console.print(_events_table(month_events, month))
    else:
        console.print(_events_table(events, "Upcoming economic events"))

    breakdown = summarize(events)
    console.print(
        f"High: {breakdown['High']}  Medium: {breakdown['Medium']}  Low: {breakdown['Low']}  "
        f"Verified: {breakdown['Verified']}  Estimated: {breakdown['Estimated']}"
    )


@cli_app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Bind port"),
):
    """Serve GET /calendar over HTTP."""
    import uvicorn

    from macrocal.api import create_app

    settings = get_settings()
    setup_logging(settings.log_level)
    log.info(f"Serving calendar API on {host}:{port}")
    uvicorn.run(create_app(settings=settings), host=host, port=port, log_level="info")


@cli_app.command()
def validate():
    """Validate configuration without fetching anything."""
    setup_logging("INFO")

    try:
        settings = get_settings()
        log.info("Configuration validation passed!")
        log.info(f"  Queries: {len(settings.search_queries_list)}")
        log.info(f"  Trusted sources: {settings.trusted_sources_list}")
        log.info(f"  Lookback: {settings.news_lookback_days} days, page size {settings.news_page_size}")
        log.info(f"  Cache TTL: {settings.cache_ttl_hours}h")

        if settings.news_api_key:
            log.info("  NewsAPI: key configured")
        else:
            log.warning("  NewsAPI: NEWS_API_KEY NOT configured")
            raise typer.Exit(code=1)

    except typer.Exit:
        raise
    except Exception as e:
        log.error(f"Configuration validation failed: {e}")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    cli_app()
