"""Top-level CLI entrypoint for CaptureBot.

Provides:
    capturebot run <provider> [--source ...] [--article k=v ...] [--option k=v ...]
    capturebot catalog list [--catalog <path>]
"""
import asyncio
import json
import logging
import sys
from typing import Dict, Optional, Tuple

import click

from .catalog import SiteCatalog
from .exceptions import CaptureBotError


def _pairs(values: Tuple[str, ...]) -> Dict[str, str]:
    """Turn ``("k=v", ...)`` option values into a dict."""
    result: Dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {item!r}")
        result[key] = value
    return result


def _catalog_path(path: Optional[str]) -> str:
    if path:
        return path
    from .conf import CAPTUREBOT_CATALOG

    return CAPTUREBOT_CATALOG


@click.group()
@click.option("--debug", is_flag=True, default=False, help="Enable debug logging.")
def cli(debug: bool) -> None:
    """CaptureBot command-line interface."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("provider")
@click.option("--source", "source_id", default=None, help="Source id (the provider may force one).")
@click.option("--catalog", "catalog_path", type=click.Path(dir_okay=False), default=None,
              help="Site Catalog file (YAML or JSON).")
@click.option("--article", multiple=True, help="Article metadata as key=value (e.g. doi=10.1/x).")
@click.option("--option", "options", multiple=True, help="Provider option as key=value.")
@click.option("--param", "params", multiple=True, help="Source parameter as key=value.")
@click.option("--timeout", type=float, default=None, help="Seconds before the run is failed.")
@click.option("--headful", is_flag=True, default=False, help="Show the browser window.")
def run(
    provider: str,
    source_id: Optional[str],
    catalog_path: Optional[str],
    article: Tuple[str, ...],
    options: Tuple[str, ...],
    params: Tuple[str, ...],
    timeout: Optional[float],
    headful: bool,
) -> None:
    """Capture content for an article through PROVIDER.

    Example:

        capturebot run mylib --source jstor --article doi=10.2307/123456
    """
    from .browser import BrowserConfig, PlaywrightTabPlatform
    from .conf import (
        CAPTUREBOT_BROWSER,
        CAPTUREBOT_HEADLESS,
        CAPTUREBOT_NAVIGATION_TIMEOUT,
        CAPTUREBOT_TIMEOUT,
    )
    from .runner import MessageType, capture

    config = BrowserConfig(
        browser_type=CAPTUREBOT_BROWSER,
        headless=CAPTUREBOT_HEADLESS and not headful,
        navigation_timeout=CAPTUREBOT_NAVIGATION_TIMEOUT,
    )

    async def _run():
        catalog = await SiteCatalog.load(_catalog_path(catalog_path))
        async with PlaywrightTabPlatform(config) as platform:
            return await capture(
                catalog,
                platform,
                provider,
                source_id,
                provider_options=_pairs(options),
                source_params=_pairs(params),
                article_info=_pairs(article),
                timeout=timeout if timeout is not None else CAPTUREBOT_TIMEOUT,
                on_status=lambda message: click.secho(message.message, fg="cyan", err=True),
            )

    try:
        outcome = asyncio.run(_run())
    except CaptureBotError as exc:
        click.secho(f"Error: {exc}", fg="red", err=True)
        sys.exit(1)

    if outcome is None:
        click.secho("Run abandoned.", fg="yellow", err=True)
        sys.exit(2)
    click.echo(json.dumps(outcome.model_dump(mode="json"), indent=2))
    if outcome.type != MessageType.SUCCESS:
        sys.exit(1)


@cli.group()
def catalog() -> None:
    """Inspect the Site Catalog."""


@catalog.command(name="list")
@click.option("--catalog", "catalog_path", type=click.Path(dir_okay=False), default=None,
              help="Site Catalog file (YAML or JSON).")
def list_catalog(catalog_path: Optional[str]) -> None:
    """List provider and source ids."""
    try:
        site_catalog = asyncio.run(SiteCatalog.load(_catalog_path(catalog_path)))
    except CaptureBotError as exc:
        click.secho(f"Error: {exc}", fg="red", err=True)
        sys.exit(1)
    click.echo("Providers:")
    for provider_id in site_catalog.list_providers():
        provider = site_catalog.provider(provider_id)
        forced = f" (source: {provider.default_source})" if provider.default_source else ""
        click.echo(f"  {provider_id}{forced}")
    click.echo("Sources:")
    for source_id in site_catalog.list_sources():
        click.echo(f"  {source_id}")


if __name__ == "__main__":
    cli()
