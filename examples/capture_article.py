"""Capture a citation from Python instead of the command line.

    python examples/capture_article.py 10.2307/1234567
"""
import asyncio
import logging
import sys
from pathlib import Path

from capturebot.browser import BrowserConfig, PlaywrightTabPlatform
from capturebot.catalog import SiteCatalog
from capturebot.runner import capture


CATALOG = Path(__file__).parent.joinpath("catalog.yaml")


async def main(doi: str):
    catalog = await SiteCatalog.load(CATALOG)
    config = BrowserConfig(headless=False, slow_mo=100)
    async with PlaywrightTabPlatform(config) as platform:
        outcome = await capture(
            catalog,
            platform,
            "mylib",
            "jstor",
            provider_options={"username": "alice", "password": "secret"},
            article_info={"doi": doi},
            timeout=120,
            on_status=lambda message: print(f"… {message.message}"),
        )
    if outcome is None:
        print("Run abandoned")
    else:
        print(outcome.model_dump_json(indent=2))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "10.2307/1234567"))
