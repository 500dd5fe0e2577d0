"""Runtime settings for the capturebot command line."""
from navconfig import config, BASE_DIR


## Site Catalog
CAPTUREBOT_CATALOG = config.get(
    "CAPTUREBOT_CATALOG",
    fallback=str(BASE_DIR.joinpath("catalog.yaml"))
)

## Watchdog (seconds before a run is failed)
CAPTUREBOT_TIMEOUT = int(config.get("CAPTUREBOT_TIMEOUT", fallback=120))

## Browser
CAPTUREBOT_BROWSER = config.get("CAPTUREBOT_BROWSER", fallback="chromium")
CAPTUREBOT_HEADLESS = config.getboolean("CAPTUREBOT_HEADLESS", fallback=True)
CAPTUREBOT_NAVIGATION_TIMEOUT = int(
    config.get("CAPTUREBOT_NAVIGATION_TIMEOUT", fallback=30)
)
