"""Playwright-based Tab Platform.

Pages of a single Playwright browser context act as tabs. Each page gets an
integer id; its ``load`` events are delivered to navigation listeners as
``(tab_id, {"status": "complete"})``. Alarms are one-shot timers on the
running event loop.

The ``playwright`` package is imported lazily inside :meth:`start` so the
module can be loaded even when Playwright is not installed.
"""
import asyncio
import inspect
import itertools
import logging
from typing import Any, Dict, List, Mapping, Optional

from .abstract import AlarmCallback, NavigationListener, TabPlatform
from .config import BrowserConfig
from .executor import PlaywrightActionExecutor


class PlaywrightTabPlatform(TabPlatform):
    """Tab Platform backed by Playwright's async API.

    Args:
        config: Browser configuration. Defaults to ``BrowserConfig()``
            (headless Chromium).
    """

    def __init__(self, config: Optional[BrowserConfig] = None) -> None:
        self.config = config or BrowserConfig()
        self.logger = logging.getLogger(__name__)
        self._playwright: Any = None
        self._browser: Any = None
        self._context: Any = None
        self._pages: Dict[int, Any] = {}
        self._listeners: List[NavigationListener] = []
        self._alarms: Dict[str, asyncio.TimerHandle] = {}
        self._ids = itertools.count(1)
        self._tasks: set = set()

    # ── Lifecycle ────────────────────────────────────────────────

    async def start(self) -> None:
        """Launch the browser and create the shared context."""
        from playwright.async_api import async_playwright

        self._playwright = await async_playwright().start()
        launcher = getattr(self._playwright, self.config.browser_type)
        self._browser = await launcher.launch(
            headless=self.config.headless,
            slow_mo=self.config.slow_mo,
        )
        self._context = await self._browser.new_context(**self.config.context_kwargs())
        self._context.set_default_timeout(self.config.action_timeout * 1000)
        self.logger.info(
            "PlaywrightTabPlatform started: browser=%s headless=%s",
            self.config.browser_type,
            self.config.headless,
        )

    async def quit(self) -> None:
        """Close browser and release resources."""
        for name in list(self._alarms):
            self.clear_alarm(name)
        if self._context:
            await self._context.close()
            self._context = None
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
        self._pages.clear()
        self.logger.info("PlaywrightTabPlatform closed.")

    async def __aenter__(self) -> "PlaywrightTabPlatform":
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.quit()

    # ── Tabs ─────────────────────────────────────────────────────

    async def create_tab(self, url: str, active: bool = False) -> int:
        if self._context is None:
            raise RuntimeError("PlaywrightTabPlatform is not started")
        page = await self._context.new_page()
        tab_id = next(self._ids)
        self._pages[tab_id] = page
        page.on("load", lambda *_: self._spawn(self._notify(tab_id, {"status": "complete"})))
        page.on("close", lambda *_: self._pages.pop(tab_id, None))
        if active:
            await page.bring_to_front()
        # navigation runs in the background: the caller subscribes before
        # the first load event can be delivered
        self._spawn(self._navigate(tab_id, page, url))
        self.logger.debug("Tab %s opening %s", tab_id, url)
        return tab_id

    async def close_tab(self, tab_id: int) -> None:
        page = self._pages.pop(tab_id, None)
        if page is not None:
            await page.close()
            self.logger.debug("Tab %s closed", tab_id)

    async def activate_tab(self, tab_id: int) -> None:
        page = self._pages.get(tab_id)
        if page is not None:
            await page.bring_to_front()

    def page(self, tab_id: int) -> Any:
        """Return the Playwright page behind *tab_id*."""
        try:
            return self._pages[tab_id]
        except KeyError:
            raise KeyError(f"Unknown tab: {tab_id}") from None

    # ── Events ───────────────────────────────────────────────────

    def add_navigation_listener(self, listener: NavigationListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_navigation_listener(self, listener: NavigationListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def _notify(self, tab_id: int, change_info: Mapping[str, Any]) -> None:
        for listener in list(self._listeners):
            outcome = listener(tab_id, change_info)
            if inspect.isawaitable(outcome):
                await outcome

    async def _navigate(self, tab_id: int, page: Any, url: str) -> None:
        try:
            await page.goto(url, timeout=self.config.navigation_timeout * 1000)
        except Exception as exc:  # pylint: disable=W0703
            # the run's watchdog alarm reports stalled tabs
            self.logger.error("Tab %s failed to load %s: %s", tab_id, url, exc)

    def _spawn(self, coro: Any) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    # ── Alarms ───────────────────────────────────────────────────

    def create_alarm(self, name: str, delay: float, callback: AlarmCallback) -> None:
        self.clear_alarm(name)
        loop = asyncio.get_running_loop()

        def _fire() -> None:
            self._alarms.pop(name, None)
            outcome = callback(name)
            if inspect.isawaitable(outcome):
                self._spawn(outcome)

        self._alarms[name] = loop.call_later(delay, _fire)

    def clear_alarm(self, name: str) -> bool:
        handle = self._alarms.pop(name, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    # ── Execution ────────────────────────────────────────────────

    def executor(
        self, tab_id: int, user_data: Optional[Mapping[str, Any]] = None
    ) -> PlaywrightActionExecutor:
        return PlaywrightActionExecutor(
            self.page(tab_id),
            user_data=user_data,
            config=self.config,
            tab_id=tab_id,
        )
