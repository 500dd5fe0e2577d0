"""Test configuration helpers for the capturebot codebase."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pytest

# Ensure the project root is importable as ``capturebot`` when running tests
# without installing the package.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from capturebot.browser.abstract import ActionExecutor, TabPlatform  # noqa: E402
from capturebot.catalog import SiteCatalog  # noqa: E402
from capturebot.runner import RunController  # noqa: E402


class FakeExecutor(ActionExecutor):
    """Scripted executor.

    Each action answers with its own ``result`` field (``True`` when
    absent) or raises ``RuntimeError(error)`` when it carries ``error``.
    """

    def __init__(self, logged_in: Any = False) -> None:
        self.logged_in = logged_in
        self.actions: List[Any] = []
        self.probes: List[str] = []

    async def run_action(self, action):
        self.actions.append(action)
        error = action.get("error")
        if error:
            raise RuntimeError(error)
        extra = action.model_extra or {}
        return extra["result"] if "result" in extra else True

    async def element_exists(self, selector: str) -> bool:
        self.probes.append(selector)
        return self.logged_in

    @property
    def verbs(self) -> List[Optional[str]]:
        return [action.action for action in self.actions]


class FakeTabPlatform(TabPlatform):
    """In-memory tab platform recording every call."""

    def __init__(self, executor: Optional[FakeExecutor] = None) -> None:
        self.executor_instance = executor or FakeExecutor()
        self.created: List[Dict[str, Any]] = []
        self.listeners: List[Any] = []
        self.removed: int = 0
        self.closed: List[int] = []
        self.activated: List[int] = []
        self.cleared: List[str] = []
        self.alarms: Dict[str, Any] = {}
        self.user_data: Optional[Mapping[str, Any]] = None
        self._next_id = 100

    async def create_tab(self, url: str, active: bool = False) -> int:
        self._next_id += 1
        self.created.append({"url": url, "active": active, "tab_id": self._next_id})
        return self._next_id

    async def close_tab(self, tab_id: int) -> None:
        self.closed.append(tab_id)

    async def activate_tab(self, tab_id: int) -> None:
        self.activated.append(tab_id)

    def add_navigation_listener(self, listener) -> None:
        self.listeners.append(listener)

    def remove_navigation_listener(self, listener) -> None:
        self.removed += 1
        if listener in self.listeners:
            self.listeners.remove(listener)

    def create_alarm(self, name: str, delay: float, callback) -> None:
        self.alarms[name] = (delay, callback)

    def clear_alarm(self, name: str) -> bool:
        self.cleared.append(name)
        return self.alarms.pop(name, None) is not None

    def executor(self, tab_id: int, user_data=None) -> FakeExecutor:
        self.user_data = user_data
        return self.executor_instance

    async def emit(self, tab_id: int, status: str = "complete") -> None:
        """Deliver a navigation event to every listener."""
        for listener in list(self.listeners):
            await listener(tab_id, {"status": status})

    async def fire_alarm(self, name: str) -> None:
        _, callback = self.alarms.pop(name)
        callback(name)


def base_catalog_data() -> Dict[str, Any]:
    return {
        "sources": {
            "jstor": {
                "start": "https://www.jstor.org/action/doBasicSearch?Query={doi}&so={source.sort}",
                "loggedIn": ".logged-in",
                "defaultParams": {"sort": "rel", "lang": "en"},
                "login": [
                    [{"action": "click", "selector": "#login"}],
                    [
                        {"action": "fill", "selector": "#user", "value": "{options.username}"},
                        {"action": "click", "selector": "#submit"},
                    ],
                ],
                "search": [
                    [
                        {"message": "Searching for article"},
                        {"action": "navigate", "url": "https://www.jstor.org/stable/{doi}?lang={source.lang}"},
                    ],
                    [{"action": "extract", "selector": ".citation", "result": "Citation text"}],
                ],
            },
            "openlib": {
                "start": "https://open.example.org/?q={title}",
                "search": [
                    [{"action": "extract", "selector": ".cite", "result": "Open citation"}],
                ],
            },
        },
        "providers": {
            "mylib": {
                "name": "My Library",
                "params": {"jstor": {"lang": "de"}},
            },
            "proxylib": {
                "name": "Proxy Library",
                "bibName": "PL",
                "defaultSource": "openlib",
                "start": "https://proxy.example.org/login?next={title}",
            },
        },
    }


@pytest.fixture
def catalog_data() -> Dict[str, Any]:
    return base_catalog_data()


@pytest.fixture
def catalog(catalog_data) -> SiteCatalog:
    return SiteCatalog.from_dict(catalog_data)


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def platform(executor) -> FakeTabPlatform:
    return FakeTabPlatform(executor)


@pytest.fixture
def messages() -> List[Any]:
    return []


@pytest.fixture
def make_controller(catalog, platform, messages):
    """Factory building a RunController wired to the fakes."""

    def _make(
        provider_id: str = "mylib",
        source_id: Optional[str] = "jstor",
        provider_options: Optional[Dict[str, Any]] = None,
        source_params: Optional[Dict[str, Any]] = None,
        article_info: Optional[Dict[str, Any]] = None,
        site_catalog: Optional[SiteCatalog] = None,
    ) -> RunController:
        return RunController(
            provider_id,
            source_id,
            provider_options if provider_options is not None else {"options.username": "alice"},
            source_params,
            article_info if article_info is not None else {"doi": "10.2307/123", "title": "On Birds"},
            messages.append,
            catalog=site_catalog or catalog,
            platform=platform,
        )

    return _make
