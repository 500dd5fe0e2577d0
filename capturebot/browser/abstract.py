"""Abstract collaborators of a capture run.

Defines the two interfaces a ``RunController`` drives:

- ``ActionExecutor`` performs one declarative action inside one tab.
- ``TabPlatform`` owns tab lifecycle, navigation events and alarms.

Concrete backends (Playwright) implement both; tests use in-memory fakes.
"""
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from ..catalog.models import Action


NavigationListener = Callable[[int, Mapping[str, Any]], Union[None, Awaitable[None]]]
AlarmCallback = Callable[[str], Union[None, Awaitable[None]]]


class ActionExecutor(ABC):
    """Runs actions inside a single tab.

    ``run_action`` answers with a raw value: ``bool`` for checks, ``str``
    for extracted content, a ``Continuation`` for decisions that need the
    controller, or whatever a script evaluation produced. Any exception it
    raises fails the run.
    """

    @abstractmethod
    async def run_action(self, action: Action) -> Any:
        """Execute *action* in the tab.

        Args:
            action: The action to perform (URL already interpolated).

        Returns:
            The raw result of the action.
        """

    @abstractmethod
    async def element_exists(self, selector: str) -> bool:
        """Return whether *selector* matches an element in the tab.

        Args:
            selector: CSS selector (or XPath starting with ``/``).
        """


class TabPlatform(ABC):
    """Tab lifecycle primitives.

    Method groups:
        - **Tabs**: create_tab, close_tab, activate_tab
        - **Events**: add_navigation_listener, remove_navigation_listener
        - **Alarms**: create_alarm, clear_alarm
        - **Execution**: executor
    """

    # ── Tabs ─────────────────────────────────────────────────────

    @abstractmethod
    async def create_tab(self, url: str, active: bool = False) -> int:
        """Open a tab loading *url* and return its id.

        Navigation events for the new tab must not be delivered before
        the caller had a chance to register its listener.
        """

    @abstractmethod
    async def close_tab(self, tab_id: int) -> None:
        """Close tab *tab_id*; closing an unknown tab is a no-op."""

    @abstractmethod
    async def activate_tab(self, tab_id: int) -> None:
        """Bring tab *tab_id* to the foreground."""

    # ── Events ───────────────────────────────────────────────────

    @abstractmethod
    def add_navigation_listener(self, listener: NavigationListener) -> None:
        """Subscribe *listener* to ``(tab_id, change_info)`` events.

        ``change_info["status"] == "complete"`` marks a finished page load.
        """

    @abstractmethod
    def remove_navigation_listener(self, listener: NavigationListener) -> None:
        """Unsubscribe *listener*; removing an absent listener is a no-op."""

    # ── Alarms ───────────────────────────────────────────────────

    @abstractmethod
    def create_alarm(self, name: str, delay: float, callback: AlarmCallback) -> None:
        """Call *callback(name)* once after *delay* seconds.

        Creating an alarm with an existing name replaces it.
        """

    @abstractmethod
    def clear_alarm(self, name: str) -> bool:
        """Cancel alarm *name*.

        Returns:
            ``True`` if a pending alarm was cancelled.
        """

    # ── Execution ────────────────────────────────────────────────

    @abstractmethod
    def executor(self, tab_id: int, user_data: Optional[Mapping[str, Any]] = None) -> ActionExecutor:
        """Return an ``ActionExecutor`` bound to *tab_id*.

        Args:
            tab_id: The tab actions will run in.
            user_data: Values available to actions (library name,
                credentials) through ``{key}`` templates.
        """
