"""
Playwright Action Executor: performs catalog actions inside one page.

Action verbs (``action`` field):

    navigate    go to ``url``                               → True
    click       click ``selector``                          → True
    fill        type ``value`` (or user data ``key``)       → True
    select      choose ``value`` in a ``<select>``          → True
    press       press ``key`` (optionally on ``selector``)  → True
    wait        wait for ``selector``                       → True
    exists      is ``selector`` on the page?                → bool
    extract     text (or ``attribute``) of ``selector``     → str
    evaluate    run ``script`` in the page                  → raw value
    abandon_if  stop the run quietly when ``selector`` is present
    activate    bring the tab to the foreground

``value`` templates are interpolated against the run's user data, so a
catalog can write ``value: "{options.username}"``.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..catalog.models import Action
from ..exceptions import ActionError
from ..runner.results import Continuation
from ..runner.urls import interpolate
from .abstract import ActionExecutor
from .config import BrowserConfig


class PlaywrightActionExecutor(ActionExecutor):
    """Executes actions against a Playwright ``Page``.

    Args:
        page: The Playwright page acting as the run's tab.
        user_data: Values for ``{key}`` templates in action values.
        config: Timeouts and browser settings.
        tab_id: Id of the tab, used in log records.
    """

    def __init__(
        self,
        page: Any,
        user_data: Optional[Mapping[str, Any]] = None,
        config: Optional[BrowserConfig] = None,
        tab_id: Optional[int] = None,
    ) -> None:
        self._page = page
        self.user_data: Mapping[str, Any] = user_data or {}
        self.config = config or BrowserConfig()
        self.tab_id = tab_id
        self.logger = logging.getLogger(__name__)

    async def element_exists(self, selector: str) -> bool:
        locator = self._page.locator(self._resolve_selector(selector))
        return await locator.count() > 0

    async def run_action(self, action: Action) -> Any:
        """Dispatch *action* to the handler of its verb.

        Raises:
            ActionError: For unknown verbs or actions missing a required field.
        """
        action_type = action.action or ("navigate" if action.url else None)
        self.logger.debug("Tab %s: running %s", self.tab_id, action_type)

        if action_type == "navigate":
            return await self._action_navigate(action)
        elif action_type == "click":
            return await self._action_click(action)
        elif action_type == "fill":
            return await self._action_fill(action)
        elif action_type == "select":
            return await self._action_select(action)
        elif action_type == "press":
            return await self._action_press(action)
        elif action_type == "wait":
            return await self._action_wait(action)
        elif action_type == "exists":
            return await self.element_exists(self._selector(action))
        elif action_type == "extract":
            return await self._action_extract(action)
        elif action_type == "evaluate":
            return await self._action_evaluate(action)
        elif action_type == "abandon_if":
            return await self._action_abandon_if(action)
        elif action_type == "activate":
            return Continuation(_activate_tab, name="activate")
        raise ActionError(f"Unknown action type: {action_type}", action=action_type)

    # ── Individual action handlers ───────────────────────────────

    async def _action_navigate(self, action: Action) -> bool:
        if not action.url:
            raise ActionError("navigate action requires an url")
        # only wait for the response; the page load event drives the next step
        await self._page.goto(
            action.url,
            wait_until="commit",
            timeout=self.config.navigation_timeout * 1000,
        )
        return True

    async def _action_click(self, action: Action) -> bool:
        locator = self._page.locator(self._resolve_selector(self._selector(action)))
        await locator.click(timeout=self._timeout(action))
        return True

    async def _action_fill(self, action: Action) -> bool:
        locator = self._page.locator(self._resolve_selector(self._selector(action)))
        await locator.fill(self._user_value(action), timeout=self._timeout(action))
        return True

    async def _action_select(self, action: Action) -> bool:
        locator = self._page.locator(self._resolve_selector(self._selector(action)))
        await locator.select_option(self._user_value(action), timeout=self._timeout(action))
        return True

    async def _action_press(self, action: Action) -> bool:
        key = action.get("key")
        if not key:
            raise ActionError("press action requires a key")
        selector = action.get("selector")
        if selector:
            locator = self._page.locator(self._resolve_selector(selector))
            await locator.press(key, timeout=self._timeout(action))
        else:
            await self._page.keyboard.press(key)
        return True

    async def _action_wait(self, action: Action) -> bool:
        await self._page.wait_for_selector(
            self._resolve_selector(self._selector(action)),
            timeout=self._timeout(action),
            state=action.get("state", "visible"),
        )
        return True

    async def _action_extract(self, action: Action) -> str:
        locator = self._page.locator(self._resolve_selector(self._selector(action)))
        if await locator.count() == 0:
            return ""
        attribute = action.get("attribute")
        if attribute:
            value = await locator.first.get_attribute(attribute)
        else:
            value = await locator.first.inner_text()
        return (value or "").strip()

    async def _action_evaluate(self, action: Action) -> Any:
        script = action.get("script")
        if not script:
            raise ActionError("evaluate action requires a script")
        args = action.get("args")
        if args is None:
            return await self._page.evaluate(script)
        return await self._page.evaluate(script, args)

    async def _action_abandon_if(self, action: Action) -> Any:
        if await self.element_exists(self._selector(action)):
            self.logger.info("Tab %s: %s present, giving up", self.tab_id, action.get("selector"))
            return Continuation(lambda controller: False, name="abandon")
        return True

    # ── Helpers ──────────────────────────────────────────────────

    def _selector(self, action: Action) -> str:
        selector = action.get("selector")
        if not selector:
            raise ActionError(f"{action.action} action requires a selector")
        return selector

    def _timeout(self, action: Action) -> float:
        return float(action.get("timeout", self.config.action_timeout)) * 1000

    def _user_value(self, action: Action) -> str:
        key = action.get("key")
        if key:
            if key not in self.user_data or self.user_data[key] is None:
                raise ActionError(f"Missing user data: {key}", key=key)
            return str(self.user_data[key])
        return interpolate(str(action.get("value", "")), self.user_data)

    def _resolve_selector(self, selector: str) -> str:
        """Prefix XPath selectors (``/...`` or ``./...``) for Playwright."""
        if selector.startswith(("/", "./")):
            return f"xpath={selector}"
        return selector


async def _activate_tab(controller: Any) -> bool:
    await controller.activate_tab()
    return True
