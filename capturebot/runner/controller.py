"""
RunController: drives one scripted capture run inside one browser tab.

A run walks two phases, ``login`` then ``search``. Each phase is a sequence
of action lists; ``step`` indexes the list to execute next. Every finished
page load of the run's tab triggers one *step cycle*:

1. at ``(login, 0)`` probe the tab for the source's ``logged_in`` selector
   and jump straight to ``(search, 0)`` when it is there;
2. run the step's actions in order through the Action Executor;
3. on the last search step, finalize with the last result;
4. otherwise advance ``step`` (rolling ``login`` over into ``search``);
5. continue at once when an action asked to skip the navigation wait,
   else wait for the next page load.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from ..browser.abstract import ActionExecutor, TabPlatform
from ..catalog.catalog import SiteCatalog
from ..catalog.models import Action, Provider, Source
from ..exceptions import ConfigError, InvalidStepError
from .fsm import Phase, RunMachine, RunStatus
from .messages import (
    FailureMessage,
    MessageSink,
    RunMessage,
    StatusMessage,
    SuccessMessage,
    as_sink,
)
from .params import build_user_data, merge_params
from .results import EMPTY_RESULT, ActionResult, ResultKind
from .urls import make_url


NOT_FOUND_MESSAGE = "failed to find content"
UNKNOWN_ACTION_MESSAGE = "Unknown action in source"


def _error_text(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


class RunController:
    """State machine of a single capture run.

    Args:
        provider_id: Provider id in the catalog.
        source_id: Source id; ignored when the provider forces a
            ``default_source``.
        provider_options: Caller options (credentials, library name...);
            ``"<provider_id>.<key>"`` entries override ``<key>``.
        source_params: Call-time parameters, highest precedence.
        article_info: Metadata of the artifact to capture, used by URL
            templates.
        callback: ``MessageSink`` or callable receiving run messages.
        catalog: Site Catalog resolving provider and source ids.
        platform: Tab Platform hosting the run.
    """

    def __init__(
        self,
        provider_id: str,
        source_id: Optional[str],
        provider_options: Optional[Mapping[str, Any]],
        source_params: Optional[Mapping[str, Any]],
        article_info: Optional[Mapping[str, Any]],
        callback: Union[MessageSink, Callable[[RunMessage], Any], None],
        *,
        catalog: SiteCatalog,
        platform: TabPlatform,
    ) -> None:
        self.step: int = 0
        self.provider_id = provider_id
        self.provider: Provider = catalog.provider(provider_id)
        self.source_id: str = self.provider.default_source or source_id
        self.source: Source = catalog.source(self.source_id)
        self.source_params: Dict[str, Any] = dict(source_params or {})
        self.article_info: Dict[str, Any] = dict(article_info or {})
        self.provider_options: Dict[str, Any] = dict(provider_options or {})
        self.user_data = build_user_data(provider_id, self.provider, self.provider_options)
        self.sink: Optional[MessageSink] = as_sink(callback)
        self.platform = platform
        self.tab_id: Optional[int] = None
        self.executor: Optional[ActionExecutor] = None
        self.outcome: Optional[RunMessage] = None
        self.fsm = RunMachine(run_id=f"{provider_id}/{self.source_id}")
        self._released = False
        self._cycle_lock = asyncio.Lock()
        self._finished = asyncio.Event()
        self.logger = logging.getLogger(__name__)

    # ── State ────────────────────────────────────────────────────

    @property
    def phase(self) -> Phase:
        return self.fsm.phase

    @property
    def status(self) -> RunStatus:
        return self.fsm.status

    @property
    def done(self) -> bool:
        return self.fsm.finished

    @property
    def alarm_name(self) -> str:
        return f"tab{self.tab_id}"

    def get_params(self) -> Dict[str, Any]:
        """Effective parameters: source defaults < provider < call."""
        return merge_params(
            self.source.default_params,
            self.provider.params.get(self.source_id),
            self.source_params,
        )

    def make_url(self, url: Any) -> str:
        return make_url(url, self.article_info, self.get_params())

    # ── Lifecycle ────────────────────────────────────────────────

    async def run(self) -> int:
        """Open the run's tab and start listening for its page loads.

        Returns:
            The id of the tab hosting the run.

        Raises:
            ConfigError: If neither provider nor source defines a start URL.
        """
        start = self.provider.start or self.source.start
        if not start:
            raise ConfigError(
                f"No start URL for provider {self.provider_id!r} / source {self.source_id!r}"
            )
        url = self.make_url(start)
        self.tab_id = await self.platform.create_tab(url, active=False)
        self.fsm.run_id = self.tab_id
        self.logger.info("Tab %s created for %s/%s", self.tab_id, self.provider_id, self.source_id)
        self.executor = self.platform.executor(self.tab_id, self.user_data)
        self.platform.add_navigation_listener(self.on_tab_updated)
        return self.tab_id

    async def wait(self) -> RunStatus:
        """Wait until the run reached a terminal state."""
        await self._finished.wait()
        return self.status

    def cleanup(self) -> None:
        """Release the navigation listener and the watchdog alarm, once."""
        if self._released:
            return
        self._released = True
        if self.tab_id is not None:
            self.platform.clear_alarm(self.alarm_name)
        self.platform.remove_navigation_listener(self.on_tab_updated)
        self._finished.set()

    async def activate_tab(self) -> None:
        """Bring the run's tab to the foreground."""
        if self.tab_id is not None:
            await self.platform.activate_tab(self.tab_id)

    # ── Events ───────────────────────────────────────────────────

    async def on_tab_updated(self, tab_id: int, change_info: Mapping[str, Any]) -> None:
        if self.done:
            self.cleanup()
            return
        if tab_id != self.tab_id:
            return
        if change_info.get("status") == "complete":
            self.logger.debug("Tab %s load complete", tab_id)
            await self.run_next_step()

    async def run_next_step(self) -> None:
        """Run step cycles until one has to wait for a page load."""
        async with self._cycle_lock:
            while not self.done:
                try:
                    logged_in = await self.is_logged_in()
                except Exception as exc:  # pylint: disable=W0703
                    self.fail(_error_text(exc))
                    return
                if self.done:
                    return
                if logged_in:
                    self._promote()
                elif self.phase is Phase.LOGIN and not self.get_action_list():
                    self.logger.debug("Tab %s: no login steps", self.tab_id)
                    self._promote()
                if not await self.run_actions_of_current_step():
                    return

    async def is_logged_in(self) -> bool:
        """Probe the login indicator, only on the very first login step."""
        if self.phase is not Phase.LOGIN or self.step != 0:
            return False
        if not self.source.logged_in:
            return False
        found = await self.executor.element_exists(self.source.logged_in)
        self.logger.debug("Tab %s logged in? %s", self.tab_id, found)
        return found is True

    # ── Action lists ─────────────────────────────────────────────

    def get_action_list(self, phase: Optional[Phase] = None) -> Optional[List[Any]]:
        """Action-list sequence of *phase*; the provider's wins if defined."""
        key = (phase or self.phase).value
        provider_list = getattr(self.provider, key)
        if provider_list is not None:
            return provider_list
        return getattr(self.source, key)

    def get_actions(self) -> List[Action]:
        """Actions of the current ``(phase, step)``.

        Raises:
            ConfigError: If the entry is not a list of actions.
        """
        action_list = self.get_action_list() or []
        try:
            actions = action_list[self.step]
        except (IndexError, KeyError, TypeError):
            actions = None
        if not isinstance(actions, (list, tuple)):
            raise ConfigError(UNKNOWN_ACTION_MESSAGE)
        try:
            return [Action.from_raw(raw) for raw in actions]
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"{UNKNOWN_ACTION_MESSAGE}: {exc}") from exc

    def is_final_step(self) -> bool:
        return (
            self.phase is Phase.SEARCH
            and self.step == len(self.get_action_list(Phase.SEARCH) or []) - 1
        )

    def handle_action(self, action: Action) -> Optional[Action]:
        """Deliver notifications, interpolate URLs; ``None`` means skip."""
        if action.is_notification:
            self.deliver(StatusMessage(message=action.message, tab_id=self.tab_id))
            return None
        if action.url:
            action = action.with_url(self.make_url(action.url))
        return action

    async def run_actions_of_current_step(self) -> bool:
        """Execute the current step.

        Returns:
            ``True`` when the next step must run without waiting for a
            page load.
        """
        try:
            actions = self.get_actions()
        except ConfigError as exc:
            self.fail(str(exc))
            return False

        result = EMPTY_RESULT
        skip_wait = False
        for action in actions:
            try:
                action = self.handle_action(action)
                if action is None:
                    continue
                result = ActionResult.of(await self.executor.run_action(action))
                if self.done:
                    return False
                if result.kind is ResultKind.CONTINUATION:
                    proceed = await result.value.resolve(self)
                    if self.done:
                        return False
                    if not proceed:
                        self.abandon()
                        return False
            except Exception as exc:  # pylint: disable=W0703
                self.fail(_error_text(exc))
                return False
            if action.skip_to_next and result.is_true:
                skip_wait = True
                break

        if self.is_final_step():
            await self.finalize(result)
            return False
        try:
            self.advance()
        except InvalidStepError as exc:
            self.fail(str(exc))
            return False
        return skip_wait

    def advance(self) -> None:
        """Move to the next step, rolling ``login`` over into ``search``.

        Raises:
            InvalidStepError: If the search sequence overflows.
        """
        self.step += 1
        if self.step > len(self.get_action_list() or []) - 1:
            if self.phase is not Phase.LOGIN:
                raise InvalidStepError(
                    f"Step {self.step} is past the end of the {self.phase.value} phase"
                )
            self._promote()

    def _promote(self) -> None:
        if self.phase is Phase.LOGIN:
            self.fsm.promote()
        self.step = 0

    # ── Outcomes ─────────────────────────────────────────────────

    def deliver(self, message: RunMessage) -> None:
        if self.sink is not None:
            self.sink.deliver(message)

    async def finalize(self, result: Any) -> None:
        """Finish the run with the content of the last action.

        Non-empty text succeeds (message, tab closed, cleanup); anything
        else fails with "failed to find content".
        """
        if self.done:
            self.logger.warning("Tab %s: finalize after run finished", self.tab_id)
            return
        text = ActionResult.of(result).text
        if not text:
            self.fail(NOT_FOUND_MESSAGE)
            return
        self.fsm.succeed()
        self.outcome = SuccessMessage(content=text, tab_id=self.tab_id)
        try:
            self.deliver(self.outcome)
            if self.tab_id is not None:
                await self.platform.close_tab(self.tab_id)
        finally:
            self.cleanup()

    def fail(self, message: str) -> None:
        """Finish the run with an error message; the tab stays open."""
        if self.done:
            self.logger.warning("Tab %s: ignoring failure after run finished: %s", self.tab_id, message)
            return
        self.fsm.fail()
        self.logger.error("Tab %s: %s", self.tab_id, message)
        self.outcome = FailureMessage(message=message, tab_id=self.tab_id)
        try:
            self.deliver(self.outcome)
        finally:
            self.cleanup()

    def abandon(self) -> None:
        """Stop quietly: no message, only cleanup."""
        if self.done:
            return
        self.fsm.abandon()
        self.logger.info("Tab %s: run abandoned at %s/%d", self.tab_id, self.phase.value, self.step)
        self.cleanup()
