"""
Run FSM: phase and terminal status of one capture run.

StateMachine subclass using python-statemachine:

    RunMachine:
        login → search                      (promote: login detected or
                                             login sequence exhausted)
        login / search → succeeded         (content extracted)
        login / search → failed             (executor/config error,
                                             empty result, timeout)
        login / search → abandoned          (continuation said stop)

The step index is not a state: it lives on the controller and is reset to
zero on promotion.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from statemachine import State, StateMachine


class Phase(str, Enum):
    """Coarse stage of a run."""
    LOGIN = "login"
    SEARCH = "search"


class RunStatus(str, Enum):
    """Lifecycle status of a run."""
    LOGIN = "login"
    SEARCH = "search"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABANDONED = "abandoned"


class RunMachine(StateMachine):
    """FSM for a single capture run."""

    # ── States ───────────────────────────────────────────────────
    login = State("login", initial=True)
    search = State("search")
    succeeded = State("succeeded", final=True)
    failed = State("failed", final=True)
    abandoned = State("abandoned", final=True)

    # ── Transitions ──────────────────────────────────────────────
    promote = login.to(search)
    succeed = login.to(succeeded) | search.to(succeeded)
    fail = login.to(failed) | search.to(failed)
    abandon = login.to(abandoned) | search.to(abandoned)

    def __init__(self, run_id: Any = "", **kwargs: Any) -> None:
        self.run_id = run_id
        self._logger = logging.getLogger("CaptureBot.RunFSM")
        self._last_phase = Phase.LOGIN
        super().__init__(**kwargs)

    def after_transition(self, source: State, target: State, event: str) -> None:
        if target.id in (Phase.LOGIN.value, Phase.SEARCH.value):
            self._last_phase = Phase(target.id)
        self._logger.debug(
            "Run %s: %s → %s (%s)",
            self.run_id or "default",
            source.id,
            target.id,
            event,
        )

    def on_enter_search(self) -> None:
        self._logger.info("Run %s entered search phase", self.run_id or "default")

    def on_enter_failed(self) -> None:
        self._logger.debug("Run %s FAILED", self.run_id or "default")

    def on_enter_abandoned(self) -> None:
        self._logger.info("Run %s ABANDONED", self.run_id or "default")

    @property
    def status(self) -> RunStatus:
        return RunStatus(self.current_state.id)

    @property
    def phase(self) -> Phase:
        """Phase of the run; a finished run reports the phase it ended in."""
        if self.current_state == self.login:
            return Phase.LOGIN
        if self.current_state == self.search:
            return Phase.SEARCH
        return self._last_phase

    @property
    def finished(self) -> bool:
        return self.current_state.final

