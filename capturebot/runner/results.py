"""
Action results.

The Action Executor answers with heterogeneous values: booleans (checks),
strings (extracted content), continuation predicates (decisions that need
the running controller) or anything else a script evaluation produced.
``ActionResult`` tags the raw value once so the step cycle dispatches on
``kind`` instead of inspecting types all over the place.
"""
from __future__ import annotations

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Union


class ResultKind(str, Enum):
    """Kind of value produced by an action."""
    BOOLEAN = "boolean"
    TEXT = "text"
    CONTINUATION = "continuation"
    EMPTY = "empty"
    OPAQUE = "opaque"


class Continuation:
    """Decision deferred to the controller.

    Wraps ``fn(controller)`` returning a bool (or an awaitable bool). A
    falsy answer abandons the run quietly, a truthy one lets it continue.
    """

    def __init__(
        self,
        fn: Callable[[Any], Union[bool, Awaitable[bool]]],
        name: str = "",
    ) -> None:
        self.fn = fn
        self.name = name or getattr(fn, "__name__", "continuation")

    async def resolve(self, controller: Any) -> bool:
        outcome = self.fn(controller)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return bool(outcome)

    def __repr__(self) -> str:
        return f"<Continuation {self.name}>"


@dataclass(frozen=True)
class ActionResult:
    """Tagged executor outcome."""
    kind: ResultKind
    value: Any = None

    @classmethod
    def of(cls, raw: Any) -> ActionResult:
        """Tag a raw executor value (an ActionResult passes through)."""
        if isinstance(raw, ActionResult):
            return raw
        if raw is None:
            return cls(ResultKind.EMPTY)
        if isinstance(raw, bool):
            return cls(ResultKind.BOOLEAN, raw)
        if isinstance(raw, str):
            return cls(ResultKind.TEXT, raw)
        if isinstance(raw, Continuation):
            return cls(ResultKind.CONTINUATION, raw)
        if callable(raw):
            return cls(ResultKind.CONTINUATION, Continuation(raw))
        return cls(ResultKind.OPAQUE, raw)

    @property
    def is_true(self) -> bool:
        """Exactly the boolean ``True``; truthy values do not qualify."""
        return self.kind is ResultKind.BOOLEAN and self.value is True

    @property
    def text(self) -> str:
        """Extracted text, ``""`` for every non-text result."""
        return self.value if self.kind is ResultKind.TEXT else ""


EMPTY_RESULT = ActionResult(ResultKind.EMPTY)
