"""
Run messages and the sinks that carry them.

A run talks to its caller only through messages: any number of ``status``
notifications, then at most one ``success`` or ``failed`` outcome. Sinks
are fire-and-forget; the controller never waits for an acknowledgment.
"""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class MessageType(str, Enum):
    STATUS = "status"
    SUCCESS = "success"
    FAILURE = "failed"


class RunMessage(BaseModel):
    """Common fields of every run message."""
    tab_id: Optional[int] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class StatusMessage(RunMessage):
    """Progress notification emitted by a ``message`` action."""
    type: Literal["status"] = MessageType.STATUS.value
    message: str


class SuccessMessage(RunMessage):
    """Terminal outcome carrying the extracted content."""
    type: Literal["success"] = MessageType.SUCCESS.value
    content: str


class FailureMessage(RunMessage):
    """Terminal outcome carrying the error text."""
    type: Literal["failed"] = MessageType.FAILURE.value
    message: str


Message = Annotated[
    Union[StatusMessage, SuccessMessage, FailureMessage],
    Field(discriminator="type"),
]
MessageAdapter: TypeAdapter = TypeAdapter(Message)


def parse_message(data: Any) -> Union[StatusMessage, SuccessMessage, FailureMessage]:
    """Rebuild a message from its serialized form."""
    return MessageAdapter.validate_python(data)


class MessageSink(ABC):
    """Destination of run messages."""

    @abstractmethod
    def deliver(self, message: RunMessage) -> None:
        """Hand ``message`` over; must not block."""


class CallbackSink(MessageSink):
    """Deliver messages to a plain callable.

    Coroutine callbacks are scheduled on the running loop. Errors raised by
    the callback are logged, never propagated to the run.
    """

    def __init__(self, callback: Callable[[RunMessage], Any]) -> None:
        self.callback = callback
        self.logger = logging.getLogger(__name__)
        self._tasks: set = set()

    def deliver(self, message: RunMessage) -> None:
        try:
            outcome = self.callback(message)
        except Exception as exc:  # pylint: disable=W0703
            self.logger.error("Message callback failed for %s: %s", message.type, exc)
            return
        if asyncio.iscoroutine(outcome):
            task = asyncio.ensure_future(outcome)
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self.logger.error(
                "Message callback failed: %s", task.exception()
            )


class QueueSink(MessageSink):
    """Deliver messages into an ``asyncio.Queue``."""

    def __init__(self, queue: Optional[asyncio.Queue] = None) -> None:
        self.queue: asyncio.Queue = queue if queue is not None else asyncio.Queue()

    def deliver(self, message: RunMessage) -> None:
        self.queue.put_nowait(message)

    async def get(self) -> RunMessage:
        return await self.queue.get()


def as_sink(target: Union[MessageSink, Callable[[RunMessage], Any], None]) -> Optional[MessageSink]:
    """Accept either a ``MessageSink`` or a callback."""
    if target is None or isinstance(target, MessageSink):
        return target
    if callable(target):
        return CallbackSink(target)
    raise TypeError(f"Unsupported message sink: {target!r}")
