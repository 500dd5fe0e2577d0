"""Capture runs: the step/phase state machine and its helpers."""
from .fsm import Phase, RunMachine, RunStatus
from .messages import (
    CallbackSink,
    FailureMessage,
    MessageSink,
    MessageType,
    QueueSink,
    RunMessage,
    StatusMessage,
    SuccessMessage,
    parse_message,
)
from .params import build_user_data, merge_params
from .results import ActionResult, Continuation, ResultKind
from .urls import encode_component, interpolate, make_url
from .controller import RunController
from .service import capture

__all__ = (
    "ActionResult",
    "CallbackSink",
    "Continuation",
    "FailureMessage",
    "MessageSink",
    "MessageType",
    "Phase",
    "QueueSink",
    "ResultKind",
    "RunController",
    "RunMachine",
    "RunMessage",
    "RunStatus",
    "StatusMessage",
    "SuccessMessage",
    "build_user_data",
    "capture",
    "encode_component",
    "interpolate",
    "make_url",
    "merge_params",
    "parse_message",
)
