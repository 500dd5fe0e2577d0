"""
Capture service: caller-side orchestration of a single run.

Owns what the controller leaves to its caller: the ``tab{tab_id}``
watchdog alarm and closing a tab a failed or abandoned run left open.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Union

from ..browser.abstract import TabPlatform
from ..catalog.catalog import SiteCatalog
from .controller import RunController
from .fsm import RunStatus
from .messages import FailureMessage, MessageType, RunMessage, StatusMessage, SuccessMessage

logger = logging.getLogger(__name__)


async def capture(
    catalog: SiteCatalog,
    platform: TabPlatform,
    provider_id: str,
    source_id: Optional[str] = None,
    provider_options: Optional[Mapping[str, Any]] = None,
    source_params: Optional[Mapping[str, Any]] = None,
    article_info: Optional[Mapping[str, Any]] = None,
    *,
    timeout: Optional[float] = None,
    on_status: Optional[Callable[[StatusMessage], Any]] = None,
) -> Optional[Union[SuccessMessage, FailureMessage]]:
    """Run one capture to completion.

    Args:
        catalog: Site Catalog.
        platform: Tab Platform hosting the run.
        provider_id: Provider id.
        source_id: Source id (the provider may force another one).
        provider_options: Provider options (credentials, library name).
        source_params: Call-time source parameters.
        article_info: Metadata of the artifact to capture.
        timeout: Seconds before the run is failed by the watchdog alarm;
            ``None`` or ``0`` disables it.
        on_status: Receives every status message.

    Returns:
        The terminal ``SuccessMessage`` or ``FailureMessage``, ``None``
        when the run was abandoned.
    """
    def _on_message(message: RunMessage) -> None:
        if message.type == MessageType.STATUS:
            logger.info("Status: %s", message.message)
            if on_status is not None:
                on_status(message)

    controller = RunController(
        provider_id,
        source_id,
        provider_options,
        source_params,
        article_info,
        _on_message,
        catalog=catalog,
        platform=platform,
    )
    tab_id = await controller.run()

    if timeout:
        def _on_alarm(name: str) -> None:
            logger.warning("Alarm %s fired", name)
            controller.fail(f"Timed out after {timeout} seconds")

        platform.create_alarm(controller.alarm_name, timeout, _on_alarm)

    status = await controller.wait()
    if status in (RunStatus.FAILED, RunStatus.ABANDONED):
        await platform.close_tab(tab_id)
    return controller.outcome
