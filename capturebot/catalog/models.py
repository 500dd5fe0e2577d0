"""
Site Catalog records.

Pydantic v2 models for the declarative configuration a run is driven by:
``Provider`` (account/service overlay), ``Source`` (target site) and
``Action`` (one scripted unit of work). Provider and Source are plain,
frozen records; precedence between them is resolved by the run controller.

Action-list sequences are stored as raw data (``List[Any]``) so that a
malformed catalog entry surfaces as a run failure at the step that uses it
instead of rejecting the whole catalog.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


UrlTemplate = Union[str, Callable[..., str]]


class Action(BaseModel):
    """One declarative unit of work.

    An action carrying ``message`` is a pure status notification. Every
    other action is sent to the Action Executor; fields not declared here
    (``selector``, ``value``, ``script``...) are executor-specific and kept
    as extra attributes.
    """
    model_config = ConfigDict(
        extra="allow",
        frozen=True,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    action: Optional[str] = Field(default=None, description="Executor verb (click, fill, extract...)")
    message: Optional[str] = Field(default=None, description="Status text forwarded to the message sink")
    url: Optional[Any] = Field(default=None, description="URL template or callable(article_info, params)")
    skip_to_next: bool = Field(
        default=False,
        alias="skipToNext",
        description="Stop the list and continue without a navigation wait when the result is exactly True"
    )

    @property
    def is_notification(self) -> bool:
        return bool(self.message)

    def get(self, name: str, default: Any = None) -> Any:
        """Return a declared or extra field, ``default`` when unset."""
        if name in type(self).model_fields:
            value = getattr(self, name)
        else:
            value = (self.model_extra or {}).get(name)
        return default if value is None else value

    def with_url(self, url: str) -> Action:
        """Return a copy of this action pointing at ``url``."""
        return self.model_copy(update={"url": url})

    @classmethod
    def from_raw(cls, raw: Any) -> Action:
        """Build an Action from a catalog entry (dict or Action)."""
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, dict):
            return cls.model_validate(raw)
        raise TypeError(f"Invalid action definition: {raw!r}")


class Source(BaseModel):
    """A target site: selectors, default parameters and per-phase actions."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    name: str = ""
    start: Optional[Any] = None
    logged_in: Optional[str] = Field(
        default=None,
        alias="loggedIn",
        description="Selector present on a page only when the session is authenticated"
    )
    default_params: Dict[str, Any] = Field(default_factory=dict, alias="defaultParams")
    login: Optional[List[Any]] = None
    search: Optional[List[Any]] = None


class Provider(BaseModel):
    """An account/service overlay on top of one or more sources."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    name: str = ""
    bib_name: Optional[str] = Field(default=None, alias="bibName")
    default_source: Optional[str] = Field(
        default=None,
        alias="defaultSource",
        description="Source id forced for every run of this provider"
    )
    start: Optional[Any] = None
    params: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict,
        description="Per-source parameter overrides keyed by source id"
    )
    login: Optional[List[Any]] = None
    search: Optional[List[Any]] = None
