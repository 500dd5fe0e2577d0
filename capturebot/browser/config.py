"""
Browser configuration for the Playwright tab platform.
"""
from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field


class BrowserConfig(BaseModel):
    """Browser configuration passed to ``PlaywrightTabPlatform``.

    Use ``merge()`` to produce a new config with overrides applied.

    Args:
        browser_type: Browser engine to launch.
        headless: Run browser without a visible window.
        slow_mo: Milliseconds to wait between Playwright operations.
        navigation_timeout: Timeout in seconds for page navigations.
        action_timeout: Default timeout in seconds for element actions.
        locale: Browser locale, e.g. ``"en-US"``.
        user_agent: Override the default user agent string.
        storage_state: Path to a JSON file with saved cookies and
            localStorage, reusing an authenticated session.
        extra_http_headers: Additional HTTP headers for every request.
    """

    browser_type: Literal["chromium", "firefox", "webkit"] = "chromium"
    headless: bool = True
    slow_mo: int = 0
    navigation_timeout: int = 30
    action_timeout: int = 10
    locale: Optional[str] = None
    user_agent: Optional[str] = None
    storage_state: Optional[str] = None
    extra_http_headers: Dict[str, str] = Field(default_factory=dict)

    def merge(self, overrides: Optional[Dict[str, Any]] = None) -> BrowserConfig:
        """Return a new BrowserConfig with overrides applied.

        This instance is never mutated.
        """
        if not overrides:
            return self.model_copy()
        data = self.model_dump()
        data.update(overrides)
        return BrowserConfig.model_validate(data)

    def context_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``browser.new_context()``."""
        kwargs: Dict[str, Any] = {}
        if self.locale:
            kwargs["locale"] = self.locale
        if self.user_agent:
            kwargs["user_agent"] = self.user_agent
        if self.storage_state:
            kwargs["storage_state"] = self.storage_state
        if self.extra_http_headers:
            kwargs["extra_http_headers"] = self.extra_http_headers
        return kwargs
