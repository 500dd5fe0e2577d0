"""Browser collaborators: Action Executor and Tab Platform."""

from .abstract import ActionExecutor, TabPlatform
from .config import BrowserConfig
from .executor import PlaywrightActionExecutor
from .platform import PlaywrightTabPlatform

__all__ = (
    "ActionExecutor",
    "BrowserConfig",
    "PlaywrightActionExecutor",
    "PlaywrightTabPlatform",
    "TabPlatform",
)
