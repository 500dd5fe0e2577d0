"""CaptureBot.

Scripted login-and-search browser runs that capture citation content.
"""
from .version import (
    __title__, __description__, __version__, __author__, __author_email__
)

__all__ = (
    "__title__",
    "__description__",
    "__version__",
    "__author__",
    "__author_email__",
)
