"""CaptureBot Meta information."""

__title__ = "capturebot"
__description__ = (
    "Scripted login-and-search browser runs that capture "
    "citation content from external sites."
)
__version__ = "0.4.1"
__author__ = "Jesus Lara"
__author_email__ = "jesuslarag@gmail.com"
__license__ = "MIT"
__copyright__ = "Copyright (c) 2026 Jesus Lara"
