"""Latebind - base types that supply implementations for bodyless members."""

import logging
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("latebind")
except PackageNotFoundError:
    __version__ = "(local)"

logging.getLogger(__name__).addHandler(logging.NullHandler())
