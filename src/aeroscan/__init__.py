"""Aeroscan - seats.aero award search proxy with OAuth sign-in."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("aeroscan")
except PackageNotFoundError:
    __version__ = "0.0.0"
