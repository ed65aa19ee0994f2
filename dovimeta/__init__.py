"""Dolby Vision RPU header and display-management metadata: bit I/O, header and blocks."""

__version__ = "0.1.0"