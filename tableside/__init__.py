"""Tableside - online table reservations"""

__version__ = "1.0.0"
