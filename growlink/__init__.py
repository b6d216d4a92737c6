"""Growlink plant monitoring and control client."""

__version__ = "0.1.0"
