"""Layoutguard - directory layout checks for documentation repositories."""

__version__ = "0.1.0"
