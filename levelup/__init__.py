"""Promotion candidate selection service."""

__version__ = "0.1.0"
