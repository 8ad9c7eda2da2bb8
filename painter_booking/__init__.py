"""Painter matching and availability allocation engine."""

__version__ = "0.1.0"
