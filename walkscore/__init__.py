"""Walkability scoring for street addresses."""

__version__ = "0.1.0"
