"""Genify - prompt to multi-file web project generator."""

__version__ = "0.1.0"
