"""Ceiling Toolbox: plugin host for suspended-ceiling calculation tools."""

__version__ = "0.3.0"
