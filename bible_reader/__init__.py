"""Reactive reading-state layer for the Bible Reader application."""

__version__ = "0.3.0"
