"""Utility functions."""

from .terminal import (
    Notifier,
    choose_index,
    create_table,
    format_verdict_color,
    shorten,
)

__all__ = [
    "Notifier",
    "choose_index",
    "create_table",
    "format_verdict_color",
    "shorten",
]
