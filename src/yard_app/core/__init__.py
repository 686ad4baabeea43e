"""Presentation helpers shared by the yard window."""

from .hud import describe_error, staged_summary

__all__ = ["describe_error", "staged_summary"]
