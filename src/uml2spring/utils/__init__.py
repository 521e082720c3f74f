"""Utility functions for common operations."""

from .ids import stable_id

__all__ = ["stable_id"]
