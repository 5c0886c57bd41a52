"""Selectors for the costbook kernel (read side)."""

from costbook_kernel.selectors.base import BaseSelector

__all__ = ["BaseSelector"]
