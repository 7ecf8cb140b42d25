"""SMS sender adapters."""

from .console import ConsoleSmsSender

__all__ = ["ConsoleSmsSender"]
