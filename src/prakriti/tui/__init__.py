"""Terminal UI for Prakriti Mitra."""

from .app import HandbookApp

__all__ = ["HandbookApp"]
