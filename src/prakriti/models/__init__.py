"""Data models for Prakriti Mitra."""

from .schemas import (
    FAQ,
    Category,
    ChatRole,
    ChatTurn,
    Crop,
    Handbook,
    Item,
    NaturalInput,
    Screen,
    Section,
)

__all__ = [
    "FAQ",
    "Category",
    "ChatRole",
    "ChatTurn",
    "Crop",
    "Handbook",
    "Item",
    "NaturalInput",
    "Screen",
    "Section",
]
