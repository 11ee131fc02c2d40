"""Prakriti Mitra - natural farming assistant for Andhra Pradesh farmers."""

__version__ = "0.1.0"
