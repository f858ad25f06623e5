"""Veterinary clinic appointment scheduling service."""

__version__ = "1.0.0"
