"""Fetch and summarise a GitHub user's recent public activity."""

__version__ = "0.1.0"
__all__ = ["__version__"]