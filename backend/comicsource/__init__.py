"""Comick Source API: uniform access to independent comic content sources."""

__version__ = "0.1.0"
