"""Saved items and faceted search for the Hindustan Founders Network."""

__version__ = "0.1.0"
