"""Adapters for providers, storage and export."""
