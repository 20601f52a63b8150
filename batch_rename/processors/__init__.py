"""Rename pipeline stages."""
