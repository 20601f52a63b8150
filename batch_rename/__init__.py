"""batch-rename - Rename files in bulk by delegating to any external command."""

__version__ = "0.1.0"
