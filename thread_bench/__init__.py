"""Repeated CPU-stress benchmark runs across thread counts, with summary statistics."""

__version__ = "0.1.0"
