"""Stability and concurrency patterns and a key-value service with a file transaction log."""

__version__ = "0.1.0"