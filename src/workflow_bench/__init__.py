"""Concurrent GitHub Actions workflow latency benchmark."""

__version__ = "0.1.0"
