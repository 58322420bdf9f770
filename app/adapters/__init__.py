"""Swappable backends for process-external concerns."""
