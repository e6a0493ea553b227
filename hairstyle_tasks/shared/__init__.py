"""Shared infrastructure: logging, errors."""
