"""Shared helpers: logging, HTTP and location handling."""
