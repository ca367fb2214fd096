"""Avail artifact manifest, jar writer and packaging orchestration."""
