"""Boundary adapters: file-system storage and caller identity."""
