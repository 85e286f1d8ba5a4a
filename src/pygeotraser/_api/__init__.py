"""Collector endpoint functions (one module per resource)."""
