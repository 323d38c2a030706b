"""Shared utilities used by the data sources (HTTP client with retry)."""
