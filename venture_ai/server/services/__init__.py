"""Dependency providers and application wiring for the server."""
