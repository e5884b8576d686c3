"""Shared helpers for db-cli."""
