"""Shared infrastructure: logging, monitoring and database access."""
