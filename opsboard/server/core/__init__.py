"""Core server configuration and constants."""
