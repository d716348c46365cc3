"""Service layer wiring for the API endpoints."""
