"""Version 1 of the OpsBoard HTTP API."""
