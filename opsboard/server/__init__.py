"""
OpsBoard Server Package.

This package contains the web server hosting the report pipeline of the
OpsBoard IT-operations dashboard.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Configuration and constants.
    exception_handlers: Application-wide error responses.
    middleware: Request logging and tracing.
    services: Wiring of repositories, clients and report runners.
"""
