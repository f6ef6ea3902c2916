"""
API Package.

HTTP surface of the status page incident service.

Modules:
- main: FastAPI application factory
- cli: Command-line entry point running uvicorn
- routers: Auxiliary routers (health)
"""

__version__ = "1.0.0"
