"""
FastAPI API routes and endpoints.

- routes.py: POST /commit, GET /health
- dependencies.py: Dependency injection for settings, runtime, caller identity
- models.py: API-specific response models
- error_handlers.py: Exception handlers for structured error responses
- middleware.py: Request tracing
"""

from daily_commit.api import dependencies, error_handlers, models
from daily_commit.api.routes import router

__all__ = [
    "router",
    "dependencies",
    "error_handlers",
    "models",
]
