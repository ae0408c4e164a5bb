"""
API module for the warehouse forecast service.
Provides REST API endpoints for dashboards and integrations.
"""
from .routes import create_app, run_api

__all__ = ["create_app", "run_api"]
