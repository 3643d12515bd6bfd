"""HTTP service mode exposing stateless template transforms."""

from .app import create_app, run_service

__all__ = ["create_app", "run_service"]
