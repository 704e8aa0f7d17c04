"""
Monitoring module for read-only result visibility.

Provides HTTP endpoints for browsing stored operation results.
Does NOT create, modify, or delete results.
"""

from .api import create_app, run_server

__all__ = ["create_app", "run_server"]
