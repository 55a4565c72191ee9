"""Backend services."""

from .executor import execute_request, get_controller

__all__ = ["execute_request", "get_controller"]
