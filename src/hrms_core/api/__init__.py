"""HTTP API."""

from hrms_core.api.app import create_app

__all__ = ["create_app"]
