"""Sample API - health and welcome endpoints.

Usage::

    from sample_services.api import create_app
    app = create_app()  # ready for uvicorn
"""

from sample_services.api.app import ApiServices, build_api_services, create_app
from sample_services.api.server import run_api

__all__ = ["ApiServices", "build_api_services", "create_app", "run_api"]
