"""
FastAPI feedback service.

Provides REST API for voice feedback with:
- POST /feedback - Upload and process a recording
- GET /feedback/{id}/full, /audio-url, /redirect-audio - Record and audio access
- GET /feedback/{shop_id} - Shop feed
- /admin/* - Listing and alert threshold
- GET /health - Service health check
"""

from feedbacker.api.app import create_app

__all__ = ["create_app"]
