"""API route modules."""

from court_vision.api.routes import health, videos

__all__ = ["health", "videos"]
