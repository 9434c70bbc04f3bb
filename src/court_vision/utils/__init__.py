"""Shared utilities."""

from court_vision.utils.async_utils import run_async

__all__ = ["run_async"]
